"""
User-Agent string sent with every request to the gust server.

Format: "<prefix>/<version>;python-X.Y.Z;<os>[;openssl-X.Y.Z]"
"""

import platform
import ssl
import sys


def _python_part():
    return 'python-%d.%d.%d' % sys.version_info[:3]


def _os_part():
    """
    Short operating system identifier, e.g. "debian-12", "macos-14.0", "windows-10".

    Falls back to the bare system name when nothing more precise is known.
    """
    system = platform.system().lower()
    try:
        if system == 'linux' and hasattr(platform, 'freedesktop_os_release'):
            release = platform.freedesktop_os_release()
            return '%s-%s' % (release.get('ID', 'linux'), release.get('VERSION_ID', 'unknown'))
        if system == 'darwin' and platform.mac_ver()[0]:
            return 'macos-%s' % (platform.mac_ver()[0],)
        if system == 'windows' and platform.win32_ver()[0]:
            return 'windows-%s' % (platform.win32_ver()[0],)
    except OSError:
        # No os-release file.
        pass
    return system or 'unknown'


def _openssl_part():
    info = getattr(ssl, 'OPENSSL_VERSION_INFO', None)
    if not info:
        return None
    return 'openssl-%d.%d.%d' % tuple(info[:3])


def build_user_agent(prefix, version):
    """
    Build the User-Agent string.

    Parameters:
        prefix (str): client identifier, e.g. "gust-py".
        version (str): client version.

    Returns:
        str: e.g. "gust-py/0.3.0;python-3.12.1;debian-12;openssl-3.0.11"
    """
    parts = ['%s/%s' % (prefix, version), _python_part(), _os_part()]
    openssl = _openssl_part()
    if openssl:
        parts.append(openssl)
    return ';'.join(parts)
