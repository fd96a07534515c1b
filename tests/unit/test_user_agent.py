import platform
import ssl
import sys
from unittest import mock

from gust import __version__
from gust.user_agent_utils import (
    _python_part,
    _os_part,
    _openssl_part,
    build_user_agent
)


class TestBuildUserAgent:
    """Tests for the build_user_agent function."""

    def test_user_agent_format(self):
        """
        Test that User-Agent has the correct format with semicolon separators.

        Example User-Agent:
        gust-py/0.3.0;python-3.12.1;debian-12;openssl-3.0.11
        """
        result = build_user_agent('gust-py', __version__)
        parts = result.split(';')
        assert len(parts) >= 3
        assert parts[0] == 'gust-py/%s' % (__version__,)
        assert parts[1].startswith('python-')
        assert ' ' not in result

    def test_without_openssl(self):
        with mock.patch('gust.user_agent_utils._openssl_part', return_value=None):
            result = build_user_agent('gust-py', '1.2.3')
        assert len(result.split(';')) == 3


class TestParts:
    """Tests for the individual User-Agent components."""

    def test_python_part(self):
        assert _python_part() == 'python-%d.%d.%d' % sys.version_info[:3]

    def test_os_part_linux(self):
        with mock.patch('platform.system', return_value='Linux'), \
             mock.patch('platform.freedesktop_os_release', return_value={'ID': 'debian', 'VERSION_ID': '12'}, create=True):
            assert _os_part() == 'debian-12'

    def test_os_part_linux_without_os_release(self):
        with mock.patch('platform.system', return_value='Linux'), \
             mock.patch('platform.freedesktop_os_release', side_effect=OSError('missing'), create=True):
            assert _os_part() == 'linux'

    def test_os_part_macos(self):
        with mock.patch('platform.system', return_value='Darwin'), \
             mock.patch('platform.mac_ver', return_value=('14.2', ('', '', ''), 'arm64')):
            assert _os_part() == 'macos-14.2'

    def test_os_part_windows(self):
        with mock.patch('platform.system', return_value='Windows'), \
             mock.patch('platform.win32_ver', return_value=('10', '10.0.19041', 'SP0', '')):
            assert _os_part() == 'windows-10'

    def test_os_part_unknown(self):
        with mock.patch('platform.system', return_value=''):
            assert _os_part() == 'unknown'

    def test_openssl_part(self):
        with mock.patch.object(ssl, 'OPENSSL_VERSION_INFO', (3, 0, 11, 0, 0)):
            assert _openssl_part() == 'openssl-3.0.11'
