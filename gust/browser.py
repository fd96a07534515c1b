"""
Best-effort browser launching for the login flow.
"""

import webbrowser


def open_browser(url: str) -> bool:
    """
    Open a URL in the user's default browser.

    Args:
        url: the URL to open.

    Returns:
        True if a browser was launched, False otherwise. Never raises: the
        caller prints the URL for manual use instead.
    """
    try:
        return bool(webbrowser.open(url))
    except webbrowser.Error:
        return False
    except OSError:
        return False
