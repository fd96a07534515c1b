"""
HTML pages served to the browser at the end of the login flow.
"""

import html
from datetime import datetime
from typing import Optional

from .time_utils import format_timestamp

_STYLE = """
        :root {{
            --base: #191724;
            --surface: #1f1d2e;
            --overlay: #26233a;
            --subtle: #908caa;
            --text: #e0def4;
            --love: #eb6f92;
            --gold: #f6c177;
            --rose: #ebbcba;
            --pine: #31748f;
            --foam: #9ccfd8;
            --iris: #c4a7e7;
            --highlight-med: #403d52;
        }}
        body {{
            font-family: system-ui, sans-serif;
            max-width: 600px;
            margin: 0 auto;
            padding: 2rem;
            text-align: center;
            line-height: 1.6;
            background-color: var(--base);
            color: var(--text);
        }}
        h1 {{
            color: var(--rose);
            margin-bottom: 1.5rem;
        }}
        .success {{
            color: var(--pine);
            font-weight: bold;
            font-size: 1.2rem;
        }}
        .info {{
            margin: 2rem 0;
            color: var(--subtle);
        }}
        .api-key {{
            background: var(--surface);
            padding: 1rem;
            border-radius: 4px;
            font-family: monospace;
            overflow-wrap: break-word;
            margin: 1.5rem 0;
            border: 1px solid var(--highlight-med);
            color: var(--foam);
        }}
        .error-message {{
            background: var(--surface);
            padding: 1rem;
            border-radius: 4px;
            font-family: monospace;
            overflow-wrap: break-word;
            margin: 1.5rem 0;
            border: 1px solid var(--love);
            color: var(--love);
        }}
        .code-block {{
            background: var(--overlay);
            padding: 1rem;
            border-radius: 4px;
            font-family: monospace;
            overflow-wrap: break-word;
            margin: 1.5rem 0;
            text-align: left;
            white-space: pre;
            border: 1px solid var(--highlight-med);
        }}
        .next-steps {{
            background: var(--surface);
            padding: 1.5rem;
            border-radius: 6px;
            margin-top: 2rem;
            border: 1px solid var(--highlight-med);
        }}
        .key-highlight {{ color: var(--love); }}
        .string-highlight {{ color: var(--iris); }}
"""

_SUCCESS_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Gust Authentication Success</title>
    <style>""" + _STYLE + """    </style>
</head>
<body>
    <h1>Authentication Successful!</h1>
    <p class="success">Welcome, {login}!</p>
    <p class="info">Your Gust API key has been generated:</p>
    <div class="api-key">{api_key}</div>
    <p>This key will allow you to access weather data through the breeze API.</p>
    <div class="next-steps">
        <p>You can now return to your terminal. The CLI application should automatically continue.</p>
        <p>If it doesn't, you can close this window and add the below to your ~/.config/gust/auth.json</p>
        <div class="code-block">{{
  <span class="key-highlight">"api_key"</span>: <span class="string-highlight">"{api_key}"</span>,
  <span class="key-highlight">"server_url"</span>: <span class="string-highlight">"{server_url}"</span>,
  <span class="key-highlight">"github_user"</span>: <span class="string-highlight">"{login}"</span>,
  <span class="key-highlight">"last_auth"</span>: <span class="string-highlight">"{last_auth}"</span>
}}</div>
    </div>
</body>
</html>
"""

_ERROR_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Gust Authentication Failed</title>
    <style>""" + _STYLE + """    </style>
</head>
<body>
    <h1>Authentication Failed</h1>
    <div class="error-message">{error}</div>
    <p class="info">Please return to your terminal and try again.</p>
    <p>You can close this browser window/tab.</p>
</body>
</html>
"""


def render_success_page(login: str, api_key: str, server_url: str, issued_at: Optional[datetime] = None) -> str:
    """
    Render the page shown once the API key has been issued.

    Args:
        login: the authenticated user name.
        api_key: the issued API key, shown so it can be copied manually.
        server_url: the server that issued the key.
        issued_at: when the key was issued, defaults to now.

    Returns:
        The HTML document.
    """
    if issued_at is None:
        from .models import now_utc
        issued_at = now_utc()
    return _SUCCESS_PAGE.format(
        login=html.escape(login or ''),
        api_key=html.escape(api_key or ''),
        server_url=html.escape(server_url or ''),
        last_auth=html.escape(format_timestamp(issued_at)),
    )


def render_error_page(error_msg: str) -> str:
    """Render the page shown when the login could not be completed."""
    return _ERROR_PAGE.format(error=html.escape(error_msg or 'Unknown error'))
