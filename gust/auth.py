"""
Loopback login for the gust CLI.

The CLI never holds any secret of its own. Instead it lets the gust server
drive a GitHub login in the user's browser and catches the result locally:

1. Listen on a fixed local port for the redirect coming back from the browser.
2. Ask the server for an authorization URL, telling it which port to redirect to.
3. Open that URL in the browser, the user proves their identity remotely.
4. The browser is redirected to http://localhost:<port>/callback?code=...
5. Exchange the code with the server for a long-lived API key.

Exactly one of success, error or timeout is returned per login attempt.
"""

from typing import Callable, Optional

import requests

from . import __version__
from .browser import open_browser
from .constants import (
    AUTH_REQUEST_TIMEOUT,
    DEFAULT_SERVER_URL,
    OAUTH_CALLBACK_PORT,
    OAUTH_CALLBACK_TIMEOUT,
    OAUTH_SHUTDOWN_DELAY,
)
from .models import Credential, now_utc
from .oauth_server import OAuthCallbackServer
from .user_agent_utils import build_user_agent
from . import utils
from .utils import AuthError, AuthURLRequestFailed, CodeExchangeFailed, GET, POST, _snippet


def resolve_server_url(server_url: Optional[str] = None) -> str:
    """
    Pick the server to authenticate against.

    An explicit URL wins, then the GUST_API_URL environment variable, then
    the public default server.
    """
    if not server_url:
        from . import GLOBAL_SERVER_URL
        server_url = GLOBAL_SERVER_URL or DEFAULT_SERVER_URL
    return server_url.rstrip('/')


class LoopbackAuthenticator:
    """Obtains an API key through a browser login and a loopback callback.

    Not safe for concurrent use: every login binds the same fixed port, so a
    second simultaneous login fails with ListenFailed.
    """

    def __init__(self,
                 server_url: Optional[str] = None,
                 callback_port: int = OAUTH_CALLBACK_PORT,
                 timeout: float = OAUTH_CALLBACK_TIMEOUT,
                 no_browser: bool = False,
                 print_debug_fn: Optional[Callable[[str], None]] = None,
                 session: Optional[requests.Session] = None,
                 shutdown_delay: float = OAUTH_SHUTDOWN_DELAY):
        """
        Args:
            server_url: base URL of the gust server, see resolve_server_url().
            callback_port: local port the browser is redirected to.
            timeout: seconds to wait for the user to complete the login.
            no_browser: if True, print the URL instead of opening a browser.
            print_debug_fn: receives detailed debug messages.
            session: requests session used to talk to the server.
            shutdown_delay: seconds the callback server lingers after the outcome.
        """
        self.server_url = resolve_server_url(server_url)
        self.callback_port = callback_port
        self.timeout = timeout
        self.no_browser = no_browser
        self.shutdown_delay = shutdown_delay
        self.auth_url: Optional[str] = None
        self._debug = print_debug_fn or utils.DEFAULT_PRINT_DEBUG_FN
        self._session = session if session is not None else requests.Session()
        self._session.headers['User-Agent'] = build_user_agent('gust-py', __version__)

    def _printDebug(self, msg):
        utils.printDebug(self._debug, msg)

    def authenticate(self) -> Credential:
        """
        Run the login.

        Returns:
            The issued Credential.

        Raises:
            ListenFailed: the callback port could not be bound.
            AuthURLRequestFailed: the server did not provide an authorization URL.
            MissingCode: the browser came back without a code.
            CodeExchangeFailed: the code could not be exchanged for an API key.
            AuthTimeout: the login was not completed in time.
        """
        callback_server = OAuthCallbackServer(
            self._exchange_code,
            port=self.callback_port,
            timeout=self.timeout,
            shutdown_delay=self.shutdown_delay,
            print_debug_fn=self._debug,
        )
        port = callback_server.start()

        try:
            self.auth_url = self._request_auth_url(port)

            if self.no_browser:
                print(f"\nPlease visit this URL to authenticate:\n{self.auth_url}\n")
            else:
                print("Opening browser for GitHub authentication...")
                if not open_browser(self.auth_url):
                    print(f"Could not open browser automatically. Please open this URL manually:\n{self.auth_url}\n")

            print("Waiting for authentication...")
            outcome = callback_server.wait_for_callback()
        finally:
            # Always release the port, whatever the outcome.
            callback_server.stop()

        if isinstance(outcome, AuthError):
            raise outcome
        return outcome

    def _request_auth_url(self, port: int) -> str:
        """
        Ask the server where the browser should go.

        Raises:
            AuthURLRequestFailed: on network error, bad status or bad payload.
        """
        url = '%s/api/auth/request' % (self.server_url,)
        try:
            response = self._session.get(url, params={'callback_port': port}, timeout=AUTH_REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise AuthURLRequestFailed("failed to contact auth server: %s" % (e,)) from e

        self._printDebug("%s %s ==> %s" % (GET, url, response.status_code))

        if not 200 <= response.status_code < 300:
            raise AuthURLRequestFailed(
                "failed to get auth URL: server returned status code %d: %s" % (response.status_code, _snippet(response.text)),
                code=response.status_code)

        try:
            auth_url = response.json()['url']
        except (ValueError, KeyError, TypeError) as e:
            raise AuthURLRequestFailed("failed to decode auth URL response: %s" % (e,)) from e

        if not isinstance(auth_url, str) or not auth_url:
            raise AuthURLRequestFailed("auth server returned an empty authorization URL")
        return auth_url

    def _exchange_code(self, code: str) -> Credential:
        """
        Exchange the code received on the callback for an API key.

        Raises:
            CodeExchangeFailed: on network error, non-200 status or bad payload.
        """
        url = '%s/api/auth/exchange' % (self.server_url,)
        try:
            response = self._session.post(url,
                                          json={'code': code, 'callback_port': self.callback_port},
                                          timeout=AUTH_REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise CodeExchangeFailed("failed to exchange code: %s" % (e,)) from e

        self._printDebug("%s %s ==> %s" % (POST, url, response.status_code))

        if response.status_code != 200:
            body = _snippet(response.text)
            raise CodeExchangeFailed("server returned status %d: %s" % (response.status_code, body),
                                     status=response.status_code,
                                     body=body)

        try:
            data = response.json()
            api_key = data['api_key']
            principal = data['github_user']
        except (ValueError, KeyError, TypeError) as e:
            raise CodeExchangeFailed("failed to decode exchange response: %s" % (e,)) from e

        if not api_key:
            raise CodeExchangeFailed("server returned an empty API key")

        return Credential(api_key=api_key,
                          server_url=self.server_url,
                          issued_at=now_utc(),
                          principal=principal or '')


def authenticate(server_url: Optional[str] = None, **kwargs) -> Credential:
    """
    Log in through the browser and return the issued Credential.

    Args:
        server_url: base URL of the gust server.
        kwargs: passed to LoopbackAuthenticator.

    Raises:
        AuthError: see LoopbackAuthenticator.authenticate().
    """
    return LoopbackAuthenticator(server_url, **kwargs).authenticate()
