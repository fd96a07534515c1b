import http.server
import socketserver
import threading
import time
import urllib.parse
from typing import Callable, Optional

from .constants import (
    OAUTH_CALLBACK_HOST,
    OAUTH_CALLBACK_PATH,
    OAUTH_CALLBACK_PORT,
    OAUTH_CALLBACK_TIMEOUT,
    OAUTH_SHUTDOWN_DELAY,
)
from .models import Credential
from .templates import render_success_page, render_error_page
from .utils import (
    AuthError,
    AuthTimeout,
    CodeExchangeFailed,
    ListenFailed,
    MissingCode,
    HTTP_OK,
    HTTP_BAD_REQUEST,
    HTTP_NOT_FOUND,
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    printDebug,
)

HTTP_GONE = 410

# Longest stop() waits for the serving thread to wind down.
SHUTDOWN_JOIN_TIMEOUT = 0.5


class OutcomeSlot:
    """One-shot result cell: the first value offered wins, later ones are dropped.

    The value is either a Credential or an AuthError instance.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._value = None

    def offer(self, value) -> bool:
        """
        Try to resolve the slot.

        Returns:
            True if this value resolved the slot, False if it was already resolved.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._value = value
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until resolved or timeout, return whether the slot is resolved."""
        return self._event.wait(timeout=timeout)

    @property
    def is_resolved(self) -> bool:
        return self._event.is_set()

    @property
    def value(self):
        return self._value


class OAuthCallbackHandler(http.server.BaseHTTPRequestHandler):
    """Handler for the login redirect coming back from the browser."""

    # Browsers open speculative connections they never use; bound how long
    # each one keeps its handler thread alive.
    timeout = 5

    def do_GET(self):
        """Handle GET request from the authorization server redirect."""
        session = self.server.session
        parsed = urllib.parse.urlparse(self.path)

        if parsed.path != OAUTH_CALLBACK_PATH:
            self._send(HTTP_NOT_FOUND, "Not found", content_type='text/plain; charset=utf-8')
            return

        # Only the first callback is processed, retries and prefetches are refused.
        if not session.claim():
            self._send(HTTP_CONFLICT, render_error_page("This login has already been handled. Return to your terminal."))
            return

        params = urllib.parse.parse_qs(parsed.query)
        code = params.get('code', [''])[0]

        if not code:
            outcome = MissingCode()
            status = HTTP_BAD_REQUEST
            page = render_error_page("Authentication failed: No code provided")
        else:
            try:
                outcome = session.exchange(code)
                status = HTTP_OK
                page = render_success_page(outcome.principal, outcome.api_key, outcome.server_url, outcome.issued_at)
            except AuthError as e:
                outcome = e
                status = HTTP_INTERNAL_SERVER_ERROR
                page = render_error_page("Authentication failed: %s" % (e,))
            except Exception as e:
                outcome = CodeExchangeFailed("unexpected error exchanging code: %s" % (e,))
                outcome.__cause__ = e
                status = HTTP_INTERNAL_SERVER_ERROR
                page = render_error_page("Authentication failed: %s" % (outcome,))

        if not session.resolve(outcome):
            # The caller stopped waiting (deadline) while we were exchanging.
            status = HTTP_GONE
            page = render_error_page("This login session has expired. Please run the login again.")

        try:
            self._send(status, page)
        finally:
            session.responded.set()

    def _send(self, status: int, body: str, content_type: str = 'text/html; charset=utf-8'):
        data = body.encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        self.wfile.write(data)
        self.wfile.flush()

    def log_message(self, format, *args):
        """Route access logs to the debug function instead of stderr."""
        self.server.session._printDebug("callback server: %s" % (format % args,))


class _CallbackTCPServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    # One thread per connection: an idle preconnect never delays the real callback.
    allow_reuse_address = True
    daemon_threads = True
    block_on_close = False

    def __init__(self, address, handler, session):
        self.session = session
        super().__init__(address, handler)


class OAuthCallbackServer:
    """Local HTTP server catching the login redirect.

    Scoped to a single login attempt: it owns the bound port, the deadline and
    the outcome slot, and it is unusable once stopped.
    """

    def __init__(self,
                 exchange_fn: Callable[[str], Credential],
                 port: int = OAUTH_CALLBACK_PORT,
                 timeout: float = OAUTH_CALLBACK_TIMEOUT,
                 host: str = OAUTH_CALLBACK_HOST,
                 shutdown_delay: float = OAUTH_SHUTDOWN_DELAY,
                 print_debug_fn: Optional[Callable[[str], None]] = None):
        """
        Initialize the callback server.

        Args:
            exchange_fn: called with the received code, returns a Credential or raises AuthError.
            port: fixed port to listen on.
            timeout: maximum time to wait for the callback (seconds).
            host: interface to bind, loopback by default.
            shutdown_delay: grace period before shutting down after an outcome (seconds).
            print_debug_fn: receives debug messages.
        """
        self.exchange = exchange_fn
        self.port = port
        self.host = host
        self.timeout = timeout
        self.shutdown_delay = shutdown_delay
        self.deadline = None
        self.outcome = OutcomeSlot()
        self._debug = print_debug_fn
        self._lock = threading.Lock()
        self._claimed = False
        self._server = None
        self._server_thread = None
        self._shutdown_timer = None
        self._stopped = False
        self._closed = threading.Event()
        # Set once the claimed callback has been answered.
        self.responded = threading.Event()

    @property
    def callback_url(self) -> str:
        return 'http://localhost:%d%s' % (self.port, OAUTH_CALLBACK_PATH)

    def _printDebug(self, msg):
        printDebug(self._debug, msg)

    def start(self) -> int:
        """
        Bind the port and start serving in the background.

        Returns:
            The port number the server is listening on.

        Raises:
            ListenFailed: if the port can't be bound.
        """
        if self._stopped:
            raise RuntimeError("callback server can't be restarted")

        try:
            self._server = _CallbackTCPServer((self.host, self.port), OAuthCallbackHandler, self)
        except OSError as e:
            raise ListenFailed(self.port, e) from e

        self.deadline = time.monotonic() + self.timeout

        self._server_thread = threading.Thread(target=self._server.serve_forever, kwargs={'poll_interval': 0.1})
        self._server_thread.daemon = True
        self._server_thread.start()

        self._printDebug("callback server listening on %s:%d" % (self.host, self.port))
        return self.port

    def claim(self) -> bool:
        """Reserve the callback for the current request, False if already taken."""
        with self._lock:
            if self._claimed or self.outcome.is_resolved:
                return False
            self._claimed = True
            return True

    def resolve(self, value) -> bool:
        """
        Deliver an outcome and schedule the shutdown of the server.

        Returns:
            True if the outcome was delivered, False if one already was.
        """
        delivered = self.outcome.offer(value)
        if delivered:
            self._printDebug("login outcome: %s" % (type(value).__name__,))
            self._schedule_shutdown()
        return delivered

    def _schedule_shutdown(self):
        with self._lock:
            if self._server is None or self._shutdown_timer is not None:
                return
            self._shutdown_timer = threading.Timer(self.shutdown_delay, self.stop)
            self._shutdown_timer.daemon = True
            self._shutdown_timer.start()

    def wait_for_callback(self):
        """
        Wait for the outcome of the login until the deadline.

        Returns:
            The Credential or AuthError that resolved the login. On deadline an
            AuthTimeout is delivered, unless a callback won the race.
        """
        if self.deadline is None:
            raise RuntimeError("callback server not started")

        remaining = self.deadline - time.monotonic()
        if not self.outcome.wait(timeout=max(remaining, 0)):
            self.outcome.offer(AuthTimeout(self.timeout))

        return self.outcome.value

    def stop(self):
        """Stop the server and release the port. Safe to call more than once."""
        with self._lock:
            server = self._server
            server_thread = self._server_thread
            timer = self._shutdown_timer
            self._server = None
            self._stopped = True

        if timer is not None and timer is not threading.current_thread():
            timer.cancel()

        if server is None:
            # Another thread is already stopping it, the port is released once it's done.
            if server_thread is not None:
                self._closed.wait(timeout=2)
            return

        # Let the browser get its page, unless the callback is still being exchanged.
        if self._claimed:
            self.responded.wait(timeout=self.shutdown_delay)

        # shutdown() blocks until serve_forever() notices, bound how long we wait for it.
        shutdown_thread = threading.Thread(target=server.shutdown)
        shutdown_thread.daemon = True
        shutdown_thread.start()
        shutdown_thread.join(timeout=SHUTDOWN_JOIN_TIMEOUT)

        # Closing the listening socket releases the port even if a handler is still running.
        server.server_close()
        self._closed.set()

        if not shutdown_thread.is_alive() and server_thread is not None and server_thread is not threading.current_thread():
            server_thread.join(timeout=SHUTDOWN_JOIN_TIMEOUT)

        self._printDebug("callback server on port %d stopped" % (self.port,))
