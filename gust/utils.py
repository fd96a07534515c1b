from datetime import datetime, timezone
from typing import Callable, Optional


class GustException( Exception ):
    '''Exception type used for various errors in the gust SDK.'''

    def __init__(self, message, code=None):
        """
        Initialize the exception with a message and an optional status code.

        Args:
            message (str): The error message.
            code (int, optional): An optional status code returned by the API. Defaults to None.
        """
        super().__init__(message)
        self.code = code


GET = 'GET'
POST = 'POST'

# Default function to call with debug messages.
DEFAULT_PRINT_DEBUG_FN: Optional[Callable[[str], None]] = None

def set_default_print_debug_fn( fn: Optional[Callable[[str], None]] = None ):
    """
    Set a default function to call with debug messages.

    Args:
        fn (function): the function to call with debug messages.
    """
    global DEFAULT_PRINT_DEBUG_FN
    DEFAULT_PRINT_DEBUG_FN = fn

def printDebug( fn: Optional[Callable[[str], None]], msg: str ):
    if fn is not None:
        time_string = datetime.now( timezone.utc ).strftime( "%Y-%m-%d %H:%M:%SZ" )
        fn( f"{time_string}: {msg}" )


HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500

# How much of a response body is kept in error messages.
MAX_BODY_SNIPPET = 500


def _snippet( body ):
    if body is None:
        return ''
    if isinstance( body, bytes ):
        body = body.decode( 'utf-8', errors = 'replace' )
    body = body.strip()
    if len( body ) > MAX_BODY_SNIPPET:
        body = body[ : MAX_BODY_SNIPPET ] + '...'
    return body


class AuthError( GustException ):
    '''Base class for login failures. Always terminal for that login attempt.'''
    pass


class ListenFailed( AuthError ):
    '''The local callback listener could not bind its port.'''

    def __init__(self, port, reason):
        super().__init__(
            "could not listen for the login callback on port %s: %s\n"
            "Another login may be in progress, or another program is using that port." % ( port, reason ) )
        self.port = port


class AuthURLRequestFailed( AuthError ):
    '''The authorization server did not hand out an authorization URL.'''
    pass


class MissingCode( AuthError ):
    '''The browser came back to the callback without an authorization code.'''

    def __init__(self):
        super().__init__( "no auth code received", code = HTTP_BAD_REQUEST )


class CodeExchangeFailed( AuthError ):
    '''The authorization code could not be exchanged for an API key.'''

    def __init__(self, message, status=None, body=None):
        super().__init__( message, code = status )
        self.status = status
        self.body = body


class AuthTimeout( AuthError ):
    '''No callback arrived before the login deadline.'''

    def __init__(self, timeout):
        super().__init__( "authentication timed out after %g seconds" % ( timeout, ) )
        self.timeout = timeout


class QuotaError( GustException ):
    '''The API quota is exhausted (HTTP 429).

    Carries what a caller needs to tell the user when to come back.
    '''

    remaining = 0

    def __init__(self, limit: int, reset_at: Optional[datetime], body=None):
        self.limit = limit
        self.reset_at = reset_at
        self.body = _snippet( body )
        message = "rate limit exceeded"
        if self.body:
            message = "%s: %s" % ( message, self.body )
        super().__init__( message, code = HTTP_TOO_MANY_REQUESTS )

    def seconds_until_reset(self, now: Optional[datetime] = None) -> Optional[int]:
        """
        Number of seconds until the quota resets, None if unknown.

        Args:
            now (datetime): reference time, defaults to the current UTC time.
        """
        if self.reset_at is None:
            return None
        now = now or datetime.now( timezone.utc )
        return int( ( self.reset_at - now ).total_seconds() )

    def retry_message(self, now: Optional[datetime] = None) -> str:
        """
        Human message telling the user when to try again.

        Args:
            now (datetime): reference time, defaults to the current UTC time.
        """
        from .time_utils import format_retry_after
        return format_retry_after( self.seconds_until_reset( now ) )


class ApiError( GustException ):
    '''Any non-quota failure talking to the weather API.'''

    CONNECTION = 'connection'
    API = 'api'
    DECODE = 'decode'

    def __init__(self, kind, message, status=None, body=None):
        super().__init__( message, code = status )
        self.kind = kind
        self.status = status
        self.body = _snippet( body )
