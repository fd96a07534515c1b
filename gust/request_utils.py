import shlex
import urllib.parse

# Query parameters and headers never shown in debug output.
REDACTED_PARAMS = ( 'api_key', )
REDACTED_HEADERS = ( 'authorization', )
REDACTED = 'REDACTED'


def redactUrl( url ):
    """
    Replace secret query parameter values in a URL.

    Args:
        url (str): the URL to redact.
    """
    parts = urllib.parse.urlsplit( url )
    if not parts.query:
        return url
    query = [ ( k, REDACTED if k in REDACTED_PARAMS else v ) for k, v in urllib.parse.parse_qsl( parts.query, keep_blank_values = True ) ]
    return urllib.parse.urlunsplit( parts._replace( query = urllib.parse.urlencode( query ) ) )


def getCurlCommandString( request ):
    """
    Build a cURL command string for a prepared request to aid with debugging.

    Secrets (API key query parameter, Authorization header) are redacted.

    Args:
        request: a requests.PreparedRequest (or anything with method, url, headers and body).
    """
    parts = [ "curl" ]

    parts.extend( [ "-X", shlex.quote( request.method or "GET" ) ] )

    for header, value in ( request.headers or {} ).items():
        if header.lower() in REDACTED_HEADERS:
            value = REDACTED
        parts.extend( [ "-H", shlex.quote( f"{header}: {value}" ) ] )

    body = request.body
    if body:
        if isinstance( body, bytes ):
            body = body.decode( "utf-8", errors = "replace" )
        parts.extend( [ "-d", shlex.quote( body ) ] )

    parts.append( shlex.quote( redactUrl( request.url ) ) )

    return " ".join( parts )
