# Default authorization / API server, used when no server URL is given.
DEFAULT_SERVER_URL = 'https://gust.ngrok.io'

# OAuth-related constants
# The callback port is fixed: the authorization server redirects back to it,
# so it must be known up front. There is no fallback to another port.
OAUTH_CALLBACK_PORT = 9876
OAUTH_CALLBACK_HOST = '127.0.0.1'
OAUTH_CALLBACK_PATH = '/callback'
OAUTH_CALLBACK_TIMEOUT = 300  # 5 minutes

# Delay before the callback server shuts down once an outcome is known,
# enough for the browser to receive the page.
OAUTH_SHUTDOWN_DELAY = 0.1

# Timeout (seconds) for the calls made to the authorization server.
AUTH_REQUEST_TIMEOUT = 10

# Timeout (seconds) for weather / city search calls.
API_REQUEST_TIMEOUT = 30

# Rate limit headers returned on every API response.
RATE_LIMIT_LIMIT_HEADER = 'X-RateLimit-Limit'
RATE_LIMIT_REMAINING_HEADER = 'X-RateLimit-Remaining'
RATE_LIMIT_RESET_HEADER = 'X-RateLimit-Reset'

# When remaining calls drop to this value or below, callers should warn.
QUOTA_WARNING_THRESHOLD = 5

# Used when the reset header can't be parsed.
QUOTA_RESET_FALLBACK = 60 * 60

# Units accepted by the weather endpoint.
VALID_UNITS = ( 'standard', 'metric', 'imperial' )

# Environment variables.
SERVER_URL_ENV_VAR = 'GUST_API_URL'
DEBUG_ENV_VAR = 'GUST_DEBUG'
