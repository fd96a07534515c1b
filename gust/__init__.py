"""gust API for the gust weather service"""

__version__ = "0.3.0"
__author__ = "gust contributors"

import os
import sys

# Global settings are acquired from the environment:
# - GUST_API_URL overrides the default authorization / API server.
# - GUST_DEBUG, when set to anything but "" or "0", prints debug messages to stderr.
from .constants import SERVER_URL_ENV_VAR, DEBUG_ENV_VAR
from . import utils

GLOBAL_SERVER_URL = os.environ.get( SERVER_URL_ENV_VAR, None ) or None

def _printDebugToStderr( msg ):
    sys.stderr.write( "%s\n" % ( msg, ) )
    sys.stderr.flush()

if os.environ.get( DEBUG_ENV_VAR, "" ) not in ( '', '0' ):
    utils.set_default_print_debug_fn( _printDebugToStderr )

from .utils import set_default_print_debug_fn
from .utils import GustException
from .utils import AuthError
from .utils import ListenFailed
from .utils import AuthURLRequestFailed
from .utils import MissingCode
from .utils import CodeExchangeFailed
from .utils import AuthTimeout
from .utils import QuotaError
from .utils import ApiError
from .models import Credential
from .models import City
from .models import WeatherResponse
from .quota import QuotaSnapshot
from .auth import authenticate
from .auth import LoopbackAuthenticator
from .Client import Client
