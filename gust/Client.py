from typing import Any, Callable, List, Optional
from urllib.parse import quote

import requests

from . import __version__
from .constants import API_REQUEST_TIMEOUT, VALID_UNITS
from .models import City, WeatherResponse
from .quota import QuotaSnapshot
from .request_utils import getCurlCommandString
from .time_utils import format_timestamp
from .user_agent_utils import build_user_agent
from . import utils
from .utils import ApiError, QuotaError, GET, HTTP_TOO_MANY_REQUESTS, _snippet


class Client( object ):
    '''Client for the gust weather API that keeps track of the caller's quota.

    Every response refreshes the quota snapshot from its rate limit headers,
    including error responses. A 429 is always reported as a QuotaError.
    '''

    def __init__( self, base_url: str, api_key: str, units: Optional[str] = None, timeout: float = API_REQUEST_TIMEOUT, print_debug_fn: Optional[Callable[[str], None]] = None, session: Optional[requests.Session] = None ):
        '''Create a client.

        Args:
            base_url (str): root URL of the gust server.
            api_key (str): API key obtained through gust.authenticate().
            units (str): optional units for weather data, one of "standard", "metric" or "imperial".
            timeout (float): timeout in seconds for each request.
            print_debug_fn (function(message)): callback function that will receive detailed debug messages.
            session (requests.Session): optional session to send requests with.
        '''
        if units and units not in VALID_UNITS:
            raise ValueError( 'invalid units %r, must be one of: %s' % ( units, ', '.join( VALID_UNITS ) ) )
        if not base_url:
            raise ValueError( 'a base URL is required' )

        self._base_url = base_url.rstrip( '/' )
        self._api_key = api_key
        self._units = units or None
        self._timeout = timeout
        self._debug = print_debug_fn or utils.DEFAULT_PRINT_DEBUG_FN
        self._quota = QuotaSnapshot()
        self._session = session if session is not None else requests.Session()
        self._session.headers[ 'User-Agent' ] = build_user_agent( 'gust-py', __version__ )

    def _printDebug( self, msg ):
        utils.printDebug( self._debug, msg )

    @property
    def quota( self ) -> QuotaSnapshot:
        '''Copy of the last known quota state.'''
        return self._quota.copy()

    @property
    def quota_level( self ) -> str:
        return self._quota.level

    def _apiCall( self, path: str, params: dict ) -> Any:
        url = '%s/%s' % ( self._base_url, path )

        request = self._session.prepare_request( requests.Request( GET, url, params = params ) )
        self._printDebug( "cURL command:" )
        self._printDebug( getCurlCommandString( request ) )

        try:
            response = self._session.send( request, timeout = self._timeout )
        except requests.exceptions.RequestException as e:
            raise ApiError( ApiError.CONNECTION, 'failed to reach %s: %s' % ( self._base_url, e ) ) from e

        self._quota.update( response.headers )
        self._printDebug( "%s: %s ==> %s" % ( GET, path, response.status_code ) )
        if self._quota.is_known:
            self._printDebug( "Rate limit: %d/%d, Reset: %s" % ( self._quota.remaining, self._quota.limit, format_timestamp( self._quota.reset_at ) ) )

        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            raise QuotaError( self._quota.limit, self._quota.reset_at, body = response.text )

        if not 200 <= response.status_code < 300:
            raise ApiError( ApiError.API,
                            'API request failed with status %d: %s' % ( response.status_code, _snippet( response.text ) ),
                            status = response.status_code,
                            body = response.text )

        try:
            return response.json()
        except ValueError as e:
            raise ApiError( ApiError.DECODE, 'failed to decode response: %s' % ( e, ), status = response.status_code, body = response.text ) from e

    def get_weather( self, city_name: str ) -> WeatherResponse:
        '''Get the current weather and forecast for a city.

        Args:
            city_name (str): name of the city.

        Returns:
            WeatherResponse

        Raises:
            QuotaError: the quota is exhausted.
            ApiError: any other failure.
        '''
        params = { 'api_key' : self._api_key }
        if self._units:
            params[ 'units' ] = self._units

        data = self._apiCall( 'api/weather/%s' % ( quote( city_name, safe = '' ), ), params )
        try:
            return WeatherResponse.from_dict( data )
        except ( ValueError, TypeError ) as e:
            raise ApiError( ApiError.DECODE, 'unexpected weather response: %s' % ( e, ) ) from e

    def search_cities( self, query: str ) -> List[City]:
        '''Search cities by name.

        Args:
            query (str): partial or full city name.

        Returns:
            list of City.

        Raises:
            QuotaError: the quota is exhausted.
            ApiError: any other failure.
        '''
        data = self._apiCall( 'api/cities/search', { 'q' : query } )
        if not isinstance( data, list ):
            raise ApiError( ApiError.DECODE, 'unexpected city search response: expected a list' )
        try:
            return [ City.from_dict( c ) for c in data ]
        except ( ValueError, TypeError ) as e:
            raise ApiError( ApiError.DECODE, 'unexpected city search response: %s' % ( e, ) ) from e
