from datetime import datetime, timedelta, timezone
import importlib

import pytest

import gust
from gust import utils
from gust.utils import (
    GustException,
    AuthError,
    ListenFailed,
    AuthURLRequestFailed,
    MissingCode,
    CodeExchangeFailed,
    AuthTimeout,
    QuotaError,
    ApiError,
    MAX_BODY_SNIPPET,
)

NOW = datetime(2025, 12, 30, 9, 0, 0, tzinfo=timezone.utc)


def test_error_hierarchy():
    for cls in (ListenFailed, AuthURLRequestFailed, MissingCode, CodeExchangeFailed, AuthTimeout):
        assert issubclass(cls, AuthError)
    assert issubclass(AuthError, GustException)
    assert issubclass(QuotaError, GustException)
    assert issubclass(ApiError, GustException)
    assert not issubclass(QuotaError, ApiError)


def test_error_codes():
    assert MissingCode().code == 400
    assert CodeExchangeFailed('nope', status=403, body='forbidden').code == 403
    assert AuthURLRequestFailed('nope').code is None
    assert AuthTimeout(300).timeout == 300
    assert '300 seconds' in str(AuthTimeout(300))


def test_quota_error():
    err = QuotaError(100, NOW + timedelta(minutes=10), body='slow down')

    assert err.remaining == 0
    assert err.limit == 100
    assert err.code == 429
    assert err.body == 'slow down'
    assert 'slow down' in str(err)
    assert err.seconds_until_reset(NOW) == 600
    assert err.retry_message(NOW) == "please try again in about 11 minute(s) when your rate limit resets"


def test_quota_error_unknown_reset():
    err = QuotaError(0, None)
    assert err.seconds_until_reset(NOW) is None
    assert err.retry_message(NOW) == "rate limit reached, please try again later"
    assert str(err) == "rate limit exceeded"


def test_body_is_truncated():
    err = ApiError(ApiError.API, 'failed', status=500, body='x' * (MAX_BODY_SNIPPET * 2))
    assert len(err.body) == MAX_BODY_SNIPPET + 3
    assert err.body.endswith('...')
    assert ApiError(ApiError.API, 'failed', body=b'  raw bytes \n').body == 'raw bytes'


def test_debug_messages_are_timestamped():
    messages = []
    utils.printDebug(messages.append, 'hello')
    utils.printDebug(None, 'dropped')

    assert len(messages) == 1
    assert messages[0].endswith('Z: hello')


def test_set_default_print_debug_fn(monkeypatch):
    messages = []
    monkeypatch.setattr(utils, 'DEFAULT_PRINT_DEBUG_FN', None)

    gust.set_default_print_debug_fn(messages.append)
    client = gust.Client('http://gust.test', 'key')
    client._printDebug('from client')

    assert len(messages) == 1
    assert messages[0].endswith('from client')


def test_environment_settings(monkeypatch, capsys):
    monkeypatch.setenv('GUST_API_URL', 'http://localhost:8080')
    monkeypatch.setenv('GUST_DEBUG', '1')
    monkeypatch.setattr(utils, 'DEFAULT_PRINT_DEBUG_FN', None)
    try:
        importlib.reload(gust)
        assert gust.GLOBAL_SERVER_URL == 'http://localhost:8080'
        assert utils.DEFAULT_PRINT_DEBUG_FN is not None

        utils.printDebug(utils.DEFAULT_PRINT_DEBUG_FN, 'to stderr')
        assert 'to stderr' in capsys.readouterr().err
    finally:
        monkeypatch.delenv('GUST_API_URL')
        monkeypatch.delenv('GUST_DEBUG')
        importlib.reload(gust)
