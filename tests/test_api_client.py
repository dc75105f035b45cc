"""Tests for the async API client."""

import httpx
import pytest

from engine.api_client import error_message, parse_json
from engine.errors import MalformedResponseError, NetworkError

from conftest import make_api


def test_calculate_upload_timeout():
    api = make_api(lambda request: httpx.Response(200), upload_timeout_base=30.0, upload_timeout_per_mb=0.1)

    assert api.calculate_upload_timeout(0) == 30.0
    assert api.calculate_upload_timeout(10 * 1024 * 1024) == pytest.approx(31.0)


def test_error_message_sources():
    """A JSON error field wins, then raw text, then the fallback."""
    assert error_message(httpx.Response(400, json={'error': 'bad'}), 'fb') == 'bad'
    assert error_message(httpx.Response(400, json={'detail': 'x'}), 'fb') == 'fb'
    assert error_message(httpx.Response(400, text='plain'), 'fb') == 'plain'
    assert error_message(httpx.Response(400), 'fb') == 'fb'


def test_parse_json_rejects_non_json():
    with pytest.raises(MalformedResponseError):
        parse_json(httpx.Response(200, text='<html>'), 'Listing')


@pytest.mark.asyncio
async def test_request_sets_request_id():
    seen = []

    def handler(request):
        seen.append(request.headers.get('X-Request-ID'))
        return httpx.Response(200)

    api = make_api(handler)
    await api.request('GET', '/ping')
    await api.request('GET', '/ping')

    assert all(seen)
    assert seen[0] != seen[1]


@pytest.mark.asyncio
async def test_request_returns_error_statuses():
    """Non-2xx responses are returned, not raised."""
    api = make_api(lambda request: httpx.Response(500))

    response = await api.request('GET', '/ping')

    assert response.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize('exc, message', [
    (httpx.ConnectError, 'Cannot connect to file server. Is it running?'),
    (httpx.ConnectTimeout, 'Request timed out. Server may be overloaded.'),
    (httpx.ReadError, 'Network error: boom'),
])
async def test_request_maps_transport_errors(exc, message):
    """Transport failures surface once as NetworkError; nothing is retried."""
    calls = []

    def handler(request):
        calls.append(request)
        raise exc('boom', request=request)

    api = make_api(handler)

    with pytest.raises(NetworkError) as exc_info:
        await api.request('GET', '/ping')

    assert exc_info.value.message == message
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_request_maps_undecodable_body():
    """A body that cannot be decoded is a NetworkError, not a raw httpx error."""
    api = make_api(
        lambda request: httpx.Response(200, content=b'not gzip', headers={'Content-Encoding': 'gzip'})
    )

    with pytest.raises(NetworkError) as exc_info:
        await api.request('GET', '/ping')

    assert exc_info.value.message.startswith('Invalid response from server')
