"""Tests for share link toggling."""

import httpx
import pytest

from engine.errors import MalformedResponseError
from engine.share_links import ShareLinkManager, share_url

from conftest import make_api

ORIGIN = 'https://files.example.com'


def test_share_url():
    assert share_url(ORIGIN, 'tok') == 'https://files.example.com/share/tok'
    assert share_url(ORIGIN + '/', 'tok') == 'https://files.example.com/share/tok'


@pytest.mark.asyncio
async def test_toggle_alternates_with_server_state(user):
    """Each call reports exactly what the server returned."""
    states = [True, False]

    def handler(request):
        assert request.method == 'POST'
        assert request.url.path == '/api/v1/user/files/f1/share'
        assert request.headers['X-User-ID'] == 'user-1'
        return httpx.Response(200, json={'share_token': 'tok', 'is_public': states.pop(0)})

    manager = ShareLinkManager(make_api(handler), ORIGIN)

    first = await manager.toggle('f1', user)
    second = await manager.toggle('f1', user)

    assert first.value.is_public is True
    assert first.value.url == 'https://files.example.com/share/tok'
    assert first.value.message == 'File sharing enabled! Link: https://files.example.com/share/tok'
    assert second.value.is_public is False
    assert second.value.message.startswith('File sharing disabled!')


@pytest.mark.asyncio
async def test_toggle_without_identity():
    def handler(request):
        raise AssertionError('no request expected')

    manager = ShareLinkManager(make_api(handler), ORIGIN)
    result = await manager.toggle('f1', None)

    assert result.message == 'You must be logged in to share files.'


@pytest.mark.asyncio
async def test_toggle_server_error_message(user):
    manager = ShareLinkManager(
        make_api(lambda request: httpx.Response(404, json={'error': 'File not found'})),
        ORIGIN,
    )

    result = await manager.toggle('f1', user)

    assert result.message == 'File not found'


@pytest.mark.asyncio
async def test_toggle_fallback_message(user):
    manager = ShareLinkManager(make_api(lambda request: httpx.Response(500, json={})), ORIGIN)

    result = await manager.toggle('f1', user)

    assert result.message == 'Failed to share file.'


@pytest.mark.asyncio
async def test_toggle_malformed_response(user):
    manager = ShareLinkManager(
        make_api(lambda request: httpx.Response(200, json={'is_public': True})),
        ORIGIN,
    )

    result = await manager.toggle('f1', user)

    assert isinstance(result.error, MalformedResponseError)
