"""Tests for public share browsing."""

import httpx
import pytest

from engine.public_shares import PublicShareBrowser

from conftest import make_api

ORIGIN = 'https://files.example.com'

SHARE = {
    'file_id': 'f1',
    'filename': 'report.pdf',
    'owner_username': 'alice',
    'mime_type': 'application/pdf',
    'size': 2048,
    'download_count': 3,
    'created_at': '2024-01-01T00:00:00Z',
    'share_token': 'tok',
}


@pytest.mark.asyncio
async def test_list_shared(user):
    def handler(request):
        assert request.url.path == '/api/v1/user/shared-publicly'
        assert request.headers['X-User-ID'] == 'user-1'
        return httpx.Response(200, json=[SHARE])

    browser = PublicShareBrowser(make_api(handler), ORIGIN)
    result = await browser.list_shared(user)

    assert len(result.value) == 1
    assert result.value[0].filename == 'report.pdf'
    assert result.value[0].download_count == 3
    assert browser.link_for(result.value[0].share_token) == 'https://files.example.com/share/tok'


@pytest.mark.asyncio
async def test_list_shared_requires_identity():
    browser = PublicShareBrowser(make_api(lambda request: httpx.Response(200, json=[])), ORIGIN)

    result = await browser.list_shared(None)

    assert not result.ok


@pytest.mark.asyncio
async def test_details(user):
    def handler(request):
        assert request.url.path == '/share/tok'
        return httpx.Response(200, json=SHARE)

    browser = PublicShareBrowser(make_api(handler), ORIGIN)
    result = await browser.details('tok')

    assert result.value.owner_username == 'alice'
    assert result.value.size == 2048


@pytest.mark.asyncio
async def test_details_not_found():
    browser = PublicShareBrowser(
        make_api(lambda request: httpx.Response(404, json={'error': 'Share link not found or expired'})),
        ORIGIN,
    )

    result = await browser.details('missing')

    assert result.message == 'Share link not found or expired'


@pytest.mark.asyncio
async def test_download():
    received = []

    def handler(request):
        assert request.url.path == '/share/tok/download'
        return httpx.Response(200, content=b'%PDF')

    browser = PublicShareBrowser(make_api(handler), ORIGIN)
    result = await browser.download('tok', 'report.pdf', lambda content, name: received.append((content, name)))

    assert result.ok
    assert received == [(b'%PDF', 'report.pdf')]


@pytest.mark.asyncio
async def test_download_requires_token():
    browser = PublicShareBrowser(make_api(lambda request: httpx.Response(200)), ORIGIN)

    result = await browser.download('', 'x', lambda content, name: None)

    assert result.message == 'Share token is missing.'
