"""Tests for the file catalog store."""

import asyncio

import httpx
import pytest

from common.types import FileRecord
from engine.catalog_store import FileCatalogStore, ResultSet, created_timestamp, group_by_owner
from engine.errors import (
    InvalidFilterError,
    MalformedResponseError,
    NetworkError,
    PreconditionError,
    ServerError,
)
from engine.filters import Filter

from conftest import file_payload, make_api


def record(file_id, owner=None, size=10, created_at='2024-01-01T00:00:00Z'):
    return FileRecord(
        id=file_id,
        filename=f'{file_id}.txt',
        created_at=created_at,
        size=size,
        mime_type='text/plain',
        owner_username=owner,
    )


def test_group_by_owner_keeps_first_seen_order():
    """Owners A, A, B give two groups in that order."""
    records = (record('1', 'alice'), record('2', 'alice'), record('3', 'bob'))

    groups = group_by_owner(records)

    assert list(groups) == ['alice', 'bob']
    assert [r.id for r in groups['alice']] == ['1', '2']
    assert [r.id for r in groups['bob']] == ['3']


def test_group_by_owner_unknown_label():
    groups = group_by_owner((record('1'),))
    assert list(groups) == ['Unknown User']


def test_result_set_totals_and_without():
    result_set = ResultSet((record('1', size=5), record('2', size=7)))

    assert result_set.count == 2
    assert result_set.total_size == 12
    assert [r.id for r in result_set.without('1').records] == ['2']


def test_result_set_without_regroups():
    records = (record('1', 'alice'), record('2', 'bob'))
    result_set = ResultSet(records, group_by_owner(records))

    remaining = result_set.without('1')

    assert list(remaining.groups) == ['bob']


def test_created_timestamp_handles_fractions_and_garbage():
    assert created_timestamp(record('1', created_at='2024-01-01T00:00:00Z')) == 1704067200.0
    assert created_timestamp(record('1', created_at='2024-01-01T00:00:00.5Z')) == 1704067200.5
    assert created_timestamp(record('1', created_at='not a date')) == 0.0


@pytest.mark.asyncio
async def test_refresh_user_listing(user):
    """A user listing is flat and built from the search endpoint."""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[file_payload('f1', 'a.txt', 10), file_payload('f2', 'b.txt', 20)])

    store = FileCatalogStore(make_api(handler))
    result = await store.submit_search(user, 'a')

    assert result.ok
    assert [r.id for r in store.result_set.records] == ['f1', 'f2']
    assert store.result_set.groups is None
    assert store.result_set.total_size == 30
    assert seen[0].url.path == '/api/v1/search'
    assert seen[0].url.params['owner_id'] == 'user-1'
    assert seen[0].url.params['filename'] == 'a'


@pytest.mark.asyncio
async def test_refresh_admin_listing_is_grouped(admin):
    """Admin listings are grouped by owner in first-seen order."""
    def handler(request):
        assert request.url.path == '/api/v1/admin/files'
        assert dict(request.url.params) == {'user_id': 'admin-1'}
        return httpx.Response(200, json=[
            file_payload('1', 'a', owner='alice'),
            file_payload('2', 'b', owner='alice'),
            file_payload('3', 'c', owner='bob'),
        ])

    store = FileCatalogStore(make_api(handler))
    await store.reload(admin)

    assert list(store.result_set.groups) == ['alice', 'bob']
    assert len(store.result_set.groups['alice']) == 2


@pytest.mark.asyncio
async def test_refresh_null_body_is_empty(user):
    """A JSON null body is an empty listing."""
    store = FileCatalogStore(make_api(
        lambda request: httpx.Response(200, content=b'null', headers={'Content-Type': 'application/json'})
    ))

    result = await store.reload(user)

    assert result.ok
    assert store.result_set.count == 0


@pytest.mark.asyncio
async def test_refresh_server_error_empties_result_set(user):
    """A failed refresh empties the visible listing and reports the status."""
    responses = [
        httpx.Response(200, json=[file_payload('f1', 'a.txt')]),
        httpx.Response(500, text='boom'),
    ]
    store = FileCatalogStore(make_api(lambda request: responses.pop(0)))

    await store.reload(user)
    assert store.result_set.count == 1

    result = await store.reload(user)

    assert not result.ok
    assert isinstance(result.error, ServerError)
    assert result.message == 'HTTP error! status: 500'
    assert store.result_set.count == 0
    assert store.last_error is result.error


@pytest.mark.asyncio
async def test_refresh_malformed_body(user):
    store = FileCatalogStore(make_api(lambda request: httpx.Response(200, json=[{'file_id': 'x'}])))

    result = await store.reload(user)

    assert isinstance(result.error, MalformedResponseError)
    assert store.result_set.count == 0


@pytest.mark.asyncio
async def test_refresh_network_error(user):
    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    store = FileCatalogStore(make_api(handler))
    result = await store.reload(user)

    assert isinstance(result.error, NetworkError)
    assert 'Cannot connect' in result.message


@pytest.mark.asyncio
async def test_reload_without_identity():
    """No identity means no request."""
    def handler(request):
        raise AssertionError('no request expected')

    store = FileCatalogStore(make_api(handler))
    result = await store.reload(None)

    assert isinstance(result.error, PreconditionError)


@pytest.mark.asyncio
async def test_set_free_text_does_not_fetch(user):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    store = FileCatalogStore(make_api(handler))
    store.set_free_text('rep')
    store.set_free_text('report')

    assert calls == []

    await store.submit_search(user)
    assert calls[0].url.params['filename'] == 'report'


@pytest.mark.asyncio
async def test_mount_loads_once(user):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    store = FileCatalogStore(make_api(handler))

    assert (await store.mount(user)).ok
    assert await store.mount(user) is None
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_save_filter_refetches_with_bounds(user):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    store = FileCatalogStore(make_api(handler))
    await store.save_filter(user, Filter(min_size=0, mime_type='image/png'))

    assert store.filter.mime_type == 'image/png'
    assert calls[0].url.params['min_size'] == '0'
    assert calls[0].url.params['mime_type'] == 'image/png'


@pytest.mark.asyncio
async def test_stale_refresh_is_discarded(user):
    """An older response arriving after a newer one never overwrites it."""
    release_first = asyncio.Event()

    async def handler(request):
        if request.url.params.get('filename') == 'old':
            await release_first.wait()
            return httpx.Response(200, json=[file_payload('old', 'old.txt')])
        return httpx.Response(200, json=[file_payload('new', 'new.txt')])

    store = FileCatalogStore(make_api(handler))

    first = asyncio.create_task(store.refresh(user, user.role, 'old', store.filter))
    await asyncio.sleep(0)
    second = await store.refresh(user, user.role, 'new', store.filter)
    release_first.set()
    first_result = await first

    assert [r.id for r in second.value.records] == ['new']
    assert first_result.ok
    assert [r.id for r in store.result_set.records] == ['new']


@pytest.mark.asyncio
async def test_recent_sorts_newest_first(user):
    def handler(request):
        assert request.url.params['sort_by'] == 'created_at'
        assert request.url.params['limit'] == '2'
        return httpx.Response(200, json=[
            file_payload('old', 'a', created_at='2024-01-01T00:00:00Z'),
            file_payload('new', 'b', created_at='2024-03-01T00:00:00.123456Z'),
            file_payload('mid', 'c', created_at='2024-02-01T00:00:00Z'),
        ])

    store = FileCatalogStore(make_api(handler))
    result = await store.recent(user, limit=2)

    assert [r.id for r in result.value] == ['new', 'mid']
    assert store.result_set.count == 0


@pytest.mark.asyncio
async def test_remove_success(user):
    """Delete sends user_id and drops the file locally."""
    def handler(request):
        if request.method == 'DELETE':
            assert request.url.path == '/api/v1/files/f1'
            assert request.url.params['user_id'] == 'user-1'
            return httpx.Response(200, json={'message': 'deleted'})
        return httpx.Response(200, json=[file_payload('f1', 'a'), file_payload('f2', 'b')])

    store = FileCatalogStore(make_api(handler))
    await store.reload(user)

    result = await store.remove(user, 'f1')

    assert result.ok
    assert [r.id for r in store.result_set.records] == ['f2']


@pytest.mark.asyncio
async def test_remove_failure_uses_server_message(user):
    store = FileCatalogStore(make_api(
        lambda request: httpx.Response(403, json={'error': 'Not your file'})
    ))

    result = await store.remove(user, 'f1')

    assert result.message == 'Not your file'
    assert result.error.status_code == 403


@pytest.mark.asyncio
async def test_remove_failure_fallback_message(user):
    store = FileCatalogStore(make_api(lambda request: httpx.Response(500, json={})))

    result = await store.remove(user, 'f1')

    assert result.message == 'Failed to delete file.'


@pytest.mark.asyncio
async def test_remove_without_identity():
    store = FileCatalogStore(make_api(lambda request: httpx.Response(200)))

    result = await store.remove(None, 'f1')

    assert result.message == 'You must be logged in to delete files.'


@pytest.mark.asyncio
async def test_download_hands_bytes_to_trigger(user):
    received = []
    store = FileCatalogStore(make_api(lambda request: httpx.Response(200, content=b'payload')))

    result = await store.download(record('f1'), lambda content, name: received.append((content, name)))

    assert result.ok
    assert received == [(b'payload', 'f1.txt')]


@pytest.mark.asyncio
async def test_download_failure(user):
    store = FileCatalogStore(make_api(lambda request: httpx.Response(404)))

    result = await store.download(record('f1'), lambda content, name: None)

    assert result.message == 'HTTP error! status: 404'


@pytest.mark.asyncio
async def test_refresh_undecodable_search_response(user):
    """A corrupt gzip search response fails the refresh and empties the listing."""
    responses = [
        httpx.Response(200, json=[file_payload('f1', 'a.txt')]),
        httpx.Response(200, content=b'not gzip', headers={'Content-Encoding': 'gzip'}),
    ]
    store = FileCatalogStore(make_api(lambda request: responses.pop(0)))

    await store.reload(user)
    assert store.result_set.count == 1

    result = await store.submit_search(user, 'a')

    assert not result.ok
    assert isinstance(result.error, NetworkError)
    assert store.result_set.count == 0


@pytest.mark.asyncio
async def test_refresh_rejects_invalid_filter_date(user):
    """A filter date that cannot be parsed sends nothing and keeps the listing."""
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[file_payload('f1', 'a.txt')])

    store = FileCatalogStore(make_api(handler))
    await store.reload(user)

    result = await store.refresh(user, user.role, '', Filter(start_date='not-a-date'))

    assert isinstance(result.error, InvalidFilterError)
    assert len(calls) == 1
    assert [r.id for r in store.result_set.records] == ['f1']
