"""Shared pytest fixtures for all tests."""

import json

import httpx
import pytest

from cli.config import Config
from cli.session import CliSession
from common.types import Identity
from engine.api_client import ApiClient

BASE_URL = 'http://test'


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .filevault directory
    """
    config_dir = tmp_path / '.filevault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, tmp_path):
    """
    Create temporary config instance.

    Downloads are confined to a directory under tmp_path.

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['server_url'] = BASE_URL
    config.data['share_origin'] = 'https://files.example.com'
    config.data['downloads_dir'] = str(tmp_path / 'downloads')
    return config


@pytest.fixture
def user():
    """Regular user identity."""
    return Identity(user_id='user-1')


@pytest.fixture
def admin():
    """Administrator identity."""
    return Identity(user_id='admin-1', is_admin=True)


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """
    Create multiple sample files for testing batch uploads.

    Returns:
        List of Paths to sample files
    """
    files = []
    for i in range(3):
        file_path = tmp_path / f'test{i}.txt'
        file_path.write_text(f'Sample content {i}')
        files.append(file_path)
    return files


def make_api(handler, **kwargs) -> ApiClient:
    """ApiClient whose requests are answered by handler(request)."""
    return ApiClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


def make_session(config, handler) -> CliSession:
    """CliSession whose requests are answered by handler(request)."""
    return CliSession(config, transport=httpx.MockTransport(handler))


def file_payload(file_id, filename, size=100, mime_type='text/plain',
                 created_at='2024-03-01T10:00:00Z', owner=None):
    """One listing entry as the server returns it."""
    payload = {
        'file_id': file_id,
        'filename': filename,
        'created_at': created_at,
        'file_contents': {'size': size, 'mime_type': mime_type},
        'owner_id': 'user-1',
    }
    if owner is not None:
        payload['users'] = {'username': owner}
    return payload


def multipart_filename(request: httpx.Request) -> str:
    """Filename of the single 'file' part of a multipart request."""
    body = request.read().decode('latin-1')
    marker = 'filename="'
    start = body.index(marker) + len(marker)
    return body[start:body.index('"', start)]


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.read())
