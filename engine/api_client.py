"""Async HTTP client for the file-storage REST API."""

import uuid
from typing import Any, Optional

import httpx

from common.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    REQUEST_ID_HEADER,
    UPLOAD_TIMEOUT_BASE_SECONDS,
    UPLOAD_TIMEOUT_PER_MB_SECONDS,
    USER_ID_HEADER,
)
from common.logging_config import get_logger
from common.types import Identity
from engine.errors import MalformedResponseError, NetworkError, ServerError

logger = get_logger(__name__)


class ApiClient:
    """
    Thin async wrapper over httpx.AsyncClient.

    Transport failures are raised as NetworkError. Nothing is retried:
    every failure is reported once and the caller decides whether to try
    again.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        upload_timeout_base: float = UPLOAD_TIMEOUT_BASE_SECONDS,
        upload_timeout_per_mb: float = UPLOAD_TIMEOUT_PER_MB_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Server base URL (e.g. "http://localhost:8080")
            timeout: Default per-request timeout in seconds
            upload_timeout_base: Fixed part of the upload timeout
            upload_timeout_per_mb: Upload timeout added per MiB of payload
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.upload_timeout_base = upload_timeout_base
        self.upload_timeout_per_mb = upload_timeout_per_mb
        self.session = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )
        self.request_id: Optional[str] = None
        logger.info(f"Initialized ApiClient [base_url={base_url}]")

    def calculate_upload_timeout(self, file_size: int) -> float:
        """
        Calculate timeout for upload based on file size.

        Args:
            file_size: File size in bytes

        Returns:
            Timeout in seconds (base + per-MiB factor)
        """
        size_mb = file_size / (1024 * 1024)
        return self.upload_timeout_base + size_mb * self.upload_timeout_per_mb

    async def request(
        self,
        method: str,
        endpoint: str,
        timeout: Optional[float] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Issue one HTTP request.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: API path relative to the base URL
            timeout: Per-request timeout override in seconds
            **kwargs: Passed through to httpx (params, json, files, headers)

        Returns:
            HTTP response object, whatever its status

        Raises:
            NetworkError: If no response was received
        """
        self.request_id = str(uuid.uuid4())
        headers = dict(kwargs.pop('headers', None) or {})
        headers[REQUEST_ID_HEADER] = self.request_id
        if timeout is not None:
            kwargs['timeout'] = timeout

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        try:
            response = await self.session.request(method, endpoint, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(
                f"Request timed out: {method} {endpoint} [request_id={self.request_id}]"
            )
            raise NetworkError("Request timed out. Server may be overloaded.") from e
        except httpx.ConnectError as e:
            logger.error(
                f"Connection failed: {method} {endpoint} error={e} [request_id={self.request_id}]"
            )
            raise NetworkError("Cannot connect to file server. Is it running?") from e
        except httpx.TransportError as e:
            logger.error(
                f"Network error: {method} {endpoint} error={type(e).__name__}: {e} "
                f"[request_id={self.request_id}]"
            )
            raise NetworkError(f"Network error: {e}") from e
        except httpx.RequestError as e:
            logger.error(
                f"Unreadable response: {method} {endpoint} error={type(e).__name__}: {e} "
                f"[request_id={self.request_id}]"
            )
            raise NetworkError(f"Invalid response from server: {e}") from e

        logger.debug(
            f"Response received: {method} {endpoint} status={response.status_code} "
            f"[request_id={self.request_id}]"
        )
        if response.status_code >= 400:
            logger.warning(
                f"Request failed: {method} {endpoint} status={response.status_code} "
                f"[request_id={self.request_id}]"
            )
        return response

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.session.aclose()


def identity_header(identity: Identity) -> dict:
    """Header carrying the caller's user id."""
    return {USER_ID_HEADER: identity.user_id}


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def error_message(response: httpx.Response, fallback: str) -> str:
    """
    Extract a user-facing message from an error response.

    A JSON body's ``error`` field wins; an unparseable body is surfaced
    verbatim; otherwise the fallback is used.

    Args:
        response: Non-2xx HTTP response
        fallback: Message used when the body carries none

    Returns:
        Message string
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or fallback

    if isinstance(data, dict) and data.get('error'):
        return str(data['error'])
    return fallback


def server_error(response: httpx.Response, fallback: str) -> ServerError:
    """Build a ServerError from a non-2xx response."""
    return ServerError(error_message(response, fallback), response.status_code)


def parse_json(response: httpx.Response, context: str) -> Any:
    """
    Decode a JSON body.

    Raises:
        MalformedResponseError: If the body is not valid JSON
    """
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(f"{context}: server returned a non-JSON response") from e
