"""Shared aiohttp plumbing for backend clients."""

import asyncio
from typing import Any, Callable, Dict, Optional

import aiohttp

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from .exceptions import BackendError

ErrorFactory = Callable[..., BackendError]


class HttpBackend(LoggerMixin):
    """Base class for clients that talk JSON over HTTP.

    A client either owns its session (created in ``initialize``, closed in
    ``close``) or borrows one passed to the constructor, in which case the
    caller keeps ownership.
    """

    #: Exception type raised for transport and non-2xx failures
    error_class: ErrorFactory = BackendError

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        self.settings = settings
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._initialized = session is not None

    async def initialize(self) -> None:
        """Create the HTTP session if none was supplied."""
        if self._initialized:
            return

        timeout = aiohttp.ClientTimeout(total=self.settings.REQUEST_TIMEOUT_SECONDS)
        self._session = aiohttp.ClientSession(timeout=timeout)
        self._owns_session = True
        self._initialized = True

    async def close(self) -> None:
        """Close the HTTP session if this client owns it."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None
        self._initialized = False

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _ensure_initialized(self) -> None:
        if not self._initialized or self._session is None:
            raise self._make_error(f"{self.__class__.__name__} not initialized")

    def _make_error(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> BackendError:
        return self.error_class(message, status=status, body=body)

    async def _request_json(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        expect_body: bool = True,
        error_factory: Optional[ErrorFactory] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Non-2xx responses, transport failures, timeouts and undecodable bodies
        are raised through ``error_factory`` (defaults to ``error_class``)
        with the upstream status and body attached.
        """
        self._ensure_initialized()
        make_error = error_factory or self._make_error

        request_headers = {"Content-Type": "application/json; charset=UTF-8"}
        if headers:
            request_headers.update(headers)

        send = getattr(self._session, method.lower())
        kwargs: Dict[str, Any] = {"headers": request_headers}
        if payload is not None:
            kwargs["json"] = payload

        try:
            async with send(url, **kwargs) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    raise make_error(
                        f"Unexpected response {response.status}: {text}",
                        status=response.status,
                        body=text,
                    )

                if not expect_body:
                    return None

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise make_error(
                        f"Malformed response body: {e}", status=response.status
                    )
        except BackendError:
            raise
        except asyncio.TimeoutError:
            raise make_error(
                f"Request to {url} timed out after {self.settings.REQUEST_TIMEOUT_SECONDS}s"
            )
        except aiohttp.ClientError as e:
            raise make_error(f"Request to {url} failed: {e}")
