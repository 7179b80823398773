"""Async HTTP gateway to the Hoodie server with uniform error normalization."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from typing import Optional

import httpx

from hoodie.errors import HoodieConnectionError
from hoodie.errors import HoodieHTTPError
from hoodie.errors import HoodieTimeoutError
from hoodie.errors import unreachable_payload
from hoodie.models import HoodieConfig
from hoodie.models import RequestOptions
from hoodie.utils import PendingRequest
from hoodie.utils import resolve_url

logger = logging.getLogger(__name__)


class HoodieHTTPClient:
    """HTTP client bound to one Hoodie server.

    Every rejection surfaces as a ``HoodieRequestError`` with a structured
    ``payload``, whether the server answered with an error or could not be
    reached at all.
    """

    def __init__(
        self,
        config: HoodieConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            config: Client configuration
            transport: Optional httpx transport (defaults to httpx's own)
        """
        self.config = config
        self._closing: Optional[asyncio.Task] = None

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            headers={"User-Agent": config.user_agent},
            transport=transport,
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def cookies(self) -> httpx.Cookies:
        """Cookie jar sent with credentialed requests."""
        return self._client.cookies

    async def __aenter__(self) -> HoodieHTTPClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def close_soon(self) -> None:
        """Close the HTTP client from synchronous code.

        Inside a running event loop the close is scheduled as a task;
        without one it runs to completion right away.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.close())
            return
        self._closing = loop.create_task(self.close())

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def request(self, method: str, path: str, **options: Any) -> PendingRequest:
        """Send a request to the Hoodie server.

        Relative paths are appended to ``base_url``; URLs that carry their own
        scheme are used as given.

        Args:
            method: HTTP method
            path: Path relative to ``base_url``, or an absolute URL
            **options: Fields of ``RequestOptions`` (``headers``, ``body``,
                ``json``, ``params``, ``timeout``, ``with_credentials``,
                ``cross_origin``, ``response_type``)

        Returns:
            Cancellable awaitable resolving to the decoded response body

        Raises:
            pydantic.ValidationError: Unknown or invalid options
        """
        request_options = RequestOptions(**options)
        url = resolve_url(self.base_url, path)
        method = method.upper()
        return PendingRequest(
            self._send(method, url, request_options),
            name=f"{method} {url}",
        )

    async def _send(self, method: str, url: str, options: RequestOptions) -> Any:
        if self.is_closed:
            logger.debug(f"{method} {url} refused: client is closed")
            raise HoodieConnectionError(self.base_url, error_code="CLIENT_CLOSED")

        headers = dict(options.headers)
        if not options.cross_origin:
            headers.setdefault("X-Requested-With", "XMLHttpRequest")

        request = self._client.build_request(
            method=method,
            url=url,
            params=options.params,
            content=options.body,
            json=options.json_body,
            headers=headers,
            timeout=options.timeout if options.timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        if not options.with_credentials:
            request.headers.pop("Cookie", None)

        try:
            response = await self._client.send(request)
        except httpx.TimeoutException as e:
            logger.debug(f"{method} {url} timed out: {e}")
            raise HoodieTimeoutError(
                self.base_url,
                timeout=options.timeout or self.config.timeout,
            ) from e
        except httpx.TransportError as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise HoodieConnectionError(self.base_url) from e

        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code >= 400:
            raise self._normalize_error(response)

        try:
            return self._decode(response, options)
        except ValueError as e:
            raise self._normalize_error(response) from e

    def _normalize_error(self, response: httpx.Response) -> HoodieHTTPError:
        """Turn an unusable response into a structured error.

        Args:
            response: Error response, or a success response with a broken body

        Returns:
            Error carrying the parsed JSON body, or ``{"error": <text>}``
        """
        try:
            payload = response.json()
        except ValueError:
            payload = {"error": response.text} if response.text else unreachable_payload(self.base_url)

        return HoodieHTTPError(
            payload,
            status_code=response.status_code,
            response_text=response.text,
        )

    @staticmethod
    def _decode(response: httpx.Response, options: RequestOptions) -> Any:
        if options.response_type == "response":
            return response
        if options.response_type == "bytes":
            return response.content
        if options.response_type == "text":
            return response.text
        if not response.content:
            return None
        return response.json()

    # Convenience methods
    def get(self, path: str, **options: Any) -> PendingRequest:
        """Make GET request."""
        return self.request("GET", path, **options)

    def post(self, path: str, **options: Any) -> PendingRequest:
        """Make POST request."""
        return self.request("POST", path, **options)

    def put(self, path: str, **options: Any) -> PendingRequest:
        """Make PUT request."""
        return self.request("PUT", path, **options)

    def delete(self, path: str, **options: Any) -> PendingRequest:
        """Make DELETE request."""
        return self.request("DELETE", path, **options)
