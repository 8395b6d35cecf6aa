# =============================================================================
# HTTP Transport
# =============================================================================
# Performs the single HTTP GET each lookup or report needs and returns the
# raw response body.
#
# Key responsibilities:
#   - One blocking round trip per call (no retries, no pooling across calls
#     beyond what the httpx client does on its own)
#   - Caller-controlled timeout
#   - Mapping every httpx failure and non-2xx status to TransportError
#
# Uses httpx. Anything that implements Transport.send() can be swapped in,
# which is how the tests keep off the network.
# =============================================================================

import logging
from typing import Protocol

import httpx

from spam_protection import __app_name__, __version__
from spam_protection.core.errors import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can GET a URL and hand back the body."""

    def send(self, url: str, timeout: float | None = None) -> bytes:
        """
        Perform an HTTP GET.

        Returns:
            The complete response body on a 2xx status.

        Raises:
            TransportError: On network failure, timeout or non-2xx status.
        """
        ...


class HttpTransport:
    """
    httpx-backed Transport.

    Usage:
        >>> with HttpTransport(timeout=5) as transport:
        ...     body = transport.send("http://api.stopforumspam.org/api?ip=1.2.3.4&f=json")

    Attributes:
        timeout: Default timeout in seconds, used when send() gets none.
    """

    # Timeout for HTTP requests (seconds)
    TIMEOUT = 10.0

    def __init__(
        self,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            timeout: Default timeout in seconds. Uses TIMEOUT if None.
            client: Pre-built httpx client. A private one is created (and
                    closed by close()) if None.
        """
        self.timeout = timeout if timeout is not None else self.TIMEOUT
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            headers={"User-Agent": f"{__app_name__}/{__version__}"},
        )

    def send(self, url: str, timeout: float | None = None) -> bytes:
        """
        GET url and return the body.

        Args:
            url: Fully built URL.
            timeout: Seconds to wait. Uses self.timeout if None.

        Raises:
            TransportError: If the request fails or the status is not 2xx.
        """
        effective_timeout = timeout if timeout is not None else self.timeout

        try:
            response = self._client.get(url, timeout=effective_timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code} from {e.request.url.host}"
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out after {effective_timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}") from e

        logger.debug(f"HTTP {response.status_code}, {len(response.content)} bytes")
        return response.content

    def close(self) -> None:
        """Close the underlying httpx client if we created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
