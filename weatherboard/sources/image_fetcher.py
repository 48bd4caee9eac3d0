"""HTTP client for downloading teaser images."""

import io
import logging
from typing import Any, Optional

import httpx
from PIL import Image, UnidentifiedImageError

from .. import __version__
from ..exceptions import ImageFetchError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 20 * 1024 * 1024


class HttpImageFetcher:
    """Blocking HTTP client that returns decoded Pillow images.

    The underlying ``httpx.Client`` is created lazily and reused across
    fetches until ``close`` is called.
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None) -> None:
        """Initialize the image fetcher.

        Args:
            timeout: Read timeout in seconds
            client: Pre-built client to use instead of creating one
        """
        self.timeout = timeout
        self.client = client
        self._owns_client = client is None

        logger.debug("Image fetcher initialized")

    def __enter__(self) -> "HttpImageFetcher":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        """Ensure HTTP client exists."""
        if self.client is None or self.client.is_closed:
            timeout = httpx.Timeout(connect=10.0, read=self.timeout, write=10.0, pool=30.0)
            self.client = httpx.Client(
                timeout=timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": f"weatherboard/{__version__}",
                    "Accept": "image/*",
                },
            )
            self._owns_client = True
        return self.client

    def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client and self.client is not None and not self.client.is_closed:
            self.client.close()

    def fetch(self, url: str) -> Image.Image:
        """Download and decode the image at ``url``.

        Args:
            url: HTTP(S) URL of the image

        Returns:
            Fully loaded Pillow image

        Raises:
            ImageFetchError: On timeouts, HTTP errors, network errors or
                undecodable content; the original exception is chained
        """
        client = self._ensure_client()
        logger.debug(f"Fetching image from {url}")

        try:
            response = client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Timed out fetching image from {url}")
            raise ImageFetchError(url, f"request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"HTTP {status} fetching image from {url}")
            raise ImageFetchError(url, f"HTTP {status}", status_code=status) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Network error fetching image from {url}: {e}")
            raise ImageFetchError(url, f"network error: {e}") from e

        content = response.content
        if not content:
            raise ImageFetchError(url, "empty response body", status_code=response.status_code)
        if len(content) > MAX_IMAGE_BYTES:
            raise ImageFetchError(
                url, f"image is {len(content)} bytes, limit is {MAX_IMAGE_BYTES}"
            )

        return decode_image(content, url)


def decode_image(data: bytes, source: str) -> Image.Image:
    """Decode image bytes, loading the pixels eagerly.

    Raises:
        ImageFetchError: If Pillow cannot identify or decode the data
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Could not decode image from {source}: {e}")
        raise ImageFetchError(source, f"cannot decode image: {e}") from e

    logger.debug(f"Decoded {image.width}x{image.height} {image.mode} image from {source}")
    return image
