"""Download previously uploaded photos over HTTP."""

from dataclasses import dataclass

import httpx

from shared_visions.domain.errors import DownloadFailedError
from shared_visions.services.photos import PhotoDownloader


@dataclass
class HttpxPhotoDownloader(PhotoDownloader):
    """Photo downloader using httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxPhotoDownloader":
        """Create a downloader with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def download(self, url: str) -> bytes:
        """Return the bytes stored at a public URL."""
        try:
            response = await self.http_client.get(url, timeout=20)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DownloadFailedError() from exc
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
