"""
Tests unitaires pour HttpAssetDownloader.

Ces tests verifient:
- La deduction de l'extension (type MIME puis suffixe de l'URL)
- Le telechargement nominal
- La conversion des echecs en AssetDownloadError
"""

import httpx
import pytest
import respx

from cinevault.adapters.api.asset_downloader import (
    HttpAssetDownloader,
    filename_from_url,
    guess_extension,
)
from cinevault.core.exceptions import AssetDownloadError

URL = "https://image.tmdb.org/t/p/original/abc123.jpg"


class TestHelpers:
    """Tests des fonctions utilitaires."""

    def test_extension_from_content_type(self) -> None:
        assert guess_extension("https://x.org/img", "image/png; charset=binary") == "png"

    def test_extension_from_url(self) -> None:
        assert guess_extension("https://x.org/a/poster.JPEG?size=w500", None) == "jpg"
        assert guess_extension("https://x.org/a/fanart.webp", "application/octet-stream") == "webp"

    def test_no_extension(self) -> None:
        assert guess_extension("https://x.org/img", None) is None

    def test_filename_from_url(self) -> None:
        assert filename_from_url(URL) == "abc123.jpg"
        assert filename_from_url("https://x.org/") == "asset"


class TestDownload:
    """Tests du telechargement."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_download_success(self, respx_mock: respx.Router) -> None:
        respx_mock.get(URL).mock(
            return_value=httpx.Response(
                200, content=b"jpeg-bytes", headers={"Content-Type": "image/jpeg"}
            )
        )
        downloader = HttpAssetDownloader(max_attempts=1)

        asset = await downloader.download(URL)
        await downloader.close()

        assert asset.url == URL
        assert asset.content == b"jpeg-bytes"
        assert asset.content_type == "image/jpeg"
        assert asset.extension == "jpg"

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error(self, respx_mock: respx.Router) -> None:
        respx_mock.get(URL).mock(return_value=httpx.Response(404))
        downloader = HttpAssetDownloader(max_attempts=1)

        with pytest.raises(AssetDownloadError) as exc_info:
            await downloader.download(URL)
        await downloader.close()

        assert exc_info.value.url == URL
        assert "404" in exc_info.value.reason

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error(self, respx_mock: respx.Router) -> None:
        route = respx_mock.get(URL).mock(side_effect=httpx.ConnectError("refused"))
        downloader = HttpAssetDownloader(max_attempts=2, max_wait=1)

        with pytest.raises(AssetDownloadError):
            await downloader.download(URL)
        await downloader.close()

        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_rate_limited(self, respx_mock: respx.Router) -> None:
        respx_mock.get(URL).mock(return_value=httpx.Response(429))
        downloader = HttpAssetDownloader(max_attempts=1)

        with pytest.raises(AssetDownloadError):
            await downloader.download(URL)
        await downloader.close()

    @pytest.mark.asyncio
    async def test_unsupported_scheme(self) -> None:
        downloader = HttpAssetDownloader()
        with pytest.raises(AssetDownloadError):
            await downloader.download("ftp://example.org/poster.jpg")
