"""Tests for image resolution, print rendering and page export."""

import base64
import webbrowser
from pathlib import Path

import httpx
import pytest
import respx

from photobinder.models.failure import ErrorCategory, FailureKind, PopupBlockedError
from photobinder.services.edited_images import EditedImageCache
from photobinder.services.export import (
    BrowserPrintSurface,
    ExportOptions,
    export_binder_page,
    generate_filename,
)
from photobinder.services.image_resolver import (
    ImageFetchError,
    ImageResolver,
    ResolvedCard,
    bytes_to_data_url,
    embed_overlay_assets,
)
from photobinder.services.overlays import LEGENDARY_BADGE, MINT_STICKER, overlay_asset_paths
from photobinder.services.page_renderer import PageSize, QualityMode, render_print_page

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


class RecordingSurface:
    def __init__(self, fail_print: bool = False) -> None:
        self.written: list[str] = []
        self.printed = False
        self.closed = False
        self._fail_print = fail_print

    def write(self, html: str) -> None:
        self.written.append(html)

    def print(self) -> None:
        if self._fail_print:
            raise PopupBlockedError(detail="refused")
        self.printed = True

    def close(self) -> None:
        self.closed = True


class RefusingBrowser(webbrowser.BaseBrowser):
    def open(self, url, new=0, autoraise=True):
        return False


@pytest.fixture
def cache(memory_store) -> EditedImageCache:
    return EditedImageCache(memory_store)


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


class TestGenerateFilename:
    @pytest.mark.parametrize(
        ("name", "page", "expected"),
        [
            ("My K-pop Collection!", 2, "my-k-pop-collection-page-2.pdf"),
            ("  Twice -- Fancy  ", 1, "twice-fancy-page-1.pdf"),
            ("ALLCAPS", 10, "allcaps-page-10.pdf"),
            ("트와이스 Binder", 3, "binder-page-3.pdf"),
            ("Claſsic K-pop", 1, "cla-sic-k-pop-page-1.pdf"),
            ("20 Kelvin", 5, "20-elvin-page-5.pdf"),
        ],
    )
    def test_slug(self, name: str, page: int, expected: str) -> None:
        assert generate_filename(name, page) == expected

    def test_deterministic(self) -> None:
        assert generate_filename("Same Name", 4) == generate_filename("Same Name", 4)

    def test_always_ascii(self) -> None:
        assert generate_filename("Ｆｕｌｌ ｗｉｄｔｈ Claſsic ǅ", 1).isascii()


class TestImageResolver:
    @respx.mock
    async def test_fetches_and_inlines(self, cache, http_client) -> None:
        respx.get("https://blobs.test/a.png").mock(
            return_value=httpx.Response(
                200, content=b"png-bytes", headers={"Content-Type": "image/png"}
            )
        )
        resolver = ImageResolver(cache, client=http_client)

        data_url = await resolver.resolve("card-1", "https://blobs.test/a.png")

        assert data_url == bytes_to_data_url(b"png-bytes", "image/png")

    @respx.mock
    async def test_non_image_content_type_falls_back_to_jpeg(self, cache, http_client) -> None:
        respx.get("https://blobs.test/a").mock(
            return_value=httpx.Response(
                200, content=JPEG_BYTES, headers={"Content-Type": "application/octet-stream"}
            )
        )
        resolver = ImageResolver(cache, client=http_client)

        data_url = await resolver.resolve("card-1", "https://blobs.test/a")

        assert data_url.startswith("data:image/jpeg;base64,")
        assert base64.b64decode(data_url.split(",", 1)[1]) == JPEG_BYTES

    @respx.mock
    async def test_edited_image_wins(self, cache, http_client) -> None:
        route = respx.get("https://blobs.test/a.png").mock(
            return_value=httpx.Response(200, content=b"remote")
        )
        await cache.save("card-1", "data:image/png;base64,RURJVEVE")
        resolver = ImageResolver(cache, client=http_client)

        assert await resolver.resolve("card-1", "https://blobs.test/a.png") == (
            "data:image/png;base64,RURJVEVE"
        )
        assert route.called is False

    @respx.mock
    async def test_edited_image_kept_until_cleared(self, cache, http_client) -> None:
        route = respx.get("https://blobs.test/a.png").mock(
            return_value=httpx.Response(200, content=b"first-remote")
        )
        await cache.save("card-1", "data:image/png;base64,RURJVEVE")
        resolver = ImageResolver(cache, client=http_client)
        assert await resolver.resolve("card-1", "https://blobs.test/a.png") == (
            "data:image/png;base64,RURJVEVE"
        )

        route.mock(return_value=httpx.Response(200, content=b"second-remote"))
        assert await resolver.resolve("card-1", "https://blobs.test/a.png") == (
            "data:image/png;base64,RURJVEVE"
        )
        assert route.called is False

        await cache.clear("card-1")

        assert await resolver.resolve("card-1", "https://blobs.test/a.png") == (
            bytes_to_data_url(b"second-remote")
        )
        assert route.call_count == 1

    @respx.mock
    async def test_fetch_failure(self, cache, http_client) -> None:
        respx.get("https://blobs.test/gone.png").mock(return_value=httpx.Response(404))
        resolver = ImageResolver(cache, client=http_client)

        with pytest.raises(ImageFetchError) as exc_info:
            await resolver.resolve("card-1", "https://blobs.test/gone.png")

        assert exc_info.value.kind == FailureKind.EXTERNAL_API_ERROR
        assert exc_info.value.category == ErrorCategory.RETRY_BANNER
        assert exc_info.value.retryable is True

    @respx.mock
    async def test_resolve_many_keeps_order(self, cache, http_client, card_factory) -> None:
        for i in range(3):
            respx.get(f"https://blobs.test/card-{i}.jpg").mock(
                return_value=httpx.Response(200, content=f"img-{i}".encode())
            )
        cards = [card_factory(i) for i in range(3)]
        await cache.save("card-1", "data:image/png;base64,AAAA")
        resolver = ImageResolver(cache, client=http_client)

        resolved = await resolver.resolve_many(cards)

        assert [r.card.id for r in resolved] == ["card-0", "card-1", "card-2"]
        assert resolved[1].image_data_url == "data:image/png;base64,AAAA"
        assert resolved[2].image_data_url == bytes_to_data_url(b"img-2")

    def test_embed_overlay_assets(self, tmp_path: Path) -> None:
        mint = tmp_path / MINT_STICKER.lstrip("/")
        mint.parent.mkdir(parents=True)
        mint.write_bytes(b"mint-png")

        embedded = embed_overlay_assets(tmp_path)

        assert embedded == {MINT_STICKER: bytes_to_data_url(b"mint-png", "image/png")}
        assert set(embedded) <= set(overlay_asset_paths())


class TestRenderPrintPage:
    def _resolved(self, card_factory, count: int, **overrides) -> list[ResolvedCard]:
        return [
            ResolvedCard(card=card_factory(i, **overrides), image_data_url=f"data:image/jpeg;base64,C{i}")
            for i in range(count)
        ]

    def test_fills_twelve_slots(self, card_factory) -> None:
        html = render_print_page("My Binder", 1, self._resolved(card_factory, 5), "#FFF8F0")

        assert html.count('class="card"') == 5
        assert html.count('class="empty-slot"') == 7
        assert "grid-template-columns: repeat(3, 1fr)" in html
        assert "Save as PDF" in html

    def test_overlays_and_quantity(self, card_factory) -> None:
        cards = self._resolved(
            card_factory, 1, rarity="legendary", condition="mint", quantity=4
        )

        html = render_print_page("B", 1, cards, "#FFF8F0", asset_base_url="https://cdn.test")

        assert f'src="https://cdn.test{MINT_STICKER}"' in html
        assert f'src="https://cdn.test{LEGENDARY_BADGE}"' in html
        assert 'class="glint"' in html
        assert "×4" in html

    def test_embedded_overlay_sources_take_precedence(self, card_factory) -> None:
        cards = self._resolved(card_factory, 1, condition="mint")

        html = render_print_page(
            "B", 1, cards, "#FFF8F0", overlay_sources={MINT_STICKER: "data:image/png;base64,TQ=="}
        )

        assert 'src="data:image/png;base64,TQ=="' in html

    def test_page_size_and_quality(self, card_factory) -> None:
        html = render_print_page(
            "B", 1, [], "#FFF8F0", page_size=PageSize.LETTER, quality=QualityMode.HIGH
        )

        assert "size: 8.5in 11in" in html
        assert "image-rendering: high-quality" in html
        assert "image-resolution: 300dpi" in html
        assert '<meta name="device-pixel-ratio" content="2">' in html

    def test_standard_quality_has_no_pixel_ratio_hint(self) -> None:
        html = render_print_page("B", 1, [], "#FFF8F0")

        assert "device-pixel-ratio" not in html
        assert "image-resolution: 150dpi" in html

    def test_escapes_names_and_rejects_unsafe_background(self, card_factory) -> None:
        cards = self._resolved(card_factory, 1, name="<script>alert(1)</script>")

        html = render_print_page("<b>Binder</b>", 1, cards, "red;}</style><script>")

        assert "<script>alert(1)</script>" not in html
        assert "&lt;b&gt;Binder&lt;/b&gt;" in html
        assert "background: #FFF8F0;" in html

    def test_more_than_twelve_cards(self, card_factory) -> None:
        with pytest.raises(ValueError):
            render_print_page("B", 1, self._resolved(card_factory, 13), "#FFF8F0")


class TestExportBinderPage:
    @pytest.fixture
    def options(self, card_factory) -> ExportOptions:
        return ExportOptions(
            binder_name="My K-pop Collection!",
            page_number=2,
            cards=[card_factory(0)],
            page_background="#FFF8F0",
        )

    @pytest.fixture
    async def resolver(self, cache) -> ImageResolver:
        await cache.save("card-0", "data:image/png;base64,AAAA")
        return ImageResolver(cache)

    async def test_writes_prints_and_closes(self, options, resolver) -> None:
        surface = RecordingSurface()

        result = await export_binder_page(options, resolver, lambda: surface)

        assert result.filename == "my-k-pop-collection-page-2.pdf"
        assert surface.written == [result.html]
        assert surface.printed is True
        assert surface.closed is True

    async def test_popup_blocked(self, options, resolver) -> None:
        with pytest.raises(PopupBlockedError) as exc_info:
            await export_binder_page(options, resolver, lambda: None)

        assert exc_info.value.kind == FailureKind.POPUP_BLOCKED
        assert exc_info.value.category == ErrorCategory.POPUP_BLOCKED

    async def test_surface_closed_when_print_fails(self, options, resolver) -> None:
        surface = RecordingSurface(fail_print=True)

        with pytest.raises(PopupBlockedError):
            await export_binder_page(options, resolver, lambda: surface)

        assert surface.closed is True

    async def test_browser_surface_refused(self, options, resolver, tmp_path: Path) -> None:
        path = tmp_path / "page.html"
        surface = BrowserPrintSurface(path, browser=RefusingBrowser(), delete_on_close=True)

        with pytest.raises(PopupBlockedError):
            await export_binder_page(options, resolver, lambda: surface)

        assert not path.exists()
