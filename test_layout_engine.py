"""Tests for the page layout engine.

Layout is checked on the operations recorded by a PageWriter; nothing is
saved to disk here.
"""
import asyncio

import pytest
from PIL import Image

from chat_to_pdf.exceptions import BlockRasterizationError, InvalidConfigurationError, LayoutFinalizedError
from chat_to_pdf.export_state import ExportState
from chat_to_pdf.models import ContentBlock, RasterImage, Role
from chat_to_pdf.page_writer import PageWriter
from chat_to_pdf.paginator.layout_engine import LayoutGeometry, LayoutState, PageLayoutEngine
from chat_to_pdf.paginator.unit_converter import pixels_to_mm

MARGIN = 25.4
BOTTOM = 297 - 25.4


def make_block(width_px=360, height_px=192, role=Role.SECONDARY, index=0, text="message"):
    return ContentBlock(raw_text=text, pixel_width=width_px, pixel_height=height_px,
                        role=role, index=index)


def make_image(block, scale=2):
    size = (block.pixel_width * scale, block.pixel_height * scale)
    return RasterImage.from_pil(Image.new("RGB", size, "white"), scale=scale)


async def rasterize(block):
    return make_image(block)


def char_width(text):
    return len(text) * 2.0


@pytest.fixture
def writer():
    return PageWriter()


@pytest.fixture
def engine(writer):
    return PageLayoutEngine(writer)


def label_ops(page):
    return [op for op in page.operations
            if op.kind == "text" and op.args["text"] in ("User:", "Assistant:")]


# ----------------------------------------------------------------------------
# Geometry
# ----------------------------------------------------------------------------

def test_a4_geometry():
    g = LayoutGeometry()
    assert g.content_width == pytest.approx(159.2)
    assert g.usable_height == pytest.approx(246.2)
    assert g.bottom_limit == pytest.approx(BOTTOM)


def test_geometry_rejects_oversized_margins():
    with pytest.raises(InvalidConfigurationError):
        LayoutGeometry(margin=110)


# ----------------------------------------------------------------------------
# Image blocks
# ----------------------------------------------------------------------------

def test_title_moves_cursor_below_it(engine, writer):
    engine.start("Chat History")
    assert engine.cursor.y_position == pytest.approx(40.4)
    assert writer.pages[0].texts() == ["Chat History"]


def test_block_that_fits_stays_on_one_page(engine, writer):
    engine.start("Chat History")
    block = make_block(height_px=192)  # 50.8 mm
    engine.place_image_block(block, make_image(block))

    page = writer.pages[0]
    assert writer.page_count() == 1
    assert len(label_ops(page)) == 1
    assert label_ops(page)[0].args["y"] == pytest.approx(40.4)
    images = page.images()
    assert len(images) == 1
    assert images[0].args["y"] == pytest.approx(45.4)
    assert images[0].args["height"] == pytest.approx(50.8)
    assert engine.cursor.y_position == pytest.approx(45.4 + 50.8 + 5)


def test_tall_block_continues_on_next_page(engine, writer):
    engine.start("Chat History")
    block = make_block(height_px=1512)  # 400.05 mm
    engine.place_image_block(block, make_image(block))

    assert writer.page_count() == 2
    first, second = writer.pages
    assert len(first.images()) == 1
    assert len(second.images()) == 1
    assert first.images()[0].args["height"] == pytest.approx(BOTTOM - 45.4)
    assert second.images()[0].args["y"] == pytest.approx(MARGIN)
    total = sum(op.args["height"] for p in writer.pages for op in p.images())
    assert total == pytest.approx(pixels_to_mm(1512), abs=0.01)
    # Only one label for the whole block
    assert len(label_ops(first)) + len(label_ops(second)) == 1


def test_wide_block_is_scaled_to_content_width():
    writer = PageWriter(page_size=(209, 297))
    engine = PageLayoutEngine(writer, LayoutGeometry(page_width=209))
    block = make_block(width_px=1134, height_px=227)
    width_mm, height_mm = pixels_to_mm(1134), pixels_to_mm(227)
    engine.place_image_block(block, make_image(block))

    image = writer.pages[0].images()[0]
    assert image.args["width"] == pytest.approx(158.2)
    assert image.args["height"] == pytest.approx(height_mm * 158.2 / width_mm)


def test_label_moves_to_next_page_with_its_content(engine, writer):
    engine.cursor.y_position = 250.0
    block = make_block(height_px=192)
    engine.place_image_block(block, make_image(block))

    assert writer.page_count() == 2
    assert label_ops(writer.pages[0]) == []
    assert label_ops(writer.pages[1])[0].args["y"] == pytest.approx(MARGIN)


def test_short_block_only_needs_its_own_height(engine, writer):
    engine.cursor.y_position = 255.0
    block = make_block(height_px=38)  # about 10 mm, under the minimum slice
    engine.place_image_block(block, make_image(block))

    assert writer.page_count() == 1
    assert len(writer.pages[0].images()) == 1


def test_labels_follow_roles(engine, writer):
    blocks = [make_block(role=Role.PRIMARY, index=0), make_block(role=Role.SECONDARY, index=1)]
    asyncio.run(engine.layout_images(blocks, rasterize))

    assert [op.args["text"] for op in label_ops(writer.pages[0])] == ["User:", "Assistant:"]


def test_failed_block_is_skipped(engine, writer):
    async def flaky(block):
        if block.index == 1:
            raise BlockRasterizationError(block.index, "renderer crashed")
        return make_image(block)

    blocks = [make_block(index=i) for i in range(3)]
    placed = asyncio.run(engine.layout_images(blocks, flaky))

    assert placed == 2
    assert len(engine.diagnostics) == 1
    assert "block 1" in engine.diagnostics[0]
    assert len(label_ops(writer.pages[0])) == 2


def test_unsplittable_image_draws_nothing(engine, writer):
    async def broken(block):
        return RasterImage(pixels=None, width=0, height=0)

    placed = asyncio.run(engine.layout_images([make_block()], broken))

    assert placed == 0
    assert label_ops(writer.pages[0]) == []
    assert writer.pages[0].images() == []


def test_cursor_stays_within_margins(engine):
    engine.start("Chat History")
    heights = [192, 1512, 38, 900, 2600, 60, 700]
    blocks = [make_block(height_px=h, index=i) for i, h in enumerate(heights)]
    asyncio.run(engine.layout_images(blocks, rasterize))

    assert engine.blocks_placed == len(blocks)
    for _, y in engine.cursor_history:
        assert MARGIN - 1e-6 <= y <= BOTTOM + 1e-6


def test_page_count_never_decreases_with_more_blocks():
    heights = [192, 1512, 38, 900, 2600, 60, 700, 400]
    counts = []
    for n in range(1, len(heights) + 1):
        writer = PageWriter()
        engine = PageLayoutEngine(writer)
        engine.start("Chat History")
        blocks = [make_block(height_px=h, index=i) for i, h in enumerate(heights[:n])]
        asyncio.run(engine.layout_images(blocks, rasterize))
        counts.append(writer.page_count())

    assert counts == sorted(counts)


def test_layout_reports_progress(writer):
    state = ExportState()
    engine = PageLayoutEngine(writer, export_state=state)
    blocks = [make_block(index=i) for i in range(4)]
    asyncio.run(engine.layout_images(blocks, rasterize))

    assert state.progress == pytest.approx(1.0)


# ----------------------------------------------------------------------------
# Text blocks
# ----------------------------------------------------------------------------

def test_text_block_inlines_label(engine, writer):
    engine.start("Chat History (Text)")
    engine.place_text_block(make_block(role=Role.PRIMARY, text="hello there"), char_width)

    assert writer.pages[0].texts() == ["Chat History (Text)", "User: hello there"]
    assert engine.cursor.y_position == pytest.approx(40.4 + 10 + 5)


def test_long_text_flows_across_pages(engine, writer):
    engine.start("Chat History (Text)")
    text = ("lorem ipsum dolor sit amet " * 19)[:500]
    blocks = [make_block(text=text, index=i) for i in range(10)]
    placed = engine.layout_text(blocks, char_width)

    assert placed == 10
    assert writer.page_count() > 1
    for page in writer.pages:
        for op in page.operations:
            if op.kind == "text":
                assert op.args["y"] + 10 <= BOTTOM + 1e-6
    assert [op for op in writer.pages[1].operations if op.kind == "text"][0].args["y"] == pytest.approx(MARGIN)
    lines = [line for page in writer.pages for line in page.texts()[(1 if page.number == 1 else 0):]]
    assert all(char_width(line) <= 159.2 for line in lines)


# ----------------------------------------------------------------------------
# Finalization
# ----------------------------------------------------------------------------

def test_finalize_numbers_every_page(engine, writer):
    block = make_block(height_px=2600)
    engine.place_image_block(block, make_image(block))
    total = engine.finalize()

    assert total == writer.page_count() == 3
    for number, page in enumerate(writer.pages, start=1):
        footer = [op for op in page.operations if op.kind == "text"][-1]
        assert footer.args["text"] == f"Page {number} of 3"
        assert footer.args["align"] == "center"
        assert footer.args["x"] == pytest.approx(105)
        assert footer.args["y"] == pytest.approx(287)
    assert engine.state is LayoutState.DONE


def test_no_placement_after_finalize(engine):
    engine.finalize()
    block = make_block()
    with pytest.raises(LayoutFinalizedError):
        engine.place_image_block(block, make_image(block))
    with pytest.raises(LayoutFinalizedError):
        asyncio.run(engine.layout_images([block], rasterize))


def test_unexpected_rasterizer_error_skips_only_that_block(engine, writer):
    async def crashing(block):
        if block.index == 1:
            raise RuntimeError("boom")
        return make_image(block)

    blocks = [make_block(index=i) for i in range(3)]
    placed = asyncio.run(engine.layout_images(blocks, crashing))

    assert placed == 2
    assert engine.diagnostics == ["Failed to render block 1: boom"]
    assert len(label_ops(writer.pages[0])) == 2


def test_text_block_failure_skips_only_that_block(engine, writer):
    def measure(text):
        if "broken" in text:
            raise KeyError("glyph")
        return char_width(text)

    blocks = [make_block(text="fine", index=0), make_block(text="broken", index=1),
              make_block(text="also fine", index=2)]
    placed = engine.layout_text(blocks, measure)

    assert placed == 2
    assert writer.pages[0].texts() == ["Assistant: fine", "Assistant: also fine"]
    assert len(engine.diagnostics) == 1
