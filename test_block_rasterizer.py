"""Tests for block measurement and rasterization."""
import asyncio

import pytest

from chat_to_pdf.block_rasterizer import BlockRasterizer
from chat_to_pdf.exceptions import BlockRasterizationError
from chat_to_pdf.models import ContentBlock, Role, StructuralNode, TextSegment


@pytest.fixture
def rasterizer():
    return BlockRasterizer()


def node(text="hello", style=None):
    return StructuralNode(tag="div", style=style or {}, text=text)


def test_single_line_block(rasterizer):
    assert rasterizer.measure(node(), (TextSegment("hello"),)) == (1000, 48)


def test_long_text_wraps_to_more_lines(rasterizer):
    text = " ".join(["paragraph"] * 400)
    width, height = rasterizer.measure(node(text), (TextSegment(text),))

    assert width == 1000
    assert height > 48
    assert (height - 24) % 24 == 0


def test_newlines_force_lines(rasterizer):
    segments = (TextSegment("one\ntwo\nthree"),)
    assert rasterizer.measure(node(), segments) == (1000, 24 + 3 * 24)


def test_zero_size_styles(rasterizer):
    segments = (TextSegment("hello"),)
    assert rasterizer.measure(node(style={"width": "0px"}), segments) == (0, 0)
    assert rasterizer.measure(node(style={"height": "0"}), segments) == (0, 0)
    assert rasterizer.measure(node(style={"display": "none"}), segments) == (0, 0)


def test_explicit_pixel_size(rasterizer):
    segments = (TextSegment("hello"),)
    assert rasterizer.measure(node(style={"width": "300px", "height": "120px"}), segments) == (300, 120)


def test_empty_block_has_no_height(rasterizer):
    assert rasterizer.measure(node(""), ()) == (1000, 0)


def test_formula_runs_are_not_broken(rasterizer):
    segments = (TextSegment("sum "), TextSegment("x² + y²", is_formula=True, source="x^2 + y^2"))
    lines = rasterizer.layout(segments)
    assert lines == [[("sum", False), ("x² + y²", True)]]


def test_rasterize_at_device_scale(rasterizer):
    block = ContentBlock(raw_text="hello", pixel_width=1000, pixel_height=48, role=Role.PRIMARY)
    image = asyncio.run(rasterizer.rasterize(block))

    assert (image.width, image.height) == (2000, 96)
    assert image.pixels.size == (2000, 96)
    assert image.scale == 2


def test_rasterize_zero_size_raises(rasterizer):
    block = ContentBlock(raw_text="hello", pixel_width=0, pixel_height=48)
    with pytest.raises(BlockRasterizationError):
        asyncio.run(rasterizer.rasterize(block))


def test_any_drawing_error_becomes_block_error(rasterizer, monkeypatch):
    def fail(block):
        raise RuntimeError("font cache corrupted")

    monkeypatch.setattr(rasterizer, "draw", fail)
    block = ContentBlock(raw_text="hello", pixel_width=1000, pixel_height=48, index=4)
    with pytest.raises(BlockRasterizationError) as excinfo:
        asyncio.run(rasterizer.rasterize(block))
    assert "font cache corrupted" in str(excinfo.value)
