"""Tests for block classification and eligibility filtering."""
from chat_to_pdf.models import ContentBlock, Role, StructuralNode
from chat_to_pdf.paginator.block_classifier import (
    classify,
    filter_eligible,
    is_eligible,
    is_visible,
)


def node(tag="div", classes=(), attributes=None, style=None, text="hi", ancestors=()):
    return StructuralNode(
        tag=tag,
        classes=frozenset(classes),
        attributes=attributes or {},
        style=style or {},
        text=text,
        ancestors=tuple(ancestors),
    )


def block(text="hello", width=100, height=50, visible=True, index=0):
    return ContentBlock(raw_text=text, pixel_width=width, pixel_height=height,
                        visible=visible, index=index)


# ----------------------------------------------------------------------------
# classify
# ----------------------------------------------------------------------------

def test_user_class_on_element_is_primary():
    assert classify(node(classes=["message", "user"])) is Role.PRIMARY


def test_human_class_on_ancestor_is_primary():
    wrapper = node(classes=["human"], text="")
    assert classify(node(classes=["message"], ancestors=[wrapper])) is Role.PRIMARY


def test_data_user_attribute_on_ancestor_is_primary():
    wrapper = node(attributes={"data-user": ""}, text="")
    assert classify(node(ancestors=[node(text=""), wrapper])) is Role.PRIMARY


def test_class_containing_user_is_primary():
    assert classify(node(classes=["chat-user-bubble"])) is Role.PRIMARY


def test_author_role_attribute():
    assert classify(node(attributes={"data-message-author-role": "user"})) is Role.PRIMARY
    assert classify(node(attributes={"data-message-author-role": "assistant"})) is Role.SECONDARY


def test_no_marker_defaults_to_secondary():
    assert classify(node(classes=["message", "assistant"])) is Role.SECONDARY


def test_classification_is_repeatable():
    sample = node(classes=["message"], ancestors=[node(classes=["human"], text="")])
    assert classify(sample) is classify(sample)


def test_role_labels():
    assert Role.PRIMARY.label == "User:"
    assert Role.SECONDARY.label == "Assistant:"


# ----------------------------------------------------------------------------
# visibility and eligibility
# ----------------------------------------------------------------------------

def test_hidden_styles():
    assert not is_visible(node(style={"display": "none"}))
    assert not is_visible(node(style={"visibility": "hidden"}))
    assert not is_visible(node(ancestors=[node(style={"display": "none"}, text="")]))
    assert is_visible(node(style={"display": "block"}))


def test_eligibility_requires_visible_text_and_size():
    assert is_eligible(block())
    assert not is_eligible(block(visible=False))
    assert not is_eligible(block(text=""))
    assert not is_eligible(block(width=0))
    assert not is_eligible(block(height=0))


def test_filter_keeps_order_and_reports_skips():
    blocks = [
        block(text="first", index=0),
        block(visible=False, index=1),
        block(text="", index=2),
        block(height=0, index=3),
        block(text="last", index=4),
    ]
    kept, diagnostics = filter_eligible(blocks)

    assert [b.raw_text for b in kept] == ["first", "last"]
    assert len(diagnostics) == 3
    assert "block 1: hidden element" in diagnostics[0]
    assert "block 2: empty element" in diagnostics[1]
    assert "block 3: zero dimensions" in diagnostics[2]
