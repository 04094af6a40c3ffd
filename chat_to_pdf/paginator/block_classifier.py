"""Block Classifier Module

Decides which originator a message block belongs to and whether it can be
paginated at all. Classification is a pure function over StructuralNode
records, so it never needs a live document.
"""
from typing import Callable, List, Sequence, Tuple

from ..models import ContentBlock, Role, StructuralNode

NodePredicate = Callable[[StructuralNode], bool]


def _has_class(name: str) -> NodePredicate:
    return lambda node: name in node.classes


def _has_attribute(name: str) -> NodePredicate:
    return lambda node: name in node.attributes


def _class_contains(fragment: str) -> NodePredicate:
    return lambda node: any(fragment in cls for cls in node.classes)


def _attribute_equals(name: str, value: str) -> NodePredicate:
    return lambda node: node.attributes.get(name, "").strip().lower() == value


# Checked in order against the node and then each ancestor, nearest first.
PRIMARY_PREDICATES: Tuple[NodePredicate, ...] = (
    _has_class("user"),
    _has_class("human"),
    _has_attribute("data-user"),
    _class_contains("user"),
    _attribute_equals("data-message-author-role", "user"),
)


def classify(node: StructuralNode,
             predicates: Sequence[NodePredicate] = PRIMARY_PREDICATES) -> Role:
    """
    Classify a block's originator from its structure.

    A node is PRIMARY when it or any ancestor matches one of the predicates
    (the element itself is checked first, like DOM ``closest()``).

    Args:
        node: Structural record of the block element
        predicates: Ordered originator markers

    Returns:
        Role.PRIMARY on the first match, Role.SECONDARY otherwise
    """
    for candidate in node.self_and_ancestors():
        for predicate in predicates:
            if predicate(candidate):
                return Role.PRIMARY
    return Role.SECONDARY


def _hidden_by_style(node: StructuralNode) -> bool:
    display = node.style.get("display", "").strip().lower()
    visibility = node.style.get("visibility", "").strip().lower()
    return display == "none" or visibility == "hidden"


def is_visible(node: StructuralNode) -> bool:
    """False when the node or an enclosing element is hidden by inline style."""
    return not any(_hidden_by_style(candidate) for candidate in node.self_and_ancestors())


def is_eligible(block: ContentBlock) -> bool:
    """True iff the block is visible, non-empty and has positive pixel dimensions."""
    return block.is_eligible


def skip_reason(block: ContentBlock) -> str:
    """Human-readable reason an ineligible block is dropped."""
    if not block.visible:
        return "hidden element"
    if not block.raw_text:
        return "empty element"
    return f"zero dimensions ({block.pixel_width}x{block.pixel_height})"


def filter_eligible(blocks: Sequence[ContentBlock]) -> Tuple[List[ContentBlock], List[str]]:
    """
    Drop blocks that cannot be paginated.

    Args:
        blocks: Blocks in document order

    Returns:
        Tuple of (eligible blocks in original order, diagnostics for dropped blocks)
    """
    kept = []
    diagnostics = []
    for block in blocks:
        if is_eligible(block):
            kept.append(block)
            continue
        message = f"Skipping block {block.index}: {skip_reason(block)}"
        print(f"Warning: {message}")
        diagnostics.append(message)
    return kept, diagnostics
