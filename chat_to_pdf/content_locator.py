"""Content Locator Module

Finds the chat container in a saved HTML page and turns message elements
into immutable StructuralNode records.
"""
import re
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .config import DEFAULT_CONTAINER_SELECTORS, DEFAULT_MESSAGE_SELECTORS
from .exceptions import ContentRootNotFoundError
from .models import StructuralNode

# Elements that start a new line of text
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "details", "div", "dl",
    "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "summary",
    "table", "tr", "ul",
}

SKIPPED_TAGS = {"script", "style", "noscript", "template", "head"}


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def load_document(path: str) -> BeautifulSoup:
    """Parse a saved HTML page from disk."""
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return parse_document(f.read())


def parse_style(style: str) -> Dict[str, str]:
    """
    Parse an inline style attribute.

    Examples:
        >>> parse_style("display: none; Width:0px")
        {'display': 'none', 'width': '0px'}
    """
    declarations = {}
    for declaration in (style or "").split(";"):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        name = name.strip().lower()
        if name:
            declarations[name] = value.strip().lower()
    return declarations


def _collect_text(node: Tag, parts: List[str]):
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
            continue
        if child.name in SKIPPED_TAGS:
            continue
        if child.name == "br":
            parts.append("\n")
            continue
        is_block = child.name in BLOCK_TAGS
        if is_block:
            parts.append("\n")
        _collect_text(child, parts)
        if is_block:
            parts.append("\n")


def extract_text(tag: Tag) -> str:
    """
    Text content with block elements on their own lines.

    Runs of whitespace collapse to one space and blank lines are dropped.
    """
    parts: List[str] = []
    _collect_text(tag, parts)
    lines = (re.sub(r"\s+", " ", line).strip() for line in "".join(parts).split("\n"))
    return "\n".join(line for line in lines if line)


def _attributes(tag: Tag) -> Dict[str, str]:
    attributes = {}
    for name, value in tag.attrs.items():
        if name in ("class", "style"):
            continue
        attributes[name] = " ".join(value) if isinstance(value, list) else str(value)
    return attributes


def _shallow_node(tag: Tag) -> StructuralNode:
    """Record of an ancestor: attributes only, no text or ancestors."""
    return StructuralNode(
        tag=tag.name,
        classes=frozenset(tag.get("class") or ()),
        attributes=_attributes(tag),
        style=parse_style(tag.get("style", "")),
    )


def to_structural_node(tag: Tag) -> StructuralNode:
    """Build the immutable record the classifier and rasterizer work from."""
    ancestors = tuple(
        _shallow_node(parent) for parent in tag.parents
        if isinstance(parent, Tag) and parent.name != "[document]"
    )
    return StructuralNode(
        tag=tag.name,
        classes=frozenset(tag.get("class") or ()),
        attributes=_attributes(tag),
        style=parse_style(tag.get("style", "")),
        text=extract_text(tag),
        ancestors=ancestors,
    )


class ContentLocator:
    """Locates the element holding the conversation.

    Attributes:
        selectors: CSS selectors tried in order
    """

    def __init__(self, selectors: Optional[Sequence[str]] = None):
        self.selectors = list(selectors or DEFAULT_CONTAINER_SELECTORS)

    def find(self, document: BeautifulSoup) -> Optional[Tag]:
        """
        Return the first selector match with non-empty text, or None.

        Args:
            document: Parsed HTML page

        Returns:
            Container element, or None if no selector matches
        """
        for selector in self.selectors:
            element = document.select_one(selector)
            if element is not None and element.get_text().strip():
                print(f"DEBUG: Chat container found with selector: {selector}")
                return element
        return None

    def find_or_raise(self, document: BeautifulSoup) -> Tag:
        """Like find(), but a missing container raises ContentRootNotFoundError."""
        root = self.find(document)
        if root is None:
            raise ContentRootNotFoundError(self.selectors)
        return root


def collect_message_nodes(root: Tag, selectors: Optional[Sequence[str]] = None) -> List[Tag]:
    """
    Collect message elements under the container, in document order.

    Elements nested inside an already-collected element belong to it and are
    not collected again. If no element matches, the container's direct
    <div> children are used.

    Args:
        root: Chat container element
        selectors: Message selectors (DEFAULT_MESSAGE_SELECTORS if None)

    Returns:
        Message elements
    """
    selector = ", ".join(selectors or DEFAULT_MESSAGE_SELECTORS)
    collected: List[Tag] = []
    collected_ids = set()
    for element in root.select(selector):
        if any(id(parent) in collected_ids for parent in element.parents):
            continue
        collected.append(element)
        collected_ids.add(id(element))

    if not collected:
        collected = root.find_all("div", recursive=False)
    return collected
