"""Tests for locating the chat container and its message elements."""
import pytest

from chat_to_pdf.content_locator import (
    ContentLocator,
    collect_message_nodes,
    extract_text,
    parse_document,
    parse_style,
    to_structural_node,
)
from chat_to_pdf.exceptions import ContentRootNotFoundError

CHAT_PAGE = """
<html><head><style>.x { color: red }</style></head><body>
  <nav>Menu</nav>
  <div class="chat-container">
    <div class="message user" data-message-author-role="user">Hello <b>there</b></div>
    <div class="message assistant">
      <p>First paragraph.</p>
      <p>Second   paragraph.</p>
      <div class="message-footer">copy</div>
    </div>
  </div>
</body></html>
"""


def test_parse_style():
    assert parse_style("display: none; Width:0px") == {"display": "none", "width": "0px"}
    assert parse_style("") == {}


def test_container_found_by_selector_order():
    document = parse_document(CHAT_PAGE)
    root = ContentLocator().find(document)
    assert "chat-container" in root.get("class")


def test_empty_match_falls_through_to_next_selector():
    document = parse_document(
        '<div data-chat-container>  </div><main><div class="message">hi</div></main>'
    )
    assert ContentLocator().find(document).name == "main"


def test_missing_container():
    document = parse_document("<html><body>   </body></html>")
    assert ContentLocator().find(document) is None
    with pytest.raises(ContentRootNotFoundError):
        ContentLocator().find_or_raise(document)


def test_custom_selectors():
    document = parse_document('<section id="log">text</section>')
    assert ContentLocator(["#log"]).find(document).name == "section"


def test_messages_in_document_order_without_nested_duplicates():
    root = ContentLocator().find(parse_document(CHAT_PAGE))
    messages = collect_message_nodes(root)

    assert len(messages) == 2
    assert extract_text(messages[0]) == "Hello there"


def test_fallback_to_direct_div_children():
    root = parse_document(
        '<div class="chat-history"><div>one</div><div>two<div>inner</div></div><span>x</span></div>'
    ).select_one(".chat-history")
    messages = collect_message_nodes(root)
    assert [extract_text(m).split("\n")[0] for m in messages] == ["one", "two"]


def test_extract_text_keeps_block_lines():
    root = ContentLocator().find(parse_document(CHAT_PAGE))
    text = extract_text(collect_message_nodes(root)[1])
    assert text == "First paragraph.\nSecond paragraph.\ncopy"


def test_extract_text_skips_scripts():
    tag = parse_document("<div>a<script>var x = 1;</script> b</div>").div
    assert extract_text(tag) == "a b"


def test_structural_node_records_ancestors():
    root = ContentLocator().find(parse_document(CHAT_PAGE))
    node = to_structural_node(collect_message_nodes(root)[0])

    assert node.tag == "div"
    assert node.classes == frozenset({"message", "user"})
    assert node.attributes["data-message-author-role"] == "user"
    assert node.text == "Hello there"
    assert "chat-container" in node.ancestors[0].classes
    assert [a.tag for a in node.ancestors][-2:] == ["body", "html"]
