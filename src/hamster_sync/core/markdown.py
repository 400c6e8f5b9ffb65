"""Markdown parsing for fact descriptions.

Descriptions are parsed with mistune's AST mode and converted into a small tree
of `Node` objects with a closed set of kinds. Everything we need from a
description (the first link, the text of every list item) is expressed as a
filter over a single pre-order walk of that tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import mistune

from hamster_sync.exceptions import DescriptionParseError


class NodeKind(Enum):
    DOCUMENT = "document"
    LIST = "list"
    LIST_ITEM = "list_item"
    LINK = "link"
    TEXT = "text"
    OTHER = "other"


@dataclass
class Node:
    kind: NodeKind
    children: List[Node] = field(default_factory=list)
    text: str = ""  # TEXT only
    href: str = ""  # LINK only


_KINDS = {
    "list": NodeKind.LIST,
    "list_item": NodeKind.LIST_ITEM,
    "link": NodeKind.LINK,
}

# Inline tokens that carry their text in "raw"
_RAW_TEXT_TYPES = ("text", "codespan", "inline_html")

_BREAK_TYPES = ("softbreak", "linebreak")


def _convert(token: Dict[str, Any]) -> Node:
    token_type = token.get("type")

    if token_type in _RAW_TEXT_TYPES:
        return Node(NodeKind.TEXT, text=token.get("raw", ""))
    if token_type in _BREAK_TYPES:
        return Node(NodeKind.TEXT, text=" ")

    children = [_convert(child) for child in token.get("children", [])]
    kind = _KINDS.get(token_type, NodeKind.OTHER)
    if kind is NodeKind.LINK:
        return Node(kind, children, href=token.get("attrs", {}).get("url", ""))
    return Node(kind, children)


def walk(node: Node) -> Iterator[Node]:
    """Yield `node` and all of its descendants, parents before children."""
    yield node
    for child in node.children:
        yield from walk(child)


def text_of(node: Node, skip_lists: bool = False) -> str:
    """
    Concatenate the text below `node`. With `skip_lists`, nested lists are left out,
    which gives a list item its own text without that of its sub-items.
    """
    parts = []
    for child in node.children:
        if skip_lists and child.kind is NodeKind.LIST:
            continue
        if child.kind is NodeKind.TEXT:
            parts.append(child.text)
        else:
            parts.append(text_of(child, skip_lists))
    return "".join(parts)


class ParsedDescription:

    def __init__(self, root: Node):
        self.root = root

    def first_link(self) -> Optional[Tuple[str, str]]:
        """
        The (title, href) of the first link anywhere in the document, or None.
        """
        for node in walk(self.root):
            if node.kind is NodeKind.LINK:
                return text_of(node).strip(), node.href
        return None

    def list_item_texts(self) -> List[str]:
        """
        The text of every list item, in top to bottom reading order.
        Empty items are skipped.
        """
        texts = []
        for node in walk(self.root):
            if node.kind is NodeKind.LIST_ITEM:
                text = " ".join(text_of(node, skip_lists=True).split())
                if text:
                    texts.append(text)
        return texts


_markdown = mistune.create_markdown(renderer=None)


def extract(description: str) -> ParsedDescription:
    """
    Parse a fact description.

    Raises:
        DescriptionParseError: if mistune fails on the input.
    """
    try:
        tokens = _markdown(description or "")
    except Exception as e:
        raise DescriptionParseError(f"couldn't parse description: {e}") from e

    return ParsedDescription(Node(NodeKind.DOCUMENT, [_convert(t) for t in tokens]))
