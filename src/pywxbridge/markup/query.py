from __future__ import annotations

import re
from typing import TypeAlias

from lxml import etree

from ..exceptions import MarkupParseError

# An element, or an attribute value selected with an `@name` step.
Node: TypeAlias = etree._Element | str

# Client payloads routinely carry unescaped `&` in URLs. Those are escaped
# before a strict parse; unclosed or mismatched tags still fail. Entities and
# network access stay disabled.
_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
)

_BARE_AMP_RE = re.compile(r"&(?!(?:[A-Za-z_][\w.-]*|#[0-9]+|#x[0-9A-Fa-f]+);)")
_CDATA_RE = re.compile(r"(<!\[CDATA\[.*?\]\]>)", re.S)


def _escape_bare_amps(text: str) -> str:
    # CDATA sections are left untouched; `&` is literal inside them.
    parts = _CDATA_RE.split(text)
    for i in range(0, len(parts), 2):
        parts[i] = _BARE_AMP_RE.sub("&amp;", parts[i])
    return "".join(parts)


def parse(text: str | bytes) -> etree._Element:
    """
    Parse a markup payload and return its root element.

    Raises `MarkupParseError` for empty or malformed input (including
    truncated payloads and mismatched tags).
    """

    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MarkupParseError(str(e)) from e
    if not text.strip():
        raise MarkupParseError("empty markup")
    raw = _escape_bare_amps(text).encode("utf-8")
    try:
        root = etree.fromstring(raw, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise MarkupParseError(str(e)) from e
    if root is None:
        raise MarkupParseError("markup has no root element")
    return root


def find_one(tree: etree._Element, path: str) -> Node | None:
    """
    Return the first node matched by an XPath expression, or `None`.

    Absolute paths (`/msg/appmsg/title`) are rooted at the document; `//@name`
    matches an attribute anywhere in it.
    """

    try:
        result = tree.xpath(path)
    except (etree.XPathError, TypeError):
        return None
    if not isinstance(result, list) or not result:
        return None
    first = result[0]
    if isinstance(first, (etree._Element, str)):
        return first
    return None


def inner_text(node: Node) -> str:
    if isinstance(node, str):
        return str(node)
    return etree.tostring(node, method="text", encoding="unicode", with_tail=False)


def find_text(tree: etree._Element, path: str) -> str | None:
    node = find_one(tree, path)
    if node is None:
        return None
    return inner_text(node)
