# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Typed access to TreeDocument nodes.

Every function in this module is total: an absent node (None), an
absent attribute or a value that cannot be coerced never raises, it
yields None or the caller-supplied default. Mutators are best-effort:
they return the created node or True on success, None or False when
given an absent target.

Lookup by tag searches the whole subtree of the given node, not only
its direct children; ``direct_children`` and ``direct_child_count``
restrict matching to the first level.

Example:
    >>> window = child(doc.root, 'window')
    >>> as_int(child(window, 'width'), 640)
    800
    >>> attr_bool(window, 'maximized', False)
    True
"""

from __future__ import annotations

import configparser
import re
from typing import Any

from .document import TreeDocument
from .node import TreeDocNode

INT_MIN, INT_MAX = -2**31, 2**31 - 1
LONG_MIN, LONG_MAX = -2**63, 2**63 - 1

TRUE_LITERALS = frozenset({'true', 'yes', '1'})
FALSE_LITERALS = frozenset({'false', 'no', '0'})

_INTEGER_RE = re.compile(r'[+-]?[0-9]+')


# ==================== Coercion helpers ====================

def _parse_integer(text: str | None, low: int, high: int) -> int | None:
    if text is None or not _INTEGER_RE.fullmatch(text):
        return None
    value = int(text)
    if value < low or value > high:
        return None
    return value


def _parse_float(text: str | None) -> float | None:
    if text is None or '_' in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_bool(text: str | None) -> bool | None:
    if text is None:
        return None
    text = text.lower()
    if text in TRUE_LITERALS:
        return True
    if text in FALSE_LITERALS:
        return False
    # generic states: on/off
    return configparser.RawConfigParser.BOOLEAN_STATES.get(text)


def _or_default(value: Any, default: Any) -> Any:
    return value if value is not None else default


# ==================== Lookup ====================

def root(document: TreeDocument | None) -> TreeDocNode | None:
    """Return the document's root node, or None."""
    if document is None:
        return None
    return document.root


def child_count(node: TreeDocNode | None, tag: str | None) -> int:
    """Count descendants of node with the given tag (whole subtree)."""
    if node is None or tag is None:
        return 0
    return len(node.find_all(tag))


def direct_child_count(node: TreeDocNode | None, tag: str | None) -> int:
    """Count direct children of node with the given tag."""
    return len(direct_children(node, tag)) if tag is not None else 0


def direct_children(
    node: TreeDocNode | None, tag: str | None = None
) -> list[TreeDocNode]:
    """Return direct children of node, optionally filtered by tag."""
    if node is None:
        return []
    if tag is None:
        return list(node.children)
    return [c for c in node.children if c.tag == tag]


def first_child(node: TreeDocNode | None) -> TreeDocNode | None:
    """Return the first child element of node, or None."""
    return nth_child(node, 0)


def nth_child(node: TreeDocNode | None, index: int) -> TreeDocNode | None:
    """Return the child element at position index, or None if out of range."""
    if node is None or index < 0 or index >= len(node.children):
        return None
    return node.children[index]


def child(
    node: TreeDocNode | None, tag: str | None, index: int = 0
) -> TreeDocNode | None:
    """Return the index-th descendant with the given tag, or None.

    The index counts only nodes with a matching tag, in document order.
    """
    if node is None or tag is None:
        return None
    matches = node.find_all(tag)
    if index < 0 or index >= len(matches):
        return None
    return matches[index]


def child_with_attribute(
    node: TreeDocNode | None,
    tag: str | None,
    attr_name: str | None,
    attr_value: str | None,
) -> TreeDocNode | None:
    """Return the first descendant with tag whose attribute equals attr_value."""
    if node is None or tag is None or attr_name is None:
        return None
    for candidate in node.find_all(tag):
        if attr_name in candidate.attr and candidate.attr[attr_name] == attr_value:
            return candidate
    return None


# ==================== Text ====================

def text(node: TreeDocNode | None) -> str | None:
    """Return the text content of node, or None for an absent node."""
    if node is None:
        return None
    return node.text_content


def text_or(node: TreeDocNode | None, default: str | None) -> str | None:
    """Return the text content of node, or default for an absent node."""
    return _or_default(text(node), default)


def as_int(node: TreeDocNode | None, default: int | None = None) -> int | None:
    """Return the node text as a 32-bit integer, or default."""
    return _or_default(_parse_integer(text(node), INT_MIN, INT_MAX), default)


def as_long(node: TreeDocNode | None, default: int | None = None) -> int | None:
    """Return the node text as a 64-bit integer, or default."""
    return _or_default(_parse_integer(text(node), LONG_MIN, LONG_MAX), default)


def as_float(node: TreeDocNode | None, default: float | None = None) -> float | None:
    """Return the node text as a float, or default."""
    return _or_default(_parse_float(text(node)), default)


def as_bool(node: TreeDocNode | None, default: bool | None = None) -> bool | None:
    """Return the node text as a boolean, or default.

    'true', 'yes', '1' are True and 'false', 'no', '0' are False, in any
    case; 'on' and 'off' are also understood. Anything else yields
    default.
    """
    return _or_default(_parse_bool(text(node)), default)


# ==================== Attributes ====================

def attribute(
    node: TreeDocNode | None, name: str | None, default: str | None = None
) -> str | None:
    """Return the attribute value, or default if node or attribute is absent."""
    if node is None or name is None:
        return default
    return node.attr.get(name, default)


def attr_int(
    node: TreeDocNode | None, name: str | None, default: int | None = None
) -> int | None:
    return _or_default(_parse_integer(attribute(node, name), INT_MIN, INT_MAX), default)


def attr_long(
    node: TreeDocNode | None, name: str | None, default: int | None = None
) -> int | None:
    return _or_default(_parse_integer(attribute(node, name), LONG_MIN, LONG_MAX), default)


def attr_float(
    node: TreeDocNode | None, name: str | None, default: float | None = None
) -> float | None:
    return _or_default(_parse_float(attribute(node, name)), default)


def attr_bool(
    node: TreeDocNode | None, name: str | None, default: bool | None = None
) -> bool | None:
    return _or_default(_parse_bool(attribute(node, name)), default)


# ==================== Mutation ====================

def append_child(
    document: TreeDocument | None,
    parent: TreeDocNode | None,
    tag: str | None,
) -> TreeDocNode | None:
    """Append a new element to parent and return it.

    A None parent means the document root. Returns None, leaving the
    tree untouched, when the document, the parent or the tag is absent.
    """
    if document is None or not tag:
        return None
    if parent is None:
        parent = document.root
    if parent is None:
        return None
    return parent.append(tag)


def set_text(node: TreeDocNode | None, value: Any) -> bool:
    """Replace the content of node with the text str(value).

    Like assigning text content in a DOM, existing children are removed.
    An empty string leaves the node without text.
    """
    if node is None or value is None:
        return False
    node.children.clear()
    node.text = str(value) or None
    return True


def set_attribute(node: TreeDocNode | None, name: str | None, value: Any) -> bool:
    """Set attribute name to str(value)."""
    if node is None or not name or value is None:
        return False
    node.attr[name] = str(value)
    return True
