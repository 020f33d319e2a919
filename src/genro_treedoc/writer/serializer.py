# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Serialization of a TreeDocument to indented markup.

ElementTree writes tags and text without checking them, so the tree is
validated here: a document that could not be parsed back is refused
with InvalidDocumentError before anything reaches the disk.
"""

from __future__ import annotations

import codecs
import re
import xml.etree.ElementTree as ET
from typing import Any

from ..document import TreeDocument
from ..exceptions import EncodingUnsupportedError, InvalidDocumentError
from ..node import TreeDocNode

_NAME_START = (
    'A-Z_a-z\u00c0-\u00d6\u00d8-\u00f6\u00f8-\u02ff\u0370-\u037d'
    '\u037f-\u1fff\u200c-\u200d\u2070-\u218f\u2c00-\u2fef\u3001-\ud7ff'
    '\uf900-\ufdcf\ufdf0-\ufffd\U00010000-\U000effff'
)
_NAME_CHAR = _NAME_START + '\\-.0-9\u00b7\u0300-\u036f\u203f-\u2040'

# XML names without a namespace prefix; a parsed namespaced tag keeps
# ElementTree's '{uri}' form.
_NAME = re.compile(rf'(?:\{{[^{{}}]*\}})?[{_NAME_START}][{_NAME_CHAR}]*')

_ILLEGAL_CHAR = re.compile('[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def strip_root_text(document: TreeDocument) -> None:
    """Drop whitespace-only text left on the root by a previous parse.

    Only a root that has children is touched: a leaf root keeps its text.
    """
    root = document.root
    if root is not None and root.children and _is_blank(root.text):
        root.text = None


def _check_name(name: Any, what: str) -> str:
    if not isinstance(name, str) or not _NAME.fullmatch(name):
        raise InvalidDocumentError(f"Invalid {what} name {name!r}")
    return name


def _check_value(value: Any, what: str) -> str:
    value = str(value)
    match = _ILLEGAL_CHAR.search(value)
    if match:
        raise InvalidDocumentError(
            f"Character {match.group()!r} is not allowed in {what}"
        )
    return value


def _to_element(node: TreeDocNode) -> ET.Element:
    tag = _check_name(node.tag, 'tag')
    attrib = {}
    for name, value in node.attr.items():
        _check_name(name, 'attribute')
        attrib[name] = _check_value(value, f"attribute {name!r} of <{tag}>")
    element = ET.Element(tag, attrib)
    if node.text is not None and not (node.children and _is_blank(node.text)):
        element.text = _check_value(node.text, f"text of <{tag}>")
    for child in node.children:
        element.append(_to_element(child))
    return element


def check_charset(charset: str) -> str:
    """Return the canonical codec name for charset.

    The charset must be known to Python and readable by the parser, so
    that every written document can be loaded again.

    Raises:
        EncodingUnsupportedError: If charset cannot be written or read back.
    """
    try:
        codec = codecs.lookup(charset).name
        sample = f'<?xml version="1.0" encoding="{charset}"?>\n<a />\n'
        ET.fromstring(sample.encode(codec))
    except (LookupError, TypeError, ValueError, ET.ParseError) as e:
        raise EncodingUnsupportedError(f"Unsupported charset {charset!r}") from e
    return codec


def serialize(
    document: TreeDocument, indent_width: int = 4, charset: str = 'UTF-8'
) -> str:
    """Return the document as text: declaration, indented tree, final newline.

    The document itself is not modified. Attribute values and text that
    are not strings are written in their str() form.

    Raises:
        InvalidDocumentError: If the document has no root node, or holds
            a tag or attribute name that is not a valid name, or a
            character that markup cannot carry.
    """
    if document is None or document.root is None:
        raise InvalidDocumentError("Document has no root node")
    element = _to_element(document.root)
    ET.indent(element, space=' ' * indent_width)
    body = ET.tostring(element, encoding='unicode')
    return f'<?xml version="1.0" encoding="{charset}"?>\n{body}\n'


def serialize_bytes(
    document: TreeDocument, charset: str = 'UTF-8', indent_width: int = 4
) -> bytes:
    """Return the document encoded with charset.

    Characters the charset cannot represent are written as character
    references.

    Raises:
        InvalidDocumentError: If the document cannot be serialized.
        EncodingUnsupportedError: If charset is unknown or cannot be
            parsed back.
    """
    codec = check_charset(charset)
    text = serialize(document, indent_width, charset)
    return text.encode(codec, errors='xmlcharrefreplace')
