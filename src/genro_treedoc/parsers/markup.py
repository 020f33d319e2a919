# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Markup parser producing TreeDocument instances.

The stored format is plain XML without namespaces. Parsing keeps tags,
attributes, element text and child order; comments, processing
instructions and whitespace between elements are discarded, so a
document survives any number of parse/write cycles unchanged.

Text that follows a child element (mixed content) has no place in the
node model and is dropped.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import IO, Callable

from ..document import TreeDocument
from ..exceptions import (
    DocumentIOError,
    DocumentNotFoundError,
    EncodingUnsupportedError,
    ErrorKind,
    MalformedDocumentError,
    TreeDocError,
)
from ..node import TreeDocNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of a parse: a document, or the reason there is none.

    Attributes:
        document: The parsed or created document, None on failure.
        error: ErrorKind describing the failure, None on success.
        message: Human readable detail of the failure.
    """

    document: TreeDocument | None = None
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        """True if a document is available."""
        return self.document is not None

    def __bool__(self) -> bool:
        return self.ok


# ==================== Tree conversion ====================

def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def _convert(element: ET.Element) -> TreeDocNode:
    """Convert an ElementTree element (and its subtree) into a TreeDocNode."""
    children = list(element)
    text = element.text
    if children and _is_blank(text):
        # indentation before the first child
        text = None
    node = TreeDocNode(element.tag, dict(element.attrib), text)
    for sub in children:
        if not _is_blank(sub.tail):
            logger.debug("Dropping mixed content after <%s>: %r", sub.tag, sub.tail)
        node.children.append(_convert(sub))
    return node


def _build(parse: Callable[[], ET.Element], source: str | None) -> TreeDocument:
    """Run an ElementTree parse and wrap the result, raising TreeDocError."""
    try:
        element = parse()
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Malformed document: {e}") from e
    except LookupError as e:
        raise EncodingUnsupportedError(f"Unsupported document encoding: {e}") from e
    except ValueError as e:
        # raised by expat for multi-byte encodings it cannot decode
        raise EncodingUnsupportedError(f"Unsupported document encoding: {e}") from e
    except OSError as e:
        raise DocumentIOError(f"Cannot read document: {e}") from e
    return TreeDocument(_convert(element), source=source)


def _collect(load: Callable[[], TreeDocument], what: str) -> ParseResult:
    """Turn a loader raising TreeDocError into a ParseResult."""
    try:
        document = load()
    except TreeDocError as e:
        if e.kind is ErrorKind.NOT_FOUND:
            logger.debug("%s: %s", what, e)
        else:
            logger.warning("Cannot parse %s: %s", what, e)
        return ParseResult(error=e.kind, message=str(e))
    logger.debug("Loaded %s: %r", what, document)
    return ParseResult(document)


# ==================== Public API ====================

def _load_file(path: str | os.PathLike | None,
               root_tag: str | None, create: bool) -> TreeDocument:
    if path is None:
        raise DocumentNotFoundError("No path given")
    filename = os.fspath(path)
    if not os.path.isfile(filename):
        if create:
            logger.debug("Creating empty document <%s> for %s", root_tag, filename)
            return TreeDocument.empty(root_tag)
        if os.path.exists(filename):
            raise DocumentNotFoundError(f"Not a regular file: {filename}")
        raise DocumentNotFoundError(f"No such file: {filename}")
    return _build(lambda: ET.parse(filename).getroot(), filename)


def parse_file(path: str | os.PathLike | None) -> ParseResult:
    """Parse the file at path.

    Fails with NOT_FOUND when the path does not exist or is not a regular
    file, MALFORMED_DOCUMENT when its content is not well-formed markup,
    IO_FAILURE when it cannot be read.
    """
    return _collect(lambda: _load_file(path, None, create=False), f"{path}")


def parse_or_create(path: str | os.PathLike | None, root_tag: str | None) -> ParseResult:
    """Parse the file at path, or create an empty document if it is missing.

    A missing file is a normal first run: the result holds a fresh
    document whose root has root_tag (no root at all if root_tag is
    empty). Malformed or unreadable files still fail as in parse_file().
    """
    return _collect(lambda: _load_file(path, root_tag, create=True), f"{path}")


def parse_stream(stream: IO[bytes] | None) -> ParseResult:
    """Parse markup read from a binary stream. The stream is not closed."""
    def load() -> TreeDocument:
        if stream is None:
            raise DocumentNotFoundError("No stream given")
        return _build(lambda: ET.parse(stream).getroot(), None)

    return _collect(load, 'stream')


def parse_string(text: str | bytes | None) -> ParseResult:
    """Parse markup held in memory."""
    def load() -> TreeDocument:
        if text is None:
            raise DocumentNotFoundError("No text given")
        return _build(lambda: ET.fromstring(text), None)

    return _collect(load, 'string')
