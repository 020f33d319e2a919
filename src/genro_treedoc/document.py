# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeDocument - a single-rooted tree plus its provenance.

A TreeDocument is obtained in one of three ways:

    - parsing a file (``TreeDocument.parse(path)``), which yields None
      when the file is missing or malformed
    - parsing a file or creating it on first run
      (``TreeDocument.parse_or_create(path, 'settings')``)
    - building it from scratch (``TreeDocument.empty('settings')``)

Example:
    >>> doc = TreeDocument.empty('settings')
    >>> window = doc.root.append('window', width='640')
    >>> doc.root.find_all('window')[0].attr
    {'width': '640'}
"""

from __future__ import annotations

import os
from typing import IO

from .node import TreeDocNode


class TreeDocument:
    """Wrapper around exactly one root TreeDocNode.

    Attributes:
        root: The root node, or None for a document created without a
            root tag. Parsed documents always have a root.
        source: Path the document was parsed from, or None when it was
            freshly created in memory.
    """

    __slots__ = ('root', 'source')

    def __init__(
        self,
        root: TreeDocNode | None = None,
        source: str | os.PathLike | None = None,
    ) -> None:
        self.root = root
        self.source = os.fspath(source) if source is not None else None

    def __repr__(self) -> str:
        tag = self.root.tag if self.root is not None else None
        return f"TreeDocument(root={tag!r}, source={self.source!r})"

    def __eq__(self, other: object) -> bool:
        """Two documents are equal when their trees are structurally equal."""
        if not isinstance(other, TreeDocument):
            return NotImplemented
        return self.root == other.root

    __hash__ = None  # type: ignore[assignment]

    @property
    def has_root(self) -> bool:
        """True if the document has a root node."""
        return self.root is not None

    @property
    def is_new(self) -> bool:
        """True if the document was not read from storage."""
        return self.source is None

    # ==================== Constructors ====================

    @classmethod
    def empty(cls, root_tag: str | None) -> TreeDocument:
        """Create a document holding only a root node with the given tag.

        An empty or None root_tag yields a document without a root,
        which the writer refuses to persist.
        """
        return cls(TreeDocNode(root_tag) if root_tag else None)

    @classmethod
    def parse(cls, path: str | os.PathLike) -> TreeDocument | None:
        """Parse a file, returning None on any failure.

        Use ``genro_treedoc.parsers.parse_file`` to also get the reason.
        """
        from .parsers import parse_file
        return parse_file(path).document

    @classmethod
    def parse_or_create(
        cls, path: str | os.PathLike, root_tag: str | None
    ) -> TreeDocument | None:
        """Parse a file, or create an empty document if it does not exist."""
        from .parsers import parse_or_create
        return parse_or_create(path, root_tag).document

    @classmethod
    def parse_stream(cls, stream: IO[bytes] | None) -> TreeDocument | None:
        """Parse a binary stream, returning None on any failure."""
        from .parsers import parse_stream
        return parse_stream(stream).document
