# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeDoc error kinds and exceptions."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Classification of every failure reported by parsers and writers."""

    NOT_FOUND = 'not_found'
    MALFORMED_DOCUMENT = 'malformed_document'
    INVALID_DOCUMENT = 'invalid_document'
    IO_FAILURE = 'io_failure'
    ENCODING_UNSUPPORTED = 'encoding_unsupported'


class TreeDocError(Exception):
    """Base exception for TreeDoc errors."""

    kind: ErrorKind | None = None


class DocumentNotFoundError(TreeDocError):
    """Raised when a document path is missing or is not a regular file."""

    kind = ErrorKind.NOT_FOUND


class MalformedDocumentError(TreeDocError):
    """Raised when stored bytes are not well-formed tree markup."""

    kind = ErrorKind.MALFORMED_DOCUMENT


class InvalidDocumentError(TreeDocError):
    """Raised when a document without a root node is written."""

    kind = ErrorKind.INVALID_DOCUMENT


class DocumentIOError(TreeDocError):
    """Raised when opening, reading, writing or renaming a file fails."""

    kind = ErrorKind.IO_FAILURE


class EncodingUnsupportedError(TreeDocError):
    """Raised when the configured charset is not known to Python."""

    kind = ErrorKind.ENCODING_UNSUPPORTED


class InvalidTransitionError(TreeDocError):
    """Raised when a commit transaction is driven along an illegal edge."""

    pass


class DurableWriteError(TreeDocError):
    """Raised by WriteResult.raise_for_status() on a failed write.

    The failed WriteResult is available as ``result``; ``kind`` mirrors
    the result's error kind.
    """

    def __init__(self, message: str, result: Any = None) -> None:
        super().__init__(message)
        self.result = result
        self.kind = getattr(result, 'error', None)
