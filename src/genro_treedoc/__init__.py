# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeDoc - Ordered attributed trees with crash-safe persistence.

A lightweight, zero-dependency library to read, query and durably write
tree documents (settings files and the like) for the Genro ecosystem.
"""

__version__ = "0.1.0"

from . import query
from .document import TreeDocument
from .exceptions import (
    DocumentIOError,
    DocumentNotFoundError,
    DurableWriteError,
    EncodingUnsupportedError,
    ErrorKind,
    InvalidDocumentError,
    InvalidTransitionError,
    MalformedDocumentError,
    TreeDocError,
)
from .node import TreeDocNode
from .parsers import ParseResult, parse_file, parse_or_create, parse_stream, parse_string
from .writer import (
    DurableWriter,
    WriteOptions,
    WriteResult,
    WriteState,
    WriteStatus,
    restore_backup,
    write_document,
)

__all__ = [
    "query",
    # Core classes
    "TreeDocument",
    "TreeDocNode",
    # Parsing
    "ParseResult",
    "parse_file",
    "parse_or_create",
    "parse_stream",
    "parse_string",
    # Writing
    "DurableWriter",
    "WriteOptions",
    "WriteResult",
    "WriteState",
    "WriteStatus",
    "write_document",
    "restore_backup",
    # Exceptions
    "ErrorKind",
    "TreeDocError",
    "DocumentNotFoundError",
    "MalformedDocumentError",
    "InvalidDocumentError",
    "DocumentIOError",
    "EncodingUnsupportedError",
    "InvalidTransitionError",
    "DurableWriteError",
]
