# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Writer package - crash-safe persistence of TreeDocuments.

The package is organized into:
- core: DurableWriter, WriteResult and the recovery helpers
- transaction: the staging/backup/promote state machine
- serializer: TreeDocument to indented markup
- paths: staging and backup file names, parent directory creation
- options: WriteOptions configuration

Example:
    >>> from genro_treedoc.writer import DurableWriter
    >>> DurableWriter().write(doc, 'settings.xml').ok
    True
"""

from .core import (
    DurableWriter,
    WriteResult,
    WriteStatus,
    pending_backup,
    restore_backup,
    write_document,
)
from .options import WriteOptions
from .paths import backup_path, ensure_parent_directory, staging_path
from .serializer import serialize, serialize_bytes
from .transaction import CommitTransaction, FileOps, WriteState

__all__ = [
    "DurableWriter",
    "WriteResult",
    "WriteStatus",
    "WriteOptions",
    "WriteState",
    "CommitTransaction",
    "FileOps",
    "write_document",
    "pending_backup",
    "restore_backup",
    "serialize",
    "serialize_bytes",
    "staging_path",
    "backup_path",
    "ensure_parent_directory",
]
