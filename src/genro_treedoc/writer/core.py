# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""DurableWriter - crash-safe persistence of a TreeDocument.

The writer serializes a document and commits it with this sequence:

    1. refuse a document without root or with names and characters that
       markup cannot carry (INVALID_DOCUMENT), or a charset that cannot
       be written and parsed back (ENCODING_UNSUPPORTED)
    2. drop whitespace-only text left on the root by an earlier parse
    3. write the staging file ``<target>~``
    4. remove a stale backup left by an interrupted earlier write
    5. if the target exists, rename it to the backup path
    6. rename the staging file onto the target, then remove the backup
    7. if that rename fails, rename the backup back onto the target

Until step 5 completes the previous target is untouched. A crash between
steps 5 and 6 leaves the previous content in the backup file next to a
missing target; ``restore_backup()`` puts it back. The writer never runs
recovery on its own.

With ``use_staging=False`` the target is overwritten directly and none
of the guarantees above apply.

Concurrent writes to the same path are not coordinated: callers needing
that must serialize access themselves.

Example:
    >>> doc = TreeDocument.empty('settings')
    >>> result = DurableWriter(indent_width=2).write(doc, 'conf/settings.xml')
    >>> result.ok
    True
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..document import TreeDocument
from ..exceptions import (
    DocumentIOError,
    DurableWriteError,
    ErrorKind,
    InvalidDocumentError,
    TreeDocError,
)
from .options import WriteOptions
from .paths import backup_path, ensure_parent_directory
from .serializer import serialize_bytes, strip_root_text
from .transaction import CommitTransaction, FileOps, WriteState

logger = logging.getLogger(__name__)


class WriteStatus(Enum):
    SUCCESS = 'success'
    # failed before anything on disk was replaced: previous target intact
    FAILED_CLEAN = 'failed_clean'
    # failed inside the commit window: check for a backup to recover
    FAILED_COMMIT = 'failed_commit'


@dataclass(frozen=True)
class WriteResult:
    """Outcome of DurableWriter.write().

    Attributes:
        status: SUCCESS, FAILED_CLEAN or FAILED_COMMIT.
        path: The target path.
        error: ErrorKind of the failure, None on success.
        message: Detail of the failure.
        state: State the commit transaction ended in. BACKED_UP after a
            FAILED_COMMIT means the rollback failed too and the previous
            content is only in the backup file.
        history: States the transaction went through.
        warnings: Best-effort cleanups that failed (e.g. a backup that
            could not be removed after a successful promotion).
    """

    status: WriteStatus
    path: Path
    error: ErrorKind | None = None
    message: str = ''
    state: WriteState = WriteState.CLEAN
    history: tuple[WriteState, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.SUCCESS

    def __bool__(self) -> bool:
        return self.ok

    @property
    def rolled_back(self) -> bool:
        """True if a failed promotion was undone by restoring the backup."""
        return WriteState.ROLLED_BACK in self.history

    @property
    def needs_recovery(self) -> bool:
        """True if the previous content may only be found in the backup file."""
        return self.status is WriteStatus.FAILED_COMMIT and not self.rolled_back

    def raise_for_status(self) -> WriteResult:
        """Raise DurableWriteError if the write failed, else return self."""
        if not self.ok:
            raise DurableWriteError(
                f"Writing {self.path} failed ({self.status.value}): {self.message}",
                result=self,
            )
        return self


class DurableWriter:
    """Writes TreeDocuments with the staging/backup/promote protocol.

    Args:
        options: A WriteOptions instance; defaults to WriteOptions().
        ops: FileOps used for every file-system primitive.
        **overrides: WriteOptions fields overriding ``options``.

    Example:
        >>> writer = DurableWriter(charset='ISO-8859-1')
        >>> writer.write(doc, 'settings.xml').raise_for_status()
    """

    def __init__(
        self,
        options: WriteOptions | None = None,
        ops: FileOps | None = None,
        **overrides: Any,
    ) -> None:
        options = options or WriteOptions()
        if overrides:
            options = options.replace(**overrides)
        self.options = options
        self.ops = ops or FileOps()

    def __repr__(self) -> str:
        return f"DurableWriter({self.options!r})"

    def _result(
        self,
        status: WriteStatus,
        target: Path,
        error: TreeDocError | None = None,
        txn: CommitTransaction | None = None,
    ) -> WriteResult:
        if status is WriteStatus.SUCCESS:
            logger.info("Wrote %s", target)
        else:
            logger.warning("Writing %s failed (%s): %s", target, status.value, error)
        return WriteResult(
            status=status,
            path=target,
            error=error.kind if error is not None else None,
            message=str(error) if error is not None else '',
            state=txn.state if txn is not None else WriteState.CLEAN,
            history=tuple(txn.history) if txn is not None else (),
            warnings=tuple(txn.warnings) if txn is not None else (),
        )

    def write(self, document: TreeDocument | None, path: str | os.PathLike) -> WriteResult:
        """Serialize document and commit it to path.

        Never raises for I/O problems: every failure is classified in the
        returned WriteResult. Re-running a failed write from scratch is
        safe.
        """
        target = Path(path)
        options = self.options
        try:
            if document is None or document.root is None:
                raise InvalidDocumentError("Document has no root node")
            strip_root_text(document)
            data = serialize_bytes(document, options.charset, options.indent_width)
            if not ensure_parent_directory(target):
                raise DocumentIOError(f"Directory of {target} is not usable")
        except TreeDocError as e:
            return self._result(WriteStatus.FAILED_CLEAN, target, e)

        if not options.use_staging:
            return self._write_direct(target, data)
        return self._commit(CommitTransaction(target, options, self.ops), data)

    def _write_direct(self, target: Path, data: bytes) -> WriteResult:
        """Overwrite the target in place: no staging, no backup."""
        existed = self.ops.is_file(target)
        try:
            self.ops.write_bytes(target, data, self.options.fsync)
        except OSError as e:
            error = DocumentIOError(f"Cannot write {target}: {e}")
            if existed:
                # the previous content may already be truncated
                return self._result(WriteStatus.FAILED_COMMIT, target, error)
            try:
                if self.ops.is_file(target):
                    self.ops.remove(target)
            except OSError as cleanup_error:
                logger.warning("Cannot remove partial %s: %s", target, cleanup_error)
                return self._result(WriteStatus.FAILED_COMMIT, target, error)
            return self._result(WriteStatus.FAILED_CLEAN, target, error)
        return self._result(WriteStatus.SUCCESS, target)

    def _commit(self, txn: CommitTransaction, data: bytes) -> WriteResult:
        try:
            txn.stage(data)
        except DocumentIOError as e:
            return self._result(WriteStatus.FAILED_CLEAN, txn.target, e, txn)

        try:
            txn.discard_stale_backup()
            if txn.target_exists:
                txn.backup_target()
        except DocumentIOError as e:
            txn.abort()
            return self._result(WriteStatus.FAILED_CLEAN, txn.target, e, txn)

        try:
            txn.promote()
        except DocumentIOError as e:
            if txn.state is WriteState.STAGED:
                # first write: no previous target to protect
                txn.abort()
                return self._result(WriteStatus.FAILED_CLEAN, txn.target, e, txn)
            try:
                txn.rollback()
            except DocumentIOError as rollback_error:
                logger.error("Rollback of %s failed, previous content is in %s: %s",
                             txn.target, txn.backup, rollback_error)
                return self._result(WriteStatus.FAILED_COMMIT, txn.target, e, txn)
            txn.finish()
            return self._result(WriteStatus.FAILED_COMMIT, txn.target, e, txn)

        txn.finish()
        return self._result(WriteStatus.SUCCESS, txn.target, txn=txn)


def write_document(
    document: TreeDocument | None,
    path: str | os.PathLike,
    options: WriteOptions | None = None,
    **overrides: Any,
) -> WriteResult:
    """Write document to path with a one-off DurableWriter."""
    return DurableWriter(options, **overrides).write(document, path)


# ==================== Recovery ====================

def pending_backup(
    path: str | os.PathLike, options: WriteOptions | None = None
) -> Path | None:
    """Return the backup file of path if one is on disk, else None."""
    options = options or WriteOptions()
    backup = backup_path(path, options.backup_extensions)
    return backup if backup.is_file() else None


def restore_backup(
    path: str | os.PathLike,
    options: WriteOptions | None = None,
    ops: FileOps | None = None,
) -> bool:
    """Recover from a write interrupted inside the commit window.

    When a backup exists and the target is missing or empty, the backup
    is moved back onto the target. A backup next to a non-empty target
    is left alone: the target may be the newly promoted document.

    Returns:
        True if the backup was restored.

    Raises:
        DocumentIOError: If the backup exists but cannot be moved back.
    """
    ops = ops or FileOps()
    target = Path(path)
    backup = pending_backup(target, options)
    if backup is None:
        return False
    if ops.is_file(target) and ops.size(target) > 0:
        logger.debug("Backup %s left alone, %s is present", backup, target)
        return False
    try:
        ops.replace(backup, target)
    except OSError as e:
        raise DocumentIOError(f"Cannot restore {target} from {backup}: {e}") from e
    logger.info("Restored %s from %s", target, backup)
    return True
