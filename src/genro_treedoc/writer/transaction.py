# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Commit transaction for the staging/backup/promote protocol.

A CommitTransaction moves through these states, one file-system
operation per edge::

    CLEAN --stage--> STAGED --backup--> BACKED_UP --promote--> PROMOTED
                       |                    |                     |
                       |                 rollback               finish
                       |                    v                     v
                       |               ROLLED_BACK --finish--> CLEAN
                       +--promote--> PROMOTED  (target did not exist)
                       +--abort----> CLEAN     (nothing was replaced)

A failing edge raises DocumentIOError and leaves the state unchanged,
so the caller always knows which files are on disk.

All file-system access goes through a FileOps instance; tests replace it
to inject a fault on any edge.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path

from ..exceptions import DocumentIOError, InvalidTransitionError
from .options import WriteOptions
from .paths import backup_path, staging_path

logger = logging.getLogger(__name__)


class WriteState(Enum):
    CLEAN = 'clean'
    STAGED = 'staged'
    BACKED_UP = 'backed_up'
    PROMOTED = 'promoted'
    ROLLED_BACK = 'rolled_back'


_TRANSITIONS: dict[WriteState, frozenset[WriteState]] = {
    WriteState.CLEAN: frozenset({WriteState.STAGED}),
    WriteState.STAGED: frozenset({
        WriteState.BACKED_UP, WriteState.PROMOTED, WriteState.CLEAN,
    }),
    WriteState.BACKED_UP: frozenset({WriteState.PROMOTED, WriteState.ROLLED_BACK}),
    WriteState.PROMOTED: frozenset({WriteState.CLEAN}),
    WriteState.ROLLED_BACK: frozenset({WriteState.CLEAN}),
}


class FileOps:
    """File-system primitives used by the writer."""

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def size(self, path: Path) -> int:
        return os.path.getsize(path)

    def write_bytes(self, path: Path, data: bytes, fsync: bool = True) -> None:
        with open(path, 'wb') as f:
            f.write(data)
            f.flush()
            if fsync:
                os.fsync(f.fileno())

    def replace(self, src: Path, dst: Path) -> None:
        os.replace(src, dst)

    def remove(self, path: Path) -> None:
        os.remove(path)


class CommitTransaction:
    """Drive one durable write of already serialized data to a target.

    Attributes:
        target: Final path of the document.
        staging: Path the data is written to first.
        backup: Path the previous target is kept at during the commit.
        state: Current WriteState.
        history: Every state entered, starting with CLEAN.
        warnings: Failed best-effort cleanups (stale staging or backup
            files that could not be removed).
    """

    def __init__(
        self,
        target: str | os.PathLike,
        options: WriteOptions | None = None,
        ops: FileOps | None = None,
    ) -> None:
        options = options or WriteOptions()
        self.target = Path(target)
        self.staging = staging_path(self.target, options.staging_suffix)
        self.backup = backup_path(self.target, options.backup_extensions)
        self.fsync = options.fsync
        self.ops = ops or FileOps()
        self.state = WriteState.CLEAN
        self.history: list[WriteState] = [WriteState.CLEAN]
        self.warnings: list[str] = []

    def __repr__(self) -> str:
        return f"CommitTransaction({str(self.target)!r}, state={self.state.name})"

    def _move(self, new_state: WriteState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Cannot go from {self.state.name} to {new_state.name}"
            )
        logger.debug("%s: %s -> %s", self.target, self.state.name, new_state.name)
        self.state = new_state
        self.history.append(new_state)

    def _check(self, *allowed: WriteState) -> None:
        if self.state not in allowed:
            names = ', '.join(s.name for s in allowed)
            raise InvalidTransitionError(
                f"Operation requires state {names}, transaction is {self.state.name}"
            )

    def _discard(self, path: Path) -> None:
        """Remove path if present, recording a warning on failure."""
        try:
            if self.ops.is_file(path):
                self.ops.remove(path)
        except OSError as e:
            logger.warning("Cannot remove %s: %s", path, e)
            self.warnings.append(f"Cannot remove {path}: {e}")

    @property
    def target_exists(self) -> bool:
        return self.ops.is_file(self.target)

    # ==================== Edges ====================

    def stage(self, data: bytes) -> None:
        """CLEAN -> STAGED: write data to the staging file.

        On failure the partial staging file is removed and the target is
        untouched.
        """
        self._check(WriteState.CLEAN)
        try:
            self.ops.write_bytes(self.staging, data, self.fsync)
        except OSError as e:
            self._discard(self.staging)
            raise DocumentIOError(f"Cannot write staging file {self.staging}: {e}") from e
        self._move(WriteState.STAGED)

    def discard_stale_backup(self) -> None:
        """Remove a backup left behind by an interrupted earlier write."""
        self._check(WriteState.STAGED)
        try:
            if self.ops.is_file(self.backup):
                logger.info("Removing stale backup %s", self.backup)
                self.ops.remove(self.backup)
        except OSError as e:
            raise DocumentIOError(f"Cannot remove stale backup {self.backup}: {e}") from e

    def backup_target(self) -> None:
        """STAGED -> BACKED_UP: move the current target to the backup path."""
        self._check(WriteState.STAGED)
        try:
            self.ops.replace(self.target, self.backup)
        except OSError as e:
            raise DocumentIOError(f"Cannot back up {self.target}: {e}") from e
        self._move(WriteState.BACKED_UP)

    def promote(self) -> None:
        """STAGED or BACKED_UP -> PROMOTED: move the staging file onto the target."""
        self._check(WriteState.STAGED, WriteState.BACKED_UP)
        try:
            self.ops.replace(self.staging, self.target)
        except OSError as e:
            raise DocumentIOError(f"Cannot promote {self.staging}: {e}") from e
        self._move(WriteState.PROMOTED)

    def rollback(self) -> None:
        """BACKED_UP -> ROLLED_BACK: move the backup back onto the target."""
        self._check(WriteState.BACKED_UP)
        try:
            self.ops.replace(self.backup, self.target)
        except OSError as e:
            raise DocumentIOError(f"Cannot restore {self.target} from backup: {e}") from e
        self._move(WriteState.ROLLED_BACK)

    def abort(self) -> None:
        """STAGED -> CLEAN: drop the staging file, nothing was replaced."""
        self._check(WriteState.STAGED)
        self._discard(self.staging)
        self._move(WriteState.CLEAN)

    def finish(self) -> None:
        """PROMOTED or ROLLED_BACK -> CLEAN: remove the leftover file.

        After a promotion the leftover is the backup, after a rollback it
        is the staging file.
        """
        self._check(WriteState.PROMOTED, WriteState.ROLLED_BACK)
        if self.state is WriteState.PROMOTED:
            self._discard(self.backup)
        else:
            self._discard(self.staging)
        self._move(WriteState.CLEAN)
