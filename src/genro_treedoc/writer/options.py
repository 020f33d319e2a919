# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Configuration of the durable writer."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class WriteOptions:
    """Options controlling how a document is written.

    Attributes:
        use_staging: Write to a staging sibling first and promote it with
            a rename. When False the target is overwritten in place,
            without any crash safety.
        charset: Encoding of the written file.
        indent_width: Spaces per nesting level.
        backup_extensions: Extensions (matched case-insensitively) that are
            kept at the end of the backup name: settings.xml is backed up
            as settings.backup.xml, other names get a '.backup' suffix.
        staging_suffix: Appended to the target name to get the staging file.
        fsync: Flush the staging file to stable storage before promoting it.

    Example:
        >>> WriteOptions(indent_width=2).replace(charset='ISO-8859-1')
    """

    use_staging: bool = True
    charset: str = 'UTF-8'
    indent_width: int = 4
    backup_extensions: tuple[str, ...] = ('.xml',)
    staging_suffix: str = '~'
    fsync: bool = True

    def __post_init__(self) -> None:
        if self.indent_width < 0:
            raise ValueError(f"indent_width must be >= 0, got {self.indent_width}")
        if not self.staging_suffix:
            raise ValueError("staging_suffix must not be empty")
        # accept a single string or a list for convenience
        extensions = self.backup_extensions
        if isinstance(extensions, str):
            extensions = (extensions,)
        object.__setattr__(self, 'backup_extensions', tuple(extensions))

    def replace(self, **changes: Any) -> WriteOptions:
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)
