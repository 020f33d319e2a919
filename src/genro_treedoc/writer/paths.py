# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""File names used by the durable writer.

For a target ``conf/settings.xml``:

    - staging file: ``conf/settings.xml~``
    - backup file:  ``conf/settings.backup.xml``

A target whose extension is not recognized (``conf/settings.cfg``) is
backed up as ``conf/settings.cfg.backup``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def staging_path(target: str | os.PathLike, suffix: str = '~') -> Path:
    """Return the staging sibling of target."""
    target = Path(target)
    return target.with_name(target.name + suffix)


def backup_path(
    target: str | os.PathLike, extensions: Iterable[str] = ('.xml',)
) -> Path:
    """Return the backup sibling of target.

    A recognized extension stays at the end of the name, keeping its
    original case: Settings.XML becomes Settings.backup.XML.
    """
    target = Path(target)
    name = target.name
    lowered = name.lower()
    for ext in extensions:
        ext = ext.lower()
        if ext and not ext.startswith('.'):
            ext = '.' + ext
        if ext and lowered.endswith(ext) and len(name) > len(ext):
            stem, suffix = name[:-len(ext)], name[-len(ext):]
            return target.with_name(f"{stem}.backup{suffix}")
    return target.with_name(name + '.backup')


def ensure_parent_directory(target: str | os.PathLike) -> bool:
    """Create all missing ancestors of target.

    Returns:
        True if the parent directory exists once the call returns.
    """
    parent = Path(target).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Cannot create directory %s: %s", parent, e)
        return False
    return parent.is_dir()
