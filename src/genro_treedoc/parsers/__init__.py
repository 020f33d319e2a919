# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Parsers for building a TreeDocument from stored markup.

Parse functions never raise: every failure is reported through a
ParseResult whose ``document`` is None and whose ``error`` tells why.

Example:
    >>> from genro_treedoc.parsers import parse_or_create
    >>> result = parse_or_create('settings.xml', 'settings')
    >>> result.document.root.tag
    'settings'
"""

from .markup import (
    ParseResult,
    parse_file,
    parse_or_create,
    parse_stream,
    parse_string,
)

__all__ = [
    'ParseResult',
    'parse_file',
    'parse_or_create',
    'parse_stream',
    'parse_string',
]
