from __future__ import annotations

import re

# Full-width ASCII variants (U+FF01..U+FF5E) sit at a fixed offset from ASCII.
_FULLWIDTH_FIRST = 0xFF01
_FULLWIDTH_LAST = 0xFF5E
_FULLWIDTH_OFFSET = 0xFEE0

# \s does not cover the byte-order mark, which pasted titles sometimes carry.
_WHITESPACE_RE = re.compile(r"[\s\ufeff]+")

_FULLWIDTH_TABLE = {
    cp: cp - _FULLWIDTH_OFFSET for cp in range(_FULLWIDTH_FIRST, _FULLWIDTH_LAST + 1)
}


def normalize_title(title: str) -> str:
    """Fold case, full-width ASCII and all whitespace out of a title."""

    s = title.lower().translate(_FULLWIDTH_TABLE)
    return _WHITESPACE_RE.sub("", s).strip()


def is_title_match(user_input: str, correct_title: str) -> bool:
    return normalize_title(user_input) == normalize_title(correct_title)
