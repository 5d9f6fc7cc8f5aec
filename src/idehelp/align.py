"""align.py - Column alignment for sibling doc block tags.

Tag lines of one group share a shape of ``<prefix> <token> <suffix>`` where
the prefix varies in length (``@property int`` vs ``@property string``) and
the token is a variable reference.  Aligning pads each prefix so every token
starts on the same column::

     * @property int    $id
     * @property string $email
"""

from __future__ import annotations

import re

# Whitespace followed by ``$name``, ``...$name``, ``&$name`` or ``{Name\\Space}``.
TOKEN_RE = re.compile(r"\s((?:&|\.\.\.)*[{$][\w\\]+}?)")


def split_token(line: str) -> tuple[str, str] | None:
    """Split *line* into (prefix, token-and-suffix) around its first token.

    The prefix has its trailing padding removed.  Returns None when the line
    carries no variable token.
    """
    m = TOKEN_RE.search(line)
    if m is None:
        return None
    return line[: m.start()].rstrip(), line[m.start(1) :]


def prefix_width(lines: list[str]) -> int:
    """Longest token-less prefix among *lines* (0 when none has a token)."""
    widths = [len(parts[0]) for parts in map(split_token, lines) if parts is not None]
    return max(widths, default=0)


def align_lines(lines: list[str], width: int | None = None) -> list[str]:
    """Pad *lines* so their variable tokens line up on one column.

    *width* defaults to the longest prefix in the set; the longest lines get
    exactly one space before the token.  Lines without a token are returned
    as-is.  Aligning an already aligned set with the same width is a no-op.
    """
    if width is None:
        width = prefix_width(lines)

    aligned: list[str] = []
    for line in lines:
        parts = split_token(line)
        if parts is None:
            aligned.append(line)
            continue
        prefix, rest = parts
        pad = max(width - len(prefix) + 1, 1)
        aligned.append(prefix + " " * pad + rest)
    return aligned
