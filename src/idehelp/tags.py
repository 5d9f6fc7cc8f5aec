"""tags.py - Doc block tag grouping for idehelp.

Splits the raw text of a PHP doc block into tag groups so that callers can
merge machine-derived facts into a block without losing anything a human
wrote.  A doc block like::

    /**
     * Billing account.
     *
     * @property int $id
     * @mixin \\Illuminate\\Database\\Eloquent\\Builder
     */

becomes::

    {
        "comment": [" * Billing account."],
        "@property": [" * @property int $id"],
        "@mixin": [" * @mixin \\\\Illuminate\\\\Database\\\\Eloquent\\\\Builder"],
    }

Lines are stored verbatim.  Group *selection* order is not decided here; the
assembler in :mod:`idehelp.docblock` owns that.
"""

from __future__ import annotations

import re

# Synthetic group holding untagged free text.
COMMENT = "comment"

OPEN = "/**"
CLOSE = " */"
BLANK = " *"

# ``* @property int $id`` -> "@property".  Dashes are part of the keyword so
# ``@property-read`` stays its own group.
TAG_RE = re.compile(r"\*\s*(?P<tag>@[A-Za-z][\w-]*)(?=\s|$)")

TagGroups = dict[str, list[str]]


def is_decoration(line: str) -> bool:
    """True for lines that carry no content: delimiters and lone ``*`` lines."""
    stripped = line.strip()
    if "*" not in stripped:
        return True
    if stripped == "*":
        return True
    return "/**" in stripped or "*/" in stripped


def tag_of(line: str) -> str | None:
    """Return the tag keyword of *line* (``"@param"``), or None for free text."""
    m = TAG_RE.search(line)
    if m is None:
        return None
    # The tag must be the first thing after the leading ``*``.
    if line[: m.start()].strip():
        return None
    return m.group("tag")


def strip_delimiters(line: str) -> str:
    """Rewrite a line holding ``/**`` or ``*/`` as a plain `` * <content>`` line.

    ``/** Billing account. */`` becomes `` * Billing account.``.  Returns ""
    when only the delimiters were there; lines without one come back verbatim.
    """
    if "/**" not in line and "*/" not in line:
        return line
    content = line
    if "/**" in content:
        content = content.split("/**", 1)[1]
    if "*/" in content:
        content = content.rsplit("*/", 1)[0]
    content = content.strip().lstrip("*").strip()
    return f" * {content}" if content else ""


def group_tags(doc: str | None) -> TagGroups:
    """Group the lines of a doc block by tag keyword.

    Tag lines are appended to their keyword's group, content lines without a
    tag go to :data:`COMMENT`, decoration lines are dropped.  Content sharing
    a line with ``/**`` or ``*/`` is kept as a line of its own.  Appearance
    order is preserved inside every group and in the mapping itself.
    """
    grouped: TagGroups = {}
    if not doc:
        return grouped

    for raw in doc.splitlines():
        line = strip_delimiters(raw)
        tag = tag_of(line)
        if tag is not None:
            grouped.setdefault(tag, []).append(line)
            continue
        if is_decoration(line):
            continue
        grouped.setdefault(COMMENT, []).append(line)
    return grouped


def dedupe(lines: list[str]) -> list[str]:
    """Drop exact duplicate lines, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for line in lines:
        if line in seen:
            continue
        seen.add(line)
        result.append(line)
    return result


def tag_content(line: str) -> str:
    """Return the text following the tag keyword (``@mixin \\Foo`` -> ``\\Foo``)."""
    m = TAG_RE.search(line)
    if m is None:
        return line.strip().lstrip("*").strip()
    return line[m.end() :].strip()
