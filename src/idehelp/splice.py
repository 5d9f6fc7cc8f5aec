"""splice.py - Exact-text replacement of doc blocks inside source files.

The splice never guesses.  The previous block (followed by the declaration
it is attached to, which pins the match point) must occur exactly once in
the source; otherwise the source is returned untouched and the result says
why.  A class whose block was reformatted by hand simply stops receiving
patches until its text lines up again.
"""

from __future__ import annotations

from dataclasses import dataclass

PATCHED = "patched"
NO_MATCH = "no-match"
AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class PatchResult:
    """Outcome of one splice: whether it applied and the resulting text."""

    matched: bool
    new_text: str
    count: int = 0

    @property
    def ambiguous(self) -> bool:
        return self.count > 1

    @property
    def status(self) -> str:
        if self.matched:
            return PATCHED
        return AMBIGUOUS if self.ambiguous else NO_MATCH


def splice(source: str, old: str, new: str) -> PatchResult:
    """Replace the single occurrence of *old* in *source* with *new*.

    Zero occurrences (or an empty *old*) yield an unmatched result, more
    than one an ambiguous one; in both cases ``new_text`` is *source*.
    """
    count = source.count(old) if old else 0
    if count != 1:
        return PatchResult(matched=False, new_text=source, count=count)
    return PatchResult(matched=True, new_text=source.replace(old, new, 1), count=1)


def splice_block(
    source: str,
    previous: str,
    rendered: str,
    anchor: str,
    gap: str = "\n",
) -> PatchResult:
    """Swap the doc block attached to *anchor* for *rendered*.

    *previous* is the block as it stands (empty when the declaration had
    none), *gap* the text between block and declaration, *anchor* the
    declaration text itself.
    """
    if previous:
        old = previous + gap + anchor
    else:
        old = anchor
    return splice(source, old, rendered + gap + anchor)
