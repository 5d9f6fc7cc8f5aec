"""properties.py - Merge discovered properties into existing ``@property`` tags.

A fact is identified by its name (and preferably its type), never by the
exact line text: ``@property int    $id  // primary key`` already describes
``(id, int)``, so the line is kept verbatim instead of gaining a duplicate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from idehelp.align import align_lines
from idehelp.tags import dedupe

TAG = "@property"


@dataclass(frozen=True)
class PropertyFact:
    """A ``(name, type)`` pair discovered for a class."""

    name: str
    type: str

    def render(self) -> str:
        return f" * {TAG} {self.type} ${self.name}"


# Both patterns only look at the first variable of a line, so a trailing
# comment mentioning another property never counts as a match.


def _typed_re(fact: PropertyFact) -> re.Pattern[str]:
    # Any whitespace run between type and name so aligned tags still match.
    return re.compile(
        r"^[^$]*(?<![\w\\])"
        + re.escape(fact.type)
        + r"\s+"
        + re.escape("$" + fact.name)
        + r"(?!\w)"
    )


def _named_re(fact: PropertyFact) -> re.Pattern[str]:
    return re.compile(r"^[^$]*\s" + re.escape("$" + fact.name) + r"(?!\w)")


def _take(existing: list[str | None], pattern: re.Pattern[str]) -> str | None:
    """Pop the first remaining line matching *pattern*."""
    for i, line in enumerate(existing):
        if line is not None and pattern.search(line):
            existing[i] = None
            return line
    return None


def reconcile_properties(
    existing: list[str], facts: list[PropertyFact] | None
) -> list[str]:
    """Merge *facts* into the *existing* ``@property`` lines.

    For each fact, in discovery order:

    1. keep the first existing line containing ``<type> $<name>``;
    2. else keep an existing line for ``$<name>`` with a hand-written type;
    3. else synthesize `` * @property <type> $<name>``.

    Existing lines left over (names that were not discovered) follow in
    their original order.  When *facts* is None (discovery failed) the
    existing lines are returned untouched.
    """
    if facts is None:
        return list(existing)

    remaining: list[str | None] = list(existing)
    merged: list[str] = []
    seen_names: set[str] = set()

    for fact in facts:
        if fact.name in seen_names:
            continue
        seen_names.add(fact.name)
        line = _take(remaining, _typed_re(fact))
        if line is None:
            line = _take(remaining, _named_re(fact))
        merged.append(line if line is not None else fact.render())

    merged.extend(line for line in remaining if line is not None)
    return dedupe(merged)


def merge_property_group(
    existing: list[str], facts: list[PropertyFact] | None
) -> list[str]:
    """Reconcile and column-align a ``@property`` group.

    Unavailable facts leave the group byte-identical, alignment included.
    """
    if facts is None:
        return list(existing)
    return align_lines(reconcile_properties(existing, facts))
