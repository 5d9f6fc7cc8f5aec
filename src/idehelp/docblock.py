"""docblock.py - Canonical doc block assembly.

Tag groups are rendered in a fixed order with controlled spacing, so the
same groups always produce byte-identical text.  That determinism is what
makes repeated runs converge: a block rendered once is regrouped and
re-rendered to itself.

Canonical class block::

    /**
     * <Class description here>
     *
     * @property int    $id
     * @property string $name
     *
     * @class     {User}
     * @namespace {App\\Models}
     *
     * @mixin \\Illuminate\\Database\\Eloquent\\Builder
     */
"""

from __future__ import annotations

from dataclasses import dataclass

from idehelp.align import align_lines
from idehelp.properties import PropertyFact, merge_property_group
from idehelp.tags import BLANK, CLOSE, COMMENT, OPEN, TagGroups, dedupe, group_tags, tag_content

# Wildcard key: every group not named elsewhere in the OrderSpec.
OTHER_TAGS = "*"

# (tag key, blank decorative line after the group)
OrderSpec = list[tuple[str, bool]]

CLASS_ORDER: OrderSpec = [
    (COMMENT, True),
    ("@property", True),
    ("@property-read", True),
    ("@property-write", True),
    ("@method", True),
    ("@class", False),
    ("@namespace", True),
    ("@mixin", True),
    (OTHER_TAGS, True),
]

METHOD_ORDER: OrderSpec = [
    ("@param", True),
    ("@return", False),
]

DEFAULT_PLACEHOLDER = "<Class description here>"


@dataclass
class MixinRequirement:
    """A ``@mixin`` target every class block must carry exactly once."""

    target: str
    already_present: bool = False

    def render(self) -> str:
        return f" * @mixin {self.target}"


def collapse_blank_lines(lines: list[str]) -> list[str]:
    """Collapse runs of blank decorative lines into one."""
    collapsed: list[str] = []
    for line in lines:
        if line.strip() == "*" and collapsed and collapsed[-1].strip() == "*":
            continue
        collapsed.append(line)
    return collapsed


def _expand(order: OrderSpec, groups: TagGroups) -> OrderSpec:
    named = {key for key, _ in order}
    expanded: OrderSpec = []
    for key, blank_after in order:
        if key != OTHER_TAGS:
            expanded.append((key, blank_after))
            continue
        expanded.extend((other, blank_after) for other in groups if other not in named)
    return expanded


def render_docblock(groups: TagGroups, order: OrderSpec, newline: str = "\n") -> str:
    """Render *groups* inside ``/** ... */`` following *order*.

    Empty or absent groups are skipped.  One blank `` *`` line separates a
    group from the next emitted one when its flag is set; nothing trails
    the last group.
    """
    lines = [OPEN]
    pending_blank = False
    for key, blank_after in _expand(order, groups):
        group = groups.get(key)
        if not group:
            continue
        if pending_blank:
            lines.append(BLANK)
        lines.extend(group)
        pending_blank = blank_after
    lines.append(CLOSE)
    return newline.join(collapse_blank_lines(lines))


def mixin_requirements(existing: list[str], targets: list[str]) -> list[MixinRequirement]:
    """Check which required mixin *targets* the *existing* tags already declare."""
    present = {tag_content(line).split()[0].lstrip("\\") for line in existing if tag_content(line)}
    return [MixinRequirement(target, target.lstrip("\\") in present) for target in targets]


def build_class_groups(
    doc: str,
    class_name: str,
    namespace: str,
    facts: list[PropertyFact] | None,
    mixins: list[str] | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> TagGroups:
    """Merge discovered facts into the tag groups of an existing class block.

    *facts* is None when property discovery failed; the ``@property`` group
    then stays exactly as written.
    """
    groups = group_tags(doc)

    if not groups.get(COMMENT) and placeholder:
        groups[COMMENT] = [f" * {placeholder}"]

    existing_props = groups.get("@property", [])
    merged = merge_property_group(existing_props, facts)
    if merged:
        groups["@property"] = merged

    class_lines = dedupe(groups.get("@class", [])) or [f" * @class {{{class_name}}}"]
    ns_lines = dedupe(groups.get("@namespace", [])) or [f" * @namespace {{{namespace}}}"]
    aligned = align_lines(class_lines + ns_lines)
    groups["@class"] = aligned[: len(class_lines)]
    groups["@namespace"] = aligned[len(class_lines) :]

    mixin_lines = dedupe(groups.get("@mixin", []))
    for requirement in mixin_requirements(mixin_lines, mixins or []):
        if not requirement.already_present:
            mixin_lines.append(requirement.render())
    if mixin_lines:
        groups["@mixin"] = mixin_lines

    return groups


def build_class_docblock(
    doc: str,
    class_name: str,
    namespace: str,
    facts: list[PropertyFact] | None,
    mixins: list[str] | None = None,
    placeholder: str = DEFAULT_PLACEHOLDER,
    newline: str = "\n",
) -> str:
    """Render the canonical doc block for a class."""
    groups = build_class_groups(doc, class_name, namespace, facts, mixins, placeholder)
    return render_docblock(groups, CLASS_ORDER, newline=newline)
