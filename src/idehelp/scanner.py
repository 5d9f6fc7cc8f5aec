"""scanner.py - Static declaration scanner for PHP sources.

Recovers, without executing anything, the facts that drive doc block
generation for the first class declared in a file:

- namespace and class name, the declaration line and the doc block (if any)
  sitting right above it;
- public instance properties with their declared types, including promoted
  constructor parameters;
- public methods declared in the class body with their parameters, return
  type, start line, declaration line and existing doc block;
- the Eloquent ``$table`` / ``$connection`` bindings.

The scanner works on text with a handful of regexes plus a bracket matcher
that skips strings and comments.  It is deliberately shallow: method bodies
are skipped wholesale, so closures and anonymous classes inside them never
leak into the class's members.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

NAMESPACE_RE = re.compile(r"^[ \t]*namespace\s+(?P<name>[\w\\]+)\s*[;{]", re.M)
CLASS_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<decl>(?:(?:abstract|final|readonly)\s+)*class\s+(?P<name>\w+)\b[^\r\n]*)",
    re.M,
)
METHOD_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<mods>(?:(?:public|protected|private|static|final|abstract)\s+)*)"
    r"function\s+&?\s*(?P<name>\w+)\s*\(",
    re.M,
)
RETURN_RE = re.compile(r"\s*:\s*(?P<type>\??[\w\\|&()]+)")
PROPERTY_RE = re.compile(
    r"^[ \t]*(?P<mods>(?:(?:public|protected|private|static|readonly|var)\s+)+)"
    r"(?:(?P<type>\??[\w\\|&()]+)\s+)?\$(?P<name>\w+)",
    re.M,
)
PARAM_RE = re.compile(
    r"^(?P<mods>(?:(?:public|protected|private|readonly)\s+)*)"
    r"(?:(?P<type>\??[\w\\|&()]+)\s+)?"
    r"(?P<ref>&)?\s*(?P<variadic>\.\.\.)?\s*\$(?P<name>\w+)"
)
TABLE_RE = re.compile(r"\$table\s*=\s*['\"](?P<value>[^'\"]+)['\"]")
CONNECTION_RE = re.compile(r"\$connection\s*=\s*['\"](?P<value>[^'\"]+)['\"]")
USE_RE = re.compile(r"^use\s+(?P<kind>function\s+|const\s+)?(?P<body>[^;]+);", re.M)

VISIBILITIES = ("public", "protected", "private")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class Parameter:
    """One formal parameter of a method."""

    name: str
    type: str | None = None
    variadic: bool = False
    by_ref: bool = False
    promoted: str = ""  # visibility when this is a promoted constructor property

    @property
    def token(self) -> str:
        """The variable as written in a ``@param`` tag (``&...$rest``)."""
        return ("&" if self.by_ref else "") + ("..." if self.variadic else "") + "$" + self.name


@dataclass
class PropertyDecl:
    """A declared (or promoted) instance property."""

    name: str
    type: str | None = None
    visibility: str = "public"
    is_static: bool = False


@dataclass
class MethodSignature:
    """A method declared in a class body."""

    name: str
    class_name: str
    line: int  # 1-based, like a reflection start line
    declaration: str
    indent: str = ""
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str | None = None
    doc: str = ""
    visibility: str = "public"
    is_static: bool = False


@dataclass
class ClassMetadata:
    """Everything known about the first class of a source file."""

    namespace: str
    name: str
    declaration: str
    indent: str = ""
    doc: str = ""
    doc_gap: str = ""
    properties: list[PropertyDecl] = field(default_factory=list)
    methods: list[MethodSignature] = field(default_factory=list)
    table: str | None = None
    connection: str | None = None

    def public_properties(self) -> list[PropertyDecl]:
        return [p for p in self.properties if p.visibility == "public" and not p.is_static]

    def public_methods(self) -> list[MethodSignature]:
        return [m for m in self.methods if m.visibility == "public"]


@dataclass
class ImportTable:
    """Short names available in a file: ``use`` imports plus its namespace."""

    namespace: str = ""
    names: dict[str, str] = field(default_factory=dict)  # qualified -> short


# ---------------------------------------------------------------------------
# Low-level text helpers
# ---------------------------------------------------------------------------


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the quoted string starting at *i*."""
    quote = text[i]
    j = i + 1
    while j < len(text):
        if text[j] == "\\":
            j += 2
            continue
        if text[j] == quote:
            return j + 1
        j += 1
    return len(text)


def _matching(text: str, open_idx: int, open_ch: str, close_ch: str) -> int:
    """Index of the bracket closing the one at *open_idx*, or -1.

    Quoted strings, ``//`` / ``#`` line comments and ``/* */`` comments are
    skipped.  ``#[`` starts an attribute, not a comment.
    """
    depth = 0
    i = open_idx
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "'\"":
            i = _skip_string(text, i)
            continue
        if text.startswith("//", i) or (ch == "#" and not text.startswith("#[", i)):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _split_top_level(s: str) -> list[str]:
    """Split *s* on commas that are not nested in brackets or strings."""
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(s):
        ch = s[i]
        if ch in "'\"":
            i = _skip_string(s, i)
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(s[start:i])
            start = i + 1
        i += 1
    parts.append(s[start:])
    return [p.strip() for p in parts if p.strip()]


def _line_at(text: str, offset: int) -> tuple[int, str]:
    """Return (1-based line number, full line text) for *offset*."""
    line_start = text.rfind("\n", 0, offset) + 1
    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    return text.count("\n", 0, offset) + 1, text[line_start:line_end].rstrip("\r")


def leading_docblock(text: str, start: int) -> tuple[str, str]:
    """Return (doc block, gap) for the declaration starting at *start*.

    The doc block must be separated from the declaration by whitespace only,
    or by single-line ``#[...]`` attributes; the gap is the text in between.
    Returns ``("", "")`` when the declaration is undocumented.
    """
    head = text[:start]
    end = len(head.rstrip())
    while True:
        line_start = head.rfind("\n", 0, end) + 1
        last = head[line_start:end].strip()
        if last.startswith("#[") and last.endswith("]"):
            end = len(head[:line_start].rstrip())
            continue
        break

    if not head[:end].endswith("*/"):
        return "", ""
    begin = head.rfind("/**", 0, end)
    if begin == -1:
        return "", ""
    doc = head[begin:end]
    # A plain /* comment */ closes before our end: not a doc block.
    if "*/" in doc[3:-2]:
        return "", ""
    return doc, head[end:]


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def parse_parameter(raw: str) -> Parameter | None:
    """Parse one formal parameter (``public ?int &$x = null``)."""
    raw = raw.strip()
    while raw.startswith("#["):
        end = _matching(raw, 1, "[", "]")
        if end == -1:
            return None
        raw = raw[end + 1 :].lstrip()

    m = PARAM_RE.match(raw)
    if m is None:
        name = re.search(r"\$(\w+)", raw)
        return Parameter(name=name.group(1)) if name else None

    mods = m.group("mods").split()
    promoted = next((mod for mod in mods if mod in VISIBILITIES), "")
    if not promoted and "readonly" in mods:
        promoted = "public"
    return Parameter(
        name=m.group("name"),
        type=m.group("type"),
        variadic=bool(m.group("variadic")),
        by_ref=bool(m.group("ref")),
        promoted=promoted,
    )


def _visibility(mods: list[str]) -> str:
    return next((mod for mod in mods if mod in VISIBILITIES), "public")


def _scan_methods(
    text: str, class_name: str, body_start: int, body_end: int
) -> tuple[list[MethodSignature], list[tuple[int, int]]]:
    """Collect methods of a class body and the text spans they occupy."""
    methods: list[MethodSignature] = []
    spans: list[tuple[int, int]] = []
    pos = body_start
    while True:
        m = METHOD_RE.search(text, pos, body_end)
        if m is None:
            break
        open_paren = m.end() - 1
        close_paren = _matching(text, open_paren, "(", ")")
        if close_paren == -1:
            break

        params = [
            p
            for p in map(parse_parameter, _split_top_level(text[open_paren + 1 : close_paren]))
            if p is not None
        ]
        rm = RETURN_RE.match(text, close_paren + 1)
        return_type = rm.group("type") if rm else None
        after = rm.end() if rm else close_paren + 1

        # Skip the body (or the ``;`` of an abstract method).
        brace = text.find("{", after, body_end)
        semi = text.find(";", after, body_end)
        if semi != -1 and (brace == -1 or semi < brace):
            pos = semi + 1
        elif brace != -1:
            close = _matching(text, brace, "{", "}")
            pos = close + 1 if close != -1 else body_end
        else:
            pos = body_end
        spans.append((m.start(), pos))

        mods = m.group("mods").split()
        line, declaration = _line_at(text, m.start())
        doc, _gap = leading_docblock(text, m.start("mods"))
        methods.append(
            MethodSignature(
                name=m.group("name"),
                class_name=class_name,
                line=line,
                declaration=declaration,
                indent=m.group("indent"),
                parameters=params,
                return_type=return_type,
                doc=doc,
                visibility=_visibility(mods),
                is_static="static" in mods,
            )
        )
    return methods, spans


def _scan_properties(
    text: str, body_start: int, body_end: int, spans: list[tuple[int, int]]
) -> list[tuple[int, PropertyDecl]]:
    found: list[tuple[int, PropertyDecl]] = []
    for m in PROPERTY_RE.finditer(text, body_start, body_end):
        if any(start <= m.start() < end for start, end in spans):
            continue
        mods = m.group("mods").split()
        visibility = "public" if "var" in mods else _visibility(mods)
        found.append(
            (
                m.start(),
                PropertyDecl(
                    name=m.group("name"),
                    type=m.group("type"),
                    visibility=visibility,
                    is_static="static" in mods,
                ),
            )
        )
    return found


def scan_source(text: str) -> ClassMetadata | None:
    """Scan PHP source for its namespace and first class declaration.

    Returns None when either is missing; such a file cannot be documented.
    """
    ns = NAMESPACE_RE.search(text)
    cm = CLASS_RE.search(text)
    if ns is None or cm is None:
        return None

    name = cm.group("name")
    open_brace = text.find("{", cm.start("name"))
    close_brace = _matching(text, open_brace, "{", "}") if open_brace != -1 else -1
    body_start = open_brace + 1 if open_brace != -1 else cm.end()
    body_end = close_brace if close_brace != -1 else len(text)

    methods, spans = _scan_methods(text, name, body_start, body_end)

    located = _scan_properties(text, body_start, body_end, spans)
    for method, (start, _end) in zip(methods, spans):
        if method.name != "__construct":
            continue
        for param in method.parameters:
            if param.promoted:
                located.append(
                    (start, PropertyDecl(name=param.name, type=param.type, visibility=param.promoted))
                )
    located.sort(key=lambda item: item[0])

    body = text[body_start:body_end]
    table = TABLE_RE.search(body)
    connection = CONNECTION_RE.search(body)
    doc, gap = leading_docblock(text, cm.start("decl"))

    return ClassMetadata(
        namespace=ns.group("name"),
        name=name,
        declaration=cm.group("decl").rstrip(),
        indent=cm.group("indent"),
        doc=doc,
        doc_gap=gap,
        properties=[decl for _, decl in located],
        methods=methods,
        table=table.group("value") if table else None,
        connection=connection.group("value") if connection else None,
    )


def import_aliases(text: str) -> ImportTable:
    """Build the import table of a file from its top-level ``use`` statements.

    Handles plain (``use A\\B;``), aliased (``use A\\B as C;``), grouped
    (``use A\\{B, C as D};``) and comma-separated forms.  Function and
    constant imports are ignored.
    """
    ns = NAMESPACE_RE.search(text)
    table = ImportTable(namespace=ns.group("name") if ns else "")

    for m in USE_RE.finditer(text):
        if m.group("kind"):
            continue
        body = " ".join(m.group("body").split())
        group = re.match(r"(?P<prefix>[\w\\]+\\)\s*\{(?P<items>.*)\}$", body)
        if group:
            prefix = group.group("prefix").lstrip("\\")
            items = [prefix + item.strip() for item in group.group("items").split(",")]
        else:
            items = [item.strip().lstrip("\\") for item in body.split(",")]

        for item in items:
            if not item:
                continue
            parts = re.split(r"\s+as\s+", item, flags=re.I)
            qualified = parts[0].strip()
            short = parts[1].strip() if len(parts) > 1 else qualified.rsplit("\\", 1)[-1]
            table.names[qualified] = short
    return table
