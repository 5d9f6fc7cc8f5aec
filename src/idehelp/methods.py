"""methods.py - Doc blocks for undocumented methods.

Only methods that a human has not documented yet are touched: a method with
any existing doc block, or one declared by another class, is left alone.
For the rest a minimal block is synthesized from the signature::

    /**
     * @param int         $id
     * @param string|null $name
     *
     * @return User
     */
"""

from __future__ import annotations

import re

from idehelp.align import align_lines
from idehelp.docblock import METHOD_ORDER, render_docblock
from idehelp.scanner import ClassMetadata, ImportTable, MethodSignature

UNTYPED = "mixed"

_NAME_RE = re.compile(r"\\?[A-Za-z_][\w\\]*")


def shorten_type(type_text: str, imports: ImportTable) -> str:
    """Collapse qualified class names in *type_text* to their imported form.

    ``\\App\\Models\\User`` becomes ``User`` when the file imports it or lives
    in ``App\\Models``.  Names that are not imported keep their spelling,
    leading backslash included.  Unions, intersections and ``?`` nullables
    are handled name by name.
    """

    def _short(m: re.Match[str]) -> str:
        written = m.group(0)
        qualified = written.lstrip("\\")
        if qualified in imports.names:
            return imports.names[qualified]
        if imports.namespace:
            prefix = imports.namespace + "\\"
            rest = qualified[len(prefix) :]
            if qualified.startswith(prefix) and "\\" not in rest:
                return rest
        return written

    return _NAME_RE.sub(_short, type_text)


def needs_docblock(method: MethodSignature, class_name: str) -> bool:
    """True when *method* should receive a synthesized doc block."""
    if method.doc.strip():
        return False
    if method.class_name != class_name:
        return False
    if method.visibility != "public":
        return False
    return bool(method.parameters or method.return_type)


def method_doc_lines(method: MethodSignature, imports: ImportTable) -> dict[str, list[str]]:
    """Return the ``@param`` / ``@return`` tag groups for *method*."""
    params = [
        f" * @param {shorten_type(p.type or UNTYPED, imports)} {p.token}"
        for p in method.parameters
    ]
    groups: dict[str, list[str]] = {}
    if params:
        groups["@param"] = align_lines(params)
    if method.return_type:
        groups["@return"] = [f" * @return {shorten_type(method.return_type, imports)}"]
    return groups


def indent_block(block: str, indent: str, newline: str = "\n") -> str:
    """Prefix every line of *block* with *indent*."""
    return newline.join(indent + line for line in block.split(newline))


def render_method_docblock(
    method: MethodSignature, imports: ImportTable, newline: str = "\n"
) -> str:
    """Render the indented doc block for *method* (without trailing newline)."""
    block = render_docblock(method_doc_lines(method, imports), METHOD_ORDER, newline=newline)
    return indent_block(block, method.indent, newline)


def undocumented_methods(cls: ClassMetadata) -> list[MethodSignature]:
    """Public methods of *cls* that still need a doc block, in source order."""
    return [m for m in cls.public_methods() if needs_docblock(m, cls.name)]
