"""generate.py - Add and refresh PHP doc blocks so IDEs see dynamic members.

For every class under the models folder and the class folders:

1. the class doc block is regrouped and re-rendered in canonical order,
   merging in ``@property`` tags (database columns for models, public
   properties for other classes), ``@class`` / ``@namespace`` tags and, for
   models, the required ``@mixin`` tags;
2. each undocumented public method gets a ``@param`` / ``@return`` block.

Blocks are spliced back by exact text match.  A file is only written when
every splice in it matched exactly once; anything else leaves it untouched
and is reported in the run summary.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from idehelp.cli import RootOption, error_exit, get_config, iter_sources, json_print, rel_display_path
from idehelp.config import ProjectConfig
from idehelp.docblock import build_class_docblock
from idehelp.methods import UNTYPED, render_method_docblock, undocumented_methods
from idehelp.properties import PropertyFact
from idehelp.scanner import ClassMetadata, import_aliases, scan_source
from idehelp.schema import ConnectionCache, MetadataUnavailable, discover_columns, model_table
from idehelp.splice import AMBIGUOUS, NO_MATCH, PATCHED, splice_block
from idehelp.utils import atomic_write_text, detect_newline, is_writable, read_source

out_console = Console()

UNCHANGED = "unchanged"
MALFORMED = "malformed"
READ_ONLY = "read-only"

SKIPPED = (NO_MATCH, MALFORMED, READ_ONLY)

_STATUS_STYLE = {
    PATCHED: "green",
    UNCHANGED: "dim",
    NO_MATCH: "yellow",
    MALFORMED: "yellow",
    READ_ONLY: "yellow",
    AMBIGUOUS: "red",
}


@dataclass
class FileResult:
    """Outcome of processing one source file."""

    filepath: Path
    class_name: str = ""
    status: str = UNCHANGED
    detail: str = ""
    methods_documented: int = 0
    warnings: list[str] = field(default_factory=list)

    def warning(self, msg: str) -> None:
        """Record a non-fatal problem (the file is still processed)."""
        self.warnings.append(msg)

    def display(self, base_dir: Path | None = None, quiet: bool = False, dry_run: bool = False) -> None:
        """Print the status line (and warnings) of this file."""
        rel = escape(rel_display_path(self.filepath, base_dir))
        if self.status == UNCHANGED and not self.warnings:
            return
        if not (quiet and self.status == PATCHED):
            label = "would patch" if dry_run and self.status == PATCHED else self.status
            style = _STATUS_STYLE.get(self.status, "")
            line = f"  [bold]{rel}[/bold]: [{style}]{label}[/{style}]"
            if self.methods_documented:
                line += f" ({self.methods_documented} methods documented)"
            if self.detail:
                line += f" - {escape(self.detail)}"
            out_console.print(line)
        if not quiet:
            for msg in self.warnings:
                out_console.print(f"  [bold]{rel}[/bold]: [yellow]warning[/yellow]: {escape(msg)}")

    def to_dict(self, base_dir: Path | None = None) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "file": rel_display_path(self.filepath, base_dir),
            "path": str(self.filepath),
            "class": self.class_name,
            "status": self.status,
            "detail": self.detail,
            "methods_documented": self.methods_documented,
            "warnings": list(self.warnings),
        }


@dataclass
class RunSummary:
    """All file results of one run."""

    results: list[FileResult] = field(default_factory=list)
    dry_run: bool = False

    def count(self, *statuses: str) -> int:
        return sum(1 for r in self.results if r.status in statuses)

    def to_dict(self, base_dir: Path | None = None) -> dict[str, Any]:
        return {
            "total": len(self.results),
            "patched": self.count(PATCHED),
            "unchanged": self.count(UNCHANGED),
            "skipped": self.count(*SKIPPED),
            "ambiguous": self.count(AMBIGUOUS),
            "dry_run": self.dry_run,
            "files": [
                r.to_dict(base_dir)
                for r in self.results
                if r.status != UNCHANGED or r.warnings
            ],
        }


# ---------------------------------------------------------------------------
# Processing
# ---------------------------------------------------------------------------


def property_facts(
    cls: ClassMetadata, is_model: bool, cfg: ProjectConfig, cache: ConnectionCache
) -> list[PropertyFact]:
    """Discover the ``(name, type)`` facts of *cls*.

    Models read their table's columns; other classes use their public
    properties.  Raises :class:`MetadataUnavailable` when a model's columns
    cannot be read.
    """
    if is_model:
        connection = cls.connection or cfg.default_connection
        table = cls.table or model_table(cls.name)
        return [PropertyFact(name, type_) for name, type_ in discover_columns(cache, connection, table)]
    return [PropertyFact(p.name, p.type or UNTYPED) for p in cls.public_properties()]


def patch_source(
    text: str,
    result: FileResult,
    cfg: ProjectConfig,
    cache: ConnectionCache,
    is_model: bool = False,
) -> str:
    """Return *text* with its class and method doc blocks refreshed.

    Sets ``result.status``; on any failed splice the original *text* is
    returned so the caller never writes a partially patched file.
    """
    cls = scan_source(text)
    if cls is None:
        result.status = MALFORMED
        result.detail = "no namespace or class declaration"
        return text
    result.class_name = cls.name
    newline = detect_newline(text)

    try:
        facts: list[PropertyFact] | None = property_facts(cls, is_model, cfg, cache)
    except MetadataUnavailable as exc:
        result.warning(f"@property tags left untouched: {exc}")
        facts = None

    rendered = build_class_docblock(
        cls.doc,
        cls.name,
        cls.namespace,
        facts,
        mixins=cfg.mixins if is_model else [],
        placeholder=cfg.placeholder,
        newline=newline,
    )
    gap = cls.doc_gap if cls.doc else newline + cls.indent
    patch = splice_block(text, cls.doc, rendered, cls.declaration, gap)
    if not patch.matched:
        result.status = patch.status
        result.detail = f"class block of {cls.name} found {patch.count} times"
        return text
    content = patch.new_text

    imports = import_aliases(text)
    for method in undocumented_methods(cls):
        block = render_method_docblock(method, imports, newline)
        patch = splice_block(content, "", block, method.declaration, newline)
        if not patch.matched:
            result.status = patch.status
            result.detail = f"method {method.name} (line {method.line}) found {patch.count} times"
            result.methods_documented = 0
            return text
        content = patch.new_text
        result.methods_documented += 1

    result.status = PATCHED if content != text else UNCHANGED
    return content


def process_file(
    filepath: Path,
    cfg: ProjectConfig,
    cache: ConnectionCache,
    is_model: bool = False,
    dry_run: bool = False,
) -> FileResult:
    """Patch one source file in place (unless *dry_run*)."""
    result = FileResult(filepath=filepath)
    try:
        text = read_source(filepath)
    except OSError as exc:
        result.status = MALFORMED
        result.detail = f"cannot read file: {exc}"
        return result
    except UnicodeDecodeError as exc:
        result.status = MALFORMED
        result.detail = f"not valid UTF-8 (byte {exc.start}: {exc.reason})"
        return result

    new_text = patch_source(text, result, cfg, cache, is_model=is_model)
    if result.status != PATCHED:
        return result
    if not is_writable(filepath):
        result.status = READ_ONLY
        return result
    if not dry_run:
        atomic_write_text(filepath, new_text, encoding="utf-8")
    return result


def run(cfg: ProjectConfig, class_name: str | None = None, dry_run: bool = False) -> RunSummary:
    """Process every eligible file of the project, one at a time."""
    summary = RunSummary(dry_run=dry_run)
    seen: set[Path] = set()
    with ConnectionCache(cfg.connections) as cache:
        for directory, is_model in cfg.source_roots():
            for filepath in iter_sources(directory, cfg, class_name):
                key = filepath.resolve()
                if key in seen:
                    continue
                seen.add(key)
                summary.results.append(
                    process_file(filepath, cfg, cache, is_model=is_model, dry_run=dry_run)
                )
    return summary


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _print_summary(summary: RunSummary) -> None:
    """Print a breakdown table by status."""
    counts: Counter[str] = Counter(r.status for r in summary.results)
    out_console.print()
    table = Table(title="Summary", show_lines=False, pad_edge=False)
    table.add_column("Status", style="bold")
    table.add_column("Files", justify="right")
    for status, count in sorted(counts.items(), key=lambda x: -x[1]):
        table.add_row(status, str(count))
    table.add_row("warnings", str(sum(len(r.warnings) for r in summary.results)))
    out_console.print(table)


app = typer.Typer(
    help="Add Builder mixins and PHP doc blocks to models and classes for IDE discovery.",
    rich_markup_mode="rich",
    epilog="""\
[bold]Examples:[/bold]

idehelp                         Process every model and class

idehelp --class User            Only the file(s) declaring class User

idehelp --dry-run               Report what would change without writing

idehelp --json                  Machine-readable JSON output

[bold]Statuses:[/bold]

patched     Doc blocks were added or refreshed

unchanged   Everything was already up to date

no-match    The existing block could not be located verbatim (file untouched)

ambiguous   The existing block occurs more than once (file untouched)

malformed   No namespace or class declaration found

read-only   The file is not writable

[dim]Reads idehelp.toml from the project root (all settings optional).[/dim]""",
)


@app.callback(invoke_without_command=True)
def main(
    class_name: str | None = typer.Option(
        None, "--class", "-c", help="Only process files declaring this class"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report changes without writing files"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show problems"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    summary: bool = typer.Option(False, "--summary", help="Print a per-status breakdown table"),
    root: Path | None = RootOption,
) -> None:
    """Generate and merge IDE doc blocks for models and classes."""
    try:
        cfg = get_config(root)
    except ValueError as exc:
        error_exit(str(exc), json_mode=json_output)

    if not json_output and not quiet:
        roots = ", ".join(rel_display_path(d, cfg.root) for d, _ in cfg.source_roots())
        typer.echo(f"Scanning {roots}", err=True)

    result = run(cfg, class_name=class_name, dry_run=dry_run)

    if json_output:
        json_print(result.to_dict(cfg.root))
    else:
        for file_result in result.results:
            file_result.display(cfg.root, quiet=quiet, dry_run=dry_run)

        ambiguous = result.count(AMBIGUOUS)
        result_text = Text()
        result_text.append(f"\nProcessed {len(result.results)} files: ")
        result_text.append(
            f"{result.count(PATCHED)} {'to patch' if dry_run else 'patched'}", style="green"
        )
        result_text.append(f", {result.count(UNCHANGED)} unchanged")
        result_text.append(f", {result.count(*SKIPPED)} skipped")
        result_text.append(", ")
        result_text.append(f"{ambiguous} ambiguous", style="red" if ambiguous else "")
        out_console.print(result_text)

        if summary:
            _print_summary(result)

    if result.count(AMBIGUOUS):
        raise typer.Exit(code=1)


def main_entry() -> None:
    """Package entry point for ``idehelp``."""
    app()


if __name__ == "__main__":
    main_entry()
