"""Shared utilities for idehelp."""

import contextlib
import os
from pathlib import Path


def atomic_write_text(filepath: Path, text: str, encoding: str = "utf-8") -> None:
    """Write text to a file atomically to prevent corruption on crash.

    ``newline=""`` keeps the line endings of *text* exactly as given.
    """
    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)
        with contextlib.suppress(OSError):
            os.chmod(tmp_path, filepath.stat().st_mode)
        os.replace(tmp_path, filepath)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


def is_writable(filepath: Path) -> bool:
    """True if *filepath* exists and the current user may overwrite it."""
    return filepath.is_file() and os.access(filepath, os.W_OK)


def read_source(filepath: Path) -> str:
    """Read a UTF-8 source file without translating its line endings.

    Decoding is strict: a file that is not valid UTF-8 raises
    :class:`UnicodeDecodeError` rather than being rewritten with replacement
    characters.
    """
    with open(filepath, encoding="utf-8", newline="") as f:
        return f.read()


def detect_newline(text: str) -> str:
    """Return the line ending used by *text* (``"\\r\\n"`` or ``"\\n"``)."""
    return "\r\n" if "\r\n" in text else "\n"
