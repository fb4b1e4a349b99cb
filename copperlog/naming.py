"""Turning configuration identifiers into valid type and member names."""

from __future__ import annotations

import os
import string
from pathlib import Path

from .errors import CuError


def _sanitize(identifier: str) -> str:
    return "".join(c if c.isalnum() else "_" for c in identifier)


def _is_digit(c: str) -> bool:
    return c in string.digits


def _is_boundary(prev: str, char: str, nxt: str) -> bool:
    if prev.islower() and char.isupper():
        return True
    if _is_digit(prev) != _is_digit(char):
        return True
    return prev.isupper() and char.isupper() and nxt.islower()


def _split_words(text: str) -> list[str]:
    words: list[str] = []
    for segment in text.split("_"):
        if not segment:
            continue
        current = segment[0]
        for prev, char, nxt in zip(segment, segment[1:], segment[2:] + " "):
            if _is_boundary(prev, char, nxt):
                words.append(current)
                current = char
            else:
                current += char
        words.append(current)
    return words


def _guard_leading_digit(candidate: str) -> str:
    if candidate[:1] and _is_digit(candidate[0]):
        return "_" + candidate
    return candidate


def config_id_to_enum(identifier: str) -> str:
    """Make a PascalCase enum variant name out of an identifier."""
    words = _split_words(_sanitize(identifier))
    candidate = "".join(w[:1].upper() + w[1:].lower() for w in words)
    return _guard_leading_digit(candidate)


def config_id_to_struct_member(identifier: str) -> str:
    """Make a snake_case member name out of an identifier."""
    words = _split_words(_sanitize(identifier))
    candidate = "_".join(w.lower() for w in words)
    return _guard_leading_digit(candidate)


def caller_crate_root(crate_name: str | None = None, start_dir: str | os.PathLike | None = None) -> Path:
    """Find the directory whose Cargo.toml declares the given package name."""
    if crate_name is None:
        crate_name = os.environ.get("CARGO_PKG_NAME")
        if crate_name is None:
            raise CuError("failed to read ENV var `CARGO_PKG_NAME`!")
    root = Path.cwd() if start_dir is None else Path(start_dir)
    search_entry = f'name="{crate_name}"'
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d.lower() != "target")
        for name in sorted(filenames):
            if name.lower() != "cargo.toml":
                continue
            path = Path(dirpath) / name
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            if search_entry in "".join(content.split()):
                return path.parent
    return root