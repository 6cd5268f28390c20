"""I/O utilities for UTF-8 text and orjson-backed JSON files."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import orjson


def read_text(path: Path) -> str:
    """Read a UTF-8 text file; a leading byte order mark is dropped."""
    return path.read_text(encoding="utf-8-sig")


def write_text(text: str, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="\n")


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))


def dump_json(obj: Any, *, pretty: bool = True) -> None:
    """Write ``obj`` as JSON to stdout."""
    opts = orjson.OPT_INDENT_2 if pretty else 0
    sys.stdout.buffer.write(orjson.dumps(obj, option=opts))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.buffer.flush()
