from __future__ import annotations

import base64
import glob as _glob
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

# Directories never descended into by grep
IGNORED_DIRS = frozenset({".git", "node_modules", "dist", "build"})
IGNORED_SUFFIXES = (".min.js", ".map")

GREP_LINE_LIMIT = 200

MIME_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
    "pdf": "application/pdf",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class FileEntry:
    name: str
    path: str
    is_directory: bool
    size: int | None = None
    modified_at: datetime | None = None


@dataclass
class GrepMatch:
    file: str
    line: int
    content: str
    match: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "content": self.content, "match": self.match}


@dataclass
class Base64File:
    base64: str
    mime_type: str
    data_url: str

    def to_dict(self) -> dict[str, Any]:
        return {"base64": self.base64, "mimeType": self.mime_type, "dataUrl": self.data_url}


def resolve_path(cwd: Path | str, path_str: str) -> Path:
    """Resolve ``path_str`` against ``cwd`` unless it is already absolute."""
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = Path(cwd) / p
    return p.resolve()


def _entry(p: Path) -> FileEntry:
    try:
        st = p.stat()
    except OSError:
        st = None
    return FileEntry(
        name=p.name,
        path=str(p),
        is_directory=p.is_dir(),
        size=st.st_size if st is not None else None,
        modified_at=datetime.fromtimestamp(st.st_mtime) if st is not None else None,
    )


def list_directory(path: Path | str) -> list[FileEntry]:
    p = Path(path)
    # iterdir raises FileNotFoundError / NotADirectoryError / PermissionError
    return [_entry(child) for child in sorted(p.iterdir(), key=lambda x: x.name.lower())]


def glob_entries(pattern: str, cwd: Path | str | None = None) -> list[FileEntry]:
    """Files and folders matching ``pattern`` below ``cwd``, hidden entries excluded."""
    base = Path(cwd) if cwd else Path.cwd()
    out: list[FileEntry] = []
    # root_dir keeps glob metacharacters in the base path literal
    for m in sorted(_glob.glob(pattern, root_dir=base, recursive=True)):
        rel = Path(m)
        if any(part.startswith(".") and part not in {".", ".."} for part in rel.parts):
            continue
        out.append(_entry((base / rel).resolve()))
    return out


def compile_search_pattern(pattern: str) -> re.Pattern[str]:
    """Case-insensitive regex; invalid syntax falls back to a literal match."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(pattern), re.IGNORECASE)


def _skip_file(name: str) -> bool:
    return name.startswith(".") or name.endswith(IGNORED_SUFFIXES)


def _iter_search_files(root: Path):
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS and not d.startswith("."))
        for f in sorted(filenames):
            if not _skip_file(f):
                yield Path(dirpath) / f


def grep(pattern: str, path: Path | str, max_results: int = 100) -> list[GrepMatch]:
    target = Path(path).expanduser().resolve()
    if not target.exists():
        raise FileNotFoundError(f"Path not found: {path}")

    rx = compile_search_pattern(pattern)
    files = _iter_search_files(target) if target.is_dir() else iter([target])

    results: list[GrepMatch] = []
    for f in files:
        if len(results) >= max_results:
            break
        try:
            text = f.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            # binary or unreadable
            continue
        for i, line in enumerate(text.split("\n"), start=1):
            m = rx.search(line)
            if m is None:
                continue
            results.append(GrepMatch(file=str(f), line=i, content=line.strip()[:GREP_LINE_LIMIT], match=m.group(0)))
            if len(results) >= max_results:
                break
    return results


def read_text(path: Path | str) -> str:
    return Path(path).read_text(encoding="utf-8")


def mime_type_for(path: Path | str) -> str:
    ext = Path(path).suffix.lower().lstrip(".")
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def read_base64(path: Path | str) -> Base64File:
    data = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    mime = mime_type_for(path)
    return Base64File(base64=data, mime_type=mime, data_url=f"data:{mime};base64,{data}")
