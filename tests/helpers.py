from __future__ import annotations

import os
from pathlib import Path


def write_script(directory: Path, name: str, description: str | None = "demo", author: str | None = "someone") -> Path:
    lines = ["# header"]
    if description is not None:
        lines.append(f"# Description: {description}")
    if author is not None:
        lines.append(f"# Author: {author}")
    lines.append("x <- 1")
    path = directory / name
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def set_mtime(path: Path, seconds: float) -> None:
    os.utime(path, (seconds, seconds))
