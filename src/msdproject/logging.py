from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import ProjectConfig


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def log_event(config: ProjectConfig, level: str, component: str, action: str, **fields: object) -> None:
    if level == "debug" and not config.verbose:
        return
    if config.quiet and level == "info":
        return
    payload = {
        "ts": utc_now_iso(),
        "level": level,
        "component": component,
        "action": action,
        **fields,
    }
    if config.log_json:
        sys.stderr.write(json.dumps(payload, sort_keys=True, default=str) + "\n")
        return
    core = f"level={level} component={component} action={action}"
    extras = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    sys.stderr.write((core if not extras else f"{core} {extras}") + "\n")
