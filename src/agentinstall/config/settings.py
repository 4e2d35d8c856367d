# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/config/settings.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    release_version: str = "4.11"
    log_dir: Path = field(default_factory=lambda: Path.home() / ".agentinstall" / "logs")
    strict_load: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        log_dir = os.getenv("AGENTINSTALL_LOG_DIR", "")
        return cls(
            release_version=os.getenv("AGENTINSTALL_RELEASE_VERSION", "4.11"),
            log_dir=Path(log_dir) if log_dir else Path.home() / ".agentinstall" / "logs",
            strict_load=_env_bool("AGENTINSTALL_STRICT_LOAD", True),
        )
