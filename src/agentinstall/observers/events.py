# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single invocation
    env: str          # generate/load/manifests
    context: Optional[str]  # artifact directory, when known

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, context: Optional[str]) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Network type
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class NetworkTypeDefaulted(BaseEvent):
    value: str
    reason: str


# ---------------------------------------------------------------------
# Manifest lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ManifestGenerated(BaseEvent):
    filename: str
    network_type: str

@dataclass(frozen=True)
class ManifestLoaded(BaseEvent):
    filename: str
    found: bool

@dataclass(frozen=True)
class ManifestInvalid(BaseEvent):
    filename: str
    errors: List[str]
