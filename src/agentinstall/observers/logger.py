# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/observers/logger.py
from __future__ import annotations

import logging

from .events import BaseEvent, ManifestInvalid

# logged at WARNING, everything else at INFO
_WARNING_EVENTS = (ManifestInvalid,)

# per-run bookkeeping, left out of the line
_HIDDEN_FIELDS = ("ts", "run_id")


class LoggerObserver:
    """Writes each manifest event as one ``[EVENT] <Type>: k=v, ...`` line."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(
            f"{k}={v}" for k, v in event.dict().items() if k not in _HIDDEN_FIELDS and v is not None
        )
        level = logging.WARNING if isinstance(event, _WARNING_EVENTS) else logging.INFO
        self.logger.log(level, "[EVENT] %s: %s", type(event).__name__, fields)
