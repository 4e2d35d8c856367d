# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/validation/field.py

"""
Field-path addressed validation errors.

Validators collect ``FieldError`` objects into a plain list instead of
raising, so a caller sees every problem in one pass. ``to_aggregate`` turns
the list into one message at the point where a single error is wanted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class FieldPath:
    def __init__(self, *segments: str):
        self._segments: Tuple[str, ...] = tuple(segments)

    def child(self, name: str) -> "FieldPath":
        return FieldPath(*self._segments, name)

    def __str__(self) -> str:
        return ".".join(self._segments)

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldPath):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)


class ErrorType(str, Enum):
    REQUIRED = "Required value"


@dataclass(frozen=True)
class FieldError:
    type: ErrorType
    field: str
    detail: str

    def __str__(self) -> str:
        return f"{self.field}: {self.type.value}: {self.detail}"


def required(path: FieldPath, detail: str) -> FieldError:
    return FieldError(ErrorType.REQUIRED, str(path), detail)


ErrorList = List[FieldError]


class AggregateError(ValueError):
    def __init__(self, errors: ErrorList):
        self.errors: ErrorList = list(errors)
        super().__init__(_aggregate_message(self.errors))


def _aggregate_message(errors: ErrorList) -> str:
    if len(errors) == 1:
        return str(errors[0])
    return "[" + ", ".join(str(e) for e in errors) + "]"


def to_aggregate(errors: ErrorList) -> Optional[AggregateError]:
    if not errors:
        return None
    return AggregateError(errors)
