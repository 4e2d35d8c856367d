# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/manifests/errors.py
from typing import Optional

from agentinstall.validation.field import ErrorList


class ManifestError(RuntimeError):
    """Base class for agent manifest failures."""


class ManifestGenerationError(ManifestError):
    """Raised when a manifest cannot be derived from the install config."""


class ManifestLoadError(ManifestError):
    """Raised when an on-disk manifest exists but cannot be read or parsed."""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class ManifestValidationError(ManifestError):
    """Raised when a manifest fails validation; carries every field error."""

    def __init__(self, message: str, errors: ErrorList):
        super().__init__(message)
        self.errors = list(errors)
