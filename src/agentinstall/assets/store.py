# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/assets/store.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Protocol

log = logging.getLogger("agentinstall")


@dataclass
class File:
    """A named artifact: a path relative to the asset directory plus its bytes."""
    filename: str
    data: bytes


class FileFetcher(Protocol):
    def fetch_by_name(self, name: str) -> File:
        """Return the named file; raise FileNotFoundError when it does not exist."""
        ...


class DirectoryFileFetcher:
    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def fetch_by_name(self, name: str) -> File:
        path = self.base_dir / name
        data = path.read_bytes()
        log.debug("Fetched %s (%d bytes)", path, len(data))
        return File(filename=name, data=data)


def write_files(base_dir: str | Path, files: Iterable[File]) -> List[Path]:
    base_dir = Path(base_dir)
    written: List[Path] = []
    for f in files:
        path = base_dir / f.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f.data)
        log.debug("Wrote %s", path)
        written.append(path)
    return written
