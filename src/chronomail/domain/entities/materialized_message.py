from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MaterializedMessage:
    message_id: str
    archive_path: Path
    raw_bytes: bytes
