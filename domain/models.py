# domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

UID = int


@dataclass
class FetchedMessage:
    uid: UID
    raw: bytes


@dataclass
class MailPart:
    """
    Nodo del árbol MIME: cabeceras + subpartes.
    `source` es el objeto nativo del parser (se le devuelve en decode_body).
    """
    headers: list[tuple[str, str]]
    source: Any = None
    subparts: list["MailPart"] = field(default_factory=list)

    def header(self, name: str) -> str | None:
        key = name.lower()
        for k, v in self.headers:
            if k.lower() == key:
                return v
        return None


@dataclass(frozen=True)
class Disposition:
    kind: str
    params: dict[str, str]


@dataclass
class CycleResult:
    uids: set[UID] = field(default_factory=set)
    saved: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
