# application/services/uid_set.py
from __future__ import annotations
from typing import Iterable

from domain.models import UID


def create_uid_set(uids: Iterable[UID]) -> str:
    """
    Convierte un conjunto de UIDs en la lista separada por comas que espera
    UID FETCH / UID STORE. Conjunto vacío -> "".
    """
    return ",".join(str(uid) for uid in sorted(set(uids)))


def parse_uid_set(text: str) -> set[UID]:
    raw = (text or "").strip()
    return {int(s.strip()) for s in raw.split(",") if s.strip()}
