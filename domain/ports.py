# domain/ports.py
# Contratos que consume el núcleo; las implementaciones viven en infrastructure/
from __future__ import annotations
from typing import Iterable, Protocol

from domain.models import UID, Disposition, FetchedMessage, MailPart


class MailSession(Protocol):
    def select(self, mailbox: str) -> int | None: ...

    def supports_idle(self) -> bool: ...

    def refresh(self) -> None: ...

    def list_all_identifiers(self) -> set[UID]: ...

    def fetch_bodies(self, uids: Iterable[UID]) -> list[FetchedMessage]: ...

    def mark_deleted(self, uids: Iterable[UID]) -> None: ...

    def purge(self) -> None: ...

    def wait_for_activity(self, timeout: float) -> None: ...


class MailParser(Protocol):
    def parse(self, raw: bytes) -> MailPart: ...

    def decode_disposition(self, value: str) -> Disposition: ...

    def decode_body(self, part: MailPart) -> bytes: ...
