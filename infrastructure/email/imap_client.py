# infrastructure/email/imap_client.py
from __future__ import annotations
import logging
from typing import Iterable

from imapclient import IMAPClient

from application.services.uid_set import create_uid_set
from config.settings import Settings
from domain.errors import MailProtocolError
from domain.models import UID, FetchedMessage

logger = logging.getLogger(__name__)

BODY_KEY = b"BODY[]"


class IMAPSession:
    """
    Sesión IMAP ya autenticada (IMAPClient en modo UID).
    Implementa el contrato MailSession que usa el ciclo de ingesta.
    """

    def __init__(self, client: IMAPClient) -> None:
        self.client = client

    def __enter__(self) -> "IMAPSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.logout()

    def select(self, mailbox: str) -> int | None:
        info = self.client.select_folder(mailbox, readonly=False)
        validity = info.get(b"UIDVALIDITY")
        logger.info("Seleccionado %s (UIDVALIDITY=%s, EXISTS=%s)", mailbox, validity, info.get(b"EXISTS"))
        return validity

    def supports_idle(self) -> bool:
        return bool(self.client.has_capability("IDLE"))

    def refresh(self) -> None:
        self.client.noop()

    def list_all_identifiers(self) -> set[UID]:
        return set(self.client.search(["ALL"]))

    def fetch_bodies(self, uids: Iterable[UID]) -> list[FetchedMessage]:
        requested = set(uids)
        uid_set = create_uid_set(requested)
        if not uid_set:
            return []
        resp = self.client.fetch(uid_set, ["BODY[]"])
        messages: list[FetchedMessage] = []
        for uid, data in resp.items():
            if uid not in requested:
                # FETCH no solicitado (p.ej. cambio de FLAGS de otro cliente), va por número de secuencia
                logger.debug("Ignorada respuesta FETCH no solicitada: %s %s", uid, data)
                continue
            body = data.get(BODY_KEY)
            if body is None:
                raise MailProtocolError(f"UID={uid} sin cuerpo en la respuesta FETCH")
            messages.append(FetchedMessage(uid=uid, raw=body))
        return messages

    def mark_deleted(self, uids: Iterable[UID]) -> None:
        uid_set = create_uid_set(uids)
        if uid_set:
            self.client.delete_messages(uid_set)

    def purge(self) -> None:
        self.client.expunge()

    def wait_for_activity(self, timeout: float) -> None:
        """
        IDLE hasta notificación del servidor o 'timeout' segundos, lo que ocurra antes.
        Ambos casos son equivalentes para quien llama.
        """
        self.client.idle()
        logger.info("Entrando en IDLE (%s s)…", timeout)
        try:
            responses = self.client.idle_check(timeout=timeout)
        finally:
            self.client.idle_done()
        if responses:
            logger.info("Notificación IMAP: %s", responses[:3])

    def logout(self) -> None:
        try:
            self.client.logout()
        except Exception:
            logger.exception("Error cerrando IMAP")


def connect(settings: Settings) -> IMAPSession:
    client = IMAPClient(settings.IMAP_HOST, port=settings.imap_port(), ssl=settings.IMAP_SSL)
    if not settings.IMAP_SSL and settings.IMAP_STARTTLS:
        client.starttls()
    client.login(settings.IMAP_USERNAME, settings.IMAP_PASSWORD)
    logger.info("Conectado a %s:%s como %s", settings.IMAP_HOST, settings.imap_port(), settings.IMAP_USERNAME)
    return IMAPSession(client)
