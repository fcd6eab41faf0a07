# domain/errors.py
from __future__ import annotations


class MailIntakeError(Exception):
    pass


class ConfigurationError(MailIntakeError):
    """Precondición de arranque no cumplida (UIDVALIDITY, IDLE, credenciales)."""


class MailProtocolError(MailIntakeError):
    """Respuesta del servidor IMAP inesperada."""


class MailParseError(MailIntakeError):
    """Mensaje MIME mal formado."""


class UnsafeFilenameError(MailIntakeError):
    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"Nombre de adjunto rechazado {filename!r}: {reason}")
        self.filename = filename
        self.reason = reason
