# application/services/attachment_extractor.py
from __future__ import annotations
import logging

from domain.ports import MailParser

logger = logging.getLogger(__name__)


class AttachmentExtractor:
    def __init__(self, parser: MailParser) -> None:
        self.parser = parser

    def extract(self, raw: bytes) -> dict[str, bytes]:
        """
        Devuelve {filename: contenido} con los adjuntos de primer nivel del mensaje.

        - Solo Content-Disposition: attachment con parámetro filename.
        - Los adjuntos sin filename se descartan (no se inventan nombres).
        - No se recorre multipart anidado.
        - Dos adjuntos con el mismo nombre en un mensaje: gana el último.
        """
        mail = self.parser.parse(raw)

        attachments: dict[str, bytes] = {}
        for part in mail.subparts:
            value = part.header("Content-Disposition")
            if value is None:
                continue
            disposition = self.parser.decode_disposition(value)
            if disposition.kind != "attachment":
                continue
            filename = disposition.params.get("filename")
            if filename is None:
                logger.debug("Adjunto sin filename descartado")
                continue
            attachments[filename] = self.parser.decode_body(part)
        return attachments
