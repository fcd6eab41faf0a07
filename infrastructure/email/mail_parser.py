# infrastructure/email/mail_parser.py
from __future__ import annotations
import email.errors
import email.utils
from email.header import Header, decode_header
from email.message import Message

import pyzmail
from pyzmail.parse import decode_mail_header

from domain.errors import MailParseError
from domain.models import Disposition, MailPart

# Defectos que dejan el multipart sin partes utilizables
_FATAL_DEFECTS = (
    email.errors.NoBoundaryInMultipartDefect,
    email.errors.StartBoundaryNotFoundDefect,
)

_UNKNOWN_8BIT = "unknown-8bit"


def _decode_8bit(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def _header_text(value) -> str:
    """
    compat32 convierte las cabeceras con bytes 8-bit (UTF-8 crudo, RFC 6532) en
    Header 'unknown-8bit'; se recuperan los bytes originales y se decodifican.
    """
    if not isinstance(value, Header):
        return value
    chunks: list[str] = []
    for text, charset in decode_header(value):
        if isinstance(text, bytes):
            if charset in (None, _UNKNOWN_8BIT):
                text = _decode_8bit(text)
            else:
                text = text.decode(charset, "replace")
        chunks.append(text)
    return "".join(chunks)


def _to_part(msg: Message) -> MailPart:
    subparts: list[MailPart] = []
    if msg.is_multipart():
        subparts = [_to_part(sub) for sub in msg.get_payload()]
    headers = [(k, _header_text(v)) for k, v in msg.items()]
    return MailPart(headers=headers, source=msg, subparts=subparts)


class PyzMailParser:
    def parse(self, raw: bytes) -> MailPart:
        if not isinstance(raw, (bytes, bytearray)):
            raise MailParseError(f"Se esperaban bytes, recibido {type(raw).__name__}")
        try:
            msg = pyzmail.PyzMessage.factory(bytes(raw))
        except Exception as exc:
            raise MailParseError(f"No se pudo parsear el mensaje: {exc}") from exc

        defects = [d for d in msg.defects if isinstance(d, _FATAL_DEFECTS)]
        if defects:
            raise MailParseError(f"Multipart mal formado: {defects[0].__class__.__name__}")
        return _to_part(msg)

    def decode_disposition(self, value: str) -> Disposition:
        holder = Message()
        holder["Content-Disposition"] = value
        params = holder.get_params(header="content-disposition") or []
        if not params:
            return Disposition(kind="", params={})

        # El primer "parámetro" es el propio tipo (attachment / inline)
        kind = params[0][0].strip().lower()
        decoded: dict[str, str] = {}
        for key, val in params[1:]:
            if isinstance(val, tuple):
                # RFC 2231: charset explícito, ya viene decodificado
                decoded[key.lower()] = email.utils.collapse_rfc2231_value(val)
                continue
            text = email.utils.collapse_rfc2231_value(val)
            if "=?" in text:
                # RFC 2047; pyzmail tolera charsets desconocidos y cabeceras rotas
                text = decode_mail_header(text)
            decoded[key.lower()] = text
        return Disposition(kind=kind, params=decoded)

    def decode_body(self, part: MailPart) -> bytes:
        msg = part.source
        if msg.get_content_type() == "message/rfc822":
            # Correo reenviado: se guarda el mensaje embebido completo (.eml)
            return msg.get_payload(0).as_bytes()
        if msg.is_multipart():
            return msg.as_bytes()
        payload = msg.get_payload(decode=True)
        return payload or b""
