# infrastructure/filesystem/storage.py
from __future__ import annotations
import logging
import os
from pathlib import Path

from application.services.filename_resolver import resolve_unique_path

logger = logging.getLogger(__name__)


class AttachmentStorage:
    def __init__(self, base: Path) -> None:
        self.base = base.resolve()
        self.base.mkdir(parents=True, exist_ok=True)

    def save_bytes(self, name_hint: str, data: bytes) -> Path:
        fp = resolve_unique_path(self.base, name_hint)
        # "xb": nunca sobrescribir, aunque aparezca el fichero entre la comprobación y la escritura
        with open(fp, "xb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        logger.info("Guardado %s (%d bytes)", fp, len(data))
        return fp
