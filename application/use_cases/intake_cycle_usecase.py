# application/use_cases/intake_cycle_usecase.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable

from application.services.attachment_extractor import AttachmentExtractor
from application.services.message_selector import MessageSelector
from domain.errors import UnsafeFilenameError
from domain.models import CycleResult
from domain.ports import MailSession
from infrastructure.filesystem.storage import AttachmentStorage

logger = logging.getLogger(__name__)


class IntakeCycleUseCase:
    def __init__(
        self,
        *,
        extractor: AttachmentExtractor,
        storage_factory: Callable[[Path], AttachmentStorage] = AttachmentStorage,
    ) -> None:
        self.extractor = extractor
        self.storage_factory = storage_factory

    def run_cycle(self, session: MailSession, output_dir: Path) -> CycleResult:
        """
        Un ciclo completo: listar -> fetch masivo -> extraer -> escribir -> borrar + expunge.

        Cualquier excepción (parseo, disco, IMAP) aborta el ciclo sin borrar nada
        del servidor; lo ya escrito en disco se queda.
        """
        result = CycleResult()

        # 1) Listado
        uids = MessageSelector(session).list_pending()
        if not uids:
            logger.info("Sin correos en el buzón.")
            return result
        result.uids = uids
        logger.info("Procesando %d correos…", len(uids))

        # 2) Fetch masivo (una sola ida y vuelta)
        messages = sorted(session.fetch_bodies(uids), key=lambda m: m.uid)

        # 3) Adjuntos a disco
        storage = self.storage_factory(output_dir)
        for msg in messages:
            attachments = self.extractor.extract(msg.raw)
            logger.info("UID=%s: %d adjuntos", msg.uid, len(attachments))
            for filename, content in attachments.items():
                try:
                    fp = storage.save_bytes(filename, content)
                except UnsafeFilenameError as exc:
                    logger.warning("UID=%s: %s", msg.uid, exc)
                    result.skipped.append(filename)
                    continue
                result.saved.append(fp)

        # 4) Todo escrito: borrar el lote completo
        session.mark_deleted(uids)
        session.purge()
        logger.info("Borrados %d correos del servidor", len(uids))
        return result
