# interface_adapters/controllers/polling_controller.py
from __future__ import annotations
import logging

from application.services.attachment_extractor import AttachmentExtractor
from application.use_cases.intake_cycle_usecase import IntakeCycleUseCase
from config.settings import Settings
from domain.errors import ConfigurationError
from domain.models import CycleResult
from domain.ports import MailSession
from infrastructure.email.mail_parser import PyzMailParser

logger = logging.getLogger(__name__)

class PollingController:
    def __init__(
        self,
        settings: Settings,
        session: MailSession,
        usecase: IntakeCycleUseCase | None = None,
    ) -> None:
        self.settings = settings
        self.session = session
        self.uc = usecase or IntakeCycleUseCase(extractor=AttachmentExtractor(PyzMailParser()))

    # ───────────────────────── arranque ─────────────────────────
    def startup(self) -> None:
        """
        Sin UIDVALIDITY los UIDs no son fiables y sin IDLE no hay espera:
        ambos casos abortan antes de entrar en el bucle.
        """
        st = self.settings
        validity = self.session.select(st.IMAP_FOLDER_INBOX)
        if validity is None:
            raise ConfigurationError(f"El buzón {st.IMAP_FOLDER_INBOX!r} no devuelve UIDVALIDITY")
        if not self.session.supports_idle():
            raise ConfigurationError("El servidor no anuncia la capacidad IDLE")
        st.output_dir_path().mkdir(parents=True, exist_ok=True)

    # ───────────────────────── ejecución ─────────────────────────
    def run_once(self) -> CycleResult:
        return self.uc.run_cycle(self.session, self.settings.output_dir_path())

    def run_forever(self, max_cycles: int | None = None) -> None:
        self.startup()
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            result = self.run_once()
            cycles += 1
            if result.skipped:
                logger.warning("Adjuntos descartados en el ciclo: %s", result.skipped)
            self.session.wait_for_activity(self.settings.IDLE_TIMEOUT)
