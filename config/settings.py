# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class Settings:
    # IMAP (STARTTLS en 143 por defecto; IMAP_SSL=true para 993). IMAP_PORT=0 -> puerto según IMAP_SSL
    IMAP_HOST: str = os.getenv("IMAP_HOST", "")
    IMAP_PORT: int = int(os.getenv("IMAP_PORT", 0))
    IMAP_USERNAME: str = os.getenv("IMAP_USERNAME", "")
    IMAP_PASSWORD: str = os.getenv("IMAP_PASSWORD", "")
    IMAP_SSL: bool = os.getenv("IMAP_SSL", "false").lower() == "true"
    IMAP_STARTTLS: bool = os.getenv("IMAP_STARTTLS", "true").lower() == "true"
    IMAP_FOLDER_INBOX: str = os.getenv("IMAP_FOLDER_INBOX", "INBOX")

    # Adjuntos
    OUTPUT_DIR: str = os.getenv("OUTPUT_DIR", ".")

    # IDLE: el RFC 2177 pide renovar antes de 29 min
    IDLE_TIMEOUT: int = int(os.getenv("IDLE_TIMEOUT", 1500))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ───────── helpers ─────────
    def imap_port(self) -> int:
        if self.IMAP_PORT:
            return self.IMAP_PORT
        return 993 if self.IMAP_SSL else 143

    def output_dir_path(self) -> Path:
        return Path(self.OUTPUT_DIR).resolve()

    def missing_credentials(self) -> list[str]:
        fields = {
            "IMAP_HOST": self.IMAP_HOST,
            "IMAP_USERNAME": self.IMAP_USERNAME,
            "IMAP_PASSWORD": self.IMAP_PASSWORD,
        }
        return [name for name, value in fields.items() if not value]
