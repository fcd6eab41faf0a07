# main.py
# Punto de entrada: IDLE IMAP -> guarda adjuntos -> borra correos
from __future__ import annotations
import argparse
import dataclasses
import logging
import sys
from config.settings import Settings
from domain.errors import ConfigurationError
from infrastructure.email.imap_client import connect
from interface_adapters.controllers.polling_controller import PollingController

logger = logging.getLogger(__name__)


def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Descarga adjuntos de un buzón IMAP y borra los correos procesados.")
    p.add_argument("-s", "--server", default=defaults.IMAP_HOST)
    p.add_argument("-u", "--username", default=defaults.IMAP_USERNAME)
    p.add_argument("-p", "--password", default=defaults.IMAP_PASSWORD)
    p.add_argument("-m", "--mailbox", default=defaults.IMAP_FOLDER_INBOX)
    p.add_argument("-o", "--output-dir", default=defaults.OUTPUT_DIR)
    p.add_argument("--port", type=int, default=defaults.IMAP_PORT, help="por defecto 143, o 993 con --ssl")
    p.add_argument("--ssl", action="store_true", default=defaults.IMAP_SSL, help="IMAP sobre TLS implícito (993)")
    p.add_argument("--no-starttls", dest="starttls", action="store_false", default=defaults.IMAP_STARTTLS)
    p.add_argument("--idle-timeout", type=int, default=defaults.IDLE_TIMEOUT)
    p.add_argument("--log-level", default=defaults.LOG_LEVEL)
    return p


def load_settings(argv: list[str] | None = None) -> Settings:
    defaults = Settings()
    args = build_parser(defaults).parse_args(argv)
    settings = dataclasses.replace(
        defaults,
        IMAP_HOST=args.server,
        IMAP_USERNAME=args.username,
        IMAP_PASSWORD=args.password,
        IMAP_FOLDER_INBOX=args.mailbox,
        OUTPUT_DIR=args.output_dir,
        IMAP_PORT=args.port,
        IMAP_SSL=args.ssl,
        IMAP_STARTTLS=args.starttls,
        IDLE_TIMEOUT=args.idle_timeout,
        LOG_LEVEL=args.log_level.upper(),
    )
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationError(f"Faltan parámetros: {', '.join(missing)}")
    return settings


def main(argv: list[str] | None = None) -> int:
    settings = load_settings(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    logger.info("=== Mail Attachment Collector ===")
    logger.info("IMAP host=%s inbox=%s output=%s", settings.IMAP_HOST, settings.IMAP_FOLDER_INBOX, settings.output_dir_path())
    try:
        with connect(settings) as session:
            PollingController(settings=settings, session=session).run_forever()
    except KeyboardInterrupt:
        logger.info("Parada solicitada")
        return 0
    except Exception:
        logger.exception("Error fatal; saliendo")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
