# application/services/message_selector.py
from __future__ import annotations
import logging

from domain.models import UID
from domain.ports import MailSession

logger = logging.getLogger(__name__)


class MessageSelector:
    def __init__(self, session: MailSession) -> None:
        self.session = session

    def list_pending(self) -> set[UID]:
        # NOOP primero: el servidor vuelca los EXISTS/EXPUNGE pendientes y el SEARCH es fiable
        self.session.refresh()
        uids = set(self.session.list_all_identifiers())
        logger.debug("UIDs en el buzón: %s", sorted(uids))
        return uids
