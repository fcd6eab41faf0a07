# tests/test_intake_cycle.py
from email.mime.message import MIMEMessage
from email.mime.text import MIMEText

import pytest

from application.services.attachment_extractor import AttachmentExtractor
from application.use_cases.intake_cycle_usecase import IntakeCycleUseCase
from domain.errors import MailParseError
from infrastructure.email.mail_parser import PyzMailParser
from infrastructure.filesystem.storage import AttachmentStorage
from tests.factories import FakeSession, attachment, build_message, plain_message


class FailingStorage(AttachmentStorage):
    """Falla al escribir el adjunto número `fail_on` (1-based)."""

    def __init__(self, base, fail_on=2):
        super().__init__(base)
        self.fail_on = fail_on
        self.count = 0

    def save_bytes(self, name_hint, data):
        self.count += 1
        if self.count == self.fail_on:
            raise OSError("disco lleno")
        return super().save_bytes(name_hint, data)


@pytest.fixture
def usecase():
    return IntakeCycleUseCase(extractor=AttachmentExtractor(PyzMailParser()))


def test_empty_mailbox_short_circuits(usecase, fake_session, tmp_path):
    result = usecase.run_cycle(fake_session, tmp_path)

    assert fake_session.call_names() == ["refresh", "list"]
    assert result.uids == set()
    assert list(tmp_path.iterdir()) == []


def test_end_to_end_round_trip(usecase, tmp_path):
    pdf = b"%PDF-1.7\n" + bytes(range(256)) * 4
    session = FakeSession({
        10: plain_message(),
        11: build_message(MIMEText("adjunto la factura"), attachment(pdf, "invoice.pdf")),
    })

    result = usecase.run_cycle(session, tmp_path)

    assert [p.name for p in tmp_path.iterdir()] == ["invoice.pdf"]
    assert (tmp_path / "invoice.pdf").read_bytes() == pdf
    assert result.saved == [(tmp_path / "invoice.pdf").resolve()]
    assert session.messages == {}
    fetches = [c for c in session.calls if c[0] == "fetch"]
    assert fetches == [("fetch", {10, 11})]
    assert session.call_names()[-2:] == ["mark_deleted", "purge"]


def test_write_failure_blocks_deletion(tmp_path):
    uc = IntakeCycleUseCase(
        extractor=AttachmentExtractor(PyzMailParser()),
        storage_factory=lambda base: FailingStorage(base, fail_on=2),
    )
    session = FakeSession({
        1: build_message(
            attachment(b"uno", "1.txt"),
            attachment(b"dos", "2.txt"),
            attachment(b"tres", "3.txt"),
        ),
    })

    with pytest.raises(OSError):
        uc.run_cycle(session, tmp_path)

    assert "mark_deleted" not in session.call_names()
    assert "purge" not in session.call_names()
    assert (tmp_path / "1.txt").read_bytes() == b"uno"
    assert not (tmp_path / "3.txt").exists()
    assert 1 in session.messages


def test_parse_error_aborts_whole_cycle(usecase, tmp_path):
    session = FakeSession({
        1: build_message(attachment(b"ok", "bueno.txt")),
        2: b'Content-Type: multipart/mixed; boundary="XYZ"\r\n\r\nroto\r\n',
    })

    with pytest.raises(MailParseError):
        usecase.run_cycle(session, tmp_path)

    assert (tmp_path / "bueno.txt").exists()
    assert "mark_deleted" not in session.call_names()
    assert set(session.messages) == {1, 2}


def test_retried_cycle_keeps_earlier_files(usecase, tmp_path):
    (tmp_path / "bueno.txt").write_bytes(b"ok")
    session = FakeSession({1: build_message(attachment(b"ok", "bueno.txt"))})

    usecase.run_cycle(session, tmp_path)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["0-bueno.txt", "bueno.txt"]


def test_same_name_across_messages_gets_prefix(usecase, tmp_path):
    session = FakeSession({
        1: build_message(attachment(b"primero", "dup.csv")),
        2: build_message(attachment(b"segundo", "dup.csv")),
    })

    usecase.run_cycle(session, tmp_path)

    assert (tmp_path / "dup.csv").read_bytes() == b"primero"
    assert (tmp_path / "0-dup.csv").read_bytes() == b"segundo"


def test_unsafe_filename_is_skipped_not_fatal(usecase, tmp_path):
    session = FakeSession({
        1: build_message(attachment(b"malo", "../evil.sh"), attachment(b"bueno", "ok.txt")),
    })

    result = usecase.run_cycle(session, tmp_path)

    assert result.skipped == ["../evil.sh"]
    assert [p.name for p in tmp_path.iterdir()] == ["ok.txt"]
    assert not (tmp_path.parent / "evil.sh").exists()
    assert session.messages == {}


def test_forwarded_message_is_saved_with_content(usecase, tmp_path):
    fwd = MIMEMessage(MIMEText("cuerpo reenviado"))
    fwd.add_header("Content-Disposition", "attachment", filename="fwd.eml")
    session = FakeSession({1: build_message(MIMEText("te reenvío"), fwd)})

    usecase.run_cycle(session, tmp_path)

    assert b"cuerpo reenviado" in (tmp_path / "fwd.eml").read_bytes()
    assert session.messages == {}


def test_raw_utf8_filename_is_kept(usecase, tmp_path):
    raw = (
        b'Content-Type: multipart/mixed; boundary="B"\r\n\r\n'
        b"--B\r\n"
        b'Content-Disposition: attachment; filename="factura \xc3\xb1.pdf"\r\n\r\n'
        b"%PDF\r\n"
        b"--B--\r\n"
    )
    session = FakeSession({1: raw})

    usecase.run_cycle(session, tmp_path)

    assert [p.name for p in tmp_path.iterdir()] == ["factura ñ.pdf"]
