import smtplib

import pytest

from backend.app.utils import emailer
from backend.app.utils.emailer import SmtpDispatcher, build_message


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user))

    def send_message(self, msg):
        self.calls.append(("send", msg["To"], msg["Subject"]))


def test_build_message_has_text_html_and_pdf():
    msg = build_message("ana@example.com", "Informe", "hola", "<p>hola</p>",
                        [("report.pdf", b"%PDF-1.4 fake")], sender="Money Tracker <mt@example.com>")
    assert msg["To"] == "ana@example.com"
    assert msg["From"] == "Money Tracker <mt@example.com>"
    alt, pdf = msg.get_payload()
    assert [p.get_content_type() for p in alt.get_payload()] == ["text/plain", "text/html"]
    assert pdf.get_content_type() == "application/pdf"
    assert pdf.get_filename() == "report.pdf"
    assert pdf.get_payload(decode=True) == b"%PDF-1.4 fake"


def test_smtp_dispatcher_sends(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(emailer.smtplib, "SMTP", FakeSMTP)
    SmtpDispatcher(host="smtp.test", port=2525, user="mt", password="x").send(
        "ana@example.com", "Informe Semanal - Money Tracker", "texto", "<p>html</p>"
    )
    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.test", 2525)
    assert smtp.calls == ["starttls", ("login", "mt"), ("send", "ana@example.com", "Informe Semanal - Money Tracker")]


def test_smtp_dispatcher_without_tls_or_login(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(emailer.smtplib, "SMTP", FakeSMTP)
    SmtpDispatcher(host="localhost", port=25, user="", use_tls=False).send("a@b.c", "s", "t", "<p>h</p>")
    assert FakeSMTP.instances[0].calls == [("send", "a@b.c", "s")]


def test_smtp_errors_propagate(monkeypatch):
    def refuse(*args, **kwargs):
        raise smtplib.SMTPConnectError(421, "busy")

    monkeypatch.setattr(emailer.smtplib, "SMTP", refuse)
    with pytest.raises(smtplib.SMTPException):
        SmtpDispatcher(host="smtp.test", port=25).send("a@b.c", "s", "t", "<p>h</p>")
