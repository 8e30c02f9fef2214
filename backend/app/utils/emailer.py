# backend/app/utils/emailer.py
import smtplib, ssl, logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.mime.base import MIMEBase
from email import encoders
from typing import Protocol, Sequence, Tuple

from backend.app.settings import (
    EMAIL_HOST, EMAIL_PORT, EMAIL_USER, EMAIL_PASSWORD, EMAIL_FROM, EMAIL_SENDER_NAME,
    EMAIL_USE_TLS, EMAIL_TIMEOUT,
)

log = logging.getLogger("emailer")

# (nombre de fichero, bytes del PDF)
Attachment = Tuple[str, bytes]


class MailDispatcher(Protocol):
    def send(self, to: str, subject: str, text: str, html: str,
             attachments: Sequence[Attachment] = ()) -> None: ...


def build_message(to_email: str, subject: str, text_body: str, html_body: str,
                  attachments: Sequence[Attachment] = (), sender: str = None) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["From"] = sender or f"{EMAIL_SENDER_NAME} <{EMAIL_FROM}>"
    msg["To"] = to_email
    msg["Subject"] = subject

    # Alternativa texto / HTML
    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(text_body, "plain", "utf-8"))
    alt.attach(MIMEText(html_body, "html", "utf-8"))
    msg.attach(alt)

    # PDF adjunto
    for filename, payload in attachments:
        part = MIMEBase("application", "pdf")
        part.set_payload(payload)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", f'attachment; filename="{filename}"')
        msg.attach(part)
        log.debug("[emailer] PDF adjunto: %s (%d bytes)", filename, len(payload))
    return msg


class SmtpDispatcher:
    def __init__(self, host=EMAIL_HOST, port=EMAIL_PORT, user=EMAIL_USER, password=EMAIL_PASSWORD,
                 use_tls=EMAIL_USE_TLS, timeout=EMAIL_TIMEOUT):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to, subject, text, html, attachments=()):
        log.info("[emailer] Preparando email → to=%s subject=%s host=%s port=%s user=%s",
                 to, subject, self.host, self.port, self.user)
        msg = build_message(to, subject, text, html, attachments)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                log.info("[emailer] Conectando a SMTP...")
                if self.use_tls:
                    smtp.starttls(context=ssl.create_default_context())
                    log.info("[emailer] TLS OK")
                if self.user:
                    log.info("[emailer] Autenticando como %s ...", self.user)
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
                log.info("[emailer] Email enviado correctamente a %s", to)
        except (smtplib.SMTPException, OSError) as e:
            log.exception("[emailer] Error enviando el email a %s: %s", to, e)
            raise
