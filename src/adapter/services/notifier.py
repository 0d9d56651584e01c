import asyncio
import logging
import smtplib
from email.message import EmailMessage

from src.app.services.notifier import Notifier, OutgoingEmail
from src.domain.exceptions import DeliveryFailed

logger = logging.getLogger(__name__)


class SmtpNotifier(Notifier):
    """
    Delivers mail through an SMTP relay (SendGrid by default).

    smtplib is blocking, so each send runs in a worker thread and the
    event loop keeps serving other requests meanwhile.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _build_message(self, email: OutgoingEmail) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = email.to
        message["Subject"] = email.subject
        message.set_content(email.body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(message)

    async def send(self, email: OutgoingEmail) -> None:
        message = self._build_message(email)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryFailed(f"SMTP delivery to {self.host}:{self.port} failed") from exc
        logger.info(f"Sent '{email.subject}' to {email.to}")


class LogNotifier(Notifier):
    """Development notifier: writes the message to the log instead of sending it"""

    def __init__(self, sender: str):
        self.sender = sender

    async def send(self, email: OutgoingEmail) -> None:
        logger.info(
            f"[DEV MAIL] from={self.sender} to={email.to} subject={email.subject!r}\n{email.body}"
        )
