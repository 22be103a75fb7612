"""
Email Infrastructure
====================

Async SMTP delivery with a circuit breaker.

Delivery is best-effort: `send` reports success as a boolean and never
raises, so request handlers and the escalation sweep can carry on when the
relay is down.
"""

import time
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from grievance_cell.config import settings
from grievance_cell.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState:
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """
    Circuit breaker for preventing cascade failures.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: After N failures, reject all requests for M seconds
    - HALF_OPEN: After timeout, allow one test request
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def state(self) -> str:
        """Get current circuit state."""
        if self._state == CircuitState.OPEN and self._last_failure_time:
            if time.monotonic() - self._last_failure_time >= self.recovery_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    def allow_request(self) -> bool:
        """Check if request should be allowed."""
        return self.state in (CircuitState.CLOSED, CircuitState.HALF_OPEN)

    def record_success(self) -> None:
        """Record successful request."""
        self._failure_count = 0
        self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Record failed request."""
        self._failure_count += 1
        self._last_failure_time = time.monotonic()

        if self._failure_count >= self.failure_threshold:
            self._state = CircuitState.OPEN
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "recovery_timeout": self.recovery_timeout
                }
            )


@dataclass
class EmailMessage:
    """Outgoing email."""
    to: str
    subject: str
    html: str


class SMTPEmailClient:
    """
    SMTP client using STARTTLS.

    Credentials come from settings (SMTP_EMAIL / SMTP_PASS); when they are
    missing every send is skipped and reported as failed.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_email
        self.password = password if password is not None else settings.smtp_pass
        self.from_name = from_name or settings.smtp_from_name
        self.timeout = timeout or settings.smtp_timeout_seconds
        self._circuit_breaker = CircuitBreaker(failure_threshold=5, recovery_timeout=60)

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = f'"{self.from_name}" <{self.username}>'
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.html, "html"))
        return mime

    async def send(self, message: EmailMessage) -> bool:
        """
        Send an email.

        Returns:
            True if the relay accepted the message, False otherwise
        """
        if not self.is_configured:
            logger.warning("SMTP not configured, skipping email", extra={"subject": message.subject})
            return False

        if not message.to:
            logger.warning("Email has no recipient, skipping", extra={"subject": message.subject})
            return False

        if not self._circuit_breaker.allow_request():
            logger.warning(
                "Circuit breaker open, skipping email",
                extra={"to": message.to, "subject": message.subject}
            )
            return False

        try:
            await aiosmtplib.send(
                self._build_mime(message),
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=True,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            self._circuit_breaker.record_failure()
            logger.error(
                "Email sending failed",
                extra={"to": message.to, "subject": message.subject, "error": str(e)}
            )
            return False

        self._circuit_breaker.record_success()
        logger.info("Email sent", extra={"to": message.to, "subject": message.subject})
        return True

    async def verify_connection(self) -> bool:
        """Check that the relay accepts our credentials."""
        if not self.is_configured:
            logger.warning("SMTP credentials not set; email notifications disabled")
            return False

        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            start_tls=True,
            timeout=self.timeout,
        )
        try:
            await smtp.connect()
            await smtp.login(self.username, self.password)
            await smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("SMTP connection failed", extra={"host": self.host, "error": str(e)})
            return False

        logger.info("SMTP server connected", extra={"host": self.host})
        return True
