"""SMTP email adapter."""

import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Callable, List, Literal, Optional

from pydantic import EmailStr, Field, TypeAdapter, ValidationError

from infrastructure.logging import redact_text
from infrastructure.notifications.channels.base import (
    ChannelAdapter,
    ProviderConfig,
    SendOptions,
)
from infrastructure.notifications.errors import DeliveryError, PermanentDeliveryError
from infrastructure.notifications.models import DeliveryResult, NotificationProvider
from infrastructure.operations import classify_smtp_error

_email_adapter = TypeAdapter(EmailStr)


def is_email_address(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


class SmtpConfig(ProviderConfig):
    """SMTP server configuration.

    Attributes:
        host: SMTP server hostname
        port: SMTP server port (587 for STARTTLS, 465 for implicit TLS)
        username: Authentication username
        password: Authentication password (encrypted at rest)
        encryption: none, ssl (implicit TLS), tls or starttls
        from_name: Optional sender display name
        from_address: Sender address
        timeout_seconds: Socket timeout for the SMTP session
        recipients: Default recipients for event notifications
    """

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    encryption: Literal["none", "ssl", "tls", "starttls"] = "starttls"
    from_name: Optional[str] = None
    from_address: EmailStr
    timeout_seconds: float = Field(default=10.0, gt=0)
    recipients: List[EmailStr] = Field(default_factory=list)

    @property
    def implicit_tls(self) -> bool:
        return self.encryption == "ssl" or self.port == 465

    @property
    def starttls(self) -> bool:
        return not self.implicit_tls and self.encryption in ("tls", "starttls")

    @property
    def sender(self) -> str:
        return formataddr((self.from_name or "", str(self.from_address)))

    @property
    def default_recipient(self) -> str:
        """Self-test recipient: the login when it is an address, else the sender."""
        if is_email_address(self.username):
            return self.username
        return str(self.from_address)


class SmtpAdapter(ChannelAdapter):
    """Email delivery over SMTP using ``smtplib``.

    Every exchange opens a fresh session (connect, optional TLS, login),
    so no connection state is shared between concurrent deliveries.
    """

    provider = NotificationProvider.SMTP
    config_model = SmtpConfig

    def __init__(
        self,
        *args,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        smtp_ssl_factory: Callable[..., smtplib.SMTP_SSL] = smtplib.SMTP_SSL,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self._smtp_factory = smtp_factory
        self._smtp_ssl_factory = smtp_ssl_factory

    @property
    def display_name(self) -> str:
        return "SMTP"

    def _connect(self, config: SmtpConfig) -> smtplib.SMTP:
        if config.implicit_tls:
            client = self._smtp_ssl_factory(
                config.host,
                config.port,
                timeout=config.timeout_seconds,
                context=ssl.create_default_context(),
            )
        else:
            client = self._smtp_factory(
                config.host, config.port, timeout=config.timeout_seconds
            )
        try:
            if config.starttls:
                client.starttls(context=ssl.create_default_context())
            client.login(config.username, config.password)
        except Exception:
            client.close()
            raise
        return client

    def _build_message(
        self, message: str, options: SendOptions, config: SmtpConfig, to: List[str]
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = options.subject
        msg["From"] = config.sender
        msg["To"] = ", ".join(to)
        msg["Message-ID"] = make_msgid()
        msg.attach(MIMEText(message, "plain", "utf-8"))
        if options.html:
            msg.attach(MIMEText(options.html, "html", "utf-8"))
        return msg

    def default_recipients(self, config: SmtpConfig) -> List[str]:
        return [str(r) for r in config.recipients] or [config.default_recipient]

    def _deliver(
        self, message: str, options: SendOptions, config: SmtpConfig
    ) -> DeliveryResult:
        to = options.to or [str(r) for r in config.recipients]
        if not to:
            raise PermanentDeliveryError(
                'Missing "to" parameter', error_code="MISSING_RECIPIENT"
            )

        msg = self._build_message(message, options, config, to)
        self.log.info(
            "smtp_send_started",
            host=config.host,
            port=config.port,
            recipient_count=len(to),
        )

        def attempt() -> None:
            try:
                client = self._connect(config)
                try:
                    client.send_message(
                        msg, from_addr=str(config.from_address), to_addrs=to
                    )
                finally:
                    self._close(client)
            except (smtplib.SMTPException, OSError) as e:
                raise DeliveryError.from_result(classify_smtp_error(e)) from e

        self._with_retry(attempt, "smtp_send")
        return DeliveryResult.ok("Email sent successfully", recipients=to)

    def _close(self, client: smtplib.SMTP) -> None:
        """End the session; a failed QUIT never fails the delivery."""
        try:
            client.quit()
        except (smtplib.SMTPException, OSError) as e:
            self.log.warning("smtp_quit_failed", error=redact_text(e))
            client.close()

    def verify(self, config: SmtpConfig) -> None:
        """Open an authenticated session and issue NOOP.

        Raises:
            DeliveryError: If the server cannot be reached or rejects the login.
        """

        def attempt() -> None:
            try:
                client = self._connect(config)
                try:
                    client.noop()
                finally:
                    self._close(client)
            except (smtplib.SMTPException, OSError) as e:
                raise DeliveryError.from_result(classify_smtp_error(e)) from e

        self._with_retry(attempt, "smtp_verify")

    def _run_test(self, config: SmtpConfig, recipient: Optional[str]) -> DeliveryResult:
        test_recipient = recipient or config.default_recipient
        try:
            self.verify(config)
        except DeliveryError as e:
            error = redact_text(e)
            self.log.error("smtp_test_failed", error=error, error_code=e.error_code)
            return DeliveryResult.failure(
                "SMTP test failed",
                error,
                error_code=e.error_code,
                retryable=e.retryable,
            )

        result = self.send(
            self._test_message(),
            SendOptions(
                config=config.model_dump(by_alias=True, mode="json"),
                to=[test_recipient],
                subject=f"{self.settings.instance_name} SMTP Test",
            ),
        )
        if not result.success:
            return result
        self.log.info("smtp_test_succeeded")
        return DeliveryResult.ok(
            f"SMTP configuration is valid. Test email sent to {test_recipient}",
            recipients=[test_recipient],
        )
