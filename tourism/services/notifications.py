"""Outbound notifications (email)"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from html import escape
from typing import Protocol

import structlog

from tourism.config import settings
from tourism.models.reservation import Reservation

logger = structlog.get_logger()


class Notifier(Protocol):
    """Delivers a message to a single recipient; returns False on failure"""

    async def send(self, recipient: str, subject: str, body_html: str) -> bool:
        ...


class SmtpNotifier:
    """HTML email over SMTP"""

    def __init__(
        self,
        host: str = settings.smtp_host,
        port: int = settings.smtp_port,
        username: str = settings.smtp_username,
        password: str = settings.smtp_password,
        use_ssl: bool = settings.smtp_use_ssl,
        sender: str = settings.mail_from,
        sender_name: str = settings.mail_from_name,
        timeout: int = settings.smtp_timeout_seconds,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.sender = sender
        self.sender_name = sender_name
        self.timeout = timeout

    def _build_message(self, recipient: str, subject: str, body_html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["From"] = formataddr((self.sender_name, self.sender))
        message["To"] = recipient
        message["Subject"] = subject
        message.attach(MIMEText(body_html, "html", "utf-8"))
        return message

    def _deliver(self, recipient: str, message: MIMEMultipart) -> None:
        if self.use_ssl:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            if not self.use_ssl:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.sender, [recipient], message.as_string())

    async def send(self, recipient: str, subject: str, body_html: str) -> bool:
        message = self._build_message(recipient, subject, body_html)
        try:
            await asyncio.to_thread(self._deliver, recipient, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email", recipient=recipient, error=str(e))
            return False

        logger.info("Email sent", recipient=recipient, subject=subject)
        return True


def reminder_subject(reservation: Reservation) -> str:
    return f"Reminder: your reservation {reservation.reservation_code} is in {settings.reminder_days_before} days"


def render_reminder_email(reservation: Reservation) -> str:
    """HTML body of the upcoming-reservation reminder"""
    place_name = reservation.place.name if reservation.place else ""
    end_row = ""
    if reservation.end_date:
        end_row = f"<p><strong>End date:</strong> {reservation.end_date:%d/%m/%Y}</p>"

    return f"""
<html>
  <body style="font-family: Arial, sans-serif;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #00695c;">Your trip is almost here!</h2>
      <p>Hello {escape(reservation.client_name)},</p>
      <p>This is a reminder that your reservation starts in
         <strong>{settings.reminder_days_before} days</strong>.</p>
      <div style="background: #f8f9fa; padding: 20px; border-radius: 10px; margin: 20px 0;">
        <h3 style="color: #00695c; margin-top: 0;">Reservation details</h3>
        <p><strong>Code:</strong> {escape(reservation.reservation_code)}</p>
        <p><strong>Place:</strong> {escape(place_name)}</p>
        <p><strong>Start date:</strong> {reservation.start_date:%d/%m/%Y}</p>
        {end_row}
        <p><strong>Guests:</strong> {reservation.party_size}</p>
        <p><strong>Total:</strong> {reservation.total_amount:,.2f}</p>
      </div>
      <p style="color: #666; font-size: 12px;">
        {escape(settings.mail_from_name)}<br>
        This is an automated message, please do not reply.
      </p>
    </div>
  </body>
</html>
"""


def get_notifier() -> Notifier:
    """FastAPI dependency for the outbound notifier"""
    return SmtpNotifier()
