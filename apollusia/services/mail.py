"""Mail delivery over SMTP."""
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, parseaddr
from typing import Any, Dict

from apollusia.core import config
from apollusia.core.logging_config import get_logger
from apollusia.services.mail_templates import render_template

logger = get_logger(__name__)


class MailService:
    def build_message(self, name: str, address: str, subject: str, html_content: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = f"{subject} | Apollusia"
        msg["From"] = config.settings.MAIL_FROM
        msg["To"] = formataddr((name, address))
        msg.attach(MIMEText(html_content, "html", "utf-8"))
        return msg

    def send_mail(self, name: str, address: str, subject: str, template: str, context: Dict[str, Any]) -> None:
        """Render a template and deliver it.

        Raises on delivery errors; callers submit this through the
        notification queue, which logs and drops failures.
        """
        html_content = render_template(template, context)
        settings = config.settings

        if not settings.SMTP_HOST:
            logger.info("mail_skipped", template=template, subject=subject, reason="SMTP_HOST not configured")
            return

        msg = self.build_message(name, address, subject, html_content)
        sender = parseaddr(settings.MAIL_FROM)[1]

        if settings.SMTP_PORT == 465:
            context_ssl = ssl.create_default_context()
            server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context_ssl, timeout=30)
        else:
            server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
            if settings.SMTP_USE_TLS:
                server.starttls(context=ssl.create_default_context())

        try:
            if settings.SMTP_USERNAME:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
            server.sendmail(sender, [address], msg.as_string())
        finally:
            server.quit()

        logger.info("mail_sent", template=template, subject=subject)


mail_service = MailService()
