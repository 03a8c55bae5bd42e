import smtplib
import uuid
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, select_autoescape
from starlette.concurrency import run_in_threadpool

from core.config import (
    BRAND_NAME,
    MAIL_FROM,
    NOTIFY_TO,
    SMTP_HOST,
    SMTP_PASS,
    SMTP_PORT,
    SMTP_STARTTLS,
    SMTP_TIMEOUT_SEC,
    SMTP_USER,
    TEMPLATES_DIR,
    logger,
)
from core.errors import NotificationError

# Jinja env; autoescape keeps user-supplied values inert in the HTML body
_jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def is_safe_href(url: str) -> bool:
    try:
        return urlparse((url or "").strip()).scheme.lower() in ("http", "https")
    except ValueError:
        return False


_jinja_env.tests["safe_href"] = is_safe_href


def render_email(template_name: str, **context) -> str:
    base = {"brand_name": BRAND_NAME}
    base.update(context or {})
    return _jinja_env.get_template(template_name).render(**base)


class SmtpRelay:
    """Connection settings for the outbound mail relay."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        user: str = SMTP_USER,
        password: str = SMTP_PASS,
        starttls: bool = SMTP_STARTTLS,
        timeout: float = SMTP_TIMEOUT_SEC,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.host)

    def send(self, sender: str, to_addr: str, subject: str, html: str, text: Optional[str] = None) -> None:
        domain = sender.split("@")[-1].strip(">") if "@" in sender else "localhost"
        msg = MIMEMultipart("alternative")
        # Header values must stay on one line
        msg["Subject"] = " ".join((subject or "").split())
        msg["From"] = sender
        recipient = "".join((to_addr or "").split())
        msg["To"] = recipient
        msg["Message-ID"] = f"<{uuid.uuid4()}@{domain}>"
        msg["Date"] = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")
        if not text:
            text = "Open this message in an HTML-capable email client."
        msg.attach(MIMEText(text, "plain", _charset="utf-8"))
        msg.attach(MIMEText(html or "", "html", _charset="utf-8"))

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.starttls:
                    server.starttls()
                if self.user or self.password:
                    server.login(self.user, self.password)
                server.sendmail(sender, [recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as ex:
            logger.exception(f"[email] SMTP send failed to={to_addr}: {ex}")
            raise NotificationError(f"Failed to send email to {to_addr}: {ex}", ex) from ex


class Notifier:
    """Sends the internal notification and the optional customer acknowledgment."""

    def __init__(
        self,
        relay: Optional[SmtpRelay] = None,
        mail_from: str = MAIL_FROM,
        notify_to: str = NOTIFY_TO,
        brand_name: str = BRAND_NAME,
    ):
        self.relay = relay if relay is not None else SmtpRelay()
        self.mail_from = mail_from or self.relay.user
        self.notify_to = notify_to or self.relay.user
        self.brand_name = brand_name

    @property
    def enabled(self) -> bool:
        return self.relay.configured

    async def notify_internal(self, submission: Dict[str, Any]) -> None:
        if not self.enabled:
            return
        if not self.notify_to:
            raise NotificationError("No internal recipient configured (NOTIFY_TO / SMTP_USER)")
        name = submission.get("name") or ""
        links: List[str] = list(submission.get("product_links") or [])
        images: List[str] = list(submission.get("image_urls") or [])
        html = render_email(
            "submission_internal.html",
            name=name,
            contact=submission.get("contact") or "",
            email=submission.get("email") or "",
            links=links,
            images=images,
        )
        text = "\n".join([
            f"Name: {name}",
            f"Contact: {submission.get('contact') or ''}",
            f"Email: {submission.get('email') or 'N/A'}",
            "Links:",
            *[f"- {l}" for l in links],
            "Images:",
            *[f"- {u}" for u in images],
        ])
        subject = f"New product submission from {name}"
        logger.info(f"[email] internal notification to={self.notify_to}")
        await run_in_threadpool(self.relay.send, self.mail_from, self.notify_to, subject, html, text)

    async def notify_customer(self, submission: Dict[str, Any]) -> None:
        if not self.enabled:
            return
        email = (submission.get("email") or "").strip()
        if not email:
            return
        name = submission.get("name") or ""
        html = render_email("submission_thanks.html", name=name, brand_name=self.brand_name)
        text = (
            f"Dear {name},\n\n"
            f"Thank you for submitting your product details to {self.brand_name}.\n"
            f"We're excited to offer you a 20% discount on your next purchase!\n"
            f"Our team will contact you shortly.\n\n"
            f"Best regards,\n{self.brand_name} Team\n"
        )
        subject = f"Thank You for Your Submission - {self.brand_name}"
        logger.info(f"[email] customer acknowledgment to={email}")
        await run_in_threadpool(self.relay.send, self.mail_from, email, subject, html, text)
