import os
import logging
import smtplib
from email.message import EmailMessage
from typing import Dict, Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import settings
from tasks.email_tasks import send_email_task

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

# Jinja2 environment for email and alert templates; plain-text templates render unescaped
_templates_env = Environment(
    loader=FileSystemLoader(searchpath=TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def send_email(to_email: str, subject: str, body: str, html: Optional[str] = None) -> bool:
    """
    Queue an email on Celery, falling back to direct SMTP when the broker is unreachable.
    Returns False only when the message could not be handed off at all.
    """
    if settings.EMAIL_USE_CELERY:
        try:
            send_email_task.delay(to_email, subject, body, html)
            logger.info("Email task queued for %s", to_email)
            return True
        except Exception:
            logger.warning("Celery not available, falling back to direct email sending", exc_info=True)

    return _send_email_direct(to_email, subject, body, html)


def build_message(to_email: str, subject: str, body: str, html: Optional[str] = None) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM or settings.SMTP_USERNAME
    msg["To"] = to_email
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")
    return msg


def render_template(template_path: str, context: Dict[str, Any]) -> str:
    """Render a template from the templates/ directory with provided context."""
    template = _templates_env.get_template(template_path)
    return template.render(**context)


def send_templated_email(
    to_email: str,
    subject: str,
    template_path: str,
    context: Dict[str, Any],
    html_template_path: Optional[str] = None,
) -> bool:
    """Render text (and optional HTML) templates and send through send_email."""
    body = render_template(template_path, context)
    html = render_template(html_template_path, context) if html_template_path else None
    return send_email(to_email, subject, body, html)


def _send_email_direct(to_email: str, subject: str, body: str, html: Optional[str] = None) -> bool:
    if not settings.SMTP_PASSWORD:
        logger.info("SMTP not configured; email to %s not sent (subject=%r)", to_email, subject)
        return False

    try:
        msg = build_message(to_email, subject, body, html)
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
    except Exception:
        logger.exception("Email sending failed for %s", to_email)
        return False

    logger.info("Email sent to %s", to_email)
    return True
