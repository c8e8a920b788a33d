import logging
import smtplib

from core.celery import celery_app
from core.config import settings

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_email_task(self, to_email: str, subject: str, body: str, html: str | None = None):
    """
    Send email asynchronously with Celery.
    Retries up to 3 times on failure.
    """
    # Imported lazily: services.email imports this module
    from services.email import build_message

    if settings.TESTING or not settings.SMTP_PASSWORD:
        logger.info("Email to %s skipped (subject=%r)", to_email, subject)
        return {"status": "skipped", "to": to_email}

    try:
        msg = build_message(to_email, subject, body, html)
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)

        return {"status": "sent", "to": to_email, "subject": subject}

    except Exception as exc:
        logger.warning("Failed to send email to %s (attempt %s)", to_email, self.request.retries + 1, exc_info=True)
        # Retry with exponential backoff
        countdown = min(2 ** self.request.retries, 60)  # Max 60 seconds
        raise self.retry(exc=exc, countdown=countdown)
