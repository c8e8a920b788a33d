#!/usr/bin/env python3
"""
Start the worker that delivers order confirmation emails.

    python celery_worker.py

Consumes only the email queue; the API keeps running if this process is down
because ``services.email.send_email`` falls back to direct SMTP.
"""

from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    from core.celery import EMAIL_QUEUE, celery_app
    from core.config import settings

    celery_app.start([
        "worker",
        f"--loglevel={settings.LOG_LEVEL.lower()}",
        f"--queues={EMAIL_QUEUE}",
        "--concurrency=2",
        "--hostname=emails@%h",
        "--without-gossip",
        "--without-mingle",
    ])
