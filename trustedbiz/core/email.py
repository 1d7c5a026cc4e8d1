import logging

import requests

from trustedbiz.core.config import settings

logger = logging.getLogger("trustedbiz")

RESEND_URL = "https://api.resend.com/emails"


def notifications_enabled() -> bool:
    return bool(
        settings.RESEND_API_KEY
        and settings.RESEND_FROM_EMAIL
        and settings.ADMIN_NOTIFICATION_EMAIL
    )


def send_review_pending_email(business_name: str, rating: int, reviewer_name: str | None):
    payload = {
        "from": settings.RESEND_FROM_EMAIL,
        "to": [settings.ADMIN_NOTIFICATION_EMAIL],
        "subject": f"New review waiting for approval: {business_name}",
        "text": f"""
Hi,

A new {rating}-star review for {business_name} was submitted by {reviewer_name or "an anonymous visitor"}.

It is waiting in the moderation queue.

The Trusted Businesses team
""",
    }

    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    response = requests.post(RESEND_URL, json=payload, headers=headers, timeout=10)

    if response.status_code >= 400:
        raise Exception(f"Email sending failed: {response.text}")


def notify_admin_of_pending_review(business_name: str, rating: int, reviewer_name: str | None):
    """Background task: runs after the response has been sent."""
    if not notifications_enabled():
        return

    try:
        send_review_pending_email(business_name, rating, reviewer_name)
    except Exception:
        logger.exception(f"Review notification email failed for {business_name}")
