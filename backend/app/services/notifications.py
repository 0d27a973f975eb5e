import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urlencode

from ..core.config import get_settings
from ..core.enums import UserRole

logger = logging.getLogger(__name__)


def send_invitation_email(email: str, role: UserRole, inviter: str = "An administrator") -> None:
    """Runs as a background task, so it takes plain values instead of ORM rows."""
    app_name = get_settings().app_name
    if role == UserRole.USER:
        subject = f"You're invited to start training with {app_name}"
        body = f"Hi!\n\n{inviter} invited you to join {app_name}.\n"
    else:
        subject = f"You're invited to help run {app_name}"
        role_label = role.value.replace("_", " ").lower()
        body = f"Hi!\n\n{inviter} invited you to join {app_name} as {role_label}.\n"
    body += "Sign up with this email address to accept the invitation.\n\n"
    cta = _build_cta_url("/sign-up", {"email": email, "role": role.value})
    if cta:
        body += f"Get started here: {cta}\n"
    _send_email(recipient=email, subject=subject, body=body)


def _build_cta_url(path: str, params: dict[str, str]) -> str | None:
    base_url = get_settings().app_base_url
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}{path}?{urlencode(params)}"


def _send_email(recipient: str, subject: str, body: str) -> None:
    settings = get_settings()
    if not settings.smtp_host or not settings.email_sender:
        logger.warning("SMTP not configured, skipping email to %s", recipient)
        return

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = settings.email_sender
    message["To"] = recipient
    message.set_content(body)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as smtp:
            if settings.smtp_starttls:
                smtp.starttls()
            if settings.smtp_username and settings.smtp_password:
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(message)
    except Exception as exc:  # pragma: no cover - network failures
        logger.error("Failed to send email to %s: %s", recipient, exc)
