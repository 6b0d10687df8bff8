"""
Outbound email.

No mail provider is wired up; messages are written to the log so the
verification flow can be exercised end to end in development.
"""
import logging

from fitness_gh.core.config import EMAIL_FROM, OTP_TTL_SECONDS

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, body: str) -> bool:
    logger.info(f"[email] from={EMAIL_FROM} to={to} subject={subject!r}")
    logger.debug(f"[email] body for {to}: {body}")
    return True


def send_otp_email(to: str, otp: str) -> bool:
    minutes = OTP_TTL_SECONDS // 60
    body = (
        f"Your Fitness GH verification code is {otp}.\n"
        f"It expires in {minutes} minutes. If you did not request it, ignore this email."
    )
    return send_email(to, "Verify your email", body)


def send_welcome_email(to: str, name: str) -> bool:
    body = f"Hi {name}, welcome to Fitness GH. Verify your email to start booking gyms."
    return send_email(to, "Welcome to Fitness GH", body)
