"""Outbound email.

``EMAIL_BACKEND=console`` logs messages instead of sending them; ``smtp``
delivers through the configured server.
"""
import smtplib
import logging
from email.message import EmailMessage
from hercycle.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


def send_email(to_email: str, subject: str, body: str, html: str | None = None) -> bool:
    if settings.EMAIL_BACKEND == "console":
        logger.info("Email to %s: %s\n%s", to_email, subject, body)
        return True

    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASSWORD

    if not smtp_user or not smtp_pass:
        raise EmailDeliveryError("SMTP credentials not configured (SMTP_USER / SMTP_PASSWORD)")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f"{settings.SENDER_NAME} <{smtp_user}>"
    msg["To"] = to_email
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(smtp_host, smtp_port, timeout=10) as server:
            server.ehlo()
            if smtp_port == 587:
                server.starttls()
                server.ehlo()
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError) as exc:
        logger.exception("Failed to send email to %s", to_email)
        raise EmailDeliveryError(str(exc)) from exc


def _signature() -> str:
    return f"Best regards,\n{settings.SENDER_NAME}"


def send_doctor_approval_email(to_email: str, full_name: str, notes: str | None = None) -> bool:
    subject = f"Your {settings.APP_NAME} doctor account has been approved"
    body = (
        f"Dear Dr. {full_name},\n\n"
        f"Your credentials have been verified and your {settings.APP_NAME} doctor account is now active.\n"
        "You can log in and start publishing articles for our community.\n\n"
    )
    if notes:
        body += f"Reviewer notes: {notes}\n\n"
    body += _signature()
    html = (
        f"<p>Dear Dr. {full_name},</p>"
        f"<p>Your credentials have been verified and your {settings.APP_NAME} doctor account is now "
        "<strong>active</strong>.</p>"
        + (f"<p>Reviewer notes: {notes}</p>" if notes else "")
        + f"<p>Best regards,<br/>{settings.SENDER_NAME}</p>"
    )
    return send_email(to_email, subject, body, html)


def send_doctor_rejection_email(to_email: str, full_name: str, reason: str, notes: str | None = None) -> bool:
    subject = f"Update on your {settings.APP_NAME} doctor verification"
    body = (
        f"Dear Dr. {full_name},\n\n"
        "We were unable to verify your credentials at this time.\n\n"
        f"Reason: {reason}\n\n"
    )
    if notes:
        body += f"Additional notes: {notes}\n\n"
    body += (
        "You may upload a new license document and resubmit your application.\n"
        f"Questions? Contact {settings.SUPPORT_EMAIL}.\n\n"
        + _signature()
    )
    return send_email(to_email, subject, body)


def send_doctor_revocation_email(to_email: str, full_name: str, reason: str) -> bool:
    subject = f"Your {settings.APP_NAME} doctor verification has been revoked"
    body = (
        f"Dear Dr. {full_name},\n\n"
        "An administrator has revoked the verification of your doctor account.\n\n"
        f"Reason: {reason}\n\n"
        "Doctor features are unavailable until a new license document is submitted and approved.\n"
        f"Questions? Contact {settings.SUPPORT_EMAIL}.\n\n"
        + _signature()
    )
    return send_email(to_email, subject, body)


def send_doctor_info_request_email(to_email: str, full_name: str, message: str) -> bool:
    subject = f"{settings.APP_NAME}: more information needed for your verification"
    body = (
        f"Dear Dr. {full_name},\n\n"
        "Our review team needs more information before completing your verification:\n\n"
        f"{message}\n\n"
        f"Please reply to {settings.SUPPORT_EMAIL}.\n\n"
        + _signature()
    )
    return send_email(to_email, subject, body)


def send_password_reset_code_email(to_email: str, full_name: str, code: str) -> bool:
    subject = f"Your {settings.APP_NAME} password reset code"
    body = (
        f"Hi {full_name},\n\n"
        f"Your password reset code is: {code}\n\n"
        f"This code will expire in {settings.RESET_CODE_EXPIRE_MINUTES} minutes.\n\n"
        "If you did not request this, please ignore this email.\n\n"
        + _signature()
    )
    html = (
        f"<p>Hi {full_name},</p>"
        f"<p>Your password reset code is: <strong>{code}</strong></p>"
        f"<p>This code will expire in {settings.RESET_CODE_EXPIRE_MINUTES} minutes.</p>"
        "<p>If you did not request this, please ignore this email.</p>"
    )
    return send_email(to_email, subject, body, html)
