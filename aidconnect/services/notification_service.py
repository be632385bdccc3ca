"""SMTP email notifications."""
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from flask import current_app
from markupsafe import escape

from aidconnect.errors import ExternalServiceFailure


def _send_email(to_email: str, subject: str, body_text: str, body_html: str = None):
    """Send email via SMTP; failures are raised, not retried."""
    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = current_app.config.get('MAIL_DEFAULT_SENDER', 'noreply@aidconnect.local')
    msg['To'] = to_email
    msg.attach(MIMEText(body_text, 'plain'))
    if body_html:
        msg.attach(MIMEText(body_html, 'html'))

    try:
        with smtplib.SMTP(
            current_app.config.get('MAIL_SERVER', 'localhost'),
            current_app.config.get('MAIL_PORT', 1025),
            timeout=5
        ) as server:
            if current_app.config.get('MAIL_USE_TLS'):
                server.starttls()
            username = current_app.config.get('MAIL_USERNAME')
            if username:
                server.login(username, current_app.config.get('MAIL_PASSWORD') or '')
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.warning(f'Email send to {to_email} failed: {e}')
        raise ExternalServiceFailure('Failed to send email. Try again later.') from e


def notify_password_reset(email: str, fullname: str, reset_link: str):
    """Send the NGO a link to choose a new password."""
    subject = 'Password Reset - AidConnect'
    body = f"""
Hi {fullname},

You requested a password reset for your NGO account.

Reset your password here: {reset_link}

If you didn't request this, just ignore this email.

- AidConnect
"""
    html = f"""
<p>Hi {escape(fullname)},</p>
<p>You requested a password reset for your NGO account.</p>
<p><a href="{escape(reset_link)}">Click here to reset your password</a></p>
<br><p>If you didn't request this, just ignore this email.</p>
"""
    _send_email(email, subject, body.strip(), html.strip())
    current_app.logger.info(f'Password reset link sent to {email}')
