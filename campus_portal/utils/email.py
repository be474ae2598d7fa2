import asyncio
import logging
import os
import smtplib
from concurrent.futures import ThreadPoolExecutor
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)

# Thread pool for async email sending
executor = ThreadPoolExecutor(max_workers=3)

# Hosted providers all take STARTTLS on 587
PROVIDER_HOSTS = {
    "gmail": "smtp.gmail.com",
    "outlook": "smtp-mail.outlook.com",
    "yahoo": "smtp.mail.yahoo.com",
    "office365": "smtp.office365.com",
}

# Sender mail domain -> provider, for MAIL_PROVIDER=auto
DOMAIN_PROVIDERS = {
    "gmail.com": "gmail",
    "outlook.com": "outlook",
    "hotmail.com": "outlook",
    "yahoo.com": "yahoo",
}


def detect_email_provider(email_address):
    domain = email_address.rpartition("@")[2].lower()
    return DOMAIN_PROVIDERS.get(domain, "custom")


def get_smtp_server():
    """(host, port) for the configured provider; unknown providers use SMTP_HOST/SMTP_PORT."""
    provider = os.getenv("MAIL_PROVIDER", "auto").lower()
    if provider == "auto":
        provider = detect_email_provider(os.getenv("MAIL_USERNAME", ""))
        logger.debug("Auto-detected mail provider: %s", provider)

    if provider in PROVIDER_HOSTS:
        return PROVIDER_HOSTS[provider], 587
    return os.getenv("SMTP_HOST", "smtp.example.com"), int(os.getenv("SMTP_PORT", 587))


def send_email_sync(to_email, subject, body):
    """Single plain-text SMTP attempt. Returns False instead of raising."""
    sender_email = os.getenv('MAIL_USERNAME')
    sender_password = os.getenv('MAIL_PASSWORD')
    sender_name = os.getenv('MAIL_FROM_NAME', 'Campus Placement Cell')

    if not sender_email or not sender_password:
        logger.warning("Email credentials not configured, skipping mail to %s (%s)", to_email, subject)
        return False

    host, port = get_smtp_server()

    message = MIMEText(body, "plain")
    message["Subject"] = subject
    message["From"] = f"{sender_name} <{sender_email}>"
    message["To"] = to_email

    logger.info("Attempting to send email to: %s", to_email)
    try:
        # quit() runs on exit, error or not
        with smtplib.SMTP(host, port, timeout=30) as server:
            server.starttls()
            server.login(sender_email, sender_password)
            server.send_message(message)

        logger.info("Email sent to %s", to_email)
        return True

    except (smtplib.SMTPException, OSError) as e:
        logger.error("Error sending email to %s: %s", to_email, e)
        return False


async def send_email(to_email, subject, body):
    """Best-effort send off the event loop; never raises, never retries."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, send_email_sync, to_email, subject, body)


async def send_application_confirmation(student, job):
    if not student.get("email"):
        logger.warning("Student %s has no email address, skipping confirmation", student.get("_id"))
        return False

    subject = f"Application received: {job.get('job_title', 'Job posting')}"
    body = f"""
Hello {student.get('name', 'Student')},

Your application for "{job.get('job_title', 'the job posting')}" has been submitted.

Application deadline: {job.get('job_deadline')}

---
Campus Placement Cell
    """
    return await send_email(student.get("email"), subject, body)
