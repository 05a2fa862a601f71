import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from typing import Optional

from runtime_regression.util.log_config import setup_logger

logger = setup_logger(__name__)

DEFAULT_SMTP_HOST = "smtp.gmail.com"
DEFAULT_SMTP_PORT = 587


class Notifier(ABC):

    @abstractmethod
    def send(self, subject: str, text: str) -> None:
        pass


class NullNotifier(Notifier):
    def send(self, subject: str, text: str) -> None:
        logger.debug(f"Notification disabled, not sending '{subject}'")


@dataclass
class EmailLogin:
    username: str
    password: str
    destination: str
    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT


def load_email_file(path: Path) -> Optional[EmailLogin]:
    """
    Reads the e-mail login file.

    One value per line: username, password, destination and optionally the
    SMTP host and port. Blank lines and lines starting with '#' are ignored.
    A missing or incomplete file disables e-mail.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            lines = [line.strip() for line in f]
    except FileNotFoundError:
        logger.info(f"No email login at {path}, summaries will not be e-mailed")
        return None

    values = [line for line in lines if line and not line.startswith("#")]
    if len(values) < 3:
        logger.warning(f"Email login {path} needs username, password and destination")
        return None

    login = EmailLogin(username=values[0], password=values[1], destination=values[2])
    if len(values) > 3:
        login.smtp_host = values[3]
    if len(values) > 4:
        login.smtp_port = int(values[4])
    return login


class SmtpNotifier(Notifier):

    def __init__(self, login: EmailLogin):
        self.login = login

    def send(self, subject: str, text: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.login.username
        message["To"] = self.login.destination
        message.set_content(text)

        try:
            with smtplib.SMTP(self.login.smtp_host, self.login.smtp_port) as server:
                server.starttls()
                server.login(self.login.username, self.login.password)
                server.send_message(message)
            logger.info(f"Sent '{subject}' to {self.login.destination}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}': {e}")


def build_notifier(email_path: Path) -> Notifier:
    login = load_email_file(email_path)
    return SmtpNotifier(login) if login else NullNotifier()
