"""
Result notifications by email.
"""

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from config.settings import Settings

logger = logging.getLogger(__name__)

RESULTS_SUBJECT = "Your AI Interview Results are Ready"


def render_results_email(candidate_name: str, total_score: int, summary: str) -> str:
    """HTML body of the results email; user and model text is escaped."""
    summary_html = html.escape(summary or "").replace("\n", "<br>")
    return f"""
<div style="font-family:Arial,sans-serif;max-width:580px;margin:0 auto;">
  <h2>Interview Complete!</h2>
  <p>Hello {html.escape(candidate_name or "there")},</p>
  <p>Your interview has been successfully graded.</p>
  <h3>Overall Score: {total_score}%</h3>
  <h4>Summary:</h4>
  <p>{summary_html}</p>
  <p>A full report is available on your dashboard.</p>
</div>
"""


class EmailNotifier:
    """Sends HTML email over SMTP. Any delivery problem raises."""

    def __init__(self, config: Settings):
        self.host = config.SMTP_HOST
        self.port = config.SMTP_PORT
        self.use_ssl = config.SMTP_USE_SSL
        self.user = config.SMTP_USER
        self.password = config.SMTP_PASSWORD
        self.sender = config.EMAIL_FROM or config.SMTP_USER
        self.timeout = config.SMTP_TIMEOUT

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.attach(MIMEText(html_body, "html"))

        if self.use_ssl:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

        with server:
            if not self.use_ssl:
                server.starttls()
            server.login(self.user, self.password)
            server.sendmail(self.sender, [recipient], msg.as_string())

        logger.info("Email sent to %s: %s", recipient, subject)


class LogOnlyNotifier:
    """Used when EMAIL_ENABLED=false: records the message instead of sending it."""

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        logger.info("[email disabled] Would send to %s: %s", recipient, subject)
