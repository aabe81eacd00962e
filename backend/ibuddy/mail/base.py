"""
Email transport interface. One call sends one HTML message; failures raise ExternalServiceError.
"""
from typing import Protocol


class EmailService(Protocol):
    def send(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        sender_name: str,
        reply_to: str | None = None,
        cc: list[str] | None = None,
    ) -> str:
        """Send the message; return the transport's message id."""
        ...
