"""
Mock transport: logs messages and keeps them in `outbox` (local development, tests).
"""
import logging
import uuid
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    to: list[str]
    subject: str
    html_body: str
    sender_name: str
    reply_to: str | None = None
    cc: list[str] = field(default_factory=list)
    message_id: str = ""


class MockEmailService:
    def __init__(self):
        self.outbox: list[SentEmail] = []

    def send(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        sender_name: str,
        reply_to: str | None = None,
        cc: list[str] | None = None,
    ) -> str:
        message_id = f"mock-{uuid.uuid4().hex}"
        self.outbox.append(SentEmail(list(to), subject, html_body, sender_name, reply_to, list(cc or []), message_id))
        logger.info("[mock email] %s -> %s: %s", sender_name, ", ".join(to), subject)
        return message_id
