"""
Bulk email from a buddy to their own mentees, optionally personalised with placeholders.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from ibuddy.errors import FormValidationError
from ibuddy.mail.base import EmailService
from ibuddy.models.user import User
from ibuddy.repositories.mentees import MenteeRepository
from ibuddy.services import templating

logger = logging.getLogger(__name__)

MAX_PARALLEL_SENDS = 8


def send_bulk_email(
    actor: User,
    recipients: list[str],
    subject: str,
    body: str,
    mentees: MenteeRepository,
    email_service: EmailService,
) -> int:
    """
    Send `body` to `recipients`, which must all be the actor's own mentees.
    Without placeholders one message goes to everyone; with placeholders each mentee gets
    a personalised copy. Returns the number of messages sent. Transport errors propagate.
    """
    own = {m.searchable_email: m for m in mentees.list_by_buddy(actor.id)}
    # one message per address, whatever its case
    wanted = list({r.strip().lower(): r.strip() for r in recipients if r and r.strip()}.values())
    if not wanted or any(r.lower() not in own for r in wanted):
        raise FormValidationError({"recipients": "Invalid recipients"})

    clean_body = templating.sanitize_html(body)
    if templating.is_empty_html(clean_body):
        raise FormValidationError({"body": "Body is required"})

    variables = templating.find_variables(clean_body)
    if not variables:
        email_service.send(
            to=wanted,
            subject=subject,
            html_body=clean_body,
            sender_name=actor.first_name,
            reply_to=actor.email,
        )
        logger.info("Bulk email from %s to %s recipient(s)", actor.id, len(wanted))
        return 1

    unknown = templating.unknown_variables(variables)
    if unknown:
        logger.info("Rejected bulk email from %s: unknown variables %s", actor.id, unknown)
        raise FormValidationError({"body": "Invalid variables in body"})

    def _send(address: str) -> str:
        recipient = own[address.lower()]
        return email_service.send(
            to=[address],
            subject=subject,
            html_body=templating.resolve_body(clean_body, recipient),
            sender_name=actor.first_name,
            reply_to=actor.email,
        )

    with ThreadPoolExecutor(max_workers=min(MAX_PARALLEL_SENDS, len(wanted))) as pool:
        # list() re-raises the first failed send
        list(pool.map(_send, wanted))
    logger.info("Personalised email from %s to %s recipient(s)", actor.id, len(wanted))
    return len(wanted)
