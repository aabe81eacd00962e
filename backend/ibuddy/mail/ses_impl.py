"""
Amazon SES transport. Sender is "<encoded sender name> <SES_EMAIL_SOURCE>" so any
user's first name can be shown while mail always leaves from the verified address.
"""
import base64
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ibuddy.errors import ExternalServiceError
from ibuddy.services.retry import call_with_retry, is_transient_aws_error

logger = logging.getLogger(__name__)


def encode_sender(sender_name: str, source: str) -> str:
    """RFC 2047 encoded display name, safe for non-ASCII names."""
    encoded = base64.b64encode(sender_name.encode("utf-8")).decode("ascii")
    return f"=?UTF-8?B?{encoded}?= <{source}>"


class SESEmailService:
    def __init__(self, source: str, region: str, client=None):
        if not source:
            raise ValueError("SES_EMAIL_SOURCE is required for the ses email backend")
        self.source = source
        self._client = client or boto3.client("ses", region_name=region or None)

    def send(
        self,
        to: list[str],
        subject: str,
        html_body: str,
        sender_name: str,
        reply_to: str | None = None,
        cc: list[str] | None = None,
    ) -> str:
        kwargs = {
            "Source": encode_sender(sender_name, self.source),
            "Destination": {"ToAddresses": list(to), "CcAddresses": list(cc or [])},
            "Message": {
                "Subject": {"Charset": "UTF-8", "Data": subject},
                "Body": {"Html": {"Charset": "UTF-8", "Data": html_body}},
            },
        }
        if reply_to:
            kwargs["ReplyToAddresses"] = [reply_to]
        try:
            response = call_with_retry(self._client.send_email, is_retryable=is_transient_aws_error, **kwargs)
        except (ClientError, BotoCoreError) as e:
            # e.g. MessageRejected for unverified recipients while the account is in the SES sandbox
            logger.error("SES send failed (to=%s): %s", ", ".join(to), e)
            raise ExternalServiceError("email", str(e)) from e
        message_id = response.get("MessageId", "")
        logger.info("SES sent %s to %s recipient(s)", message_id, len(to) + len(cc or []))
        return message_id
