"""
Email transport: SES when EMAIL_BACKEND=ses, otherwise a logging mock.
"""
import logging

from ibuddy.config import settings
from ibuddy.mail.base import EmailService

logger = logging.getLogger(__name__)

_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Process-wide transport (FastAPI dependency)."""
    global _service
    if _service is None:
        backend = settings.email_backend or "mock"
        if backend == "ses":
            from ibuddy.mail.ses_impl import SESEmailService
            _service = SESEmailService(settings.ses_email_source, settings.aws_region)
        else:
            if settings.is_production:
                logger.warning("EMAIL_BACKEND=%s in production; emails are only logged.", backend)
            from ibuddy.mail.mock_impl import MockEmailService
            _service = MockEmailService()
    return _service


__all__ = ["EmailService", "get_email_service"]
