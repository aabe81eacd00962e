"""
Email API: bulk email to the current user's own mentees, and the email templates they
may start from.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_asset_repository, get_current_user, get_mentee_repository
from ibuddy.mail import EmailService, get_email_service
from ibuddy.models.asset import AssetType
from ibuddy.models.user import User
from ibuddy.repositories import AssetRepository, MenteeRepository
from ibuddy.schemas.assets import AssetResponse
from ibuddy.schemas.email import BulkEmailRequest, BulkEmailResponse
from ibuddy.services.bulk_email import send_bulk_email
from ibuddy.services.permissions import is_admin

router = APIRouter(prefix="/email", tags=["email"])


def _templates_for(user: User, assets: AssetRepository):
    if is_admin(user):
        return assets.list_all(AssetType.EMAIL_TEMPLATE)
    return assets.list_accessible(user.id, AssetType.EMAIL_TEMPLATE)


@router.post("/bulk", response_model=BulkEmailResponse)
def send_bulk(
    data: BulkEmailRequest,
    current_user: User = Depends(get_current_user),
    mentees: MenteeRepository = Depends(get_mentee_repository),
    email_service: EmailService = Depends(get_email_service),
):
    sent = send_bulk_email(
        current_user,
        [str(r) for r in data.recipients],
        data.subject,
        data.body,
        mentees=mentees,
        email_service=email_service,
    )
    return BulkEmailResponse(sent=sent)


@router.get("/templates", response_model=list[AssetResponse])
def list_templates(
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    return [AssetResponse.from_asset(a) for a in _templates_for(current_user, assets)]


@router.get("/templates/{template_id}", response_model=AssetResponse)
def get_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
    assets: AssetRepository = Depends(get_asset_repository),
):
    """A template is only found among those the current user may use."""
    template = next((t for t in _templates_for(current_user, assets) if t.id == template_id), None)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return AssetResponse.from_asset(template)
