"""
FAQ API: everyone reads; staff create; authors and staff edit or delete.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from ibuddy.api.deps import get_current_user, get_faq_repository
from ibuddy.errors import require
from ibuddy.models.faq import FAQ
from ibuddy.models.user import User
from ibuddy.repositories import FAQRepository
from ibuddy.schemas.faqs import FAQRequest, FAQResponse, FAQUpdateRequest
from ibuddy.services.permissions import can_user_create_faq, can_user_mutate_faq

router = APIRouter(prefix="/faqs", tags=["faqs"])


def _get_faq_or_404(faqs: FAQRepository, faq_id: str) -> FAQ:
    faq = faqs.get(faq_id)
    if not faq:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="FAQ not found")
    return faq


@router.get("", response_model=list[FAQResponse])
def list_faqs(
    current_user: User = Depends(get_current_user),
    faqs: FAQRepository = Depends(get_faq_repository),
):
    return [FAQResponse.model_validate(f) for f in faqs.list_all()]


@router.post("", response_model=FAQResponse, status_code=status.HTTP_201_CREATED)
def create_faq(
    data: FAQRequest,
    current_user: User = Depends(get_current_user),
    faqs: FAQRepository = Depends(get_faq_repository),
):
    require(can_user_create_faq(current_user), "Not allowed to create FAQs")
    faq = faqs.create(author_id=current_user.id, question=data.question, answer=data.answer)
    return FAQResponse.model_validate(faq)


@router.get("/{faq_id}", response_model=FAQResponse)
def get_faq(
    faq_id: str,
    current_user: User = Depends(get_current_user),
    faqs: FAQRepository = Depends(get_faq_repository),
):
    return FAQResponse.model_validate(_get_faq_or_404(faqs, faq_id))


@router.patch("/{faq_id}", response_model=FAQResponse)
def update_faq(
    faq_id: str,
    data: FAQUpdateRequest,
    current_user: User = Depends(get_current_user),
    faqs: FAQRepository = Depends(get_faq_repository),
):
    faq = _get_faq_or_404(faqs, faq_id)
    require(can_user_mutate_faq(current_user, faq), "Not allowed to edit this FAQ")
    updated = faqs.update(faq_id, question=data.question, answer=data.answer)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="FAQ not found")
    return FAQResponse.model_validate(updated)


@router.delete("/{faq_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_faq(
    faq_id: str,
    current_user: User = Depends(get_current_user),
    faqs: FAQRepository = Depends(get_faq_repository),
):
    faq = _get_faq_or_404(faqs, faq_id)
    require(can_user_mutate_faq(current_user, faq), "Not allowed to delete this FAQ")
    faqs.delete(faq_id)
