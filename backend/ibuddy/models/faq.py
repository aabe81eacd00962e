"""FAQ model."""
from datetime import datetime

from ibuddy.models.base import StoredModel


class FAQ(StoredModel):
    id: str
    author_id: str
    question: str
    answer: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
