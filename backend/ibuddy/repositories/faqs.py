import logging
import uuid

from ibuddy.errors import ensure
from ibuddy.models.base import utcnow
from ibuddy.models.faq import FAQ
from ibuddy.store import FAQS, KeyValueStore
from ibuddy.store.keys import faq_key

logger = logging.getLogger(__name__)


class FAQRepository:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def get(self, faq_id: str) -> FAQ | None:
        return FAQ.from_item(self._store.get(FAQS, faq_key(faq_id).encode()))

    def list_all(self) -> list[FAQ]:
        """Newest first."""
        faqs = [FAQ.from_item(i) for i in self._store.scan(FAQS)]
        faqs.sort(key=lambda f: f.created_at.isoformat() if f.created_at else "", reverse=True)
        return faqs

    def create(self, *, author_id: str, question: str, answer: str) -> FAQ:
        faq_id = uuid.uuid4().hex
        now = utcnow()
        faq = FAQ(
            id=faq_id,
            author_id=author_id,
            question=question.strip(),
            answer=answer.strip(),
            created_at=now,
            updated_at=now,
        )
        self._store.put(FAQS, faq_key(faq_id).encode(), faq.to_item())
        created = self.get(faq_id)
        ensure(created, f"FAQ {faq_id} not found after being created")
        logger.info("Created FAQ %s by %s", faq_id, author_id)
        return created

    def update(self, faq_id: str, *, question: str | None = None, answer: str | None = None) -> FAQ | None:
        changes = {"updated_at": utcnow()}
        if question is not None:
            changes["question"] = question.strip()
        if answer is not None:
            changes["answer"] = answer.strip()
        item = self._store.update(FAQS, faq_key(faq_id).encode(), set_values=FAQ.item_values(changes))
        return FAQ.from_item(item)

    def delete(self, faq_id: str) -> None:
        self._store.delete(FAQS, faq_key(faq_id).encode())
        logger.info("Deleted FAQ %s", faq_id)
