"""
KV record: one row per stored item. `table_name` partitions rows into logical tables
(users, passwords, mentees, assets, faqs); (pk, sk) is the composite item key.
Item attributes live in `data` (JSON) using the persisted camelCase names.
"""
from datetime import datetime
from sqlalchemy import JSON, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from ibuddy.database import Base


class Record(Base):
    __tablename__ = "kv_items"

    table_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    pk: Mapped[str] = mapped_column(String(512), primary_key=True)
    sk: Mapped[str] = mapped_column(String(512), primary_key=True, default="")
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_kv_items_table_pk", "table_name", "pk"),)
