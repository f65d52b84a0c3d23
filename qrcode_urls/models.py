"""SQLAlchemy ORM models for the QR code URL generator.

Data Model Layout
=================
::
    qrcode_urls table
    ├─ id (SERIAL PRIMARY KEY)
    ├─ full_url (TEXT NOT NULL)
    ├─ code (VARCHAR(16) UNIQUE, INDEXED)
    └─ created_at (TIMESTAMPTZ NOT NULL)

How to Use
===========
**Step 1 — Import**::
    from qrcode_urls.models import UrlRecord

**Step 2 — Append a batch**::
    db.add_all([UrlRecord(full_url=url, code=code, created_at=now) for ...])
    await db.commit()

**Step 3 — Snapshot existing codes**::
    result = await db.execute(select(UrlRecord.code))
    existing = set(result.scalars().all())

Key Behaviours
===============
- Records are append-only; nothing in this project updates or deletes them.
- The unique index on code is a storage-level backstop for the batch check.
- created_at is set by the application when the batch is built.

Classes:
    UrlRecord:  One issued code and the full URL embedding it.
"""

import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from qrcode_urls.config import MAX_CODE_LENGTH
from qrcode_urls.database import Base

__all__ = ["UrlRecord"]


class UrlRecord(Base):
    __tablename__ = "qrcode_urls"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    full_url: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(String(MAX_CODE_LENGTH), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<UrlRecord(id={self.id}, code='{self.code}')>"
