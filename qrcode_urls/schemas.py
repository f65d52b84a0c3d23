"""Pydantic schemas for input validation and output serialization.

Used by both the HTTP routes and the console menu, so a count typed at the
prompt is validated by the same rules as one posted to the API.

Schema Hierarchy
=================
::
    GenerateRequest (Input)
    └─ count: int (0..MAX_COUNT)

    PreviewResponse (Output)
    ├─ count: int
    └─ urls: list[str]

    UrlRecordResponse (Output)
    ├─ id: int
    ├─ full_url: str
    ├─ code: str
    └─ created_at: datetime

    InsertResponse (Output)
    ├─ count: int
    └─ records: list[UrlRecordResponse]

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ database: HealthStatus

How to Use
===========
**Step 1 — Parse console input**::
    try:
        request = GenerateRequest.from_text(raw)
    except ValidationError:
        print("Invalid input.")

**Step 2 — Serialize inserted records**::
    records = await service.insert_urls(request.count)
    return InsertResponse.from_records(records)

Key Behaviours
===============
- Counts must be non-negative integers; strings like "12" are coerced.
- Record responses read ORM attributes directly.

Classes:
    GenerateRequest:  Number of codes to preview or insert.
    PreviewResponse:  Generated URLs that were not persisted.
    UrlRecordResponse:  One persisted record.
    InsertResponse:  Records written by one insert.
    HealthResponse:  Output schema for health checks.
"""

import datetime
from collections.abc import Sequence

from pydantic import BaseModel, Field

from qrcode_urls.enums import HealthStatus
from qrcode_urls.models import UrlRecord

__all__ = [
    "MAX_COUNT",
    "GenerateRequest",
    "PreviewResponse",
    "UrlRecordResponse",
    "InsertResponse",
    "HealthResponse",
]

# Largest batch one request or prompt may build in memory
MAX_COUNT = 10_000_000


class GenerateRequest(BaseModel):
    count: int = Field(..., ge=0, le=MAX_COUNT, description="Number of codes to generate, e.g. 100")

    @classmethod
    def from_text(cls, raw: str) -> "GenerateRequest":
        """Validate a count typed at the console."""
        return cls.model_validate({"count": raw.strip()})


class PreviewResponse(BaseModel):
    count: int
    urls: list[str]


class UrlRecordResponse(BaseModel):
    id: int
    full_url: str
    code: str
    created_at: datetime.datetime

    model_config = {"from_attributes": True}


class InsertResponse(BaseModel):
    count: int
    records: list[UrlRecordResponse]

    @classmethod
    def from_records(cls, records: Sequence[UrlRecord]) -> "InsertResponse":
        return cls(
            count=len(records),
            records=[UrlRecordResponse.model_validate(record) for record in records],
        )


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus
