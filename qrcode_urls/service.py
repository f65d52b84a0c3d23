"""Business logic layer for QR code URL preview and insertion.

This module binds the unique code generator to storage: it takes a snapshot
of the codes already persisted, generates a fresh batch against it, and
either formats the batch for display or appends it to the table in one
transaction.

Flow Diagram — insert_urls()
============================
::
    ┌─────────────┐
    │ count        │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Validate     │──── bad ───▶ InvalidCountError
    │ count        │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Snapshot     │
    │ SELECT code  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Generate     │
    │ unique batch │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ add_all +    │──── error ──▶ rollback, re-raise
    │ commit       │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Return       │
    │ records      │
    └─────────────┘

preview_urls() follows the same path up to generation and stops there,
returning ``URL_BASE_PATH + code`` for each code.

How to Use
===========
**Step 1 — Build from a context**::
    service = QRCodeUrlService(ctx)

**Step 2 — Preview without writing**::
    urls = await service.preview_urls(5)

**Step 3 — Persist a batch**::
    records = await service.insert_urls(1000)

Key Behaviours
===============
- The snapshot is read once per operation and not refreshed.
- Preview and failed generation end the snapshot transaction; the session
  is left idle, never idle-in-transaction.
- Insert is a single commit; failures are rolled back and re-raised, never retried.
- Another process inserting between snapshot and commit can still collide;
  the unique index on code turns that into an IntegrityError.

Classes:
    QRCodeUrlService:  Preview and insert operations over one session.
"""

import datetime
import time
from typing import TYPE_CHECKING, Optional

from prometheus_client import Counter, Histogram
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from qrcode_urls.codes import CodeSpaceExhaustedError, InvalidCountError, UniqueCodeGenerator, validate_count
from qrcode_urls.enums import OperationStatus
from qrcode_urls.models import UrlRecord
from qrcode_urls.urls import build_full_url

if TYPE_CHECKING:
    from qrcode_urls.dependencies import RequestContext

__all__ = ["QRCodeUrlService"]


# ============================================================================
# PROMETHEUS METRICS
# ============================================================================

CODES_GENERATED_TOTAL = Counter(
    "qrcode_codes_generated_total",
    "Total unique codes generated",
    ["operation"],
)
RECORDS_INSERTED_TOTAL = Counter(
    "qrcode_records_inserted_total",
    "Total URL records committed to the database",
)
OPERATIONS_TOTAL = Counter(
    "qrcode_operations_total",
    "Preview/insert operations by outcome",
    ["operation", "status"],
)
GENERATION_DURATION = Histogram(
    "qrcode_generation_duration_seconds",
    "Time taken to generate one batch of codes",
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)


class QRCodeUrlService:
    """Preview and insert operations for QR code URLs.

    Args:
        ctx: Context carrying ``database``, ``logger`` and ``settings``.
        generator: Optional generator; built from settings when omitted.
    """

    def __init__(self, ctx: "RequestContext", generator: Optional[UniqueCodeGenerator] = None):
        self._db = ctx.database
        self._logger = ctx.logger
        self._settings = ctx.settings
        self._generator = generator or UniqueCodeGenerator(
            length=self._settings.CODE_LENGTH,
            alphabet=self._settings.CODE_ALPHABET,
            max_retries=self._settings.CODE_MAX_RETRIES,
        )

    @classmethod
    def from_context(cls, ctx: "RequestContext") -> "QRCodeUrlService":
        return cls(ctx)

    def full_url(self, code: str) -> str:
        return build_full_url(code, self._settings.URL_BASE_PATH)

    async def fetch_existing_codes(self) -> set[str]:
        """Snapshot every code currently stored."""
        result = await self._db.execute(select(UrlRecord.code))
        return set(result.scalars().all())

    async def preview_urls(self, count: int) -> list[str]:
        """Generate ``count`` fresh codes and return their full URLs without persisting.

        Raises:
            InvalidCountError: If count is negative or not an integer.
            CodeSpaceExhaustedError: If no fresh code can be found.
        """
        self._logger.info(f"Previewing {count} URLs")
        codes = await self._generate_codes(count, operation="preview")
        await self._end_snapshot()
        OPERATIONS_TOTAL.labels(operation="preview", status=OperationStatus.SUCCESS).inc()
        return [self.full_url(code) for code in codes]

    async def insert_urls(self, count: int) -> list[UrlRecord]:
        """Generate ``count`` fresh codes and append them as records in one commit.

        Returns:
            list[UrlRecord]: The committed records, ids assigned.

        Raises:
            InvalidCountError: If count is negative or not an integer.
            CodeSpaceExhaustedError: If no fresh code can be found.
            SQLAlchemyError: If the write fails; the session is rolled back first.
        """
        self._logger.info(f"Inserting {count} URL records")
        codes = await self._generate_codes(count, operation="insert")
        if not codes:
            OPERATIONS_TOTAL.labels(operation="insert", status=OperationStatus.SUCCESS).inc()
            return []

        created_at = datetime.datetime.now(datetime.timezone.utc)
        records = [UrlRecord(full_url=self.full_url(code), code=code, created_at=created_at) for code in codes]

        try:
            self._db.add_all(records)
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            OPERATIONS_TOTAL.labels(operation="insert", status=OperationStatus.ERROR).inc()
            self._logger.error(f"Inserting {len(records)} URL records failed: {exc}")
            raise

        RECORDS_INSERTED_TOTAL.inc(len(records))
        OPERATIONS_TOTAL.labels(operation="insert", status=OperationStatus.SUCCESS).inc()
        self._logger.info(f"Inserted {len(records)} URL records")
        return records

    async def _generate_codes(self, count: int, operation: str) -> list[str]:
        try:
            validate_count(count)
        except InvalidCountError as exc:
            OPERATIONS_TOTAL.labels(operation=operation, status=OperationStatus.VALIDATION_ERROR).inc()
            self._logger.warning(f"{operation} rejected: {exc}")
            raise

        if count == 0:
            return []

        existing = await self.fetch_existing_codes()
        self._logger.debug(f"Snapshot holds {len(existing)} existing codes")

        start_time = time.perf_counter()
        try:
            codes = self._generator.generate(count, existing)
        except CodeSpaceExhaustedError as exc:
            OPERATIONS_TOTAL.labels(operation=operation, status=OperationStatus.EXHAUSTED).inc()
            self._logger.error(f"{operation} failed: {exc}")
            await self._end_snapshot()
            raise
        duration = time.perf_counter() - start_time

        GENERATION_DURATION.observe(duration)
        CODES_GENERATED_TOTAL.labels(operation=operation).inc(len(codes))
        self._logger.debug(f"Generated {len(codes)} codes in {duration:.3f}s")
        return codes

    async def _end_snapshot(self) -> None:
        # Closes the transaction autobegun by the snapshot read so a long-lived
        # session does not sit idle in transaction between operations.
        if self._db.in_transaction():
            await self._db.commit()
