"""Dependency wiring with a singleton service manager.

This module provides a centralized way to inject the database session, the
shared logger and settings into the QR code URL service, for both the HTTP
routes and the console entry point.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qrcode_urls.config import Settings, get_settings
from qrcode_urls.database import get_db
from qrcode_urls.service import QRCodeUrlService

__all__ = [
    "LOG_FORMAT",
    "RequestIdFilter",
    "RequestContext",
    "ServiceManager",
    "get_qrcode_service",
    "get_request_context",
    "get_service_manager",
]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Gives records logged outside a request a placeholder request id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


# ============================================================================
# SINGLETON SERVICE MANAGER
# ============================================================================


class ServiceManager:
    """Singleton service manager for shared resources.

    Holds the settings and the configured logger so they are set up once per
    process rather than once per request or menu action.
    """

    _instance: Optional["ServiceManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "ServiceManager":
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def initialize(self) -> None:
        """Initialize shared resources once at startup."""
        if not self._initialized:
            self.settings = get_settings()
            self.logger = self._setup_logger(self.settings)
            self._initialized = True

    def _setup_logger(self, settings: Settings) -> logging.Logger:
        """Setup logger once."""
        logger = logging.getLogger("qrcode_urls")
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(LOG_FORMAT)
            handler.setFormatter(formatter)
            handler.addFilter(RequestIdFilter())
            logger.addHandler(handler)
        logger.setLevel(settings.LOG_LEVEL)
        return logger

    def cleanup(self) -> None:
        """Reset so the next initialize() re-reads settings."""
        self._initialized = False


# Global singleton instance
_service_manager = ServiceManager()


# ============================================================================
# REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-operation context handed to QRCodeUrlService.

    Attributes:
        database: Async database session for this request or console run
        service_manager: Singleton service manager with shared resources
        request_id: Unique identifier attached to log records
        start_time: Creation timestamp
    """

    database: AsyncSession
    service_manager: ServiceManager
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: float = field(default_factory=lambda: time.time())

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Get shared logger tagged with this request id."""
        return logging.LoggerAdapter(self.service_manager.logger, {"request_id": self.request_id})

    @property
    def settings(self) -> Settings:
        return self.service_manager.settings

    def get_duration(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_service_manager() -> ServiceManager:
    """Get the initialized singleton service manager."""
    if not _service_manager._initialized:
        _service_manager.initialize()
    return _service_manager


def get_request_context(
    db: AsyncSession = Depends(get_db),
    manager: ServiceManager = Depends(get_service_manager),
) -> RequestContext:
    return RequestContext(database=db, service_manager=manager)


def get_qrcode_service(ctx: RequestContext = Depends(get_request_context)) -> QRCodeUrlService:
    return QRCodeUrlService.from_context(ctx)
