"""Database layer - session management, base models, and atomic procedures."""

from leaselink.core.database.base import Base, TimestampMixin, UUIDMixin, str_enum
from leaselink.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)
from leaselink.core.database.transaction import (
    TRANSACTION_FAILED,
    TRANSACTION_TIMEOUT,
    ProcedureError,
    ProcedureResult,
    run_atomic,
    unit_of_work,
)


__all__ = [
    "TRANSACTION_FAILED",
    "TRANSACTION_TIMEOUT",
    "Base",
    "ProcedureError",
    "ProcedureResult",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "run_atomic",
    "str_enum",
    "unit_of_work",
]
