"""Atomic, time-bounded execution of multi-row procedures.

A procedure is an async callable that receives the session and performs
several reads and writes. ``run_atomic`` executes it as one unit: either
every statement takes effect or none do. Instead of raising, it returns a
``ProcedureResult`` that callers branch on.

Usage:
    async def _create(session: AsyncSession) -> UUID:
        ...

    result = await run_atomic(session, _create, name="onboard_landlord")
    if not result.success:
        ...
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog
from opentelemetry import trace
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from leaselink.config import settings


T = TypeVar("T")

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

# PostgreSQL SQLSTATE for "canceling statement due to statement timeout"
QUERY_CANCELED_SQLSTATE = "57014"

TRANSACTION_FAILED = "transaction_failed"
TRANSACTION_TIMEOUT = "transaction_timeout"


class ProcedureError(Exception):
    """Abort a procedure and roll back with a structured failure.

    Attributes:
        error_code: Machine-readable failure code
        message: Message safe to show to the caller
        retryable: Whether repeating the call may succeed
    """

    def __init__(self, error_code: str, message: str, *, retryable: bool = False) -> None:
        self.error_code = error_code
        self.message = message
        self.retryable = retryable
        super().__init__(message)


@dataclass
class ProcedureResult(Generic[T]):
    """Outcome of an atomic procedure."""

    success: bool
    value: T | None = None
    error_code: str | None = None
    error_message: str | None = None
    retryable: bool = False

    @classmethod
    def ok(cls, value: T) -> "ProcedureResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def failed(
        cls, error_code: str, error_message: str, *, retryable: bool = False
    ) -> "ProcedureResult[T]":
        return cls(
            success=False,
            error_code=error_code,
            error_message=error_message,
            retryable=retryable,
        )


def unit_of_work(session: AsyncSession) -> AsyncSessionTransaction:
    """Open a transaction, or a savepoint when one is already in progress."""
    if session.in_transaction():
        return session.begin_nested()
    return session.begin()


def _is_statement_timeout(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == QUERY_CANCELED_SQLSTATE


async def run_atomic(
    session: AsyncSession,
    procedure: Callable[[AsyncSession], Awaitable[T]],
    *,
    name: str,
    timeout: float | None = None,
) -> ProcedureResult[T]:
    """Run ``procedure`` as a single all-or-nothing unit.

    A fresh session gets its own transaction, committed on success. A
    session that already has a transaction open gets a savepoint, so a
    failure discards only this procedure's statements; on success the
    open transaction is committed before returning, so the outcome is
    durable once the caller sees it. Within another savepoint nothing is
    committed here.

    Args:
        session: Database session
        procedure: Async callable doing the work
        name: Procedure name used in logs
        timeout: Seconds before the unit is cancelled and rolled back
            (defaults to ``transaction_timeout_seconds``)

    Returns:
        ProcedureResult with the procedure's return value or the failure
    """
    timeout = settings.transaction_timeout_seconds if timeout is None else timeout

    with tracer.start_as_current_span(f"procedure {name}") as span:
        result = await _execute(session, procedure, name, timeout)
        span.set_attribute("leaselink.procedure.success", result.success)
        if result.error_code:
            span.set_attribute("leaselink.procedure.error_code", result.error_code)
    return result


async def _execute(
    session: AsyncSession,
    procedure: Callable[[AsyncSession], Awaitable[T]],
    name: str,
    timeout: float,
) -> ProcedureResult[T]:
    log = logger.bind(procedure=name)
    # Reads made earlier in the request autobegin a transaction; the
    # procedure then runs in a savepoint and must still commit before
    # returning. Inside another procedure the outer one commits.
    commit_outer = session.in_transaction() and not session.in_nested_transaction()

    try:
        async with asyncio.timeout(timeout):
            async with unit_of_work(session):
                await session.execute(
                    text(f"SET LOCAL statement_timeout = {int(timeout * 1000)}")
                )
                value = await procedure(session)
            if commit_outer:
                await session.commit()
    except ProcedureError as exc:
        log.info("procedure_rejected", error_code=exc.error_code)
        return ProcedureResult.failed(exc.error_code, exc.message, retryable=exc.retryable)
    except TimeoutError:
        log.warning("procedure_timeout", timeout_seconds=timeout)
        return ProcedureResult.failed(
            TRANSACTION_TIMEOUT,
            "The operation timed out, please retry",
            retryable=True,
        )
    except IntegrityError as exc:
        log.warning("procedure_constraint_violation", error_type=type(exc.orig).__name__)
        return ProcedureResult.failed(
            TRANSACTION_FAILED, "The operation could not be completed"
        )
    except DBAPIError as exc:
        if _is_statement_timeout(exc):
            log.warning("procedure_timeout", timeout_seconds=timeout)
            return ProcedureResult.failed(
                TRANSACTION_TIMEOUT,
                "The operation timed out, please retry",
                retryable=True,
            )
        log.error("procedure_failed", error_type=type(exc.orig).__name__)
        return ProcedureResult.failed(
            TRANSACTION_FAILED, "The operation could not be completed", retryable=True
        )
    except SQLAlchemyError as exc:
        log.error("procedure_failed", error_type=type(exc).__name__)
        return ProcedureResult.failed(
            TRANSACTION_FAILED, "The operation could not be completed", retryable=True
        )

    log.info("procedure_committed")
    return ProcedureResult.ok(value)
