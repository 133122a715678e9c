"""Evaluate access predicates against the current database state."""

from typing import Any

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from leaselink.core.errors import ForbiddenError


class PolicyEvaluator:
    """Service for checking a predicate before a write.

    Reads do not need this class: they add the predicate to their WHERE
    clause and a denial simply returns no rows.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def allows(self, predicate: ColumnElement[bool]) -> bool:
        """Check whether a predicate currently holds.

        Args:
            predicate: Expression built from ``leaselink.core.policy.predicates``

        Returns:
            True only if the database evaluates the predicate to true
        """
        result = await self.session.execute(select(predicate))
        return result.scalar() is True

    async def require(
        self,
        predicate: ColumnElement[bool],
        message: str = "Not allowed to perform this action",
        **details: Any,
    ) -> None:
        """Raise unless the predicate holds.

        Raises:
            ForbiddenError: If the predicate is false
        """
        if not await self.allows(predicate):
            raise ForbiddenError(message, details={k: str(v) for k, v in details.items()})
