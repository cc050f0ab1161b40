"""
Readlater Backend — Rule Service
==================================

What:  Create, list and delete a user's rules.
How:   Every operation is one TransactionManager.run() scoped to the owner.
Who:   /api/rules router.

create_rule() is find-or-create: a rule whose name matches case-insensitively
is returned unchanged, otherwise a new one is inserted. Two concurrent creates
of the same name race on the unique (user_id, lower(name)) index; the loser
gets the DatabaseError that TransactionManager.run() raises for it.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from readlater.exceptions import NotFoundError
from readlater.models.rule import Rule
from readlater.repository import TransactionManager
from readlater.schemas.common import DeleteResult
from readlater.schemas.rule import RuleCreate

logger = logging.getLogger(__name__)


class RuleService:
    def __init__(self, trx: TransactionManager):
        self.trx = trx

    async def create_rule(self, user_id: uuid.UUID, params: RuleCreate) -> Rule:
        """
        Return the owner's rule named `params.name`, creating it if needed.

        Name comparison is exact apart from case: "News" finds "news" but
        "N_ws" does not.
        """

        async def unit_of_work(session: AsyncSession) -> Rule:
            existing = await session.scalar(
                select(Rule).where(
                    Rule.user_id == user_id,
                    func.lower(Rule.name) == func.lower(params.name),
                )
            )
            if existing is not None:
                logger.debug("Rule '%s' already exists for %s", params.name, user_id)
                return existing

            rule = Rule(
                user_id=user_id,
                name=params.name,
                description=params.description,
                filter=params.filter,
                actions=[a.model_dump(mode="json") for a in params.actions],
            )
            session.add(rule)
            await session.flush()
            logger.info("Rule created: %s (user=%s)", rule.id, user_id)
            return rule

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def find_rules(self, user_id: uuid.UUID) -> List[Rule]:
        async def unit_of_work(session: AsyncSession) -> List[Rule]:
            result = await session.scalars(
                select(Rule).where(Rule.user_id == user_id).order_by(Rule.name)
            )
            return list(result)

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def delete_rule(self, rule_id: uuid.UUID, user_id: uuid.UUID) -> Rule:
        """
        Delete one rule and return it as it was before the delete.

        Raises:
            NotFoundError: The rule does not exist or belongs to someone else.
        """

        async def unit_of_work(session: AsyncSession) -> Rule:
            rule: Optional[Rule] = await session.scalar(
                select(Rule).where(Rule.id == rule_id, Rule.user_id == user_id)
            )
            if rule is None:
                raise NotFoundError(resource="rule", resource_id=str(rule_id))
            await session.delete(rule)
            await session.flush()
            return rule

        rule = await self.trx.run(unit_of_work, user_id=user_id)
        logger.info("Rule deleted: %s (user=%s)", rule_id, user_id)
        return rule

    async def delete_rules(self, user_id: uuid.UUID) -> DeleteResult:
        async def unit_of_work(session: AsyncSession) -> DeleteResult:
            result = await session.execute(delete(Rule).where(Rule.user_id == user_id))
            return DeleteResult(affected=result.rowcount or 0)

        outcome = await self.trx.run(unit_of_work, user_id=user_id)
        logger.info("Deleted %d rules (user=%s)", outcome.affected, user_id)
        return outcome
