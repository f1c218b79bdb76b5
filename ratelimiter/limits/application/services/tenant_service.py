from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ratelimiter.limits.domain.entities import Tenant, TenantWithRules
from ratelimiter.limits.domain.repositories.rule_repository import RuleRepository
from ratelimiter.limits.domain.repositories.tenant_repository import TenantRepository
from ratelimiter.limits.infrastructure.repositories.rule_repository_impl import RuleRepositoryImpl
from ratelimiter.limits.infrastructure.repositories.tenant_repository_impl import TenantRepositoryImpl
from ratelimiter.shared.error_codes import ERROR_CODES
from ratelimiter.shared.exceptions import ConflictError, ValidationError
from ratelimiter.shared.logging import get_logger

logger = get_logger(__name__)


class TenantService:
    """Tenant registration and listing."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._tenants: TenantRepository = TenantRepositoryImpl(session)
        self._rules: RuleRepository = RuleRepositoryImpl(session)

    async def register(self, name: str) -> Tenant:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError(
                "Tenant name is required and must be a non-empty string",
                details={"field": "name"},
            )

        if await self._tenants.get_by_name(clean) is not None:
            raise ConflictError(ERROR_CODES["tenant_conflict"]["message"], code="tenant_conflict")

        try:
            tenant = await self._tenants.create(clean)
            await self._session.commit()
        except IntegrityError as e:
            # lost a race with a concurrent registration of the same name
            await self._session.rollback()
            raise ConflictError(ERROR_CODES["tenant_conflict"]["message"], code="tenant_conflict") from e

        logger.info("Tenant created", tenant_id=str(tenant.id))
        return tenant

    async def list_with_rules(self) -> list[TenantWithRules]:
        tenants = await self._tenants.list_all()
        rules = await self._rules.list_all()
        return [
            TenantWithRules(tenant=t, rules=tuple(r for r in rules if r.tenant_id == t.id))
            for t in tenants
        ]
