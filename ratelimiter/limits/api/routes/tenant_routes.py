from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ratelimiter.dependencies import get_rule_service, get_tenant_service
from ratelimiter.limits.api.schemas import (
    RuleCreateRequest,
    RuleResponse,
    TenantCreateRequest,
    TenantResponse,
    TenantWithRulesResponse,
)
from ratelimiter.limits.application.services.rule_service import RuleService
from ratelimiter.limits.application.services.tenant_service import TenantService

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


@router.get("", response_model=List[TenantWithRulesResponse])
async def list_tenants(svc: TenantService = Depends(get_tenant_service)):
    items = await svc.list_with_rules()
    return [
        TenantWithRulesResponse(
            id=item.tenant.id,
            name=item.tenant.name,
            created_at=item.tenant.created_at,
            rules=[RuleResponse.model_validate(r) for r in item.rules],
        )
        for item in items
    ]


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(payload: TenantCreateRequest, svc: TenantService = Depends(get_tenant_service)):
    tenant = await svc.register(payload.name)
    return TenantResponse.model_validate(tenant)


@router.get("/{tenant_id}/rules", response_model=List[RuleResponse])
async def list_rules(tenant_id: UUID, svc: RuleService = Depends(get_rule_service)):
    rules = await svc.list_rules(tenant_id)
    return [RuleResponse.model_validate(r) for r in rules]


@router.post("/{tenant_id}/rules", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    tenant_id: UUID,
    payload: RuleCreateRequest,
    svc: RuleService = Depends(get_rule_service),
):
    rule = await svc.create_rule(
        tenant_id,
        rule_type=payload.rule_type,
        limit=payload.limit,
        window_seconds=payload.window_seconds,
        api_pattern=payload.api_pattern,
    )
    return RuleResponse.model_validate(rule)
