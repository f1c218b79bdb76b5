from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from ratelimiter.limits.domain.entities import RuleType


class TenantCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = Field(max_length=255)


class RuleResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)
    id: UUID
    tenant_id: UUID
    rule_type: RuleType
    limit: int
    window_seconds: int
    api_pattern: Optional[str] = None
    created_at: datetime


class TenantResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)
    id: UUID
    name: str
    created_at: datetime


class TenantWithRulesResponse(TenantResponse):
    rules: List[RuleResponse] = Field(default_factory=list)


class RuleCreateRequest(BaseModel):
    # range and cross-field checks: validate_rule_definition
    model_config = ConfigDict(extra="forbid")
    rule_type: str
    limit: StrictInt
    window_seconds: StrictInt
    api_pattern: Optional[str] = None


class RateLimitCheckRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tenant_id: str = Field(min_length=1)
    source_address: str = Field(min_length=1)
    target: Optional[str] = None


class RateLimitDecisionResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)
    allowed: bool
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_epoch_seconds: Optional[int] = None
    explanation: Optional[str] = None


class ProxyRequest(BaseModel):
    # everything besides tenant_id/api_url is echoed back as the payload
    model_config = ConfigDict(extra="allow")
    tenant_id: str = Field(min_length=1)
    api_url: str = Field(min_length=1)

    def payload(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class ProxyResponse(BaseModel):
    success: bool = True
    message: str
    proxied_to: str
    tenant_id: str
    client_ip: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
