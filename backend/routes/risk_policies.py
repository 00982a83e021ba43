"""Risk Policy API Routes - preview de l'arbre de décision"""
from fastapi import APIRouter, HTTPException
from pydantic import Field
from typing import List, Dict, Any
import logging

from engines.effective_values import resolve_effective_values
from engines.plan_derivation import PlanPercentages, derive_plan
from engines.policy_preview import PolicyPreview, PolicyPreviewEngine
from engines.policy_templates import RiskPolicyTemplate, get_template, list_templates
from models.decision_tree import CamelModel, EffectiveValues
from models.risk_policy import RiskPolicy

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk-policies", tags=["risk-policies"])

# Global preview engine instance (singleton pattern)
_engine_instance = None


def get_preview_engine() -> PolicyPreviewEngine:
    """Get or create preview engine singleton"""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = PolicyPreviewEngine()
    return _engine_instance


# ============== Request/Response Models ==============

class PreviewRequest(CamelModel):
    """Policy + current account balance (cents)"""
    policy: RiskPolicy
    account_balance_cents: int = Field(default=0)


class EffectiveValuesResponse(CamelModel):
    """Balance-resolved values + plan percentages"""
    effective_values: EffectiveValues
    plan: PlanPercentages


# ============== Endpoints ==============

@router.post("/preview", response_model=PolicyPreview)
async def preview_policy(request: PreviewRequest):
    """
    Resolve the policy for the balance and build the full decision tree.

    Returns:
        effective values, trade situations, tree, scenario summary, plan
    """
    return get_preview_engine().preview(request.policy, request.account_balance_cents)


@router.post("/effective-values", response_model=EffectiveValuesResponse)
async def effective_values(request: PreviewRequest):
    """Effective values only (no tree)."""
    effective = resolve_effective_values(request.policy, request.account_balance_cents)
    return EffectiveValuesResponse(
        effective_values=effective,
        plan=derive_plan(effective, request.account_balance_cents, request.policy),
    )


@router.get("/templates", response_model=List[RiskPolicyTemplate])
async def get_templates():
    """List built-in policy templates"""
    return list_templates()


@router.get("/templates/{template_id}", response_model=RiskPolicyTemplate)
async def get_template_by_id(template_id: str):
    """Get a policy template by id"""
    try:
        return get_template(template_id)
    except KeyError:
        logger.warning(f"Template not found: {template_id}")
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")


@router.get("/cache")
async def cache_stats() -> Dict[str, Any]:
    """Preview cache statistics"""
    return get_preview_engine().cache.get_stats()
