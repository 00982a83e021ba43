"""
Effective Parameter Resolver

Transforme une politique stockée + solde courant en valeurs effectives
(risque de base, limites jour/semaine/mois, objectif journalier).

Fonction pure: jamais d'exception, les cas dégénérés retombent sur les
valeurs stockées, jamais sur des montants négatifs.
"""
import logging
from typing import Optional

from models.decision_tree import EffectiveValues
from models.risk_policy import (
    RiskPolicy,
    GainMode,
    PercentOfBalanceSizing,
    FixedRatioSizing,
    PercentOfInitialLimits,
    RMultipleLimits,
)
from utils.money import round_cents

logger = logging.getLogger(__name__)


def resolve_risk_cents(policy: RiskPolicy, account_balance_cents: int) -> int:
    """
    Risque effectif selon risk_sizing_mode.

    - fixed / kellyFractional / inconnu → risque stocké
    - percentOfBalance → round(balance * riskPercent / 100)
    - fixedRatio → baseContractRiskCents
    """
    stored = policy.stored_base_risk_cents
    if account_balance_cents <= 0:
        return stored

    mode = policy.risk_sizing_mode
    if isinstance(mode, PercentOfBalanceSizing):
        return max(0, round_cents(account_balance_cents * mode.risk_percent / 100))
    if isinstance(mode, FixedRatioSizing):
        return max(0, mode.base_contract_risk_cents)
    return stored


def _scale(value: Optional[float], amount_cents: int, divisor: float = 1) -> Optional[int]:
    if value is None:
        return None
    return max(0, round_cents(amount_cents * value / divisor))


def resolve_effective_values(policy: RiskPolicy, account_balance_cents: int) -> EffectiveValues:
    """
    Résout les valeurs effectives pour un solde donné.

    Args:
        policy: Politique stockée (structurellement valide)
        account_balance_cents: Solde courant en centimes

    Returns:
        EffectiveValues (si balance ≤ 0: valeurs stockées non mises à l'échelle)
    """
    limits = policy.cascading_limits
    stored_risk = policy.stored_base_risk_cents
    stored_target = policy.stored_daily_target_cents

    risk_cents = resolve_risk_cents(policy, account_balance_cents)

    daily_loss = limits.daily_loss_cents
    weekly_loss = limits.weekly_loss_cents
    monthly_loss = limits.monthly_loss_cents

    if account_balance_cents > 0:
        mode = limits.limit_mode
        if isinstance(mode, PercentOfInitialLimits):
            daily_loss = _scale(mode.daily_pct, account_balance_cents, 100)
            weekly_loss = _scale(mode.weekly_pct, account_balance_cents, 100)
            monthly_loss = _scale(mode.monthly_pct, account_balance_cents, 100)
        elif isinstance(mode, RMultipleLimits):
            daily_loss = _scale(mode.daily_r, risk_cents)
            weekly_loss = _scale(mode.weekly_r, risk_cents)
            monthly_loss = _scale(mode.monthly_r, risk_cents)
        # absolute: valeurs stockées inchangées

    # Objectif mis à l'échelle pour préserver son multiple de R
    # ex: 3000 stockés à 500 de risque = 6R → risque effectif 300 × 6 = 1800
    daily_target = stored_target
    if stored_target is not None and stored_risk > 0 and risk_cents != stored_risk:
        daily_target = max(0, round_cents(stored_target * risk_cents / stored_risk))

    effective = EffectiveValues(
        risk_cents=risk_cents,
        daily_loss_cents=daily_loss,
        weekly_loss_cents=weekly_loss,
        monthly_loss_cents=monthly_loss,
        daily_profit_target_cents=daily_target,
    )
    logger.debug(f"Effective values for balance={account_balance_cents}: {effective}")
    return effective


def resolve_gain_mode(gain_mode: GainMode, daily_target_cents: Optional[int]) -> GainMode:
    """Copie du gain mode avec l'objectif effectif (inchangé si None)."""
    if daily_target_cents is None:
        return gain_mode
    return gain_mode.model_copy(update={'daily_target_cents': daily_target_cents})
