"""
Plan derivation - valeurs effectives → pourcentages du solde courant

Consommateur fin de EffectiveValues: c'est cette forme aplatie (en %) que le
plan mensuel persiste, pas les centimes.
"""
from typing import Optional

from models.decision_tree import CamelModel, EffectiveValues
from models.risk_policy import RiskPolicy, PercentOfBase, FixedCents
from utils.money import cents_to_percent


class PlanPercentages(CamelModel):
    risk_per_trade_pct: Optional[float] = None
    daily_loss_pct: Optional[float] = None
    weekly_loss_pct: Optional[float] = None
    monthly_loss_pct: Optional[float] = None
    daily_target_pct: Optional[float] = None
    derived_max_daily_trades: Optional[int] = None
    risk_reduction_factor: Optional[float] = None


def risk_reduction_factor(policy: RiskPolicy, effective_risk_cents: int) -> Optional[float]:
    """
    Facteur de réduction après perte, dérivé de la 1re étape de récupération.

    Seulement si au moins une étape réduit le risque sous la base
    (percentOfBase < 100, ou fixedCents < risque effectif).
    """
    sequence = policy.loss_recovery.sequence
    if not sequence:
        return None

    def reduces(step) -> bool:
        calc = step.risk_calculation
        if isinstance(calc, PercentOfBase):
            return calc.percent < 100
        if isinstance(calc, FixedCents):
            return calc.amount_cents < effective_risk_cents
        return False

    if not any(reduces(step) for step in sequence):
        return None

    first = sequence[0].risk_calculation
    if isinstance(first, PercentOfBase):
        return first.percent / 100
    if isinstance(first, FixedCents) and effective_risk_cents > 0:
        return first.amount_cents / effective_risk_cents
    return None


def derive_plan(effective: EffectiveValues, balance_cents: int, policy: RiskPolicy) -> PlanPercentages:
    """Pourcentages du solde (None si solde ≤ 0) + nb max de trades/jour."""
    max_trades = None
    if effective.risk_cents > 0:
        max_trades = effective.daily_loss_cents // effective.risk_cents

    return PlanPercentages(
        risk_per_trade_pct=cents_to_percent(effective.risk_cents, balance_cents),
        daily_loss_pct=cents_to_percent(effective.daily_loss_cents, balance_cents),
        weekly_loss_pct=cents_to_percent(effective.weekly_loss_cents, balance_cents),
        monthly_loss_pct=cents_to_percent(effective.monthly_loss_cents, balance_cents),
        daily_target_pct=cents_to_percent(effective.daily_profit_target_cents, balance_cents),
        derived_max_daily_trades=max_trades,
        risk_reduction_factor=risk_reduction_factor(policy, effective.risk_cents),
    )
