"""
Trade Situation Sequence Builder

Progression linéaire "le pire cas continue de perdre" T1..Tn:
T1 = trade de base au risque effectif, puis un trade par étape de récupération.
"""
import logging
from typing import List, Optional

from models.decision_tree import EffectiveValues, TradeSituation, SituationOutcome
from models.risk_policy import (
    RiskPolicy,
    RecoveryStep,
    PercentOfBase,
    FixedCents,
)
from utils.money import percent_of

logger = logging.getLogger(__name__)


def compute_step_risk(step: RecoveryStep, base_risk_cents: int, previous_risk_cents: int) -> int:
    """
    Risque d'une étape de récupération.

    percentOfBase s'applique au risque de BASE effectif (pas au précédent),
    fixedCents est littéral, sameAsPrevious répète le risque précédent.
    """
    calc = step.risk_calculation
    if isinstance(calc, PercentOfBase):
        return percent_of(base_risk_cents, calc.percent)
    if isinstance(calc, FixedCents):
        return calc.amount_cents
    return previous_risk_cents


def risk_label(step: RecoveryStep) -> str:
    calc = step.risk_calculation
    if isinstance(calc, PercentOfBase):
        return f"{calc.percent:g}% of base"
    if isinstance(calc, FixedCents):
        return "fixed"
    return "same as previous"


def build_trade_situations(policy: RiskPolicy, effective: EffectiveValues) -> List[TradeSituation]:
    """
    Construit la séquence T1..Tn (jamais vide).

    Returns:
        Liste ordonnée, index 0 = trade de base
    """
    base_risk = effective.risk_cents
    constraints = policy.execution_constraints

    situations = [
        TradeSituation(
            trade_number=1,
            is_base_trade=True,
            risk_cents=base_risk,
            cumulative_loss_before=0,
            worst_case_total_cents=base_risk,
            max_contracts=policy.base_trade.max_contracts,
            min_stop_points=policy.base_trade.min_stop_points,
            risk_label=None,
        )
    ]

    cumulative_loss = base_risk
    previous_risk = base_risk
    for step in policy.loss_recovery.sequence:
        step_risk = compute_step_risk(step, base_risk, previous_risk)
        max_contracts = step.max_contracts_override
        if max_contracts is None:
            max_contracts = constraints.max_contracts

        situations.append(TradeSituation(
            trade_number=len(situations) + 1,
            is_base_trade=False,
            risk_cents=step_risk,
            cumulative_loss_before=cumulative_loss,
            worst_case_total_cents=cumulative_loss + step_risk,
            max_contracts=max_contracts,
            min_stop_points=constraints.min_stop_points,
            risk_label=risk_label(step),
        ))
        cumulative_loss += step_risk
        previous_risk = step_risk

    logger.debug(f"Built {len(situations)} trade situations, worst case={cumulative_loss}")
    return situations


def describe_situation_outcomes(
    situations: List[TradeSituation],
    execute_all_regardless: bool,
    daily_loss_cents: int,
) -> List[SituationOutcome]:
    """Issue gain/perte de chaque situation + marge restante vs limite journalière."""
    outcomes = []
    last_index = len(situations) - 1
    for index, situation in enumerate(situations):
        is_last = index == last_index

        if situation.is_base_trade:
            on_win = 'enter_gain_mode'
        elif not is_last and execute_all_regardless:
            on_win = 'continue_recovery'
        else:
            on_win = 'recovery_complete'

        if situation.is_base_trade and not is_last:
            on_loss = 'enter_recovery'
        elif not is_last:
            on_loss = 'proceed_to_next'
        elif situation.worst_case_total_cents >= daily_loss_cents:
            on_loss = 'max_loss_reached'
        else:
            on_loss = 'sequence_exhausted'

        outcomes.append(SituationOutcome(
            trade_number=situation.trade_number,
            on_win=on_win,
            on_loss=on_loss,
            buffer_remaining_cents=daily_loss_cents - situation.worst_case_total_cents,
        ))
    return outcomes


def worst_case_loss_cents(situations: List[TradeSituation]) -> Optional[int]:
    """Perte max par épuisement de la séquence (None si aucune situation)."""
    if not situations:
        return None
    return situations[-1].worst_case_total_cents
