"""Modèles Risk Policy - configuration journalière du trader (JSON camelCase)"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Literal, Optional, Union


class PolicyModel(BaseModel):
    """Base commune: clés JSON camelCase, attributs snake_case, immuable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============================================================================
# RISK SIZING MODE
# ============================================================================

class FixedSizing(PolicyModel):
    type: Literal['fixed'] = 'fixed'


class PercentOfBalanceSizing(PolicyModel):
    type: Literal['percentOfBalance'] = 'percentOfBalance'
    risk_percent: float


class FixedRatioSizing(PolicyModel):
    type: Literal['fixedRatio'] = 'fixedRatio'
    base_contract_risk_cents: int
    delta_cents: Optional[int] = None


class KellyFractionalSizing(PolicyModel):
    """Pas d'effet sur le risque effectif (fallback sur le risque stocké)."""
    type: Literal['kellyFractional'] = 'kellyFractional'
    divisor: float = 4.0


RiskSizingMode = Annotated[
    Union[FixedSizing, PercentOfBalanceSizing, FixedRatioSizing, KellyFractionalSizing],
    Field(discriminator='type'),
]


# ============================================================================
# LOSS RECOVERY
# ============================================================================

class PercentOfBase(PolicyModel):
    type: Literal['percentOfBase'] = 'percentOfBase'
    percent: float


class FixedCents(PolicyModel):
    type: Literal['fixedCents'] = 'fixedCents'
    amount_cents: int


class SameAsPrevious(PolicyModel):
    type: Literal['sameAsPrevious'] = 'sameAsPrevious'


RiskCalculation = Annotated[
    Union[PercentOfBase, FixedCents, SameAsPrevious],
    Field(discriminator='type'),
]


class RecoveryStep(PolicyModel):
    """Un trade de la séquence de récupération (T2, T3, ...)."""
    risk_calculation: RiskCalculation
    max_contracts_override: Optional[int] = None


# Profondeur de l'arbre côté perte = 1 + nb d'étapes, à garder sous MAX_TREE_DEPTH
MAX_RECOVERY_STEPS = 100


class LossRecovery(PolicyModel):
    sequence: List[RecoveryStep] = Field(default_factory=list, max_length=MAX_RECOVERY_STEPS)
    execute_all_regardless: bool = False  # un gain en récupération ne termine pas la journée
    stop_after_sequence: bool = True


# ============================================================================
# GAIN MODE
# ============================================================================

class CompoundingGain(PolicyModel):
    """Réinvestit reinvestment_percent des gains accumulés dans le trade suivant."""
    type: Literal['compounding'] = 'compounding'
    reinvestment_percent: float
    stop_on_first_loss: bool = True
    daily_target_cents: Optional[int] = None


class SingleTargetGain(PolicyModel):
    """Taille fixe (risque de base) jusqu'à l'objectif journalier cumulé."""
    type: Literal['singleTarget'] = 'singleTarget'
    daily_target_cents: int


GainMode = Annotated[
    Union[CompoundingGain, SingleTargetGain],
    Field(discriminator='type'),
]


# ============================================================================
# CASCADING LIMITS
# ============================================================================

class AbsoluteLimits(PolicyModel):
    type: Literal['absolute'] = 'absolute'


class PercentOfInitialLimits(PolicyModel):
    type: Literal['percentOfInitial'] = 'percentOfInitial'
    daily_pct: float
    weekly_pct: Optional[float] = None
    monthly_pct: float


class RMultipleLimits(PolicyModel):
    type: Literal['rMultiples'] = 'rMultiples'
    daily_r: float
    weekly_r: Optional[float] = None
    monthly_r: float


LimitMode = Annotated[
    Union[AbsoluteLimits, PercentOfInitialLimits, RMultipleLimits],
    Field(discriminator='type'),
]


class CascadingLimits(PolicyModel):
    daily_loss_cents: int
    weekly_loss_cents: Optional[int] = None
    monthly_loss_cents: int
    limit_mode: LimitMode = Field(default_factory=AbsoluteLimits)


# ============================================================================
# BASE TRADE / EXECUTION
# ============================================================================

class BaseTrade(PolicyModel):
    risk_cents: int = Field(gt=0)
    max_contracts: Optional[int] = None
    min_stop_points: Optional[float] = None


class OperatingHours(PolicyModel):
    start: str  # "09:01"
    end: str    # "17:00"


class ExecutionConstraints(PolicyModel):
    min_stop_points: Optional[float] = None
    max_contracts: Optional[int] = None
    operating_hours: Optional[OperatingHours] = None


class RiskPolicy(PolicyModel):
    """
    Politique de risque journalière complète.

    Gouverne le comportement de la journée: perte sur T1 → séquence de
    récupération, gain sur T1 → gain mode, limites en cascade jour/semaine/mois.
    """
    name: str = 'Untitled policy'
    description: Optional[str] = None
    base_trade: BaseTrade
    risk_sizing_mode: RiskSizingMode = Field(default_factory=FixedSizing)
    loss_recovery: LossRecovery = Field(default_factory=LossRecovery)
    gain_mode: GainMode
    cascading_limits: CascadingLimits
    execution_constraints: ExecutionConstraints = Field(default_factory=ExecutionConstraints)
    daily_profit_target_cents: Optional[int] = None

    @property
    def stored_base_risk_cents(self) -> int:
        return self.base_trade.risk_cents

    @property
    def stored_daily_target_cents(self) -> Optional[int]:
        """Objectif stocké: champ explicite, sinon celui du gain mode."""
        if self.daily_profit_target_cents is not None:
            return self.daily_profit_target_cents
        return self.gain_mode.daily_target_cents


def load_policy(raw_json: str) -> RiskPolicy:
    """Parse une politique JSON (lève pydantic.ValidationError si malformée)."""
    return RiskPolicy.model_validate_json(raw_json)
