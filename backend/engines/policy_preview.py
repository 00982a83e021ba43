"""
Policy Preview Engine - resolve → situations → arbre → résumé

Point d'entrée unique pour prévisualiser une politique de risque pour un solde.
Résultats mémoïsés: (politique, solde) identiques → preview identique.
"""
import logging
from typing import List, Optional

from config.settings import settings
from engines.decision_tree import build_decision_tree
from engines.effective_values import resolve_effective_values, resolve_gain_mode
from engines.plan_derivation import PlanPercentages, derive_plan
from engines.preview_cache import PreviewCache
from engines.trade_situations import build_trade_situations, describe_situation_outcomes
from engines.tree_summary import TreeSummary, summarize_tree
from models.decision_tree import CamelModel, DecisionTree, EffectiveValues, SituationOutcome, TradeSituation
from models.risk_policy import RiskPolicy
from utils.money import format_cents

logger = logging.getLogger(__name__)


class PolicyPreview(CamelModel):
    policy_name: str
    account_balance_cents: int
    effective_values: EffectiveValues
    situations: List[TradeSituation]
    situation_outcomes: List[SituationOutcome]
    tree: Optional[DecisionTree] = None
    summary: Optional[TreeSummary] = None
    plan: PlanPercentages


class PolicyPreviewEngine:
    """Orchestre Resolver + Builders, avec cache LRU."""

    def __init__(self, reward_ratio: Optional[float] = None, cache_size: Optional[int] = None):
        self.reward_ratio = settings.REWARD_RATIO if reward_ratio is None else reward_ratio
        self.cache = PreviewCache(max_size=settings.PREVIEW_CACHE_SIZE if cache_size is None else cache_size)
        logger.info(f"PolicyPreviewEngine initialized: R:R=1:{self.reward_ratio:g}, "
                    f"cache_size={self.cache.max_size}")

    def compute(self, policy: RiskPolicy, account_balance_cents: int) -> PolicyPreview:
        """Calcul complet, sans cache."""
        effective = resolve_effective_values(policy, account_balance_cents)
        situations = build_trade_situations(policy, effective)
        outcomes = describe_situation_outcomes(
            situations,
            policy.loss_recovery.execute_all_regardless,
            effective.daily_loss_cents,
        )

        tree = build_decision_tree(
            situations=situations,
            reward_ratio=self.reward_ratio,
            loss_recovery=policy.loss_recovery,
            gain_mode=resolve_gain_mode(policy.gain_mode, effective.daily_profit_target_cents),
            base_risk_cents=effective.risk_cents,
            stop_after_sequence=policy.loss_recovery.stop_after_sequence,
        )
        summary = summarize_tree(tree) if tree is not None else None

        if summary is not None and summary.unresolved_probability > 0:
            logger.info(f"Preview '{policy.name}': {summary.unresolved_probability:.2%} "
                        f"of probability mass truncated at depth cap")

        logger.info(
            f"Preview '{policy.name}' @ balance {format_cents(account_balance_cents)}: "
            f"risk={format_cents(effective.risk_cents)}, {len(situations)} situations, "
            f"{len(tree.leaves) if tree else 0} leaves"
        )
        return PolicyPreview(
            policy_name=policy.name,
            account_balance_cents=account_balance_cents,
            effective_values=effective,
            situations=situations,
            situation_outcomes=outcomes,
            tree=tree,
            summary=summary,
            plan=derive_plan(effective, account_balance_cents, policy),
        )

    def preview(self, policy: RiskPolicy, account_balance_cents: int) -> PolicyPreview:
        """Preview mémoïsée."""
        key = self.cache.get_cache_key(policy, account_balance_cents)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = self.compute(policy, account_balance_cents)
        self.cache.put(key, result)
        return result
