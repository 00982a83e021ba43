"""Modèles de l'arbre de décision - valeurs effectives, situations, noeuds"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, Dict, List, Literal, Optional, Union

LeafStatus = Literal['stop', 'target', 'exit', 'continues']


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EffectiveValues(CamelModel):
    """Valeurs en vigueur pour le solde courant (jamais persistées telles quelles)."""
    risk_cents: int
    daily_loss_cents: int
    weekly_loss_cents: Optional[int] = None
    monthly_loss_cents: int
    daily_profit_target_cents: Optional[int] = None


class TradeSituation(CamelModel):
    """Une position dans la chaîne de pertes (index 0 = trade de base)."""
    trade_number: int
    is_base_trade: bool
    risk_cents: int
    cumulative_loss_before: int
    worst_case_total_cents: int
    max_contracts: Optional[int] = None
    min_stop_points: Optional[float] = None
    risk_label: Optional[str] = None


class SituationOutcome(CamelModel):
    """Ce qui se passe après T<n> selon le résultat (vue détail par trade)."""
    trade_number: int
    on_win: Literal['enter_gain_mode', 'continue_recovery', 'recovery_complete']
    on_loss: Literal['enter_recovery', 'proceed_to_next', 'max_loss_reached', 'sequence_exhausted']
    buffer_remaining_cents: int


# ============================================================================
# NOEUDS
# ============================================================================

class LeafNode(CamelModel):
    type: Literal['leaf'] = 'leaf'
    id: str
    depth: int
    total_pnl_cents: int
    path_pattern: str
    probability: float
    wins: int
    losses: int
    leaf_index: int
    status: LeafStatus


class DecisionNode(CamelModel):
    type: Literal['decision'] = 'decision'
    id: str
    depth: int
    trade_number: int
    risk_cents: int
    loss: TreeNode
    gain: TreeNode


class RootNode(CamelModel):
    type: Literal['root'] = 'root'
    id: str = 'root'
    depth: int = 0
    trade_number: int = 1
    risk_cents: int
    loss: TreeNode
    gain: TreeNode


TreeNode = Annotated[
    Union[RootNode, DecisionNode, LeafNode],
    Field(discriminator='type'),
]

DecisionNode.model_rebuild()
RootNode.model_rebuild()


class DecisionTree(CamelModel):
    """Arbre binaire strict: tout noeud non-feuille a exactement deux enfants."""
    root: RootNode
    leaves: List[LeafNode]
    max_depth: int

    def iter_nodes(self) -> List[Union[RootNode, DecisionNode, LeafNode]]:
        """Parcours pré-ordre (noeud, perte, gain)."""
        nodes = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            nodes.append(node)
            if node.type != 'leaf':
                stack.append(node.gain)
                stack.append(node.loss)
        return nodes

    def pnl_by_path(self) -> Dict[str, int]:
        return {leaf.path_pattern: leaf.total_pnl_cents for leaf in self.leaves}
