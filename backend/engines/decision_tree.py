"""
Decision Tree Builder - arbre binaire exhaustif des issues d'une journée

Racine = T1 (risque de base effectif):
- branche perte → sous-arbre de récupération (séquence lossRecovery)
- branche gain → sous-arbre gain mode (singleTarget ou compounding)

Chaque feuille porte le P&L cumulé, le chemin ("L-G-..."), la probabilité
p^wins * (1-p)^losses et un statut (stop / target / exit / continues).

Jamais d'exception: les cas numériques dégénérés (risque nul, séquence
épuisée, profondeur max) deviennent des feuilles classées.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from config.settings import settings
from models.decision_tree import (
    DecisionTree,
    DecisionNode,
    LeafNode,
    LeafStatus,
    RootNode,
    TradeSituation,
    TreeNode,
)
from models.risk_policy import GainMode, LossRecovery, SingleTargetGain
from utils.money import percent_of, round_cents

logger = logging.getLogger(__name__)


@dataclass
class _Path:
    """Position courante dans l'arbre (immuable par convention: extend() renvoie une copie)."""
    depth: int
    pnl_cents: int
    tokens: List[str]
    wins: int
    losses: int

    def extend(self, token: str, delta_cents: int) -> '_Path':
        is_win = token == 'G'
        return _Path(
            depth=self.depth + 1,
            pnl_cents=self.pnl_cents + delta_cents,
            tokens=self.tokens + [token],
            wins=self.wins + (1 if is_win else 0),
            losses=self.losses + (0 if is_win else 1),
        )

    @property
    def node_key(self) -> str:
        return ''.join(self.tokens)


@dataclass
class _TreeAccumulator:
    """Feuilles collectées dans l'ordre gauche→droite + profondeur max."""
    win_probability: float
    leaves: List[LeafNode] = field(default_factory=list)
    max_depth: int = 0

    def make_leaf(self, path: _Path, status: LeafStatus) -> LeafNode:
        leaf_index = len(self.leaves)
        leaf = LeafNode(
            id=f"leaf-{leaf_index}",
            depth=path.depth,
            total_pnl_cents=path.pnl_cents,
            path_pattern='-'.join(path.tokens),
            probability=(self.win_probability ** path.wins) * ((1 - self.win_probability) ** path.losses),
            wins=path.wins,
            losses=path.losses,
            leaf_index=leaf_index,
            status=status,
        )
        self.max_depth = max(self.max_depth, leaf.depth)
        self.leaves.append(leaf)
        return leaf


class DecisionTreeBuilder:
    """
    Construit l'arbre via deux récursions (perte / gain) sans état partagé:
    l'accumulateur de feuilles est passé explicitement à chaque appel.
    """

    def __init__(
        self,
        situations: List[TradeSituation],
        reward_ratio: float,
        loss_recovery: LossRecovery,
        gain_mode: GainMode,
        base_risk_cents: int,
        stop_after_sequence: bool,
        win_probability: Optional[float] = None,
        max_compounding_depth: Optional[int] = None,
        max_tree_depth: Optional[int] = None,
    ):
        self.situations = situations
        self.reward_ratio = reward_ratio
        self.execute_all_regardless = loss_recovery.execute_all_regardless
        self.gain_mode = gain_mode
        self.base_risk_cents = base_risk_cents
        self.stop_after_sequence = stop_after_sequence
        self.win_probability = settings.WIN_PROBABILITY if win_probability is None else win_probability
        self.max_compounding_depth = (
            settings.MAX_COMPOUNDING_DEPTH if max_compounding_depth is None else max_compounding_depth
        )
        self.max_tree_depth = settings.MAX_TREE_DEPTH if max_tree_depth is None else max_tree_depth

    def _gain_cents(self, risk_cents: int) -> int:
        return round_cents(risk_cents * self.reward_ratio)

    def build(self) -> Optional[DecisionTree]:
        if not self.situations:
            logger.warning("Cannot build decision tree: no trade situations")
            return None

        acc = _TreeAccumulator(win_probability=self.win_probability)
        base_risk = self.base_risk_cents
        start = _Path(depth=0, pnl_cents=0, tokens=[], wins=0, losses=0)

        # Perte d'abord: les feuilles sont indexées de gauche à droite
        loss_child = self._build_loss_subtree(acc, 0, start.extend('L', -base_risk))
        gain_child = self._build_gain_subtree(acc, start.extend('G', self._gain_cents(base_risk)))

        root = RootNode(
            risk_cents=base_risk,
            trade_number=self.situations[0].trade_number,
            loss=loss_child,
            gain=gain_child,
        )
        tree = DecisionTree(root=root, leaves=acc.leaves, max_depth=acc.max_depth)
        logger.info(
            f"Decision tree built: {len(tree.leaves)} leaves, max_depth={tree.max_depth}, "
            f"base_risk={base_risk}, gain_mode={self.gain_mode.type}"
        )
        return tree

    # ========================================================================
    # SOUS-ARBRE PERTE (récupération)
    # ========================================================================

    def _build_loss_subtree(self, acc: _TreeAccumulator, step_index: int, path: _Path) -> TreeNode:
        situation_index = step_index + 1
        if situation_index >= len(self.situations):
            # Séquence épuisée (ou aucune étape configurée)
            return acc.make_leaf(path, 'stop')

        situation = self.situations[situation_index]
        is_last_step = situation_index >= len(self.situations) - 1

        # LOSS
        loss_path = path.extend('L', -situation.risk_cents)
        if is_last_step:
            loss_child = acc.make_leaf(loss_path, 'stop')
        else:
            loss_child = self._build_loss_subtree(acc, step_index + 1, loss_path)

        # GAIN
        gain_path = path.extend('G', self._gain_cents(situation.risk_cents))
        if not self.execute_all_regardless or is_last_step:
            gain_child = acc.make_leaf(gain_path, 'stop' if self.stop_after_sequence else 'exit')
        else:
            # executeAllRegardless: le gain ne termine pas la journée
            gain_child = self._build_loss_subtree(acc, step_index + 1, gain_path)

        return DecisionNode(
            id=f"d-{situation.trade_number}-{path.node_key}",
            depth=path.depth,
            trade_number=situation.trade_number,
            risk_cents=situation.risk_cents,
            loss=loss_child,
            gain=gain_child,
        )

    # ========================================================================
    # SOUS-ARBRE GAIN
    # ========================================================================

    def _build_gain_subtree(self, acc: _TreeAccumulator, path: _Path) -> TreeNode:
        if isinstance(self.gain_mode, SingleTargetGain):
            gain_per_trade = self._gain_cents(self.base_risk_cents)
            if gain_per_trade <= 0:
                logger.warning("singleTarget: gain per trade is 0, cannot size gain side")
                return acc.make_leaf(path, 'continues')

            trades_to_target = math.ceil(self.gain_mode.daily_target_cents / gain_per_trade)
            if trades_to_target <= 1:
                # Le gain de T1 atteint déjà l'objectif
                return acc.make_leaf(path, 'target')
            return self._build_single_target_chain(acc, path, gain_per_trade, trades_to_target, 1)

        # Compounding: gains accumulés = P&L courant (gain de T1)
        return self._build_compounding_chain(acc, path, path.pnl_cents, 1)

    def _build_single_target_chain(
        self,
        acc: _TreeAccumulator,
        path: _Path,
        gain_per_trade: int,
        trades_to_target: int,
        gains_accumulated: int,
    ) -> TreeNode:
        if gains_accumulated >= trades_to_target:
            return acc.make_leaf(path, 'target')
        if path.depth >= self.max_tree_depth:
            logger.warning(f"singleTarget chain truncated at depth {path.depth} ({gains_accumulated} gains)")
            return acc.make_leaf(path, 'continues')

        trade_number = gains_accumulated + 1
        base_risk = self.base_risk_cents

        # Perte côté gain → stop
        loss_child = acc.make_leaf(path.extend('L', -base_risk), 'stop')

        win_path = path.extend('G', gain_per_trade)
        new_gains = gains_accumulated + 1
        if new_gains >= trades_to_target:
            gain_child = acc.make_leaf(win_path, 'target')
        else:
            gain_child = self._build_single_target_chain(
                acc, win_path, gain_per_trade, trades_to_target, new_gains
            )

        return DecisionNode(
            id=f"dg-{trade_number}-{path.node_key}",
            depth=path.depth,
            trade_number=trade_number,
            risk_cents=base_risk,
            loss=loss_child,
            gain=gain_child,
        )

    def _target_reached(self, pnl_cents: int) -> bool:
        target = self.gain_mode.daily_target_cents
        return target is not None and pnl_cents >= target

    def _build_compounding_chain(
        self,
        acc: _TreeAccumulator,
        path: _Path,
        accumulated_gains_cents: int,
        compounding_depth: int,
    ) -> TreeNode:
        if compounding_depth > self.max_compounding_depth:
            return acc.make_leaf(path, 'continues')

        if self._target_reached(path.pnl_cents):
            return acc.make_leaf(path, 'target')

        risk_cents = percent_of(accumulated_gains_cents, self.gain_mode.reinvestment_percent)
        if risk_cents <= 0:
            # Base de réinvestissement nulle: impossible de dimensionner le trade suivant
            logger.warning(f"Compounding risk collapsed to {risk_cents} at path {path.node_key}")
            return acc.make_leaf(path, 'continues')

        gain_cents = self._gain_cents(risk_cents)
        trade_number = compounding_depth + 1

        # Perte → stop
        loss_child = acc.make_leaf(path.extend('L', -risk_cents), 'stop')

        win_path = path.extend('G', gain_cents)
        is_last_compounding = compounding_depth + 1 >= self.max_compounding_depth
        if self._target_reached(win_path.pnl_cents):
            gain_child = acc.make_leaf(win_path, 'target')
        elif is_last_compounding:
            gain_child = acc.make_leaf(win_path, 'continues')
        else:
            gain_child = self._build_compounding_chain(
                acc, win_path, accumulated_gains_cents + gain_cents, compounding_depth + 1
            )

        return DecisionNode(
            id=f"dg-{trade_number}-{path.node_key}",
            depth=path.depth,
            trade_number=trade_number,
            risk_cents=risk_cents,
            loss=loss_child,
            gain=gain_child,
        )


def build_decision_tree(
    situations: List[TradeSituation],
    reward_ratio: float,
    loss_recovery: LossRecovery,
    gain_mode: GainMode,
    base_risk_cents: int,
    stop_after_sequence: bool,
    win_probability: Optional[float] = None,
) -> Optional[DecisionTree]:
    """
    Construit l'arbre de décision complet.

    Returns:
        DecisionTree, ou None si situations est vide
    """
    return DecisionTreeBuilder(
        situations=situations,
        reward_ratio=reward_ratio,
        loss_recovery=loss_recovery,
        gain_mode=gain_mode,
        base_risk_cents=base_risk_cents,
        stop_after_sequence=stop_after_sequence,
        win_probability=win_probability,
    ).build()
