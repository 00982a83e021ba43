"""
Scenario summary - agrégats sur les feuilles de l'arbre de décision

DÉFINITIONS:
- expected_pnl = Σ probability * total_pnl (toutes feuilles, continues inclus)
- probability_of_profit = Σ probability des feuilles avec total_pnl > 0
- unresolved_probability = masse des feuilles 'continues' (tronquées, non perdues)
"""
import logging
from typing import Dict

import pandas as pd
from pydantic import Field

from models.decision_tree import CamelModel, DecisionTree

logger = logging.getLogger(__name__)

LEAF_STATUSES = ['stop', 'target', 'exit', 'continues']
SCENARIO_COLUMNS = [
    'leaf_index', 'path_pattern', 'status', 'total_pnl_cents',
    'probability', 'wins', 'losses', 'depth',
]


class TreeSummary(CamelModel):
    leaf_count: int
    total_probability: float
    expected_pnl_cents: float
    worst_case_pnl_cents: int
    best_case_pnl_cents: int
    probability_of_profit: float
    unresolved_probability: float
    probability_by_status: Dict[str, float] = Field(default_factory=dict)


def scenario_table(tree: DecisionTree) -> pd.DataFrame:
    """Une ligne par feuille, ordre gauche→droite."""
    rows = [
        {
            'leaf_index': leaf.leaf_index,
            'path_pattern': leaf.path_pattern,
            'status': leaf.status,
            'total_pnl_cents': leaf.total_pnl_cents,
            'probability': leaf.probability,
            'wins': leaf.wins,
            'losses': leaf.losses,
            'depth': leaf.depth,
        }
        for leaf in tree.leaves
    ]
    return pd.DataFrame(rows, columns=SCENARIO_COLUMNS)


def breakdown_by_status(tree: DecisionTree) -> pd.DataFrame:
    """
    Segmentation par statut: nb feuilles, probabilité, P&L espéré conditionnel.

    Les statuts absents apparaissent avec 0 (index = LEAF_STATUSES).
    """
    df = scenario_table(tree)
    df['weighted_pnl'] = df['probability'] * df['total_pnl_cents']
    grouped = df.groupby('status').agg(
        leaves=('leaf_index', 'count'),
        probability=('probability', 'sum'),
        weighted_pnl=('weighted_pnl', 'sum'),
        worst_pnl_cents=('total_pnl_cents', 'min'),
        best_pnl_cents=('total_pnl_cents', 'max'),
    )
    grouped = grouped.reindex(LEAF_STATUSES)
    grouped[['leaves', 'probability', 'weighted_pnl']] = (
        grouped[['leaves', 'probability', 'weighted_pnl']].fillna(0)
    )
    grouped['leaves'] = grouped['leaves'].astype(int)
    grouped['expected_pnl_cents'] = 0.0
    has_mass = grouped['probability'] > 0
    grouped.loc[has_mass, 'expected_pnl_cents'] = (
        grouped.loc[has_mass, 'weighted_pnl'] / grouped.loc[has_mass, 'probability']
    )
    return grouped.drop(columns=['weighted_pnl'])


def summarize_tree(tree: DecisionTree) -> TreeSummary:
    df = scenario_table(tree)
    by_status = df.groupby('status')['probability'].sum()
    probability_by_status = {status: float(by_status.get(status, 0.0)) for status in LEAF_STATUSES}

    summary = TreeSummary(
        leaf_count=len(df),
        total_probability=float(df['probability'].sum()),
        expected_pnl_cents=float((df['probability'] * df['total_pnl_cents']).sum()),
        worst_case_pnl_cents=int(df['total_pnl_cents'].min()),
        best_case_pnl_cents=int(df['total_pnl_cents'].max()),
        probability_of_profit=float(df.loc[df['total_pnl_cents'] > 0, 'probability'].sum()),
        unresolved_probability=probability_by_status['continues'],
        probability_by_status=probability_by_status,
    )
    logger.debug(f"Tree summary: {summary}")
    return summary
