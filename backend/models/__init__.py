"""Models package"""
from .risk_policy import RiskPolicy, RecoveryStep, load_policy
from .decision_tree import EffectiveValues, TradeSituation, DecisionTree, LeafNode, DecisionNode, RootNode

__all__ = [
    'RiskPolicy',
    'RecoveryStep',
    'load_policy',
    'EffectiveValues',
    'TradeSituation',
    'DecisionTree',
    'LeafNode',
    'DecisionNode',
    'RootNode'
]
