"""Engines package"""
from .effective_values import resolve_effective_values
from .trade_situations import build_trade_situations
from .decision_tree import build_decision_tree

__all__ = [
    'resolve_effective_values',
    'build_trade_situations',
    'build_decision_tree'
]
