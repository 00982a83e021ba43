"""Utilities package"""
from .money import round_cents, percent_of, cents_to_percent

__all__ = [
    'round_cents',
    'percent_of',
    'cents_to_percent'
]
