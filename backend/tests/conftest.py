import sys
from pathlib import Path

import pytest


# Ensure 'backend' is on sys.path so tests can import 'models', 'engines', 'routes', 'config'.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from models.risk_policy import RiskPolicy  # noqa: E402


def _policy_payload(
    base_risk_cents=50000,
    sequence=None,
    execute_all_regardless=False,
    stop_after_sequence=True,
    gain_mode=None,
    risk_sizing_mode=None,
    limit_mode=None,
    daily_loss_cents=100000,
    weekly_loss_cents=250000,
    monthly_loss_cents=500000,
    daily_profit_target_cents=None,
):
    """Payload JSON camelCase d'une politique (1 étape à 50% + singleTarget 100000 par défaut)."""
    if sequence is None:
        sequence = [{'riskCalculation': {'type': 'percentOfBase', 'percent': 50}}]
    if gain_mode is None:
        gain_mode = {'type': 'singleTarget', 'dailyTargetCents': 100000}
    payload = {
        'name': 'Test policy',
        'baseTrade': {'riskCents': base_risk_cents, 'maxContracts': 2, 'minStopPoints': 10},
        'riskSizingMode': risk_sizing_mode or {'type': 'fixed'},
        'lossRecovery': {
            'sequence': sequence,
            'executeAllRegardless': execute_all_regardless,
            'stopAfterSequence': stop_after_sequence,
        },
        'gainMode': gain_mode,
        'cascadingLimits': {
            'dailyLossCents': daily_loss_cents,
            'weeklyLossCents': weekly_loss_cents,
            'monthlyLossCents': monthly_loss_cents,
            'limitMode': limit_mode or {'type': 'absolute'},
        },
        'executionConstraints': {'minStopPoints': 12, 'maxContracts': 3, 'operatingHours': None},
    }
    if daily_profit_target_cents is not None:
        payload['dailyProfitTargetCents'] = daily_profit_target_cents
    return payload


@pytest.fixture
def policy_payload():
    """Factory: policy_payload(**overrides) → dict camelCase"""
    return _policy_payload


@pytest.fixture
def make_policy():
    """Factory: make_policy(**overrides) → RiskPolicy"""
    def _make(**overrides):
        return RiskPolicy.model_validate(_policy_payload(**overrides))
    return _make


@pytest.fixture
def reference_policy(make_policy):
    """1 étape percentOfBase 50, executeAllRegardless=False, stopAfterSequence=True, singleTarget 100000"""
    return make_policy()
