"""
Tests Scenario summary + Plan derivation
"""
import pytest

from engines.decision_tree import build_decision_tree
from engines.effective_values import resolve_effective_values, resolve_gain_mode
from engines.plan_derivation import derive_plan, risk_reduction_factor
from engines.trade_situations import build_trade_situations
from engines.tree_summary import (
    LEAF_STATUSES,
    SCENARIO_COLUMNS,
    breakdown_by_status,
    scenario_table,
    summarize_tree,
)


def _tree(policy, balance=10_000_00):
    effective = resolve_effective_values(policy, balance)
    return build_decision_tree(
        situations=build_trade_situations(policy, effective),
        reward_ratio=2,
        loss_recovery=policy.loss_recovery,
        gain_mode=resolve_gain_mode(policy.gain_mode, effective.daily_profit_target_cents),
        base_risk_cents=effective.risk_cents,
        stop_after_sequence=policy.loss_recovery.stop_after_sequence,
    )


class TestScenarioTable:

    def test_one_row_per_leaf(self, reference_policy):
        df = scenario_table(_tree(reference_policy))
        assert list(df.columns) == SCENARIO_COLUMNS
        assert len(df) == 3
        assert df['path_pattern'].tolist() == ['L-L', 'L-G', 'G']
        assert df['leaf_index'].tolist() == [0, 1, 2]


class TestSummarizeTree:

    def test_reference_summary(self, reference_policy):
        summary = summarize_tree(_tree(reference_policy))
        assert summary.leaf_count == 3
        assert summary.total_probability == pytest.approx(1.0)
        # 0.25 * -750 + 0.25 * 0 + 0.5 * 1000 = 312.50
        assert summary.expected_pnl_cents == pytest.approx(31250)
        assert summary.worst_case_pnl_cents == -75000
        assert summary.best_case_pnl_cents == 100000
        assert summary.probability_of_profit == pytest.approx(0.5)
        assert summary.unresolved_probability == 0
        assert summary.probability_by_status == pytest.approx(
            {'stop': 0.5, 'target': 0.5, 'exit': 0.0, 'continues': 0.0}
        )

    def test_unresolved_mass_from_compounding_cap(self, make_policy):
        policy = make_policy(gain_mode={'type': 'compounding', 'reinvestmentPercent': 50,
                                        'stopOnFirstLoss': True, 'dailyTargetCents': None})
        summary = summarize_tree(_tree(policy))
        # G-G-G-G seulement
        assert summary.unresolved_probability == pytest.approx(0.0625)
        assert summary.best_case_pnl_cents == 800000

    def test_camel_case_dump(self, reference_policy):
        dumped = summarize_tree(_tree(reference_policy)).model_dump(by_alias=True)
        assert 'expectedPnlCents' in dumped
        assert 'probabilityByStatus' in dumped


class TestBreakdownByStatus:

    def test_all_statuses_present(self, reference_policy):
        breakdown = breakdown_by_status(_tree(reference_policy))
        assert breakdown.index.tolist() == LEAF_STATUSES
        assert breakdown.loc['exit', 'leaves'] == 0
        assert breakdown.loc['exit', 'probability'] == 0
        assert breakdown.loc['exit', 'expected_pnl_cents'] == 0

    def test_conditional_expectation(self, reference_policy):
        breakdown = breakdown_by_status(_tree(reference_policy))
        assert breakdown.loc['stop', 'leaves'] == 2
        assert breakdown.loc['stop', 'probability'] == pytest.approx(0.5)
        assert breakdown.loc['stop', 'expected_pnl_cents'] == pytest.approx(-37500)
        assert breakdown.loc['stop', 'worst_pnl_cents'] == -75000
        assert breakdown.loc['target', 'expected_pnl_cents'] == pytest.approx(100000)


class TestPlanDerivation:

    def test_percentages_of_balance(self, reference_policy):
        effective = resolve_effective_values(reference_policy, 10_000_00)
        plan = derive_plan(effective, 10_000_00, reference_policy)
        assert plan.risk_per_trade_pct == pytest.approx(5)
        assert plan.daily_loss_pct == pytest.approx(10)
        assert plan.weekly_loss_pct == pytest.approx(25)
        assert plan.monthly_loss_pct == pytest.approx(50)
        assert plan.daily_target_pct == pytest.approx(10)
        assert plan.derived_max_daily_trades == 2
        assert plan.risk_reduction_factor == pytest.approx(0.5)

    def test_no_balance_no_percentages(self, reference_policy):
        effective = resolve_effective_values(reference_policy, 0)
        plan = derive_plan(effective, 0, reference_policy)
        assert plan.risk_per_trade_pct is None
        assert plan.daily_loss_pct is None
        assert plan.derived_max_daily_trades == 2

    def test_max_trades_without_risk(self, make_policy):
        policy = make_policy(risk_sizing_mode={'type': 'percentOfBalance', 'riskPercent': 0})
        effective = resolve_effective_values(policy, 10_000_00)
        assert derive_plan(effective, 10_000_00, policy).derived_max_daily_trades is None

    def test_reduction_factor_from_fixed_first_step(self, make_policy):
        policy = make_policy(sequence=[{'riskCalculation': {'type': 'fixedCents', 'amountCents': 20000}}])
        assert risk_reduction_factor(policy, 50000) == pytest.approx(0.4)

    @pytest.mark.parametrize('sequence', [
        [],
        [{'riskCalculation': {'type': 'sameAsPrevious'}}],
        [{'riskCalculation': {'type': 'percentOfBase', 'percent': 100}}],
    ])
    def test_no_reduction(self, make_policy, sequence):
        assert risk_reduction_factor(make_policy(sequence=sequence), 50000) is None
