"""
Tests Trade Situation Sequence - progression pire cas T1..Tn
"""
from engines.effective_values import resolve_effective_values
from engines.trade_situations import (
    build_trade_situations,
    compute_step_risk,
    describe_situation_outcomes,
    risk_label,
    worst_case_loss_cents,
)
from models.risk_policy import RecoveryStep


def _situations(policy, balance=10_000_00):
    return build_trade_situations(policy, resolve_effective_values(policy, balance))


class TestStepRisk:

    def test_percent_of_base_uses_base_not_previous(self):
        step = RecoveryStep.model_validate({'riskCalculation': {'type': 'percentOfBase', 'percent': 50}})
        assert compute_step_risk(step, 50000, 12345) == 25000

    def test_fixed_cents_is_literal(self):
        step = RecoveryStep.model_validate({'riskCalculation': {'type': 'fixedCents', 'amountCents': 7000}})
        assert compute_step_risk(step, 50000, 25000) == 7000

    def test_same_as_previous(self):
        step = RecoveryStep.model_validate({'riskCalculation': {'type': 'sameAsPrevious'}})
        assert compute_step_risk(step, 50000, 25000) == 25000

    def test_labels(self):
        assert risk_label(RecoveryStep.model_validate(
            {'riskCalculation': {'type': 'percentOfBase', 'percent': 50}})) == "50% of base"
        assert risk_label(RecoveryStep.model_validate(
            {'riskCalculation': {'type': 'percentOfBase', 'percent': 37.5}})) == "37.5% of base"
        assert risk_label(RecoveryStep.model_validate(
            {'riskCalculation': {'type': 'fixedCents', 'amountCents': 1}})) == "fixed"
        assert risk_label(RecoveryStep.model_validate(
            {'riskCalculation': {'type': 'sameAsPrevious'}})) == "same as previous"


class TestBuildSituations:

    def test_reference_policy(self, reference_policy):
        """T1=500.00, T2=50% → 250.00, pire cas 750.00"""
        situations = _situations(reference_policy)
        assert len(situations) == 2

        t1, t2 = situations
        assert t1.trade_number == 1 and t1.is_base_trade
        assert t1.risk_cents == 50000
        assert t1.cumulative_loss_before == 0
        assert t1.worst_case_total_cents == 50000
        assert t1.max_contracts == 2 and t1.min_stop_points == 10
        assert t1.risk_label is None

        assert t2.trade_number == 2 and not t2.is_base_trade
        assert t2.risk_cents == 25000
        assert t2.cumulative_loss_before == 50000
        assert t2.worst_case_total_cents == 75000
        assert t2.max_contracts == 3 and t2.min_stop_points == 12
        assert t2.risk_label == "50% of base"

    def test_length_is_steps_plus_one(self, make_policy):
        assert len(_situations(make_policy(sequence=[]))) == 1
        steps = [{'riskCalculation': {'type': 'sameAsPrevious'}}] * 4
        assert len(_situations(make_policy(sequence=steps))) == 5

    def test_chain_consistency(self, make_policy):
        """cumulative(k) = worst(k-1), worst(k) = cumulative(k) + risk(k)"""
        policy = make_policy(sequence=[
            {'riskCalculation': {'type': 'percentOfBase', 'percent': 75}},
            {'riskCalculation': {'type': 'fixedCents', 'amountCents': 12000}},
            {'riskCalculation': {'type': 'sameAsPrevious'}},
            {'riskCalculation': {'type': 'percentOfBase', 'percent': 25}},
        ])
        situations = _situations(policy)
        assert [s.risk_cents for s in situations] == [50000, 37500, 12000, 12000, 12500]
        for previous, current in zip(situations, situations[1:]):
            assert current.cumulative_loss_before == previous.worst_case_total_cents
        for situation in situations:
            assert situation.worst_case_total_cents == situation.cumulative_loss_before + situation.risk_cents
        assert worst_case_loss_cents(situations) == 50000 + 37500 + 12000 + 12000 + 12500

    def test_percent_of_base_follows_effective_risk(self, make_policy):
        policy = make_policy(risk_sizing_mode={'type': 'percentOfBalance', 'riskPercent': 1})
        situations = _situations(policy, balance=20_000_00)
        assert situations[0].risk_cents == 20000
        assert situations[1].risk_cents == 10000

    def test_max_contracts_override(self, make_policy):
        policy = make_policy(sequence=[
            {'riskCalculation': {'type': 'percentOfBase', 'percent': 50}, 'maxContractsOverride': 1},
            {'riskCalculation': {'type': 'sameAsPrevious'}},
        ])
        situations = _situations(policy)
        assert situations[1].max_contracts == 1
        assert situations[2].max_contracts == 3

    def test_worst_case_empty(self):
        assert worst_case_loss_cents([]) is None


class TestSituationOutcomes:

    def test_reference_outcomes(self, reference_policy):
        situations = _situations(reference_policy)
        outcomes = describe_situation_outcomes(situations, False, 100000)

        assert outcomes[0].on_win == 'enter_gain_mode'
        assert outcomes[0].on_loss == 'enter_recovery'
        assert outcomes[0].buffer_remaining_cents == 50000

        assert outcomes[1].on_win == 'recovery_complete'
        assert outcomes[1].on_loss == 'sequence_exhausted'
        assert outcomes[1].buffer_remaining_cents == 25000

    def test_execute_all_regardless_continues(self, make_policy):
        policy = make_policy(sequence=[{'riskCalculation': {'type': 'percentOfBase', 'percent': 50}}] * 2)
        situations = _situations(policy)
        outcomes = describe_situation_outcomes(situations, True, 100000)
        assert outcomes[1].on_win == 'continue_recovery'
        assert outcomes[1].on_loss == 'proceed_to_next'
        assert outcomes[2].on_win == 'recovery_complete'
        assert outcomes[2].on_loss == 'max_loss_reached'
        assert outcomes[2].buffer_remaining_cents == 0

    def test_base_trade_without_recovery(self, make_policy):
        situations = _situations(make_policy(sequence=[]))
        outcomes = describe_situation_outcomes(situations, False, 50000)
        assert outcomes[0].on_win == 'enter_gain_mode'
        assert outcomes[0].on_loss == 'max_loss_reached'
