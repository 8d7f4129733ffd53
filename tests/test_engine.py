"""Unit tests for the amortization engine."""

import math
from dataclasses import replace
from datetime import date

import pytest

from loan_sim import engine
from loan_sim.data_models import LoanParameters
from loan_sim.engine import calculate_annuity_payment, monthly_rate, simulate
from loan_sim.exceptions import (
    DegenerateScheduleError,
    InvalidConfigurationError,
    InvalidRangeError,
    LoanSimulationError,
)


# ============================================================================
# Annuity payment
# ============================================================================


class TestAnnuityPayment:
    def test_zero_rate_divides_principal_evenly(self):
        assert calculate_annuity_payment(1000.0, 0.0, 4) == 250.0

    def test_known_value(self):
        # 100k at 12 % a year over 12 months
        assert calculate_annuity_payment(100_000.0, 0.01, 12) == pytest.approx(8884.88, abs=0.01)

    def test_single_period_repays_principal_plus_interest(self):
        assert calculate_annuity_payment(1000.0, 0.01, 1) == pytest.approx(1010.0)

    def test_tiny_rate_approaches_even_split(self):
        assert calculate_annuity_payment(1200.0, 1e-20, 12) == pytest.approx(100.0)

    def test_non_positive_term_rejected(self):
        with pytest.raises(InvalidRangeError):
            calculate_annuity_payment(1000.0, 0.01, 0)

    def test_monthly_rate(self):
        assert monthly_rate(6.0) == pytest.approx(0.005)


# ============================================================================
# Single simulation
# ============================================================================


class TestSimulate:
    def test_runs_full_term_without_overpayment(self, simple_params):
        result = simulate(simple_params)

        assert result.actual_installment_count == 24
        assert len(result.installments) == 24
        assert [i.number for i in result.installments] == list(range(1, 25))
        assert result.installments[-1].remaining_balance == 0.0
        assert result.duration_years == 2
        assert result.duration_months == 0
        assert result.end_date == date(2027, 9, 1)
        assert result.rate_changes == ()
        assert result.final_rate == result.initial_rate == 6.0

    def test_constant_installment_amount(self, simple_params):
        result = simulate(simple_params)
        expected = calculate_annuity_payment(120_000.0, monthly_rate(6.0), 24)
        assert all(i.amount == expected for i in result.installments)

    def test_interest_plus_principal_matches_amount(self, simple_params):
        result = simulate(simple_params)
        for entry in result.installments:
            assert entry.interest + entry.principal == pytest.approx(entry.amount)

    def test_principal_repays_loan(self, simple_params):
        result = simulate(simple_params)
        total = sum(i.principal for i in result.installments) + result.written_off_balance
        assert total == pytest.approx(120_000.0)
        assert result.total_principal == pytest.approx(120_000.0)
        assert result.total_paid == pytest.approx(120_000.0 + result.total_interest)

    def test_total_interest_is_sum_of_ledger(self, simple_params):
        result = simulate(simple_params)
        assert result.total_interest == pytest.approx(sum(i.interest for i in result.installments))

    def test_first_interest_uses_monthly_rate(self, simple_params):
        result = simulate(simple_params)
        assert result.installments[0].interest == pytest.approx(600.0)

    def test_installment_dates_advance_monthly(self):
        params = LoanParameters(
            principal=3000.0, annual_rate=5.0, installment_count=3, start_date=date(2024, 1, 31)
        )
        result = simulate(params)
        assert [i.date for i in result.installments] == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
        ]
        assert result.end_date == date(2024, 3, 31)

    def test_single_installment(self, start_date):
        params = LoanParameters(
            principal=1000.0, annual_rate=12.0, installment_count=1, start_date=start_date
        )
        result = simulate(params)

        assert result.actual_installment_count == 1
        assert result.end_date == start_date
        only = result.installments[0]
        assert only.interest == pytest.approx(10.0)
        assert only.principal == pytest.approx(1000.0)
        assert only.amount == pytest.approx(1010.0)
        assert only.remaining_balance == 0.0

    def test_zero_rate(self, start_date):
        params = LoanParameters(
            principal=1200.0, annual_rate=0.0, installment_count=12, start_date=start_date
        )
        result = simulate(params)

        assert result.total_interest == 0.0
        assert all(i.interest == 0.0 for i in result.installments)
        assert all(i.amount == 100.0 for i in result.installments)
        assert result.actual_installment_count == 12

    def test_overpayment_shortens_loan(self, start_date):
        params = LoanParameters(
            principal=1200.0,
            annual_rate=0.0,
            installment_count=12,
            start_date=start_date,
            overpayment=100.0,
        )
        result = simulate(params)

        assert result.actual_installment_count == 6
        assert result.end_date == date(2026, 3, 1)
        assert all(i.overpayment == 100.0 for i in result.installments)
        assert result.total_overpayment_applied == 600.0
        assert result.monthly_overpayment == 100.0

    def test_final_overpayment_is_capped_by_balance(self, start_date):
        params = LoanParameters(
            principal=1000.0,
            annual_rate=0.0,
            installment_count=10,
            start_date=start_date,
            overpayment=350.0,
        )
        result = simulate(params)

        # 100 + 350 per month leaves 100 after two months
        assert result.actual_installment_count == 3
        assert result.installments[-1].principal == 100.0
        assert result.installments[-1].overpayment == 0.0
        assert result.total_overpayment_applied == 700.0

    def test_principal_capped_on_last_installment(self, start_date):
        params = LoanParameters(
            principal=1000.0,
            annual_rate=0.0,
            installment_count=4,
            start_date=start_date,
            overpayment=200.0,
        )
        result = simulate(params)

        last = result.installments[-1]
        assert last.amount == 250.0
        assert last.principal == 100.0
        assert last.interest + last.principal < last.amount

    def test_overpayment_and_principal_account_for_whole_loan(self, start_date):
        params = LoanParameters(
            principal=250_000.0,
            annual_rate=7.1,
            installment_count=300,
            start_date=start_date,
            overpayment=1234.56,
        )
        result = simulate(params)

        repaid = (
            sum(i.principal for i in result.installments)
            + sum(i.overpayment for i in result.installments)
            + result.written_off_balance
        )
        assert repaid == pytest.approx(250_000.0)
        assert result.actual_installment_count < 300

    def test_result_is_immutable(self, simple_params):
        result = simulate(simple_params)
        with pytest.raises(AttributeError):
            result.total_interest = 0.0

    def test_first_and_last_installments(self, simple_params):
        result = simulate(simple_params)
        assert [i.number for i in result.first_installments(3)] == [1, 2, 3]
        assert [i.number for i in result.last_installments(3)] == [22, 23, 24]
        assert result.last_installments(0) == []


# ============================================================================
# Interest rate step-downs
# ============================================================================


class TestRateStepDowns:
    @pytest.fixture
    def stepped(self, simple_params):
        return replace(simple_params, rate_decrease=1.0, decrease_frequency=12, minimum_rate=3.0)

    def test_rate_changes_recorded(self, stepped):
        result = simulate(stepped)

        assert [c.installment for c in result.rate_changes] == [12, 24]
        first = result.rate_changes[0]
        assert first.old_rate == 6.0
        assert first.new_rate == 5.0
        assert first.remaining_installments == 13
        assert result.final_rate == 4.0

    def test_new_rate_applies_from_trigger_installment(self, stepped):
        result = simulate(stepped)
        ledger = result.installments

        assert ledger[10].interest_rate == 6.0
        assert ledger[11].interest_rate == 5.0
        balance_before = ledger[10].remaining_balance
        assert ledger[11].interest == pytest.approx(balance_before * 5.0 / 1200)

    def test_payment_recomputed_from_balance_before_trigger(self, stepped):
        result = simulate(stepped)
        ledger = result.installments

        balance_before = ledger[10].remaining_balance
        expected = calculate_annuity_payment(balance_before, monthly_rate(5.0), 13)
        assert ledger[11].amount == pytest.approx(expected)
        assert result.rate_changes[0].new_amount == ledger[11].amount
        assert result.rate_changes[0].remaining_balance == balance_before
        assert ledger[12].amount == ledger[11].amount

    def test_still_repays_on_schedule(self, stepped):
        result = simulate(stepped)
        assert result.actual_installment_count == 24
        assert result.installments[-1].remaining_balance == 0.0

    def test_rate_clamped_at_floor(self, start_date):
        params = LoanParameters(
            principal=50_000.0,
            annual_rate=4.0,
            installment_count=36,
            start_date=start_date,
            rate_decrease=1.0,
            decrease_frequency=6,
            minimum_rate=3.5,
        )
        result = simulate(params)

        assert len(result.rate_changes) == 1
        assert result.rate_changes[0].new_rate == 3.5
        assert result.final_rate == 3.5

    def test_floor_above_rate_prevents_step_downs(self, simple_params):
        params = replace(simple_params, rate_decrease=1.0, decrease_frequency=6, minimum_rate=7.0)
        result = simulate(params)
        assert result.rate_changes == ()
        assert result.final_rate == 6.0

    def test_zero_decrease_disables_step_downs(self, simple_params):
        params = replace(simple_params, rate_decrease=0.0, decrease_frequency=1)
        assert simulate(params).rate_changes == ()

    def test_overpayment_continues_after_step_down(self, stepped):
        params = stepped.with_overpayment(500.0)
        result = simulate(params)
        ledger = result.installments

        assert result.rate_changes[0].installment == 12
        assert ledger[11].overpayment == 500.0
        assert ledger[12].overpayment == 500.0
        # Recomputed payment amortizes the balance before the overpayment lands
        expected = calculate_annuity_payment(ledger[10].remaining_balance, monthly_rate(5.0), 13)
        assert ledger[11].amount == pytest.approx(expected)
        assert result.actual_installment_count < 24

    def test_step_down_to_zero_rate(self, start_date):
        params = LoanParameters(
            principal=12_000.0,
            annual_rate=0.3,
            installment_count=12,
            start_date=start_date,
            rate_decrease=0.1,
            decrease_frequency=2,
            minimum_rate=0.0,
        )
        result = simulate(params)

        assert result.final_rate == pytest.approx(0.0, abs=1e-12)
        assert result.installments[-1].remaining_balance == 0.0
        assert all(math.isfinite(i.amount) for i in result.installments)


# ============================================================================
# Validation and failures
# ============================================================================


class TestValidation:
    def test_zero_decrease_frequency_rejected(self, simple_params):
        with pytest.raises(InvalidConfigurationError):
            simulate(replace(simple_params, decrease_frequency=0))

    def test_zero_decrease_frequency_rejected_without_step_downs(self, simple_params):
        with pytest.raises(InvalidConfigurationError):
            simulate(replace(simple_params, rate_decrease=0.0, decrease_frequency=0))

    @pytest.mark.parametrize(
        "changes",
        [
            {"installment_count": 0},
            {"installment_count": -12},
            {"principal": 0.0},
            {"principal": -1000.0},
            {"overpayment": -1.0},
            {"annual_rate": -0.5},
            {"minimum_rate": -1.0},
            {"rate_decrease": -1.0},
            {"principal": float("nan")},
            {"annual_rate": float("inf")},
        ],
    )
    def test_out_of_range_rejected(self, simple_params, changes):
        with pytest.raises(InvalidRangeError):
            simulate(replace(simple_params, **changes))

    def test_error_carries_context(self, simple_params):
        with pytest.raises(LoanSimulationError) as exc_info:
            simulate(replace(simple_params, principal=-5.0))
        assert exc_info.value.context == {"principal": -5.0}
        assert "Context: principal=-5.0" in str(exc_info.value)

    def test_negative_amortization_fails_fast(self, simple_params, monkeypatch):
        monkeypatch.setattr(engine, "calculate_annuity_payment", lambda p, r, n: 0.0)
        with pytest.raises(DegenerateScheduleError) as exc_info:
            simulate(simple_params)
        assert exc_info.value.context["installment"] == 1
