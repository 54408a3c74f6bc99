"""Unit tests for the allocation engine

Tests cover:
- Waterfall order of charges and profit
- Conservation and non-negativity over seeded random inputs
- Rejection correctness of evaluate_sufficiency
- Reference scenarios for credit use, unpaid debt and surplus-only charges
"""

import random
import pytest
from decimal import Decimal
from src.domain.allocation import allocate_charge, distribute_profit, evaluate_sufficiency
from src.domain.exceptions import InvalidAmount
from src.domain.money import compute_profit

D = Decimal
SEEDS = range(5)
ROUNDS = 200


def _money(rng: random.Random, upper_cents: int = 500_000) -> Decimal:
    return D(rng.randint(0, upper_cents)).scaleb(-2)


def _rate(rng: random.Random) -> Decimal:
    return D(rng.randint(0, 2000)).scaleb(-4)


class TestAllocateCharge:
    def test_surplus_consumed_before_credit(self):
        allocation = allocate_charge(D("200.00"), D("1000.00"), D("150.00"))

        assert allocation.from_surplus == D("150.00")
        assert allocation.from_credit == D("0.00")
        assert allocation.external_debt == D("0.00")

    def test_remainder_beyond_credit_is_external_debt(self):
        allocation = allocate_charge(D("200.00"), D("100.00"), D("500.00"))

        assert allocation.from_surplus == D("200.00")
        assert allocation.from_credit == D("100.00")
        assert allocation.external_debt == D("200.00")

    def test_zero_charge(self):
        allocation = allocate_charge(D("10.00"), D("10.00"), D("0.00"))
        assert allocation.total == D("0.00")

    def test_negative_input_rejected(self):
        with pytest.raises(InvalidAmount):
            allocate_charge(D("0"), D("100"), D("-1"))
        with pytest.raises(InvalidAmount):
            allocate_charge(D("-1"), D("100"), D("1"))

    @pytest.mark.parametrize("seed", SEEDS)
    def test_conservation_and_non_negativity(self, seed):
        rng = random.Random(seed)
        for _ in range(ROUNDS):
            surplus, credit, amount = _money(rng), _money(rng), _money(rng)

            allocation = allocate_charge(surplus, credit, amount)

            assert allocation.from_surplus + allocation.from_credit + allocation.external_debt == amount
            assert allocation.from_surplus >= 0
            assert allocation.from_credit >= 0
            assert allocation.external_debt >= 0
            assert allocation.from_surplus <= surplus
            assert allocation.from_credit <= credit


class TestDistributeProfit:
    def test_profit_pays_debt_first(self):
        distribution = distribute_profit(D("25.00"), D("200.00"), D("100.00"), D("0.00"))

        assert distribution.debt_paid == D("25.00")
        assert distribution.credit_restored == D("0.00")
        assert distribution.surplus_added == D("0.00")

    def test_profit_restores_credit_then_surplus(self):
        distribution = distribute_profit(D("50.00"), D("0.00"), D("30.00"), D("5.00"))

        assert distribution.debt_paid == D("0.00")
        assert distribution.credit_restored == D("30.00")
        assert distribution.surplus_added == D("20.00")
        assert distribution.new_surplus == D("25.00")
        assert distribution.credit_used_remaining == D("0.00")

    def test_negative_profit_rejected(self):
        with pytest.raises(InvalidAmount):
            distribute_profit(D("-1"), D("0"), D("0"), D("0"))

    @pytest.mark.parametrize("seed", SEEDS)
    def test_conservation_and_non_negativity(self, seed):
        rng = random.Random(1000 + seed)
        for _ in range(ROUNDS):
            profit, debt, used, surplus = _money(rng), _money(rng), _money(rng), _money(rng)

            distribution = distribute_profit(profit, debt, used, surplus)

            assert distribution.debt_paid + distribution.credit_restored + distribution.surplus_added == profit
            assert distribution.debt_paid >= 0
            assert distribution.credit_restored >= 0
            assert distribution.surplus_added >= 0
            assert distribution.credit_used_remaining >= 0
            assert distribution.new_surplus == surplus + distribution.surplus_added


class TestEvaluateSufficiency:
    def test_credit_fully_restored_by_profit_scenario(self):
        """Surplus 0, credit 1000, charge 600 at 5%"""
        profit = compute_profit(D("600.00"), D("0.05"))

        evaluation = evaluate_sufficiency(D("0.00"), D("1000.00"), D("600.00"), profit)

        assert evaluation.allocation.from_surplus == D("0.00")
        assert evaluation.allocation.from_credit == D("600.00")
        assert evaluation.allocation.external_debt == D("0.00")
        assert profit == D("30.00")
        assert evaluation.distribution.credit_restored == D("30.00")
        assert evaluation.accepted is True
        assert evaluation.available_credit_after == D("430.00")
        assert evaluation.total_after == D("430.00")

    def test_unpaid_external_debt_scenario(self):
        """Surplus 200, credit 100, charge 500 at 5%"""
        profit = compute_profit(D("500.00"), D("0.05"))

        evaluation = evaluate_sufficiency(D("200.00"), D("100.00"), D("500.00"), profit)

        assert evaluation.allocation.from_surplus == D("200.00")
        assert evaluation.allocation.from_credit == D("100.00")
        assert evaluation.allocation.external_debt == D("200.00")
        assert profit == D("25.00")
        assert evaluation.distribution.debt_paid == D("25.00")
        assert evaluation.unpaid_debt == D("175.00")
        assert evaluation.accepted is False

    def test_surplus_only_recharge_scenario(self):
        """Surplus 500, credit 1000, charge 300 at 0%"""
        profit = compute_profit(D("300.00"), D("0"))

        evaluation = evaluate_sufficiency(D("500.00"), D("1000.00"), D("300.00"), profit)

        assert evaluation.allocation.from_surplus == D("300.00")
        assert evaluation.allocation.from_credit == D("0.00")
        assert evaluation.allocation.external_debt == D("0.00")
        assert profit == D("0.00")
        assert evaluation.accepted is True
        assert evaluation.distribution.total == D("0.00")
        assert evaluation.total_after == D("1200.00")

    def test_profit_exactly_covering_external_debt_is_accepted(self):
        evaluation = evaluate_sufficiency(D("0.00"), D("100.00"), D("110.00"), D("10.00"))

        assert evaluation.unpaid_debt == D("0.00")
        assert evaluation.accepted is True

    @pytest.mark.parametrize("seed", SEEDS)
    def test_rejection_correctness(self, seed):
        """accepted iff the charge fits in surplus + credit + profit"""
        rng = random.Random(2000 + seed)
        for _ in range(ROUNDS):
            surplus, credit, amount = _money(rng), _money(rng), _money(rng)
            profit = compute_profit(amount, _rate(rng))

            evaluation = evaluate_sufficiency(surplus, credit, amount, profit)

            assert evaluation.accepted == (amount <= surplus + credit + profit)
            assert evaluation.accepted == (not (evaluation.unpaid_debt > 0 or evaluation.total_after < 0))
            if evaluation.accepted:
                assert evaluation.total_after == surplus + credit - amount + profit
                assert evaluation.total_after >= 0
