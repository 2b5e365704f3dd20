"""
Unit tests for StakeLedger

Tests the stake lifecycle, lock enforcement, yield accrual and protocol stats
"""

import threading

import pytest

from gamerewards.core.constants import LOCK_DURATION_MS, MILLISECONDS_PER_DAY, STARTING_CAPITAL
from gamerewards.core.economics_exceptions import (
    EconomicsValidationError,
    InvalidAmountError,
    LockActiveError,
    NoStakeBookError,
    StakeNotFoundError,
)
from gamerewards.core.staking import (
    StakeLedger,
    compound_yield,
    remaining_lock_days,
)
from gamerewards.core.staking_models import StakeStatus

THIRTY_DAY_YIELD = 1000 * ((1 + 0.05 / 365 * 1.5) ** 30 - 1)


class TestStake:
    def test_stake_creates_active_position(self, ledger, clock):
        result = ledger.stake("alice", 1000)
        assert result.success is True

        book = ledger.get_book("alice")
        assert book.total_staked == 1000
        assert len(book.positions) == 1
        position = book.positions[0]
        assert position.status is StakeStatus.ACTIVE
        assert position.created_at == clock.now_ms
        assert position.unlock_at == position.created_at + 30 * MILLISECONDS_PER_DAY
        assert position.bonus_multiplier == 1.5

    def test_stake_receipt_includes_estimate(self, ledger):
        receipt = ledger.stake("alice", 1000).value
        assert receipt.estimated_yield == pytest.approx(THIRTY_DAY_YIELD)
        assert receipt.to_dict()["principal"] == 1000

    def test_multiple_stakes_accumulate(self, ledger):
        ledger.stake("alice", 1000)
        ledger.stake("alice", 500)
        book = ledger.get_book("alice")
        assert book.total_staked == 1500
        assert [p.stake_id for p in book.positions] == ["stake_1", "stake_2"]

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_rejected(self, ledger, amount):
        result = ledger.stake("alice", amount)
        assert result.success is False
        assert isinstance(result.error, InvalidAmountError)
        assert ledger.has_book("alice") is False

    @pytest.mark.parametrize("amount", [10.5, "100", True])
    def test_non_integer_amount_rejected(self, ledger, amount):
        result = ledger.stake("alice", amount)
        assert result.code == "INVALID_AMOUNT"

    def test_empty_user_rejected(self, ledger):
        result = ledger.stake("", 100)
        assert isinstance(result.error, EconomicsValidationError)

    def test_rejected_stake_leaves_existing_book(self, ledger):
        ledger.stake("alice", 1000)
        ledger.stake("alice", 0)
        assert ledger.get_book("alice").total_staked == 1000

    def test_default_ids_are_unique(self, clock):
        default_ledger = StakeLedger(time_provider=clock)
        ids = {default_ledger.stake("alice", 10).value.position.stake_id for _ in range(50)}
        assert len(ids) == 50


class TestUnstake:
    def test_no_book(self, ledger):
        result = ledger.unstake("bob", "stake_1")
        assert isinstance(result.error, NoStakeBookError)
        assert result.code == "NO_STAKING_BOOK"

    def test_unknown_stake(self, ledger):
        ledger.stake("alice", 1000)
        result = ledger.unstake("alice", "stake_99")
        assert isinstance(result.error, StakeNotFoundError)

    def test_other_users_stake_not_found(self, ledger):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        ledger.stake("bob", 10)
        result = ledger.unstake("bob", stake_id)
        assert isinstance(result.error, StakeNotFoundError)

    def test_lock_active_before_unlock(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=10)

        result = ledger.unstake("alice", stake_id)
        assert isinstance(result.error, LockActiveError)
        assert result.error.remaining_days == 20
        assert ledger.get_book("alice").positions[0].status is StakeStatus.ACTIVE
        assert ledger.get_book("alice").total_staked == 1000

    def test_remaining_days_rounds_up(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(ms=LOCK_DURATION_MS - 1)
        result = ledger.unstake("alice", stake_id)
        assert result.error.remaining_days == 1
        assert result.error.details["remaining_days"] == 1

    def test_unstake_at_unlock(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=30)

        result = ledger.unstake("alice", stake_id)
        assert result.success is True
        receipt = result.value
        assert receipt.principal == 1000
        assert receipt.yield_amount == pytest.approx(THIRTY_DAY_YIELD)
        assert receipt.yield_amount == pytest.approx(6.18, abs=0.01)
        assert receipt.total == pytest.approx(1000 + THIRTY_DAY_YIELD)
        assert receipt.staking_duration_ms == LOCK_DURATION_MS
        assert receipt.position.status is StakeStatus.CLOSED

        book = ledger.get_book("alice")
        assert book.positions == []
        assert book.total_staked == 0
        assert ledger.rewards_paid == pytest.approx(THIRTY_DAY_YIELD)

    def test_second_unstake_not_found(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=30)
        ledger.unstake("alice", stake_id)
        assert isinstance(ledger.unstake("alice", stake_id).error, StakeNotFoundError)

    def test_yield_keeps_accruing_after_unlock(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=60)
        receipt = ledger.unstake("alice", stake_id).value
        assert receipt.yield_amount == pytest.approx(compound_yield(1000, 1.5, 60))
        assert receipt.yield_amount > THIRTY_DAY_YIELD

    def test_unstake_only_removes_target(self, ledger, clock):
        first = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=10)
        ledger.stake("alice", 300)
        clock.advance(days=20)

        assert ledger.unstake("alice", first).success is True
        book = ledger.get_book("alice")
        assert book.total_staked == 300
        assert len(book.positions) == 1

    def test_unwrap_raises_carried_error(self, ledger):
        with pytest.raises(NoStakeBookError):
            ledger.unstake("nobody", "stake_1").unwrap()


class TestYieldHelpers:
    def test_zero_elapsed_is_zero(self):
        assert compound_yield(1000, 1.5, 0) == 0.0

    def test_negative_elapsed_clamped(self):
        assert compound_yield(1000, 1.5, -3) == 0.0

    def test_current_yield_fractional_days(self, ledger, clock):
        position = ledger.stake("alice", 1000).value.position
        clock.advance(ms=MILLISECONDS_PER_DAY // 2)
        assert ledger.current_yield(position) == pytest.approx(compound_yield(1000, 1.5, 0.5))

    def test_remaining_lock_days_zero_when_unlocked(self, ledger, clock):
        position = ledger.stake("alice", 1000).value.position
        assert remaining_lock_days(position, position.unlock_at) == 0


class TestBooksAndStats:
    def test_get_book_for_unknown_user_is_empty(self, ledger):
        book = ledger.get_book("ghost")
        assert book.user == "ghost"
        assert book.positions == []
        assert book.total_staked == 0

    def test_get_book_returns_copy(self, ledger):
        ledger.stake("alice", 1000)
        book = ledger.get_book("alice")
        book.positions.clear()
        assert len(ledger.get_book("alice").positions) == 1

    def test_empty_stats(self, ledger):
        stats = ledger.get_protocol_stats()
        assert stats.total_staked == 0
        assert stats.total_stakes == 0
        assert stats.average_stake_amount == 0.0
        assert stats.protocol_liquidity_increase == 0.0

    def test_stats_over_users(self, ledger):
        amounts = {"alice": 1000, "bob": 250, "carol": 4000}
        for user, amount in amounts.items():
            ledger.stake(user, amount)
        ledger.stake("alice", 750)

        stats = ledger.get_protocol_stats()
        total = sum(amounts.values()) + 750
        assert stats.total_staked == total
        assert stats.total_users == 3
        assert stats.total_stakes == 4
        assert stats.average_stake_amount == pytest.approx(total / 4)
        assert stats.protocol_liquidity_increase == pytest.approx(total / STARTING_CAPITAL * 100)

    def test_stats_after_unstake(self, ledger, clock):
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        ledger.stake("bob", 500)
        clock.advance(days=30)
        ledger.unstake("alice", stake_id)

        stats = ledger.get_protocol_stats()
        assert stats.total_staked == 500
        assert stats.total_stakes == 1
        assert stats.total_staking_rewards == pytest.approx(THIRTY_DAY_YIELD)


class TestConcurrency:
    def test_concurrent_stakes_same_user(self, clock):
        ledger = StakeLedger(time_provider=clock)
        threads = [threading.Thread(target=ledger.stake, args=("alice", 10)) for _ in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        book = ledger.get_book("alice")
        assert len(book.positions) == 40
        assert book.total_staked == 400

    def test_concurrent_unstake_pays_once(self, clock):
        ledger = StakeLedger(time_provider=clock)
        stake_id = ledger.stake("alice", 1000).value.position.stake_id
        clock.advance(days=30)

        results = []
        lock = threading.Lock()

        def worker():
            result = ledger.unstake("alice", stake_id)
            with lock:
                results.append(result)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(1 for r in results if r.success) == 1
        assert ledger.rewards_paid == pytest.approx(THIRTY_DAY_YIELD)
