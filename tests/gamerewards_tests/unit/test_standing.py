"""
Unit tests for player standing classification

Tests rule ordering, thresholds and malformed signal handling
"""

import pytest

from gamerewards.core.economics_exceptions import MalformedSignalsError
from gamerewards.core.standing import (
    PlayerSignals,
    Standing,
    StandingClassifier,
    StandingReason,
)


def make_signals(**overrides):
    base = dict(
        account_age_days=400,
        suspicion_score=0.2,
        owned_games=4,
        qualifying_games=2,
        total_playtime_minutes=900,
    )
    base.update(overrides)
    return PlayerSignals(**base)


@pytest.fixture
def classifier():
    return StandingClassifier()


class TestStandingRules:
    """Test each classification rule"""

    def test_clean_player_is_cleared(self, classifier):
        verdict = classifier.classify(make_signals())
        assert verdict.standing is Standing.CLEARED
        assert verdict.reason is StandingReason.VALID
        assert verdict.is_valid is True

    def test_vac_ban_blacklists(self, classifier):
        verdict = classifier.classify(make_signals(vac_banned=True, vac_ban_count=1))
        assert verdict.standing is Standing.BLACKLISTED
        assert verdict.reason is StandingReason.VAC_BAN

    def test_community_ban_blacklists(self, classifier):
        verdict = classifier.classify(make_signals(community_banned=True))
        assert verdict.standing is Standing.BLACKLISTED
        assert verdict.reason is StandingReason.COMMUNITY_BAN

    def test_ban_dominates_old_account(self, classifier):
        verdict = classifier.classify(make_signals(vac_banned=True, account_age_days=1000))
        assert verdict.standing is Standing.BLACKLISTED

    def test_ban_dominates_new_account_and_no_games(self, classifier):
        verdict = classifier.classify(
            make_signals(community_banned=True, account_age_days=1, qualifying_games=0)
        )
        assert verdict.standing is Standing.BLACKLISTED

    def test_account_age_29_is_suspicious(self, classifier):
        verdict = classifier.classify(make_signals(account_age_days=29))
        assert verdict.standing is Standing.SUSPICIOUS
        assert verdict.reason is StandingReason.NEW_ACCOUNT

    def test_account_age_30_passes_age_check(self, classifier):
        verdict = classifier.classify(make_signals(account_age_days=30))
        assert verdict.standing is Standing.CLEARED

    def test_score_above_threshold_is_suspicious(self, classifier):
        verdict = classifier.classify(make_signals(suspicion_score=0.71))
        assert verdict.standing is Standing.SUSPICIOUS
        assert verdict.reason is StandingReason.SUSPICIOUS_ACTIVITY

    def test_score_at_threshold_is_not_suspicious(self, classifier):
        verdict = classifier.classify(make_signals(suspicion_score=0.7))
        assert verdict.standing is Standing.CLEARED

    def test_new_account_outranks_activity_score(self, classifier):
        verdict = classifier.classify(make_signals(account_age_days=3, suspicion_score=0.9))
        assert verdict.reason is StandingReason.NEW_ACCOUNT

    def test_no_qualifying_game_is_ineligible(self, classifier):
        verdict = classifier.classify(make_signals(qualifying_games=0))
        assert verdict.standing is Standing.INELIGIBLE
        assert verdict.reason is StandingReason.NO_QUALIFYING_GAME
        assert verdict.is_valid is False

    def test_classify_is_stateless(self, classifier):
        signals = make_signals(account_age_days=29)
        first = classifier.classify(signals)
        classifier.classify(make_signals())
        assert classifier.classify(signals) == first


class TestMalformedSignals:
    """Test that malformed signal sets yield ERROR verdicts instead of raising"""

    def test_negative_count_is_error(self, classifier):
        verdict = classifier.classify(make_signals(owned_games=-1))
        assert verdict.standing is Standing.ERROR
        assert verdict.reason is StandingReason.MALFORMED_SIGNALS
        assert "owned_games" in verdict.message

    def test_score_out_of_range_is_error(self, classifier):
        verdict = classifier.classify(make_signals(suspicion_score=1.5))
        assert verdict.standing is Standing.ERROR

    def test_qualifying_exceeding_owned_is_error(self, classifier):
        verdict = classifier.classify(make_signals(owned_games=1, qualifying_games=2))
        assert verdict.standing is Standing.ERROR

    def test_non_boolean_flag_is_error(self, classifier):
        verdict = classifier.classify(make_signals(vac_banned="yes"))
        assert verdict.standing is Standing.ERROR

    def test_unknown_field_in_mapping_is_error(self, classifier):
        verdict = classifier.classify({"account_age_days": 100, "karma": 5})
        assert verdict.standing is Standing.ERROR
        assert verdict.signals is None

    def test_non_mapping_input_is_error(self, classifier):
        verdict = classifier.classify(["not", "a", "mapping"])
        assert verdict.standing is Standing.ERROR

    def test_mapping_input_is_classified(self, classifier, cleared_signals):
        verdict = classifier.classify(cleared_signals)
        assert verdict.standing is Standing.CLEARED
        assert verdict.signals.account_age_days == 365

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(MalformedSignalsError) as exc_info:
            PlayerSignals.from_dict({"vac_banned": False, "extra": 1})
        assert exc_info.value.details["fields"] == ["extra"]


class TestVerdictSerialization:
    def test_to_dict_without_signals(self, classifier):
        verdict = classifier.classify(make_signals(), include_signals=False)
        data = verdict.to_dict()
        assert data["standing"] == "CLEARED"
        assert data["reason"] == "VALID"
        assert data["is_valid"] is True
        assert data["signals"] is None
