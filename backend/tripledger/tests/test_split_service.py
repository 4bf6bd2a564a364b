"""
Tests for share calculation and share-sum validation.
"""
from decimal import Decimal
import pytest

from tripledger.services.split_service import (
    InvalidSplitError, SplitInput, SplitType, calculate_shares, find_share_mismatches,
    share_drift, validate_expense_shares
)
from tripledger.tests.factories import make_expense


def _amounts(shares):
    return [share.share_amount for share in shares]


def test_equal_split_even():
    """€100 among four people is €25 each."""
    people = [SplitInput(user_id=u) for u in ("alice", "bob", "charlie", "david")]
    assert _amounts(calculate_shares(10000, SplitType.EQUAL, people)) == [2500] * 4


def test_equal_split_gives_remainder_to_earliest():
    """$100 three ways is 33.34, 33.33, 33.33."""
    people = [SplitInput(user_id=u) for u in ("alice", "bob", "charlie")]
    assert _amounts(calculate_shares(10000, "equal", people)) == [3334, 3333, 3333]
    assert _amounts(calculate_shares(100, "equal", people)) == [34, 33, 33]


def test_percentage_split():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(50)),
        SplitInput(user_id="bob", share_value=Decimal(30)),
        SplitInput(user_id="charlie", share_value=Decimal(20)),
    ]
    assert _amounts(calculate_shares(20000, SplitType.PERCENTAGE, people)) == [10000, 6000, 4000]


def test_percentage_split_must_total_100():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(50)),
        SplitInput(user_id="bob", share_value=Decimal(40)),
    ]
    with pytest.raises(InvalidSplitError):
        calculate_shares(10000, SplitType.PERCENTAGE, people)


def test_weighted_shares_split():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(2)),
        SplitInput(user_id="bob", share_value=Decimal(1)),
    ]
    shares = calculate_shares(1000, SplitType.SHARES, people)
    assert _amounts(shares) == [667, 333]
    assert sum(_amounts(shares)) == 1000


def test_remainder_follows_largest_fraction():
    """1:2 of €1.00 is 33.33 and 66.67, so the spare cent goes to the larger share."""
    people = [
        SplitInput(user_id="alice", share_value=Decimal(1)),
        SplitInput(user_id="bob", share_value=Decimal(2)),
    ]
    assert _amounts(calculate_shares(100, SplitType.SHARES, people)) == [33, 67]


def test_zero_weight_participant_owes_nothing():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(0)),
        SplitInput(user_id="bob", share_value=Decimal(1)),
        SplitInput(user_id="charlie", share_value=Decimal(1)),
    ]
    assert _amounts(calculate_shares(3, SplitType.SHARES, people)) == [0, 2, 1]


def test_zero_percent_participant_owes_nothing():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(0)),
        SplitInput(user_id="bob", share_value=Decimal(50)),
        SplitInput(user_id="charlie", share_value=Decimal(50)),
    ]
    assert _amounts(calculate_shares(3, SplitType.PERCENTAGE, people)) == [0, 2, 1]


def test_custom_amount_split():
    people = [
        SplitInput(user_id="alice", share_value=Decimal(4000)),
        SplitInput(user_id="bob", share_value=Decimal(3000)),
        SplitInput(user_id="charlie", share_value=Decimal(5000)),
    ]
    assert _amounts(calculate_shares(12000, SplitType.AMOUNT, people)) == [4000, 3000, 5000]
    with pytest.raises(InvalidSplitError):
        calculate_shares(11000, SplitType.AMOUNT, people)


def test_split_rejects_bad_input():
    with pytest.raises(InvalidSplitError):
        calculate_shares(1000, SplitType.EQUAL, [])
    with pytest.raises(InvalidSplitError):
        calculate_shares(-1, SplitType.EQUAL, [SplitInput(user_id="alice")])
    with pytest.raises(InvalidSplitError):
        calculate_shares(1000, SplitType.SHARES, [SplitInput(user_id="alice")])


def test_share_drift_and_validation():
    exact = make_expense("ok", 10000, "alice", {"alice": 5000, "bob": 5000})
    off_by_one = make_expense("near", 10000, "alice", {"alice": 5000, "bob": 4999})
    broken = make_expense("bad", 10000, "alice", {"alice": 5000, "bob": 4000})

    assert share_drift(exact) == 0
    assert share_drift(broken) == -1000
    assert validate_expense_shares(exact)
    assert validate_expense_shares(off_by_one)
    assert not validate_expense_shares(broken)
    assert find_share_mismatches([exact, off_by_one, broken]) == [("bad", -1000)]
