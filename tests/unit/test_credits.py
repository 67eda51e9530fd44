import pytest

from pipeline_jobs.credits import adjust_banked_credits
from pipeline_jobs.errors import InsufficientCreditsError, NotFoundError, ValidationError
from pipeline_jobs.models import User


class TestAdjustBankedCredits:
    def test_adds_credits(self, db, make_user) -> None:
        user = make_user(banked_credits=3)
        assert adjust_banked_credits(db, user.id, 4).banked_credits == 7

    def test_removes_credits(self, db, make_user) -> None:
        user = make_user(banked_credits=3)
        assert adjust_banked_credits(db, user.id, -3).banked_credits == 0

    def test_refuses_to_go_negative(self, db, make_user) -> None:
        user = make_user(banked_credits=3)
        with pytest.raises(InsufficientCreditsError):
            adjust_banked_credits(db, user.id, -5)

        db.expire_all()
        assert db.get(User, user.id).banked_credits == 3

    def test_zero_is_rejected(self, db, make_user) -> None:
        user = make_user()
        with pytest.raises(ValidationError) as exc:
            adjust_banked_credits(db, user.id, 0)
        assert "amount" in exc.value.errors

    def test_unknown_user(self, db) -> None:
        with pytest.raises(NotFoundError):
            adjust_banked_credits(db, 404, 5)

    def test_sequence_of_adjustments_sums(self, db, make_user) -> None:
        user = make_user()
        for delta in (5, -2, 10, -13):
            adjust_banked_credits(db, user.id, delta)
        db.expire_all()
        assert db.get(User, user.id).banked_credits == 0


# ---------------------------------------------------------------------------
# Concurrent adjustments
# ---------------------------------------------------------------------------


class TestConcurrentAdjustments:
    def test_no_update_is_lost(self, db, other_session, make_user) -> None:
        user = make_user(banked_credits=3)
        # both requests loaded the balance before either wrote
        stale = other_session.get(User, user.id)
        assert stale.banked_credits == 3

        adjust_banked_credits(db, user.id, 5)
        assert adjust_banked_credits(other_session, user.id, 2).banked_credits == 10

        db.expire_all()
        assert db.get(User, user.id).banked_credits == 10

    def test_only_one_removal_fits_the_balance(self, db, other_session, make_user) -> None:
        user = make_user(banked_credits=5)
        assert other_session.get(User, user.id).banked_credits == 5

        assert adjust_banked_credits(db, user.id, -3).banked_credits == 2
        with pytest.raises(InsufficientCreditsError, match="user only has 2"):
            adjust_banked_credits(other_session, user.id, -3)

        db.expire_all()
        assert db.get(User, user.id).banked_credits == 2
