"""Tests for the review lifecycle: create, edit, moderate, delete."""
from datetime import datetime, timedelta, timezone

import pytest

from reviewsite.exceptions import (
    DuplicateReviewError,
    ForbiddenError,
    InvalidDecisionError,
    InvalidRatingError,
    InvalidTargetError,
    InvalidTransitionError,
    NotFoundError,
    TargetNotFoundError,
    UnauthenticatedError,
)
from reviewsite.models.activity import ActivityLog
from reviewsite.models.review import Review, ReviewStatus, ModerationDecision
from reviewsite.models.target import ReviewTarget, TargetKind
from tests.conftest import DEFAULT_RATINGS


def _review_count(db):
    return db.query(Review).count()


class TestReviewTarget:
    """Album-or-track target union."""

    def test_from_album_id(self):
        target = ReviewTarget.from_ids(album_id=3)
        assert target.kind == TargetKind.ALBUM
        assert target.as_columns() == {"album_id": 3, "track_id": None}

    def test_from_track_id(self):
        target = ReviewTarget.from_ids(track_id=8)
        assert target.kind == TargetKind.TRACK
        assert target.as_columns() == {"album_id": None, "track_id": 8}

    def test_neither_id(self):
        with pytest.raises(InvalidTargetError):
            ReviewTarget.from_ids()

    def test_both_ids(self):
        with pytest.raises(InvalidTargetError):
            ReviewTarget.from_ids(album_id=1, track_id=2)

    def test_review_is_not_a_review_target(self):
        with pytest.raises(InvalidTargetError):
            ReviewTarget(TargetKind.REVIEW, 1)


class TestCreateReview:
    """Review creation."""

    def test_create_album_review(self, db, make_review, author, test_album):
        """New reviews are pending with a computed score and no moderator."""
        review = make_review(author, album=test_album)

        assert review.id is not None
        assert review.user_id == author.id
        assert review.target == ReviewTarget.album(test_album.id)
        assert review.status == ReviewStatus.PENDING
        assert review.final_score == 51
        assert review.atmosphere_multiplier == pytest.approx(1.2024)
        assert review.atmosphere_rating == 4
        assert review.moderated_by is None
        assert review.moderated_at is None

    def test_create_track_review(self, make_review, author, test_track):
        review = make_review(author, track=test_track)

        assert review.target == ReviewTarget.track(test_track.id)
        assert review.album_id is None

    def test_create_logs_activity(self, db, pending_review, author):
        entry = db.query(ActivityLog).filter(ActivityLog.action == "review_created").one()
        assert entry.user_id == author.id
        assert entry.entity_id == pending_review.id
        assert entry.details["final_score"] == 51

    def test_missing_album(self, db, review_service, author, test_album):
        """A review of a non-existent album fails and writes nothing."""
        with pytest.raises(TargetNotFoundError) as exc:
            review_service.create(author, ReviewTarget.album(9999), **DEFAULT_RATINGS)

        assert exc.value.kind == "album"
        assert _review_count(db) == 0
        assert db.query(ActivityLog).count() == 0

    def test_missing_track(self, db, review_service, author):
        with pytest.raises(TargetNotFoundError):
            review_service.create(author, ReviewTarget.track(4242), **DEFAULT_RATINGS)
        assert _review_count(db) == 0

    def test_deleted_album_counts_as_missing(self, db, review_service, author, test_album):
        test_album.deleted_at = datetime.now(timezone.utc)
        db.commit()

        with pytest.raises(TargetNotFoundError):
            review_service.create(author, ReviewTarget.album(test_album.id), **DEFAULT_RATINGS)

    def test_invalid_rating_fails_before_write(self, db, review_service, author, test_album):
        ratings = {**DEFAULT_RATINGS, "rating_structure": 0}

        with pytest.raises(InvalidRatingError) as exc:
            review_service.create(author, ReviewTarget.album(test_album.id), **ratings)

        assert exc.value.field == "rating_structure"
        assert _review_count(db) == 0

    def test_invalid_atmosphere(self, review_service, author, test_album):
        ratings = {**DEFAULT_RATINGS, "atmosphere_rating": 11}
        with pytest.raises(InvalidRatingError) as exc:
            review_service.create(author, ReviewTarget.album(test_album.id), **ratings)
        assert exc.value.field == "atmosphere_rating"

    def test_target_must_be_review_target(self, review_service, author, test_album):
        with pytest.raises(InvalidTargetError):
            review_service.create(author, test_album.id, **DEFAULT_RATINGS)

    def test_anonymous_actor(self, review_service, test_album):
        with pytest.raises(UnauthenticatedError):
            review_service.create(None, ReviewTarget.album(test_album.id), **DEFAULT_RATINGS)

    def test_duplicate_album_review(self, db, make_review, author, test_album):
        """One live review per author and album."""
        make_review(author, album=test_album)

        with pytest.raises(DuplicateReviewError):
            make_review(author, album=test_album)

        assert _review_count(db) == 1

    def test_other_user_can_review_same_album(self, make_review, author, stranger, test_album):
        make_review(author, album=test_album)
        review = make_review(stranger, album=test_album)
        assert review.user_id == stranger.id

    def test_album_and_track_reviews_are_independent(self, make_review, author, test_album, test_track):
        make_review(author, album=test_album)
        review = make_review(author, track=test_track)
        assert review.track_id == test_track.id

    def test_can_review_again_after_delete(self, review_service, make_review, author, test_album):
        first = make_review(author, album=test_album)
        review_service.delete(author, first.id)

        second = make_review(author, album=test_album)
        assert second.id != first.id


class TestEditReview:
    """Author edits."""

    def test_edit_recomputes_score(self, review_service, pending_review, author):
        review = review_service.edit(author, pending_review.id, rating_rhymes=10, atmosphere_rating=10)

        # (10 + 8 + 6 + 9) * 1.4 * 1.6072 = 74.25
        assert review.final_score == 74
        assert review.atmosphere_multiplier == 1.6072
        assert review.status == ReviewStatus.PENDING

    def test_edit_approved_review_returns_to_pending(self, review_service, approved_review, author):
        """Editing a rating sends an approved review back for moderation."""
        assert approved_review.status == ReviewStatus.APPROVED
        assert approved_review.moderated_by is not None

        review = review_service.edit(author, approved_review.id, rating_structure=2)

        assert review.status == ReviewStatus.PENDING
        assert review.moderated_by is None
        assert review.moderated_at is None

    def test_edit_text_returns_to_pending(self, review_service, approved_review, author):
        review = review_service.edit(author, approved_review.id, text="Changed my mind")

        assert review.text == "Changed my mind"
        assert review.status == ReviewStatus.PENDING
        assert review.final_score == 51

    def test_edit_rejected_review_allows_remoderation(self, review_service, pending_review, author, admin):
        review_service.reject(admin, pending_review.id)
        review_service.edit(author, pending_review.id, text="Cleaned up")

        review = review_service.approve(admin, pending_review.id)
        assert review.status == ReviewStatus.APPROVED

    def test_unchanged_edit_keeps_status(self, review_service, approved_review, author):
        """Submitting the current values is not a content change."""
        review = review_service.edit(
            author, approved_review.id,
            rating_rhymes=approved_review.rating_rhymes,
            text=approved_review.text,
        )
        assert review.status == ReviewStatus.APPROVED

    def test_only_author_may_edit(self, review_service, pending_review, stranger):
        with pytest.raises(ForbiddenError):
            review_service.edit(stranger, pending_review.id, rating_rhymes=1)

    def test_admin_cannot_edit_content(self, review_service, pending_review, admin):
        with pytest.raises(ForbiddenError):
            review_service.edit(admin, pending_review.id, text="Admin rewrite")

    def test_invalid_rating_leaves_review_untouched(self, db, review_service, pending_review, author):
        with pytest.raises(InvalidRatingError):
            review_service.edit(author, pending_review.id, rating_rhymes=3, rating_individuality=12)

        db.expire_all()
        review = db.get(Review, pending_review.id)
        assert review.rating_rhymes == 7
        assert review.final_score == 51

    def test_edit_missing_review(self, review_service, author):
        with pytest.raises(NotFoundError):
            review_service.edit(author, 9999, text="hello")

    def test_edit_deleted_review(self, review_service, pending_review, author):
        review_service.delete(author, pending_review.id)
        with pytest.raises(NotFoundError):
            review_service.edit(author, pending_review.id, text="hello")

    def test_target_is_kept(self, review_service, pending_review, author, test_album):
        review = review_service.edit(author, pending_review.id, rating_rhymes=1)
        assert review.target == ReviewTarget.album(test_album.id)


class TestModerateReview:
    """Admin moderation state machine."""

    def test_approve(self, review_service, pending_review, admin):
        review = review_service.moderate(admin, pending_review.id, ModerationDecision.APPROVE)

        assert review.status == ReviewStatus.APPROVED
        assert review.moderated_by == admin.id
        assert review.moderated_at is not None

    def test_reject(self, review_service, pending_review, admin):
        review = review_service.moderate(admin, pending_review.id, ModerationDecision.REJECT)

        assert review.status == ReviewStatus.REJECTED
        assert review.moderated_by == admin.id

    def test_decision_as_string(self, review_service, pending_review, admin):
        review = review_service.moderate(admin, pending_review.id, "approve")
        assert review.status == ReviewStatus.APPROVED

    def test_non_admin_forbidden(self, review_service, pending_review, author):
        """Authors cannot approve their own reviews."""
        with pytest.raises(ForbiddenError):
            review_service.approve(author, pending_review.id)

    def test_non_admin_forbidden_before_lookup(self, review_service, stranger):
        """Role is checked before the review is looked up."""
        with pytest.raises(ForbiddenError):
            review_service.approve(stranger, 9999)

    @pytest.mark.parametrize("first", [ModerationDecision.APPROVE, ModerationDecision.REJECT])
    @pytest.mark.parametrize("second", [ModerationDecision.APPROVE, ModerationDecision.REJECT])
    def test_cannot_moderate_twice(self, review_service, pending_review, admin, first, second):
        """Moderated reviews must be edited before they can be moderated again."""
        review_service.moderate(admin, pending_review.id, first)

        with pytest.raises(InvalidTransitionError) as exc:
            review_service.moderate(admin, pending_review.id, second)

        assert exc.value.current == first.resulting_status.value

    def test_moderate_missing_review(self, review_service, admin):
        with pytest.raises(NotFoundError):
            review_service.approve(admin, 9999)

    def test_moderate_deleted_review(self, review_service, pending_review, author, admin):
        review_service.delete(author, pending_review.id)
        with pytest.raises(NotFoundError):
            review_service.approve(admin, pending_review.id)

    def test_unknown_decision(self, db, review_service, pending_review, admin):
        """Anything but approve/reject is a domain error and changes nothing."""
        with pytest.raises(InvalidDecisionError) as exc:
            review_service.moderate(admin, pending_review.id, "maybe")

        assert exc.value.decision == "maybe"
        db.expire_all()
        assert db.get(Review, pending_review.id).status == ReviewStatus.PENDING

    def test_unknown_decision_from_non_admin(self, review_service, pending_review, author):
        with pytest.raises(ForbiddenError):
            review_service.moderate(author, pending_review.id, "maybe")

    def test_moderation_is_logged(self, db, review_service, pending_review, admin):
        review_service.reject(admin, pending_review.id)

        entry = db.query(ActivityLog).filter(ActivityLog.action == "review_rejected").one()
        assert entry.user_id == admin.id
        assert entry.entity_id == pending_review.id


class TestDeleteReview:
    """Soft deletion."""

    def test_author_deletes(self, db, review_service, pending_review, author):
        review_service.delete(author, pending_review.id)

        with pytest.raises(NotFoundError):
            review_service.get(pending_review.id)

        # Row kept for history
        row = db.get(Review, pending_review.id)
        assert row is not None
        assert row.is_deleted

    def test_admin_deletes(self, review_service, pending_review, admin):
        review_service.delete(admin, pending_review.id)
        with pytest.raises(NotFoundError):
            review_service.get(pending_review.id)

    def test_stranger_forbidden(self, review_service, pending_review, stranger):
        with pytest.raises(ForbiddenError):
            review_service.delete(stranger, pending_review.id)
        assert review_service.get(pending_review.id).deleted_at is None

    def test_delete_twice(self, review_service, pending_review, author):
        review_service.delete(author, pending_review.id)
        with pytest.raises(NotFoundError):
            review_service.delete(author, pending_review.id)

    def test_deleted_reviews_hidden_from_lists(self, review_service, approved_review, author, test_album):
        assert [r.id for r in review_service.list_reviews(album_id=test_album.id)] == [approved_review.id]

        review_service.delete(author, approved_review.id)

        assert review_service.list_reviews(album_id=test_album.id) == []
        assert review_service.list_reviews(status=None) == []


class TestListReviews:
    """Read queries."""

    def test_defaults_to_approved(self, review_service, make_review, author, stranger, admin, test_album):
        approved = make_review(author, album=test_album)
        make_review(stranger, album=test_album)
        review_service.approve(admin, approved.id)

        assert [r.id for r in review_service.list_reviews()] == [approved.id]

    def test_filter_by_status_and_user(self, review_service, make_review, author, stranger, test_album):
        mine = make_review(author, album=test_album)
        make_review(stranger, album=test_album)

        pending = review_service.list_reviews(user_id=author.id, status=ReviewStatus.PENDING)
        assert [r.id for r in pending] == [mine.id]

    def test_filter_by_track(self, review_service, make_review, author, test_album, test_track):
        make_review(author, album=test_album)
        on_track = make_review(author, track=test_track)

        reviews = review_service.list_reviews(track_id=test_track.id, status=None)
        assert [r.id for r in reviews] == [on_track.id]

    def test_pending_queue_oldest_first(self, review_service, make_review, author, stranger, test_album):
        first = make_review(author, album=test_album)
        second = make_review(stranger, album=test_album)

        assert [r.id for r in review_service.pending()] == [first.id, second.id]


class TestPopularReviews:
    """Most liked recent album reviews."""

    @pytest.fixture
    def approved_pair(self, review_service, make_review, author, stranger, admin, test_album):
        first = make_review(author, album=test_album)
        second = make_review(stranger, album=test_album)
        review_service.approve(admin, first.id)
        review_service.approve(admin, second.id)
        return first, second

    def test_ordered_by_likes(self, review_service, ledger, approved_pair, author, admin):
        first, second = approved_pair
        ledger.react(author, TargetKind.REVIEW, first.id)
        ledger.react(admin, TargetKind.REVIEW, first.id)
        ledger.react(admin, TargetKind.REVIEW, second.id)

        assert [r.id for r in review_service.popular()] == [first.id, second.id]

    def test_ties_newest_first(self, review_service, approved_pair):
        first, second = approved_pair
        assert [r.id for r in review_service.popular()] == [second.id, first.id]

    def test_unliked_reviews_drop_back(self, review_service, ledger, approved_pair, admin):
        first, second = approved_pair
        ledger.react(admin, TargetKind.REVIEW, first.id)
        ledger.unreact(admin, TargetKind.REVIEW, first.id)

        assert [r.id for r in review_service.popular()] == [second.id, first.id]

    def test_excludes_old_reviews(self, db, review_service, approved_pair):
        first, second = approved_pair
        db.query(Review).filter(Review.id == first.id).update(
            {"created_at": datetime.now(timezone.utc) - timedelta(days=3)}
        )
        db.commit()

        assert [r.id for r in review_service.popular()] == [second.id]

    def test_excludes_unapproved_and_track_reviews(
        self, review_service, make_review, author, admin, test_album, test_track
    ):
        make_review(author, album=test_album)
        on_track = make_review(author, track=test_track)
        review_service.approve(admin, on_track.id)

        assert review_service.popular() == []

    def test_limit(self, review_service, approved_pair):
        assert len(review_service.popular(limit=1)) == 1

    @pytest.mark.parametrize("limit", [0, -5, 500])
    def test_out_of_range_limit_uses_default(self, review_service, approved_pair, limit):
        assert len(review_service.popular(limit=limit)) == 2


class TestActivityHistory:
    """Audit entries written alongside review changes."""

    def test_entity_history(self, review_service, pending_review, author, admin):
        review_service.edit(author, pending_review.id, text="Second take")
        review_service.approve(admin, pending_review.id)
        review_service.delete(admin, pending_review.id)

        actions = [e.action for e in review_service.activity.get_entity_activity("review", pending_review.id)]
        assert actions == ["review_created", "review_edited", "review_approved", "review_deleted"]

    def test_user_activity(self, review_service, make_review, author, test_album, test_track):
        make_review(author, album=test_album)
        make_review(author, track=test_track)

        entries = review_service.activity.get_user_activity(author.id, limit=1)
        assert len(entries) == 1
        assert entries[0].details["target"] == "track"
