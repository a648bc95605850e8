"""Pytest fixtures for review site tests."""
import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import reviewsite.models  # noqa: F401  registers tables on Base.metadata
from reviewsite.database import Base, create_db_engine
from reviewsite.logging_config import reset_logging
from reviewsite.models.album import Album
from reviewsite.models.genre import Genre
from reviewsite.models.target import ReviewTarget
from reviewsite.models.track import Track
from reviewsite.models.user import User
from reviewsite.services.identity import Actor
from reviewsite.services.reactions import ReactionLedger
from reviewsite.services.reviews import ReviewService

# In-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_db_engine(SQLALCHEMY_DATABASE_URL, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_logging():
    """Drop handlers the CLI installs so they do not outlive a test."""
    yield
    reset_logging()


@pytest.fixture
def db_session(db):
    """Alias for db fixture (used by some tests)."""
    return db


def _create_user(db, username, is_admin=False):
    user = User(username=username, email=f"{username}@example.com", is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db):
    """Create a regular user."""
    return _create_user(db, "testuser")


@pytest.fixture
def other_user(db):
    """Create a second regular user."""
    return _create_user(db, "otheruser")


@pytest.fixture
def admin_user(db):
    """Create an admin user."""
    return _create_user(db, "adminuser", is_admin=True)


@pytest.fixture
def author(test_user):
    """Actor for the regular test user."""
    return Actor.from_user(test_user)


@pytest.fixture
def stranger(other_user):
    """Actor for a user who does not own the test reviews."""
    return Actor.from_user(other_user)


@pytest.fixture
def admin(admin_user):
    """Actor for the admin user."""
    return Actor.from_user(admin_user)


@pytest.fixture
def test_genre(db):
    """Create a test genre."""
    genre = Genre(name="Hip-Hop", description="Rap and beats")
    db.add(genre)
    db.commit()
    db.refresh(genre)
    return genre


@pytest.fixture
def test_album(db, test_genre):
    """Create a test album."""
    album = Album(title="Test Album", artist="Test Artist", genre_id=test_genre.id)
    db.add(album)
    db.commit()
    db.refresh(album)
    return album


@pytest.fixture
def test_track(db, test_album):
    """Create a test track."""
    track = Track(album_id=test_album.id, title="Test Track", track_number=1, duration=180)
    db.add(track)
    db.commit()
    db.refresh(track)
    return track


@pytest.fixture
def review_service(db):
    return ReviewService(db)


@pytest.fixture
def ledger(db):
    return ReactionLedger(db)


DEFAULT_RATINGS = {
    "rating_rhymes": 7,
    "rating_structure": 8,
    "rating_implementation": 6,
    "rating_individuality": 9,
    "atmosphere_rating": 4,
}


@pytest.fixture
def make_review(review_service):
    """Factory creating a review through the service.

    Targets the given album or track; ratings default to DEFAULT_RATINGS
    (final score 51).
    """

    def _make(actor, album=None, track=None, text="Solid record", **ratings):
        target = ReviewTarget.album(album.id) if album is not None else ReviewTarget.track(track.id)
        values = {**DEFAULT_RATINGS, **ratings}
        return review_service.create(actor, target, text=text, **values)

    return _make


@pytest.fixture
def pending_review(make_review, author, test_album):
    """A pending review of the test album by the test user."""
    return make_review(author, album=test_album)


@pytest.fixture
def approved_review(review_service, pending_review, admin):
    """An approved review of the test album by the test user."""
    return review_service.approve(admin, pending_review.id)
