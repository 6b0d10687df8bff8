"""
Shared fixtures: in-memory SQLite shared by the app and the tests.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fitness_gh.main import app
from fitness_gh.db.base import Base
from fitness_gh.db.session import get_db
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.profile import UserProfile
from fitness_gh.db.models.gym import Gym
from fitness_gh.db.models.employment import Employment
from fitness_gh.db.models.subscription_plan import SubscriptionPlan
from fitness_gh.core.security import hash_password, create_access_token


TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


def create_user(db, email, username, user_type="MEMBER", password="testpass123", verified=True):
    account = Account(
        email=email,
        password_hash=hash_password(password),
        user_type=user_type,
        email_verified=verified,
    )
    db.add(account)
    db.flush()
    profile = UserProfile(account_id=account.id, username=username, first_name=username.title())
    db.add(profile)
    db.commit()
    db.refresh(account)
    db.refresh(profile)
    return account, profile


def auth_headers(account, profile):
    token = create_access_token({
        "sub": str(account.id),
        "user_type": account.user_type,
        "profile_id": profile.id,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(db_session):
    return create_user(db_session, "owner@example.com", "gym_owner", user_type="GYM_OWNER")


@pytest.fixture
def member(db_session):
    return create_user(db_session, "member@example.com", "kofi")


@pytest.fixture
def gym(db_session, owner):
    _, owner_profile = owner
    gym = Gym(owner_id=owner_profile.id, name="Osu Iron Works", slug="osu-iron-works", city="Accra")
    db_session.add(gym)
    db_session.commit()
    db_session.refresh(gym)
    return gym


@pytest.fixture
def monthly_plan(db_session, gym):
    plan = SubscriptionPlan(
        gym_id=gym.id,
        name="Monthly",
        price=50.0,
        currency="GHS",
        duration=1,
        duration_unit="MONTHS",
        features=["Gym floor"],
    )
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


@pytest.fixture
def employ(db_session, gym):
    """Factory: give a fresh user a role at the gym."""
    def _employ(email, username, role):
        account, profile = create_user(db_session, email, username, user_type="EMPLOYEE")
        db_session.add(Employment(profile_id=profile.id, gym_id=gym.id, role=role))
        db_session.commit()
        return account, profile
    return _employ
