import os

import pytest

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_DEMO_USERS"] = "0"

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.core.database import Base, get_db, redis_client
from app.core.security import Identity, UserGroup, get_password_hash
from app.models.user import User

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

# Passwords are hashed once; bcrypt is slow on purpose
PASSWORD = "Secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    redis_client.flushall()
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def db(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

def make_user(session, username, name, group):
    user = User(username=username, password_hash=PASSWORD_HASH, name=name, group=group)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture
def users(db):
    """alice and carol are patients, drbob and drlee are doctors."""
    return {
        "alice": make_user(db, "alice", "Alice Johnson", UserGroup.PATIENTS),
        "carol": make_user(db, "carol", "Carol White", UserGroup.PATIENTS),
        "drbob": make_user(db, "drbob", "Dr. Bob Smith", UserGroup.DOCTORS),
        "drlee": make_user(db, "drlee", "Dr. Emily Lee", UserGroup.DOCTORS),
    }

@pytest.fixture
def identities(users):
    return {name: Identity(id=user.id, groups=user.groups) for name, user in users.items()}

@pytest.fixture
def login(client, users):
    """Return Authorization headers for one of the test users."""
    def _login(username):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login
