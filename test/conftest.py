import os

# Test-Umgebung setzen, bevor app/database importiert werden
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from database import SessionLocal
from models import Base


# ---------------------------------------------------------
# DB Setup Fixture
# ---------------------------------------------------------
@pytest.fixture(autouse=True)
def setup_db():
    db = SessionLocal()
    Base.metadata.drop_all(bind=db.bind)
    Base.metadata.create_all(bind=db.bind)
    yield
    db.close()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()
