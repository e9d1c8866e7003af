import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
import sys
import os

# Add src to path so we can import the package without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from sheepfold.database import Base
from sheepfold.store import KeyValueStore

@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    yield session

    session.rollback()
    session.close()

@pytest.fixture
def store(db_session):
    return KeyValueStore(db_session)
