from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime

from sheepfold.config import cfg

Base = declarative_base()

class StoredValue(Base):
    """
    One JSON document per key. Each entity collection is written here as a
    whole snapshot, so a write always replaces the previous value.
    """
    __tablename__ = 'kv_store'

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False)
    value = Column(Text, nullable=False) # JSON text
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


# Engine Instances
engine = create_engine(cfg.DB_PATH, echo=False, connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db():
    # Mainly for manual init, Alembic handles migration usually
    Base.metadata.create_all(engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
