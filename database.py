from sqlmodel import create_engine, SQLModel, Session
from sqlalchemy.pool import StaticPool
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")

engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # In-memory databases live as long as their single connection
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool

# Create engine
engine = create_engine(DATABASE_URL, echo=DATABASE_ECHO, **engine_kwargs)


def create_db_and_tables():
    """Create all tables in the database"""
    # Register table models on the metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Get database session - used as FastAPI dependency"""
    with Session(engine) as session:
        yield session
