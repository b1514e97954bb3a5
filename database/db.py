from sqlalchemy import create_engine               # SQLAlchemy engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings               # ✅ environment settings

# SQLite connections are shared with FastAPI's thread pool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

# ✅ session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ declarative base for all models
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables (models must be imported so they register on Base)."""
    from models import students, subjects, grades  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
