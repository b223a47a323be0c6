from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
import logging

from core.exceptions import LotteryException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./club_lottery.db"
    club_timezone: str = "Europe/Copenhagen"
    cutoff_weekday: int = 6  # ISO weekday, 6 = Saturday
    cutoff_hour: int = 17
    max_repeat_weeks: int = 52
    seed_weeks_ahead: int = 20 * 52
    seed_on_startup: bool = True
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite needs check_same_thread=False because FastAPI serves sync routes from a thread pool
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency: provide a database Session

    The session is closed once the request finishes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def serializable_session() -> Session:
    """
    Session whose connection runs at SERIALIZABLE isolation.

    Used for round seeding, where two processes racing to create the first
    active round could otherwise both succeed.
    """
    return SessionLocal(bind=engine.execution_options(isolation_level="SERIALIZABLE"))


def _find_session(args, kwargs):
    if isinstance(kwargs.get('db'), Session):
        return kwargs['db']
    for arg in args:
        if isinstance(arg, Session):
            return arg
    return None


def transactional(func):
    """
    Transaction decorator: make a business operation atomic

    Usage:
        class LedgerService:
            @transactional
            def approve(self, db: Session, transaction_id: str):
                # every DB operation runs in one transaction
                tx = ...
                tx.status = TransactionStatus.APPROVED
                # no manual commit, the decorator handles it

    If the function raises:
        - the session is rolled back
        - the exception is re-raised for the caller to handle

    Notes:
        - a Session must be passed positionally (after self for methods) or as db=
        - do not commit inside the function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        db = _find_session(args, kwargs)

        if db is None:
            raise ValueError(
                f"@transactional requires a 'db: Session' argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except LotteryException as e:
            # business rule rejections are expected, no traceback needed
            logger.warning(f"Transaction rejected in {func.__name__}: {e}")
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
