# obra/db/concurrency.py
import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from obra.logger import get_logger

logger = get_logger(__name__)


def lock_for_update(query):
    """
    Apply row-level locking for read-then-write guards.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the first INSERT of the
    transaction takes the database write lock instead.
    """
    return query.with_for_update()


def run_with_retry(db: Session, func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a whole unit of work, retrying on lock contention.

    Retries on OperationalError ("database is locked", deadlocks) and
    StaleDataError. The session is rolled back before every retry, so func
    must redo all of its reads.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "write conflict (attempt %s/%s): %s", attempt + 1, attempts, exc
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
