# Overview: Retry helpers for transactional service operations.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class StorageUnavailableError(RuntimeError):
    """Raised when the data store keeps failing after retries."""


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks, dropped connections) and
    StaleDataError. func must own its whole read-then-write sequence, since
    the session is rolled back between attempts.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise StorageUnavailableError("Data store unavailable") from exc
            time.sleep(backoff_base * (2 ** attempt))
