# Overview: Locking and retry helpers for the booking critical section.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    The optimistic version check on Staff covers SQLite.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Execute a DB operation, re-running it when it lost an optimistic-lock race.

    Only StaleDataError (another transaction bumped the row version between
    our read and our write) is retried. The re-run reads fresh state, so a
    booking that lost the race is re-checked and rejected as a conflict
    rather than written. Any other database failure propagates immediately.
    """
    for attempt in range(attempts):
        try:
            return func()
        except StaleDataError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Concurrent write detected, retrying (attempt %d of %d)", attempt + 2, attempts
            )
            time.sleep(backoff_base * (2 ** attempt))
