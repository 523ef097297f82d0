from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageUnavailable
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (
    mysql.connector.OperationalError,
    mysql.connector.InterfaceError,
    mysql.connector.errors.PoolError,
)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection, yield (conn, cursor) and commit on success.

    Any exception rolls the transaction back. Connection-level faults surface
    as StorageUnavailable.
    """

    try:
        conn = conn_factory.connect()
    except _TRANSIENT_ERRORS as e:
        logger.error("database connection failed: %s", e)
        raise StorageUnavailable("Database is unavailable") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except _TRANSIENT_ERRORS as e:
        _safe_rollback(conn)
        logger.error("database operation failed: %s", e)
        raise StorageUnavailable("Database is unavailable") from e
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except _TRANSIENT_ERRORS:
        logger.warning("rollback failed on a broken connection")


def is_duplicate_key(error: Exception) -> bool:
    return isinstance(error, mysql.connector.IntegrityError) and getattr(error, "errno", None) == errorcode.ER_DUP_ENTRY


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_placeholders(values) -> str:
    return ", ".join(["%s"] * len(values))


def to_db_datetime(value: datetime) -> datetime:
    """DATETIME columns hold naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_db_datetime(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc)
