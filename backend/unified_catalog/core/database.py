"""
PostgreSQL connection handling

Every repository works on a psycopg2 connection handed to it by the caller.
Reads use a short-lived connection, writes run inside `transaction()` so a
product and all of its variants are committed or rolled back together.
"""
import re
import time
import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extras import RealDictCursor

from .config import settings
from .exceptions import ConflictError

logger = logging.getLogger(__name__)

CONNECTION_TIMEOUT = settings.CONNECTION_TIMEOUT

# Unique constraints declared in scripts/migrations/001_unified_catalog.sql
UNIQUE_CONSTRAINT_FIELDS = {
    "product_types_name_lower_key": "name",
    "product_types_slug_key": "slug",
    "products_slug_key": "slug",
    "products_base_slug_key": "base_slug",
    "product_variants_sku_key": "sku",
}

# "Key (sku)=(00000201) already exists." / "Key (lower(name::text))=(iphone) already exists."
_KEY_DETAIL = re.compile(r"Key \((?P<key>.+?)\)=\((?P<value>.*)\) already exists")
_KEY_FIELD = re.compile(r"^(?:lower\()?(?P<field>\w+)")


def _database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM product_types")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    return psycopg2.connect(
        _database_url(),
        cursor_factory=RealDictCursor,
        connect_timeout=CONNECTION_TIMEOUT,
    )


def get_db_connection_dict_with_retry(max_retries=None, retry_delay=None):
    """
    Get a RealDictCursor connection with automatic retry on connection failures

    Retries use exponential backoff: retry_delay, 2 * retry_delay, ...

    Args:
        max_retries: Maximum number of connection attempts (default: settings.DB_MAX_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: settings.DB_RETRY_DELAY)

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    max_retries = max_retries or settings.DB_MAX_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = get_db_connection_dict()
            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")

    raise last_error


def conflict_from_unique_violation(error: pg_errors.UniqueViolation) -> ConflictError:
    """
    Translate a PostgreSQL unique violation into a ConflictError naming the
    offending field and value.
    """
    diag = getattr(error, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    detail = getattr(diag, "message_detail", None) or ""

    field = UNIQUE_CONSTRAINT_FIELDS.get(constraint)
    value = None

    match = _KEY_DETAIL.search(detail)
    if match:
        value = match.group("value")
        if not field:
            key_match = _KEY_FIELD.match(match.group("key"))
            field = key_match.group("field") if key_match else None

    field = field or "unknown"
    return ConflictError(f"{field} already exists: {value}", field=field, value=value)


@contextmanager
def transaction() -> Iterator:
    """
    Run a block inside one database transaction

    Commits when the block finishes, rolls back on any exception. Unique
    violations raised by PostgreSQL surface as ConflictError.

    Usage:
        with transaction() as conn:
            ProductRepository(conn).insert(...)
            VariantRepository(conn).insert_many(...)
    """
    conn = get_db_connection_dict_with_retry()
    try:
        yield conn
        conn.commit()
    except pg_errors.UniqueViolation as e:
        conn.rollback()
        logger.warning(f"Transaction rolled back on unique violation: {e}")
        raise conflict_from_unique_violation(e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def read_connection() -> Iterator:
    """Connection for read-only work, always closed afterwards"""
    conn = get_db_connection_dict_with_retry()
    try:
        yield conn
    finally:
        conn.close()
