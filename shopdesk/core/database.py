"""
Conexión a base de datos PostgreSQL (Supabase)

Este módulo centraliza TODAS las formas de acceso a la base de datos:
- psycopg2 directo (para queries SQL y transacciones)
- Supabase client (para las funciones RPC: log_admin_action, search_inventory)

Author: TM3
Updated: 2026-03-02
"""
import logging
import time
from contextlib import contextmanager
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from supabase import create_client, Client

from .config import settings
from .errors import StoreError

logger = logging.getLogger(__name__)


# ============================================================================
# psycopg2 Direct Connections
# ============================================================================

def _database_url() -> str:
    # Use settings.DATABASE_URL which loads from .env file
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def get_db_connection_dict_with_retry(max_retries=None, retry_delay=None):
    """
    Get a psycopg2 connection with RealDictCursor and automatic retry

    This function handles intermittent Supabase connection issues by:
    - Retrying failed connections up to max_retries times
    - Adding exponential backoff between retries
    - Logging connection attempts for debugging

    Only the connect step is retried. Statements are never replayed here:
    a failed statement rolls back its transaction and surfaces to the caller.

    Args:
        max_retries: Maximum number of connection attempts (default: settings.DB_MAX_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: settings.DB_RETRY_DELAY)

    Returns:
        psycopg2 connection with RealDictCursor

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    max_retries = max_retries or settings.DB_MAX_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay
    database_url = _database_url()

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection (dict) attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, cursor_factory=RealDictCursor)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection (dict) successful on attempt {attempt}")
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

    raise last_error if last_error else Exception("Connection failed after all retries")


@contextmanager
def transaction(operation: str):
    """
    Run a block of statements as one database transaction

    Commits when the block exits normally, rolls back on any exception.
    psycopg2 errors are re-raised as StoreError; domain errors raised
    inside the block propagate unchanged (after the rollback).

    Usage:
        with transaction("create order") as cursor:
            cursor.execute("INSERT INTO orders ...")
    """
    try:
        conn = get_db_connection_dict_with_retry()
    except psycopg2.Error as e:
        raise StoreError(operation, e) from e

    cursor = conn.cursor()
    try:
        yield cursor
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        logger.error(f"Transaction '{operation}' rolled back: {e}")
        raise StoreError(operation, e) from e
    except Exception:
        conn.rollback()
        logger.info(f"Transaction '{operation}' rolled back")
        raise
    finally:
        cursor.close()
        conn.close()


@contextmanager
def read_cursor(operation: str):
    """
    Cursor for read-only queries, closed together with its connection

    Usage:
        with read_cursor("find order") as cursor:
            cursor.execute("SELECT * FROM orders WHERE id = %s", (order_id,))
    """
    try:
        conn = get_db_connection_dict_with_retry()
    except psycopg2.Error as e:
        raise StoreError(operation, e) from e

    cursor = conn.cursor()
    try:
        yield cursor
    except psycopg2.Error as e:
        raise StoreError(operation, e) from e
    finally:
        cursor.close()
        conn.close()


# ============================================================================
# Supabase Client (RPC endpoint)
# ============================================================================

_supabase: Optional[Client] = None


def get_supabase() -> Client:
    """
    FastAPI dependency para obtener cliente de Supabase

    The client is created on first use so that importing this module does
    not require Supabase credentials.
    """
    global _supabase
    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise Exception("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase
