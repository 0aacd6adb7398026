"""
PostgreSQL connection handling for the match store.

Connects using DATABASE_URL (preferred) or individual
PGHOST/PGPORT/PGUSER/PGPASSWORD/PGDATABASE environment variables.
The games table is the same one Supabase exposes, so either store
backend can read what the other wrote.
"""

import os
import logging
import psycopg2
from psycopg2.extras import RealDictCursor
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"id", "code", "status", "player1_id", "player2_id", "winner_id", "created_at"}


def get_connection_string() -> str:
    """
    Get the PostgreSQL connection string.

    Priority:
    1. DATABASE_URL environment variable
    2. Individual PG* environment variables (PGHOST, PGPORT, PGUSER, PGPASSWORD, PGDATABASE)

    Raises:
        ValueError: If no valid connection configuration is found
    """
    database_url = os.getenv('DATABASE_URL')
    if database_url:
        return database_url

    pghost = os.getenv('PGHOST')
    pgport = os.getenv('PGPORT', '5432')
    pguser = os.getenv('PGUSER')
    pgpassword = os.getenv('PGPASSWORD')
    pgdatabase = os.getenv('PGDATABASE')

    if pghost and pguser and pgpassword and pgdatabase:
        return f"postgresql://{pguser}:{pgpassword}@{pghost}:{pgport}/{pgdatabase}"

    raise ValueError(
        "Database connection not configured. "
        "Set DATABASE_URL or PGHOST/PGUSER/PGPASSWORD/PGDATABASE environment variables."
    )


def get_connection():
    """
    Get a database connection to PostgreSQL.

    Returns:
        psycopg2 connection with RealDictCursor (returns rows as dictionaries)
    """
    try:
        return psycopg2.connect(get_connection_string(), cursor_factory=RealDictCursor)
    except Exception as e:
        logger.error(f"Failed to connect to PostgreSQL: {e}")
        raise


def check_schema() -> bool:
    """
    Verify the games table has every column the match store uses.

    Returns:
        True if all required columns are present
    """
    conn = get_connection()
    cursor = conn.cursor()
    try:
        cursor.execute("""
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = 'public' AND table_name = 'games'
        """)
        columns = {row['column_name'] for row in cursor.fetchall()}
    finally:
        cursor.close()
        conn.close()

    missing = REQUIRED_COLUMNS - columns
    if missing:
        print(f"[WARN] games table is missing columns: {', '.join(sorted(missing))}")
        return False

    print("[OK] games table has all required columns")
    return True


if __name__ == "__main__":
    print("Testing PostgreSQL connection...")
    check_schema()
