"""
Connection health check for the store and tenant databases.
"""

from sqlalchemy import Engine, text


def health_check(engine: Engine) -> bool:
    """
    Run SELECT 1 and return True if no exception. Postgres, MySQL, Trino and SQLite all support SELECT 1.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception:
        return False
