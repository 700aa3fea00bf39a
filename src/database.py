"""Database layer for the user_books shelf table."""
import psycopg2
from psycopg2 import errors, pool
from typing import Optional, List, Dict, Any
import logging

from src.errors import DuplicateEntry, StoreFailure
from src.models import ShelfBook
from src.parse import SHELF_BOOK_COLUMNS, parse_shelf_book_row

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

_SELECT_COLUMNS = ", ".join(SHELF_BOOK_COLUMNS)


def is_duplicate_error(exc: Exception) -> bool:
    """
    Tell whether a driver error is a uniqueness violation.

    The SQLSTATE is checked first; the message text is the fallback for
    errors raised without a pgcode.
    """
    if isinstance(exc, errors.UniqueViolation):
        return True
    if getattr(exc, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    return "duplicate" in str(exc).lower()


def translate_error(exc: Exception) -> Exception:
    """Map a psycopg2 error onto DuplicateEntry or StoreFailure."""
    if is_duplicate_error(exc):
        return DuplicateEntry("This book is already on your shelf")
    return StoreFailure(str(exc).strip() or exc.__class__.__name__)


class Database:
    """PostgreSQL shelf store with connection pooling."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        try:
            self.connection_pool = psycopg2.pool.SimpleConnectionPool(
                min_conn,
                max_conn,
                connection_string
            )
        except psycopg2.Error as e:
            raise StoreFailure(f"Failed to create connection pool: {e}") from e

        logger.info("Database connection pool created successfully")

    def init_schema(self):
        """Create the user_books table if it doesn't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS user_books (
                        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                        user_id UUID NOT NULL,
                        google_book_id VARCHAR(255) NOT NULL,
                        title TEXT NOT NULL,
                        authors TEXT[] NOT NULL DEFAULT '{}',
                        description TEXT,
                        thumbnail TEXT,
                        published_date VARCHAR(50),
                        shelf_type VARCHAR(32) NOT NULL
                            CHECK (shelf_type IN ('want_to_read', 'currently_reading', 'read')),
                        added_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                        UNIQUE (user_id, google_book_id)
                    )
                """)

                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_user_books_user_added
                    ON user_books (user_id, added_at DESC)
                """)

                conn.commit()
                logger.info("Database schema initialized successfully")
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to initialize schema: {e}")
            raise translate_error(e) from e
        finally:
            self.connection_pool.putconn(conn)

    def list_books(self, user_id: str, shelf_type: Optional[str] = None) -> List[ShelfBook]:
        """
        List a user's books, newest first.

        Args:
            user_id: Owning user
            shelf_type: Optional shelf to filter on

        Returns:
            List of ShelfBook objects
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                if shelf_type:
                    cur.execute(f"""
                        SELECT {_SELECT_COLUMNS}
                        FROM user_books
                        WHERE user_id = %s AND shelf_type = %s
                        ORDER BY added_at DESC
                    """, (user_id, shelf_type))
                else:
                    cur.execute(f"""
                        SELECT {_SELECT_COLUMNS}
                        FROM user_books
                        WHERE user_id = %s
                        ORDER BY added_at DESC
                    """, (user_id,))

                rows = cur.fetchall()
                return [parse_shelf_book_row(row) for row in rows]
        except psycopg2.Error as e:
            logger.error(f"Failed to list books: {e}")
            raise translate_error(e) from e
        finally:
            self.connection_pool.putconn(conn)

    def insert_book(self, record: Dict[str, Any]) -> ShelfBook:
        """
        Insert one shelf book.

        Args:
            record: Column values for user_id, google_book_id, title, authors,
                description, thumbnail, published_date and shelf_type

        Returns:
            The stored ShelfBook

        Raises:
            DuplicateEntry: if the user already shelved this catalog id
            StoreFailure: for any other database error
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(f"""
                    INSERT INTO user_books (
                        user_id, google_book_id, title, authors, description,
                        thumbnail, published_date, shelf_type
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_SELECT_COLUMNS}
                """, (
                    record["user_id"], record["google_book_id"], record["title"],
                    list(record.get("authors") or []), record.get("description"),
                    record.get("thumbnail"), record.get("published_date"),
                    record["shelf_type"]
                ))
                row = cur.fetchone()
                conn.commit()
                logger.info(f"Inserted book {record['google_book_id']} on {record['shelf_type']}")
                return parse_shelf_book_row(row)
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to insert book: {e}")
            raise translate_error(e) from e
        finally:
            self.connection_pool.putconn(conn)

    def update_shelf(self, book_id: str, user_id: str, shelf_type: str) -> int:
        """Move a user's book to another shelf. Returns the number of rows updated."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    UPDATE user_books
                    SET shelf_type = %s
                    WHERE id = %s AND user_id = %s
                """, (shelf_type, book_id, user_id))
                updated = cur.rowcount
                conn.commit()
                logger.info(f"Moved book {book_id} to {shelf_type} ({updated} row)")
                return updated
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to move book: {e}")
            raise translate_error(e) from e
        finally:
            self.connection_pool.putconn(conn)

    def delete_book(self, book_id: str, user_id: str) -> int:
        """Delete a user's book. Returns the number of rows deleted."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    DELETE FROM user_books
                    WHERE id = %s AND user_id = %s
                """, (book_id, user_id))
                deleted = cur.rowcount
                conn.commit()
                logger.info(f"Removed book {book_id} ({deleted} row)")
                return deleted
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to remove book: {e}")
            raise translate_error(e) from e
        finally:
            self.connection_pool.putconn(conn)

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
