"""
Custom UUID type for SQLAlchemy that hands UUIDs to the application as strings.
Stored natively on PostgreSQL and as CHAR(32) on SQLite.
"""

from sqlalchemy.types import TypeDecorator, Uuid
import uuid


class StringUUID(TypeDecorator):
    """
    A UUID column whose Python-side value is always a string.
    This removes manual UUID to string conversions from the API layer.
    """
    impl = Uuid(as_uuid=True)
    cache_ok = True

    def process_result_value(self, value, dialect):
        """Convert UUID to string when reading from database."""
        if value is None:
            return None
        return str(value)

    def process_bind_param(self, value, dialect):
        """Convert string to UUID when writing to database."""
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))
