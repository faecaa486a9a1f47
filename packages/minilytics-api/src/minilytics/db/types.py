"""Custom SQLAlchemy column types."""

import json

from sqlalchemy import Text, TypeDecorator


class JSONType(TypeDecorator):
    """Portable JSON column stored as TEXT.

    Used for the bounded event properties map so the same schema runs on
    SQLite in development and on PostgreSQL in production.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return json.dumps(value, separators=(",", ":"))
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return json.loads(value)
        return None
