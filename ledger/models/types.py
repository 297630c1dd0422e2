"""
Column types shared by the models.
"""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

from ledger.core.money import PRECISION, QUANTUM


class Money(TypeDecorator):
    """
    Fixed-point amount column, ``NUMERIC(19, 4)`` on PostgreSQL.

    SQLite has no exact decimal storage (NUMERIC becomes REAL), so there the
    value is kept as its 4-place decimal text and parsed back on load.
    """

    impl = Numeric(precision=PRECISION, scale=4)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(PRECISION + 2))
        return dialect.type_descriptor(Numeric(precision=PRECISION, scale=4))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value).quantize(QUANTUM)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value).quantize(QUANTUM)
