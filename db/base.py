"""
db/base.py

Declarative base and shared mixins for all SQLAlchemy models.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Monetary columns keep ten fractional digits, matching the precision the
# summary engine rounds persisted amounts to.
MONEY_PRECISION = 24
MONEY_SCALE = 10


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.

    ``Mapped[Decimal]`` columns default to ``NUMERIC(24, 10)`` so money never
    round-trips through a binary float.
    """

    type_annotation_map: dict[type, Any] = {
        Decimal: Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True),
    }


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at to any model.
    updated_at is automatically refreshed on every UPDATE via onupdate.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
