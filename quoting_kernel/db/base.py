"""
Module: quoting_kernel.db.base
Responsibility: Declarative base shared by the record store's ORM models.
Architecture position: Kernel > DB.  Imports nothing from the kernel.

Column conventions carried by the annotation map:
    - Prices, costs and tax rates are ``Decimal`` -> Numeric(18, 6), which
      holds any quote amount and a percentage to six places.  Floats are
      never used.
    - ``datetime`` columns are timezone-aware.
    - Primary keys are uuid4 values (SQLAlchemy's portable ``Uuid`` type:
      native on PostgreSQL, CHAR(32) on SQLite).
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(18, 6),
        datetime: DateTime(timezone=True),
        UUID: Uuid(as_uuid=True),
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
