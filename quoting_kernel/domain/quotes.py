"""
Quotes -- Read-only quote value objects.

Responsibility:
    Immutable representation of issued quotes and their lines as handed
    to the valuation engine by the surrounding application.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Line quantities are never negative.
    - All monetary amounts are ``Decimal``.

Failure modes:
    - ValueError from QuoteLine.__post_init__ on negative quantity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")


def normalize_description(text: str | None) -> str:
    """Case-insensitive, trimmed form of a line or catalog description."""
    return (text or "").strip().lower()


class QuoteStatus(str, Enum):
    """Lifecycle status of a quote."""

    OPEN = "open"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class QuoteKind(str, Enum):
    """Shape of a quote's lines."""

    SIMPLE = "simple"  # single blended unit price per line
    DETAILED = "detailed"  # separate material and labor unit prices


@dataclass(frozen=True)
class QuoteLine:
    """
    One line of a quote.

    For detailed quotes ``unit_sale_price`` is the material unit price and
    ``unit_sale_labor_price`` the labor unit price.  Simple quotes carry a
    single blended unit price in ``unit_sale_price``.

    Lines link to a catalog item by ``item_id``; legacy lines have no id and
    are matched by description within ``category_id``.
    """

    description: str
    quantity: Decimal
    line_total: Decimal
    unit_sale_price: Decimal = ZERO
    unit_sale_labor_price: Decimal = ZERO
    item_id: str | None = None
    category_id: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValueError(
                f"Line quantity cannot be negative, got {self.quantity}"
            )

    @property
    def normalized_description(self) -> str:
        return normalize_description(self.description)

    @property
    def is_empty(self) -> bool:
        """True for placeholder lines that carry nothing to value.

        A priced line with a blank description is not a placeholder; it
        stays in the order and comes back unmatched.
        """
        if self.quantity == 0:
            return True
        return (
            self.unit_sale_price == 0
            and self.unit_sale_labor_price == 0
            and self.line_total == 0
        )


@dataclass(frozen=True)
class Quote:
    """An issued quote. Immutable apart from status transitions made elsewhere."""

    quote_id: str
    emission_date: date
    status: QuoteStatus
    total_value: Decimal
    client_id: str
    client_name: str
    kind: QuoteKind = QuoteKind.DETAILED
    lines: tuple[QuoteLine, ...] = ()

    @property
    def is_accepted(self) -> bool:
        return self.status == QuoteStatus.ACCEPTED

    @property
    def valued_lines(self) -> tuple[QuoteLine, ...]:
        """Lines that participate in valuation (empty placeholders dropped)."""
        return tuple(line for line in self.lines if not line.is_empty)
