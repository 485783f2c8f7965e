"""
Quoting Kernel

Shared foundation for the quote valuation and profitability engine:
- Structured JSON logging
- Typed exceptions with machine-readable codes
- Immutable quote and valuation domain types
- Append-only versioned record store (SQLAlchemy)
"""

__version__ = "0.1.0"
