"""
Quoting Modules.

Thin orchestration layers over the Quoting Kernel and Engines.
Each module contains:
- Domain models (the report DTOs)
- Configuration schemas (policy and settings)
- Pure transformation functions
- A session-backed service

Modules:
- Reporting: period reports over issued quotes, profitability, CSV export

Actual valuation logic lives in the engines.
"""

from quoting_modules import reporting

__all__ = ["reporting"]
