"""Service layer for operations that span many ledger rows.

Services:
- CsvService: import CSV rows into the ledger as one undo step
"""

from .csv_service import CsvService

__all__ = ["CsvService"]
