"""Transaction list query package."""

from homeledger.queries.executor import DayGroup, QueryExecutor, TransactionFilters

__all__ = ["DayGroup", "QueryExecutor", "TransactionFilters"]
