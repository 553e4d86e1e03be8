"""
Data Stores

Storage backends behind the DataStore interface:
- MemoryDataStore: en proceso (tests y uso sin bench)
- FrappeDataStore: DocTypes Salon Appointment/Procedure/Blockage
"""

from .base import AnyOf, DataStore, Filter, any_of, eq, gte, lte, neq
from .memory import MemoryDataStore

__all__ = [
	"AnyOf",
	"DataStore",
	"Filter",
	"MemoryDataStore",
	"any_of",
	"eq",
	"gte",
	"lte",
	"neq",
]
