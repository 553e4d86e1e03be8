"""
In-Memory Data Store

Process-local backend with the same semantics as the Frappe adapter.
Used by the test-suite and for running the engine without a bench.
"""

import itertools
import logging
import operator
import threading
from copy import deepcopy
from typing import Any, Callable, Dict, List, Sequence

from ..exceptions import DataStoreError
from ..models import to_datetime
from .base import ENTITIES, AnyOf, DataStore, OrderBy, QueryFilter, sort_records

logger = logging.getLogger("salon_agenda")

# Campos que se guardan como datetime naive aunque lleguen como ISO-8601
DATETIME_FIELDS = ("start_time", "end_time", "created_at")


def normalize_values(values: Dict[str, Any]) -> Dict[str, Any]:
	"""Copia de values con los campos de fecha convertidos a datetime."""
	result = deepcopy(values)
	for field in DATETIME_FIELDS:
		if field in result:
			result[field] = to_datetime(result[field])
	return result


_COMPARE = {
	">=": operator.ge,
	"<=": operator.le,
	">": operator.gt,
	"<": operator.lt,
}


def matches(record: Dict[str, Any], query_filter: QueryFilter) -> bool:
	"""Evalúa un filtro (o un AnyOf) contra un registro."""
	if isinstance(query_filter, AnyOf):
		return any(
			all(matches(record, f) for f in group)
			for group in query_filter.groups
		)

	value = record.get(query_filter.field)
	expected = query_filter.value
	if query_filter.field in DATETIME_FIELDS:
		expected = to_datetime(expected)

	if query_filter.op == "=":
		return value == expected
	if query_filter.op == "!=":
		return value != expected

	# Comparaciones de orden contra NULL nunca coinciden (como en SQL)
	if value is None or expected is None:
		return False

	try:
		return _COMPARE[query_filter.op](value, expected)
	except TypeError as e:
		raise DataStoreError(f"Cannot compare {query_filter.field}: {str(e)}") from e


class MemoryDataStore(DataStore):
	"""Almacenamiento en memoria con ids incrementales por entidad."""

	def __init__(self, seed: Dict[str, Sequence[Dict[str, Any]]] = None):
		self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {entity: {} for entity in ENTITIES}
		self._listeners: Dict[str, List[Callable[[], None]]] = {entity: [] for entity in ENTITIES}
		self._counter = itertools.count(1)
		self._lock = threading.RLock()

		for entity, records in (seed or {}).items():
			for record in records:
				self.insert(entity, record)

	def _table(self, entity: str) -> Dict[str, Dict[str, Any]]:
		try:
			return self._tables[entity]
		except KeyError:
			raise DataStoreError(f"Unknown entity: {entity}")

	def query(
		self,
		entity: str,
		filters: Sequence[QueryFilter] = (),
		order_by: OrderBy = ()
	) -> List[Dict[str, Any]]:
		with self._lock:
			rows = [
				deepcopy(record)
				for record in self._table(entity).values()
				if all(matches(record, f) for f in filters)
			]

		return sort_records(rows, order_by)

	def insert(self, entity: str, record: Dict[str, Any]) -> Dict[str, Any]:
		with self._lock:
			table = self._table(entity)
			stored = normalize_values(record)
			stored["id"] = str(stored.get("id") or next(self._counter))
			if stored["id"] in table:
				raise DataStoreError(f"Duplicate id for {entity}: {stored['id']}")
			table[stored["id"]] = stored

		self._notify(entity)
		return deepcopy(stored)

	def update(self, entity: str, record_id: str, values: Dict[str, Any]) -> None:
		with self._lock:
			table = self._table(entity)
			if record_id not in table:
				raise DataStoreError(f"{entity} {record_id} not found")
			table[record_id].update(normalize_values(values))

		self._notify(entity)

	def delete(self, entity: str, record_id: str) -> None:
		with self._lock:
			removed = self._table(entity).pop(record_id, None)

		if removed is not None:
			self._notify(entity)

	def subscribe(self, entity: str, on_change: Callable[[], None]) -> Callable[[], None]:
		with self._lock:
			self._table(entity)
			self._listeners[entity].append(on_change)

		def unsubscribe() -> None:
			with self._lock:
				if on_change in self._listeners[entity]:
					self._listeners[entity].remove(on_change)

		return unsubscribe

	def _notify(self, entity: str) -> None:
		with self._lock:
			listeners = list(self._listeners[entity])

		for listener in listeners:
			try:
				listener()
			except Exception:
				logger.exception("Change listener failed for %s", entity)
