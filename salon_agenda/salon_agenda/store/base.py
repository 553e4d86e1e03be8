"""
Base Data Store

Defines the interface every storage backend must implement, plus the
filter vocabulary the scheduling core uses to query it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

ENTITIES = ("appointments", "procedures", "blockages")

OPERATORS = ("=", "!=", ">=", "<=", ">", "<")


@dataclass(frozen=True)
class Filter:
	field: str
	op: str
	value: Any

	def __post_init__(self) -> None:
		if self.op not in OPERATORS:
			raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class AnyOf:
	"""OR lógico entre grupos de filtros; cada grupo es un AND."""

	groups: Tuple[Tuple[Filter, ...], ...]


QueryFilter = Union[Filter, AnyOf]
OrderBy = Sequence[Tuple[str, bool]]


def eq(field: str, value: Any) -> Filter:
	return Filter(field, "=", value)


def neq(field: str, value: Any) -> Filter:
	return Filter(field, "!=", value)


def gte(field: str, value: Any) -> Filter:
	return Filter(field, ">=", value)


def lte(field: str, value: Any) -> Filter:
	return Filter(field, "<=", value)


def any_of(*groups: Sequence[Filter]) -> AnyOf:
	return AnyOf(tuple(tuple(group) for group in groups))


def sort_records(rows: List[Dict[str, Any]], order_by: OrderBy) -> List[Dict[str, Any]]:
	"""Ordena en sitio por [(campo, ascendente), ...]; los None van al final."""
	for field, ascending in reversed(list(order_by)):
		present = [r for r in rows if r.get(field) is not None]
		missing = [r for r in rows if r.get(field) is None]
		present.sort(key=lambda r: r[field], reverse=not ascending)
		rows[:] = present + missing
	return rows


class DataStore(ABC):
	"""
	Interfaz base para almacenamientos.

	Los registros son dicts con un campo "id". Los errores del backend
	deben propagarse como DataStoreError.
	"""

	@abstractmethod
	def query(
		self,
		entity: str,
		filters: Sequence[QueryFilter] = (),
		order_by: OrderBy = ()
	) -> List[Dict[str, Any]]:
		"""
		Consulta registros.

		Args:
			entity: "appointments", "procedures" o "blockages"
			filters: filtros combinados con AND
			order_by: [(campo, ascendente), ...]

		Returns:
			list[dict]: registros que cumplen todos los filtros
		"""
		pass

	@abstractmethod
	def insert(self, entity: str, record: Dict[str, Any]) -> Dict[str, Any]:
		"""Inserta y retorna el registro con su "id" generado."""
		pass

	@abstractmethod
	def update(self, entity: str, record_id: str, values: Dict[str, Any]) -> None:
		"""Actualiza parcialmente un registro."""
		pass

	@abstractmethod
	def delete(self, entity: str, record_id: str) -> None:
		"""Elimina un registro; un id inexistente no es error."""
		pass

	@abstractmethod
	def subscribe(self, entity: str, on_change: Callable[[], None]) -> Callable[[], None]:
		"""
		Registra un callback sin payload para cualquier cambio en entity.

		Returns:
			callable: función para cancelar la suscripción
		"""
		pass
