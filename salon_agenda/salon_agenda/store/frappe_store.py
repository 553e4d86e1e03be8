"""
Frappe Data Store

Maps the scheduling entities onto the app's DocTypes:
- appointments -> Salon Appointment
- procedures   -> Salon Procedure
- blockages    -> Salon Blockage

El "id" del núcleo es el "name" del documento. Los cambios se propagan
con doc_events (ver hooks.py) a suscriptores del proceso y al desk vía
frappe.publish_realtime.
"""

import itertools
import frappe
from typing import Any, Callable, Dict, List, Sequence

from ..exceptions import DataStoreError, ValidationError
from .base import ENTITIES, AnyOf, DataStore, Filter, OrderBy, QueryFilter, sort_records

DOCTYPES = {
	"appointments": "Salon Appointment",
	"procedures": "Salon Procedure",
	"blockages": "Salon Blockage",
}

ENTITY_BY_DOCTYPE = {doctype: entity for entity, doctype in DOCTYPES.items()}

# campo del núcleo -> campo del DocType
FIELD_MAP = {
	"appointments": {
		"id": "name",
		"client_name": "client_name",
		"client_phone": "client_phone",
		"start_time": "start_time",
		"end_time": "end_time",
		"status": "status",
		"procedure_id": "procedure",
		"created_at": "creation",
	},
	"procedures": {
		"id": "name",
		"name": "procedure_name",
		"category": "category",
		"price": "price",
		"duration_minutes": "duration_minutes",
		"description": "description",
		"is_package": "is_package",
		"image_url": "image_url",
	},
	"blockages": {
		"id": "name",
		"start_time": "start_time",
		"end_time": "end_time",
		"day_of_week": "day_of_week",
		"reason": "reason",
	},
}

CHANGE_EVENT = "salon_agenda_{entity}_changed"

_listeners: Dict[str, List[Callable[[], None]]] = {entity: [] for entity in ENTITIES}


def _to_doc_value(entity: str, field: str, value: Any) -> Any:
	# day_of_week es un Select: "" significa bloqueo por rango
	if entity == "blockages" and field == "day_of_week":
		return "" if value is None or value == "" else str(value)
	return value


class FrappeDataStore(DataStore):
	"""DataStore sobre la base de datos del sitio Frappe."""

	def __init__(self, ignore_permissions: bool = False):
		self.ignore_permissions = ignore_permissions

	def _doctype(self, entity: str) -> str:
		try:
			return DOCTYPES[entity]
		except KeyError:
			raise DataStoreError(f"Unknown entity: {entity}")

	def _doc_field(self, entity: str, field: str) -> str:
		try:
			return FIELD_MAP[entity][field]
		except KeyError:
			raise DataStoreError(f"Unknown field for {entity}: {field}")

	def _to_doc_values(self, entity: str, values: Dict[str, Any]) -> Dict[str, Any]:
		return {
			self._doc_field(entity, field): _to_doc_value(entity, field, value)
			for field, value in values.items()
			if field != "id"
		}

	def _to_record(self, entity: str, row: Dict[str, Any]) -> Dict[str, Any]:
		record = {field: row.get(doc_field) for field, doc_field in FIELD_MAP[entity].items()}
		if entity == "blockages" and record.get("day_of_week") in ("", None):
			record["day_of_week"] = None
		return record

	def _to_condition(self, entity: str, query_filter: Filter) -> List[Any]:
		return [
			self._doc_field(entity, query_filter.field),
			query_filter.op,
			_to_doc_value(entity, query_filter.field, query_filter.value),
		]

	def query(
		self,
		entity: str,
		filters: Sequence[QueryFilter] = (),
		order_by: OrderBy = ()
	) -> List[Dict[str, Any]]:
		"""
		Ejecuta un frappe.get_all por cada combinación de grupos AnyOf y
		une los resultados por name.
		"""
		doctype = self._doctype(entity)
		plain = [self._to_condition(entity, f) for f in filters if not isinstance(f, AnyOf)]
		alternatives = [
			[[self._to_condition(entity, f) for f in group] for group in f.groups]
			for f in filters
			if isinstance(f, AnyOf)
		]

		sql_order = ", ".join(
			f"{self._doc_field(entity, field)} {'asc' if ascending else 'desc'}"
			for field, ascending in order_by
		) or None

		rows: Dict[str, Dict[str, Any]] = {}
		try:
			for combination in itertools.product(*alternatives):
				conditions = plain + [c for group in combination for c in group]
				for row in frappe.get_all(
					doctype,
					filters=conditions,
					fields=list(FIELD_MAP[entity].values()),
					order_by=sql_order,
				):
					rows.setdefault(row["name"], row)
		except Exception as e:
			raise DataStoreError(f"Query on {doctype} failed: {str(e)}") from e

		records = [self._to_record(entity, row) for row in rows.values()]
		if len(alternatives) > 0:
			sort_records(records, order_by)
		return records

	def insert(self, entity: str, record: Dict[str, Any]) -> Dict[str, Any]:
		doctype = self._doctype(entity)
		values = self._to_doc_values(entity, record)

		try:
			doc = frappe.get_doc({"doctype": doctype, **values})
			doc.insert(ignore_permissions=self.ignore_permissions)
		except frappe.DoesNotExistError as e:
			raise DataStoreError(str(e)) from e
		except frappe.ValidationError as e:
			raise ValidationError(str(e)) from e
		except Exception as e:
			raise DataStoreError(f"Insert into {doctype} failed: {str(e)}") from e

		return self._to_record(entity, doc.as_dict())

	def update(self, entity: str, record_id: str, values: Dict[str, Any]) -> None:
		doctype = self._doctype(entity)

		try:
			doc = frappe.get_doc(doctype, record_id)
			doc.update(self._to_doc_values(entity, values))
			doc.save(ignore_permissions=self.ignore_permissions)
		except frappe.DoesNotExistError as e:
			raise DataStoreError(f"{doctype} {record_id} not found") from e
		except frappe.ValidationError as e:
			raise ValidationError(str(e)) from e
		except Exception as e:
			raise DataStoreError(f"Update of {doctype} {record_id} failed: {str(e)}") from e

	def delete(self, entity: str, record_id: str) -> None:
		doctype = self._doctype(entity)

		try:
			frappe.delete_doc(
				doctype,
				record_id,
				ignore_permissions=self.ignore_permissions,
				ignore_missing=True,
			)
		except Exception as e:
			raise DataStoreError(f"Delete of {doctype} {record_id} failed: {str(e)}") from e

	def subscribe(self, entity: str, on_change: Callable[[], None]) -> Callable[[], None]:
		self._doctype(entity)
		_listeners[entity].append(on_change)

		def unsubscribe() -> None:
			if on_change in _listeners[entity]:
				_listeners[entity].remove(on_change)

		return unsubscribe


def publish_change(doc, method=None) -> None:
	"""
	doc_event para Salon Appointment/Procedure/Blockage (on_update, after_delete).

	Avisa a los suscriptores del proceso y publica el evento realtime
	salon_agenda_<entity>_changed para que el desk vuelva a leer.
	"""
	entity = ENTITY_BY_DOCTYPE.get(doc.doctype)
	if entity is None:
		return

	for listener in list(_listeners[entity]):
		try:
			listener()
		except Exception:
			frappe.log_error(
				title="Salon Agenda Change Listener",
				message=frappe.get_traceback()
			)

	frappe.publish_realtime(
		CHANGE_EVENT.format(entity=entity),
		{"name": doc.name},
		after_commit=True,
	)
