"""
Procedure Catalog

Read-only queries over the procedures table used by the booking menu.
"""

from typing import Dict, List, Optional

from ..models import Procedure
from ..store.base import DataStore, eq

OTHER_CATEGORY = "Outros"


def procedures_by_category(store: DataStore, category: str) -> List[Procedure]:
	"""Servicios de una categoría, del más barato al más caro."""
	records = store.query("procedures", [eq("category", category)], order_by=[("price", True)])
	return [Procedure.from_record(r) for r in records]


def all_procedures(store: DataStore) -> List[Procedure]:
	records = store.query("procedures", order_by=[("category", True), ("name", True)])
	return [Procedure.from_record(r) for r in records]


def get_procedure(store: DataStore, procedure_id: Optional[str]) -> Optional[Procedure]:
	if not procedure_id:
		return None
	records = store.query("procedures", [eq("id", procedure_id)])
	return Procedure.from_record(records[0]) if records else None


def group_by_category(procedures: List[Procedure]) -> Dict[str, List[Procedure]]:
	grouped: Dict[str, List[Procedure]] = {}
	for procedure in procedures:
		grouped.setdefault(procedure.category or OTHER_CATEGORY, []).append(procedure)
	return grouped
