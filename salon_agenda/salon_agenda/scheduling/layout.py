"""
Day Timeline Layout

Assigns confirmed appointments of a day to display columns so that
overlapping appointments render side by side (greedy interval coloring).
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..models import Appointment
from .interval import overlaps


@dataclass(frozen=True)
class ColumnPlacement:
	column: int
	total_columns: int

	def as_dict(self) -> dict:
		return {"column": self.column, "total_columns": self.total_columns}


def layout_day(appointments: Sequence[Appointment]) -> Dict[str, ColumnPlacement]:
	"""
	Calcula (columna, total de columnas) para cada cita.

	Args:
		appointments: citas confirmadas del día

	Returns:
		dict: {appointment_id: ColumnPlacement}

	Algoritmo:
		1. Ordenar por (start, end, id) para que el resultado sea estable
		2. Poner cada cita en la primera columna cuya última cita termina
		   antes o justo en su inicio; si no hay, abrir una columna nueva
		3. total_columns = mayor columna entre las citas que se solapan
		   con ella (incluida ella misma) + 1
	"""
	ordered = sorted(appointments, key=lambda a: (a.start, a.end, a.id))

	columns: List[List[Appointment]] = []
	column_of: Dict[str, int] = {}

	for appointment in ordered:
		for index, column in enumerate(columns):
			if column[-1].end <= appointment.start:
				column.append(appointment)
				column_of[appointment.id] = index
				break
		else:
			columns.append([appointment])
			column_of[appointment.id] = len(columns) - 1

	placements = {}
	for appointment in ordered:
		max_column = max(
			column_of[other.id]
			for other in ordered
			if overlaps(appointment.start, appointment.end, other.start, other.end)
		)
		placements[appointment.id] = ColumnPlacement(
			column=column_of[appointment.id],
			total_columns=max_column + 1
		)

	return placements
