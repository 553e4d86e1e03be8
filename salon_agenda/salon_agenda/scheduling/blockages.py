"""
Blockage Resolution

Decides how blockages close a working day:
- Bloqueo semanal (day_of_week) -> día completo cerrado
- Bloqueo por rango que cubre toda la jornada -> día completo cerrado
- Bloqueo por rango parcial -> sólo cierra los slots que toca
"""

from datetime import date, datetime
from typing import Iterable, List

from ..models import Blockage
from .interval import at_hour, contains, day_bounds, overlaps, weekday_index


def is_day_fully_blocked(
	target_date: date,
	blockages: Iterable[Blockage],
	open_hour: int,
	close_hour: int
) -> bool:
	"""
	Indica si la jornada de target_date está cerrada por completo.

	Args:
		target_date: fecha a evaluar
		blockages: bloqueos aplicables al día
		open_hour: hora de apertura
		close_hour: hora que cierra la ventana laboral

	Returns:
		bool: True si un bloqueo semanal coincide con el día, o si un
		bloqueo por rango contiene [open_hour, close_hour] de ese día
	"""
	weekday = weekday_index(target_date)
	work_start = at_hour(target_date, open_hour)
	work_end = at_hour(target_date, close_hour)

	for block in blockages:
		if block.is_recurring:
			if block.day_of_week == weekday:
				return True
			continue

		if block.start is None or block.end is None:
			continue

		if contains(block.start, block.end, work_start, work_end):
			return True

	return False


def is_interval_blocked(
	proposed_start: datetime,
	proposed_end: datetime,
	blockages: Iterable[Blockage]
) -> bool:
	"""
	True si algún bloqueo por rango se solapa con [proposed_start, proposed_end).

	Los bloqueos semanales se evalúan sólo en is_day_fully_blocked().
	"""
	for block in blockages:
		if block.is_recurring or block.start is None or block.end is None:
			continue
		if overlaps(proposed_start, proposed_end, block.start, block.end):
			return True
	return False


def blockages_for_day(target_date: date, blockages: Iterable[Blockage]) -> List[Blockage]:
	"""
	Filtra los bloqueos que afectan a target_date.

	Un bloqueo por rango afecta al día si toca cualquier instante entre
	00:00 y 23:59:59.999999 (límites inclusivos).
	"""
	weekday = weekday_index(target_date)
	day_start, day_end = day_bounds(target_date)

	result = []
	for block in blockages:
		if block.is_recurring:
			if block.day_of_week == weekday:
				result.append(block)
		elif block.start is not None and block.end is not None:
			if block.start <= day_end and block.end >= day_start:
				result.append(block)

	return result
