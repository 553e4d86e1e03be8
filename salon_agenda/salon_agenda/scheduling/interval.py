"""
Interval Math

Pure helpers over naive datetimes. Intervals are half-open [start, end):
two intervals that only touch (a.end == b.start) do not overlap.
"""

from datetime import date, datetime, time, timedelta
from typing import Tuple


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
	"""True si [a_start, a_end) y [b_start, b_end) comparten algún instante."""
	return a_start < b_end and a_end > b_start


def contains(outer_start: datetime, outer_end: datetime, inner_start: datetime, inner_end: datetime) -> bool:
	"""True si el intervalo exterior cubre completamente al interior."""
	return outer_start <= inner_start and outer_end >= inner_end


def minute_of_day(instant: datetime) -> int:
	return instant.hour * 60 + instant.minute


def weekday_index(day: date) -> int:
	"""
	Día de la semana con Domingo=0 .. Sábado=6.

	Es la convención de los registros de bloqueo (day_of_week);
	date.weekday() de Python usa Lunes=0.
	"""
	return (day.weekday() + 1) % 7


def at_hour(day: date, hour: int, minute: int = 0) -> datetime:
	# hour=24 representa el final del día
	return datetime.combine(day, time.min) + timedelta(hours=hour, minutes=minute)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
	"""Primer y último instante (inclusive) del día."""
	return datetime.combine(day, time.min), datetime.combine(day, time.max)
