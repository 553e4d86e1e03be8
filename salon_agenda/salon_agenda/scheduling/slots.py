"""
Slot Generation Service

Generates the bookable start times of a day for a given service duration,
considering:
- Bloqueos (día completo o parciales)
- Hora de almuerzo
- Citas existentes
- Horarios ya pasados
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import BusinessHours
from ..models import Blockage
from .blockages import is_day_fully_blocked, is_interval_blocked
from .interval import at_hour, overlaps


class UnavailableReason(str, Enum):
	BLOCKED = "blocked"
	FULL = "full"
	CLOSED = "closed"


@dataclass(frozen=True)
class SlotResult:
	slots: List[str] = field(default_factory=list)
	reason: Optional[UnavailableReason] = None
	# True cuando la lectura falló y la UI debe ofrecer "intentar de nuevo"
	retry: bool = False

	def as_dict(self) -> dict:
		return {
			"slots": list(self.slots),
			"reason": self.reason.value if self.reason else None,
			"retry": self.retry,
		}


def generate_available_slots(
	target_date: date,
	duration_minutes: int,
	busy: Sequence[Tuple[datetime, datetime]],
	blockages: Iterable[Blockage],
	hours: BusinessHours,
	now: datetime
) -> SlotResult:
	"""
	Genera los horarios de inicio disponibles (HH:MM) de un día.

	Args:
		target_date: fecha a evaluar
		duration_minutes: duración del servicio
		busy: pares (start, end) de las citas no canceladas del día
		blockages: bloqueos aplicables al día
		hours: configuración de horario
		now: instante actual (inyectado para poder testear)

	Returns:
		SlotResult con los slots en orden ascendente y la razón si no hay ninguno

	Algoritmo:
		1. Si el día está bloqueado por completo -> [] con razón "blocked"
		2. Recorrer candidatos desde open_hour:00 cada slot_interval_minutes
		   mientras candidato < last_start_hour:01
		3. Descartar: hora de almuerzo, choque con cita, bloqueo parcial, pasado
		4. Sin slots: "blocked" si hubo bloqueos y ningún choque con citas,
		   si no "full"
	"""
	if duration_minutes is None or duration_minutes <= 0:
		return SlotResult()

	blockages = list(blockages)

	# 1. Bloqueo de día completo
	if is_day_fully_blocked(target_date, blockages, hours.open_hour, hours.work_end_hour):
		return SlotResult(reason=UnavailableReason.BLOCKED)

	duration = timedelta(minutes=duration_minutes)
	step = timedelta(minutes=hours.slot_interval_minutes)
	candidate = at_hour(target_date, hours.open_hour)
	last_possible_start = at_hour(target_date, hours.last_start_hour, 1)

	slots = []
	has_blocked_slot = False
	has_occupied_slot = False

	# 2. Recorrer candidatos
	while candidate < last_possible_start:
		proposed_end = candidate + duration

		# 3. La hora de almuerzo se descarta antes de cualquier verificación
		if hours.lunch_hour is None or candidate.hour != hours.lunch_hour:
			has_collision = any(
				overlaps(candidate, proposed_end, busy_start, busy_end)
				for busy_start, busy_end in busy
			)
			is_blocked = is_interval_blocked(candidate, proposed_end, blockages)

			if has_collision:
				has_occupied_slot = True
			if is_blocked:
				has_blocked_slot = True

			is_past = candidate < now

			if not has_collision and not is_blocked and not is_past:
				slots.append(candidate.strftime("%H:%M"))

		candidate += step

	# 4. Razón de indisponibilidad
	if slots:
		return SlotResult(slots=slots)

	if has_blocked_slot and not has_occupied_slot:
		return SlotResult(reason=UnavailableReason.BLOCKED)

	return SlotResult(reason=UnavailableReason.FULL)
