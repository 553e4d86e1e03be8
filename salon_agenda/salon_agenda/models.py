"""
Scheduling Records

Typed records for the three entities the engine works with:
- Procedure (servicio del catálogo)
- Appointment (cita)
- Blockage (bloqueo puntual o semanal)

Los registros del almacenamiento llegan como dicts sin tipo; se convierten
aquí con from_record() y el núcleo nunca opera sobre dicts crudos.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .exceptions import ValidationError


class AppointmentStatus(str, Enum):
	PENDING = "pending"
	CONFIRMED = "confirmed"
	CANCELLED = "cancelled"
	MANUAL_FIT = "manual_fit"


ALLOWED_TRANSITIONS = {
	AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
	AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.CANCELLED}),
}


def can_transition(current: AppointmentStatus, requested: AppointmentStatus) -> bool:
	return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def requires_slot_exclusion(status: Union[AppointmentStatus, str, None]) -> bool:
	"""
	Sólo las solicitudes de clientes ("pending") se rechazan por solapamiento.

	Las cargas manuales del staff nacen "confirmed" (encaixe) y pueden
	solaparse con otras citas.
	"""
	return status in (AppointmentStatus.PENDING, AppointmentStatus.PENDING.value)


def to_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
	"""
	Convierte un valor del almacenamiento a datetime naive (hora local).

	Args:
		value: datetime, string ISO-8601 ("2024-06-10T10:00:00Z", "2024-06-10 10:00:00") o None

	Returns:
		datetime naive, o None si value es None/vacío
	"""
	if value is None or value == "":
		return None

	if isinstance(value, str):
		text = value.strip()
		if text.endswith("Z"):
			text = text[:-1] + "+00:00"
		try:
			value = datetime.fromisoformat(text)
		except ValueError:
			raise ValidationError(f"Data/hora inválida: {value!r}")

	if not isinstance(value, datetime):
		raise ValidationError(f"Data/hora inválida: {value!r}")

	# Valores con zona horaria se llevan a hora local y se descarta tzinfo
	if value.tzinfo is not None:
		value = value.astimezone().replace(tzinfo=None)

	return value


def _parse_status(value: Any) -> AppointmentStatus:
	try:
		return AppointmentStatus(value)
	except ValueError:
		raise ValidationError(f"Status desconhecido: {value!r}")


@dataclass(frozen=True)
class Procedure:
	id: str
	name: str
	category: Optional[str]
	price: float
	duration_minutes: int
	description: Optional[str] = None
	is_package: bool = False
	image_url: Optional[str] = None

	@classmethod
	def from_record(cls, record: Dict[str, Any]) -> "Procedure":
		return cls(
			id=str(record["id"]),
			name=record.get("name") or "",
			category=record.get("category"),
			price=float(record.get("price") or 0),
			duration_minutes=int(record.get("duration_minutes") or 0),
			description=record.get("description"),
			is_package=bool(record.get("is_package")),
			image_url=record.get("image_url"),
		)


@dataclass(frozen=True)
class Appointment:
	id: str
	client_name: str
	client_phone: str
	start: datetime
	end: datetime
	status: AppointmentStatus
	procedure_id: Optional[str]
	procedure: Optional[Procedure] = None
	created_at: Optional[datetime] = None

	@property
	def is_active(self) -> bool:
		"""Una cita no cancelada ocupa su horario."""
		return self.status != AppointmentStatus.CANCELLED

	@classmethod
	def from_record(cls, record: Dict[str, Any]) -> "Appointment":
		"""
		Mapea un registro de "appointments" (con join opcional "procedure").

		Raises:
			ValidationError: si faltan fechas o end <= start
		"""
		start = to_datetime(record.get("start_time"))
		end = to_datetime(record.get("end_time"))
		if start is None or end is None:
			raise ValidationError("start_time e end_time são obrigatórios")
		if end <= start:
			raise ValidationError("end_time deve ser maior que start_time")

		procedure = record.get("procedure")
		procedure = Procedure.from_record(procedure) if isinstance(procedure, dict) else None

		return cls(
			id=str(record["id"]),
			client_name=record.get("client_name") or "",
			client_phone=record.get("client_phone") or "",
			start=start,
			end=end,
			status=_parse_status(record.get("status")),
			procedure_id=record.get("procedure_id"),
			procedure=procedure,
			created_at=to_datetime(record.get("created_at")),
		)


@dataclass(frozen=True)
class Blockage:
	"""
	Bloqueo de agenda.

	Exactamente una de las dos formas es significativa:
	- rango puntual [start, end)
	- regla semanal day_of_week (0=Domingo..6=Sábado), siempre de día completo
	"""

	id: str
	start: Optional[datetime] = None
	end: Optional[datetime] = None
	day_of_week: Optional[int] = None
	reason: Optional[str] = None

	@property
	def is_recurring(self) -> bool:
		return self.day_of_week is not None

	@classmethod
	def from_record(cls, record: Dict[str, Any]) -> "Blockage":
		day_of_week = record.get("day_of_week")
		if day_of_week is not None and day_of_week != "":
			day_of_week = int(day_of_week)
		else:
			day_of_week = None

		return cls(
			id=str(record["id"]),
			start=to_datetime(record.get("start_time")),
			end=to_datetime(record.get("end_time")),
			day_of_week=day_of_week,
			reason=record.get("reason"),
		)


def normalize_blockage(
	start: Union[datetime, str, None],
	end: Union[datetime, str, None],
	day_of_week: Union[int, str, None]
) -> Tuple[Optional[datetime], Optional[datetime], Optional[int]]:
	"""
	Valida los campos de un bloqueo y los normaliza.

	Exactamente una forma debe estar informada: rango completo con
	end > start, o day_of_week en 0..6.

	Returns:
		tuple: (start, end, day_of_week) con la forma no usada en None

	Raises:
		ValidationError: ninguna o ambas formas, rango incompleto o invertido,
		day_of_week inválido
	"""
	start = to_datetime(start)
	end = to_datetime(end)
	has_range = start is not None or end is not None
	has_weekday = day_of_week is not None and day_of_week != ""

	if not has_range and not has_weekday:
		raise ValidationError("Informe um período ou um dia da semana para o bloqueio")

	if has_range and has_weekday:
		raise ValidationError("O bloqueio deve ter um período ou um dia da semana, não ambos")

	if has_weekday:
		try:
			day_of_week = int(day_of_week)
		except (TypeError, ValueError):
			raise ValidationError(f"Dia da semana inválido: {day_of_week!r}")
		if not 0 <= day_of_week <= 6:
			raise ValidationError(f"Dia da semana fora do intervalo (0-6): {day_of_week}")
		return None, None, day_of_week

	if start is None or end is None:
		raise ValidationError("Início e fim do bloqueio são obrigatórios")
	if end <= start:
		raise ValidationError("O fim do bloqueio deve ser depois do início")

	return start, end, None
