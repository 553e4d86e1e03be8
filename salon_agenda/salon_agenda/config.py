"""
Business Hours Configuration

Single source for the salon's booking window:
- Apertura y última hora de inicio reservable
- Granularidad de slots y hora de almuerzo
- Días laborables (0=Domingo..6=Sábado)
- Política de solapamiento al reprogramar
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional, Union

from .exceptions import ValidationError

DEFAULT_WORKING_WEEKDAYS = frozenset({2, 3, 4, 5, 6})


@dataclass(frozen=True)
class BusinessHours:
	open_hour: int = 10
	last_start_hour: int = 18
	close_hour: Optional[int] = None
	slot_interval_minutes: int = 30
	lunch_hour: Optional[int] = 12
	working_weekdays: FrozenSet[int] = field(default=DEFAULT_WORKING_WEEKDAYS)
	default_duration_minutes: int = 30
	allow_overlap_on_reschedule: bool = True

	def __post_init__(self) -> None:
		object.__setattr__(self, "working_weekdays", _parse_weekdays(self.working_weekdays))
		self.validate()

	@property
	def work_end_hour(self) -> int:
		"""Hora que cierra la ventana laboral para detectar bloqueos de día completo."""
		return self.close_hour if self.close_hour is not None else self.last_start_hour

	def validate(self) -> None:
		"""
		Valida la coherencia de los horarios.

		Raises:
			ValidationError: si algún valor está fuera de rango
		"""
		for name in ("open_hour", "last_start_hour"):
			value = getattr(self, name)
			if not 0 <= value <= 23:
				raise ValidationError(f"{name} deve estar entre 0 e 23 (recebido: {value})")

		if self.open_hour > self.last_start_hour:
			raise ValidationError("open_hour deve ser menor ou igual a last_start_hour")

		if self.close_hour is not None and not self.last_start_hour <= self.close_hour <= 24:
			raise ValidationError("close_hour deve estar entre last_start_hour e 24")

		if self.lunch_hour is not None and not 0 <= self.lunch_hour <= 23:
			raise ValidationError(f"lunch_hour deve estar entre 0 e 23 (recebido: {self.lunch_hour})")

		if self.slot_interval_minutes <= 0:
			raise ValidationError("slot_interval_minutes deve ser maior que 0")

		if self.default_duration_minutes <= 0:
			raise ValidationError("default_duration_minutes deve ser maior que 0")

	@classmethod
	def from_settings(cls, source: Any) -> "BusinessHours":
		"""
		Construye BusinessHours desde un dict o un objeto con atributos
		(por ejemplo el doc "Salon Settings").

		Los campos vacíos conservan el valor por defecto.
		"""
		values = {}
		for name in cls.__dataclass_fields__:
			if isinstance(source, dict):
				value = source.get(name)
			else:
				value = getattr(source, name, None)

			if value is None or value == "":
				continue

			if name == "allow_overlap_on_reschedule":
				value = bool(int(value)) if isinstance(value, (int, str)) else bool(value)
			elif name != "working_weekdays":
				try:
					value = int(value)
				except (TypeError, ValueError):
					raise ValidationError(f"{name} deve ser um número inteiro (recebido: {value!r})")

			values[name] = value

		return cls(**values)


def _parse_weekdays(value: Union[str, Iterable[Any]]) -> FrozenSet[int]:
	"""Acepta "2,3,4" o un iterable de enteros."""
	if isinstance(value, str):
		parts = [p.strip() for p in value.split(",")]
		value = [p for p in parts if p]

	days = set()
	for item in value:
		try:
			day = int(item)
		except (TypeError, ValueError):
			raise ValidationError(f"Dia útil inválido: {item!r}")
		if not 0 <= day <= 6:
			raise ValidationError(f"Dia útil fora do intervalo (0-6): {day}")
		days.add(day)

	return frozenset(days)
