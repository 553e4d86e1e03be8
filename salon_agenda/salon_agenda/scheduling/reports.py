"""
Agenda Reports

Aggregations for the staff dashboard over already fetched appointments:
- Rango de fechas de un período (hoy, semana, mes, día o mes elegido)
- Estadísticas del período sobre las citas confirmadas
- Historial de clientes agrupado por teléfono
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import ValidationError
from ..models import Appointment, AppointmentStatus
from .catalog import OTHER_CATEGORY
from .interval import day_bounds, weekday_index

PERIODS = ("today", "week", "month", "custom", "all")


def period_range(
	period: str,
	base_date: date,
	custom: Optional[str] = None
) -> Optional[Tuple[datetime, datetime]]:
	"""
	Rango [inicio, fin] (ambos inclusivos) de un período del dashboard.

	Args:
		period: "today", "week", "month", "custom" o "all"
		base_date: fecha de referencia para today/week/month
		custom: "YYYY-MM" (mes) o "YYYY-MM-DD" (día) cuando period="custom"

	Returns:
		tuple: (inicio, fin), o None para "all"

	Raises:
		ValidationError: período desconocido o fecha custom inválida

	La semana empieza el domingo.
	"""
	if period == "all":
		return None

	if period == "today":
		return day_bounds(base_date)

	if period == "week":
		first = base_date - timedelta(days=weekday_index(base_date))
		return day_bounds(first)[0], day_bounds(first + timedelta(days=6))[1]

	if period == "month":
		return _month_bounds(base_date)

	if period == "custom":
		value = (custom or "").strip()
		if not value:
			raise ValidationError("Informe o dia (YYYY-MM-DD) ou o mês (YYYY-MM)")
		try:
			if len(value) == 7:
				return _month_bounds(date.fromisoformat(value + "-01"))
			return day_bounds(date.fromisoformat(value))
		except ValueError:
			raise ValidationError(f"Data inválida: {value!r}")

	raise ValidationError(f"Período desconhecido: {period!r}")


def _month_bounds(day: date) -> Tuple[datetime, datetime]:
	first = day.replace(day=1)
	next_month = (first + timedelta(days=32)).replace(day=1)
	return day_bounds(first)[0], day_bounds(next_month - timedelta(days=1))[1]


def _price(appointment: Appointment) -> float:
	return appointment.procedure.price if appointment.procedure else 0.0


@dataclass(frozen=True)
class PeriodStats:
	total_earnings: float = 0.0
	total_count: int = 0
	# (categoría, cantidad) en orden de aparición
	participation: List[Tuple[str, int]] = field(default_factory=list)
	# (servicio, ingresos) de mayor a menor
	revenue_per_service: List[Tuple[str, float]] = field(default_factory=list)

	def as_dict(self) -> dict:
		return {
			"total_earnings": self.total_earnings,
			"total_count": self.total_count,
			"participation": [{"name": n, "value": v} for n, v in self.participation],
			"revenue_per_service": [{"name": n, "value": v} for n, v in self.revenue_per_service],
		}


def period_stats(appointments: Sequence[Appointment]) -> PeriodStats:
	"""
	Estadísticas de las citas confirmadas del período.

	Una cita sin servicio cuenta con precio 0 en la categoría y el
	servicio "Outros".
	"""
	confirmed = [a for a in appointments if a.status == AppointmentStatus.CONFIRMED]

	counts: Dict[str, int] = {}
	revenues: Dict[str, float] = {}
	for appointment in confirmed:
		procedure = appointment.procedure
		category = (procedure.category if procedure else None) or OTHER_CATEGORY
		service = (procedure.name if procedure else None) or OTHER_CATEGORY

		counts[category] = counts.get(category, 0) + 1
		revenues[service] = revenues.get(service, 0.0) + _price(appointment)

	return PeriodStats(
		total_earnings=sum(_price(a) for a in confirmed),
		total_count=len(confirmed),
		participation=list(counts.items()),
		revenue_per_service=sorted(revenues.items(), key=lambda item: item[1], reverse=True),
	)


@dataclass(frozen=True)
class ClientHistory:
	client_phone: str
	client_name: str
	visits: int = 0
	total_spent: float = 0.0
	appointments: List[Appointment] = field(default_factory=list)


def group_by_client(appointments: Sequence[Appointment]) -> Dict[str, ClientHistory]:
	"""
	Agrupa las citas por client_phone.

	visits y total_spent sólo cuentan citas confirmadas; appointments
	conserva todas las citas del cliente en el orden recibido. El nombre
	es el de la primera cita del grupo.
	"""
	groups: Dict[str, List[Appointment]] = {}
	for appointment in appointments:
		groups.setdefault(appointment.client_phone, []).append(appointment)

	result = {}
	for phone, items in groups.items():
		confirmed = [a for a in items if a.status == AppointmentStatus.CONFIRMED]
		result[phone] = ClientHistory(
			client_phone=phone,
			client_name=items[0].client_name,
			visits=len(confirmed),
			total_spent=sum(_price(a) for a in confirmed),
			appointments=items,
		)

	return result


def client_history(appointments: Sequence[Appointment], client_phone: str) -> ClientHistory:
	"""Historial de un cliente; sin citas devuelve visits=0."""
	phone = (client_phone or "").strip()
	history = group_by_client([a for a in appointments if a.client_phone == phone]).get(phone)
	return history or ClientHistory(client_phone=phone, client_name="")
