"""
Availability Service

Fetches a day's appointments and blockages from the data store and feeds
them to the pure scheduling functions:
- Slots disponibles por fecha y duración (slots.py)
- Layout de columnas de la agenda del día (layout.py)
- Días reservables del mes (selector de fecha)
- Citas por período y por cliente (reports.py)
"""

import calendar
import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from ..config import BusinessHours
from ..exceptions import SchedulingError, ValidationError
from ..models import Appointment, AppointmentStatus, Blockage
from ..store.base import DataStore, any_of, eq, gte, lte, neq
from .blockages import blockages_for_day
from .catalog import all_procedures, get_procedure
from .interval import day_bounds, weekday_index
from .layout import ColumnPlacement, layout_day
from .slots import SlotResult, UnavailableReason, generate_available_slots

Clock = Callable[[], datetime]


class AvailabilityService:
	"""
	Lecturas de agenda sobre un DataStore.

	Todas las operaciones de cálculo son síncronas y puras; sólo las
	lecturas al almacenamiento pueden fallar (DataStoreError).
	"""

	def __init__(
		self,
		store: DataStore,
		hours: Optional[BusinessHours] = None,
		clock: Optional[Clock] = None,
		logger: Optional[logging.Logger] = None
	):
		self.store = store
		self.hours = hours or BusinessHours()
		self.clock = clock or datetime.now
		self.logger = logger or logging.getLogger("salon_agenda")

	def compute_available_slots(self, target_date: date, duration_minutes: int) -> SlotResult:
		"""
		Slots disponibles (HH:MM) para target_date y una duración de servicio.

		Args:
			target_date: fecha a consultar
			duration_minutes: duración del servicio elegido

		Returns:
			SlotResult: slots + razón ("closed" si el día no es laborable);
			si la lectura falla, lista vacía con retry=True
		"""
		if duration_minutes is None or duration_minutes <= 0:
			return SlotResult()

		if weekday_index(target_date) not in self.hours.working_weekdays:
			return SlotResult(reason=UnavailableReason.CLOSED)

		try:
			appointments = self.day_appointments(target_date)
			blockages = self.day_blockages(target_date)
		except SchedulingError as e:
			self.logger.warning(f"Availability read failed for {target_date}: {str(e)}")
			return SlotResult(retry=True)

		busy = [(a.start, a.end) for a in appointments if a.is_active]

		return generate_available_slots(
			target_date,
			duration_minutes,
			busy,
			blockages,
			self.hours,
			now=self.clock(),
		)

	def day_appointments(self, target_date: date, confirmed_only: bool = False) -> List[Appointment]:
		"""
		Citas no canceladas que empiezan y terminan dentro de target_date.

		Args:
			target_date: fecha
			confirmed_only: sólo citas "confirmed" (vista de agenda)

		Returns:
			list[Appointment]: ordenadas por inicio, con su Procedure si existe
		"""
		day_start, day_end = day_bounds(target_date)

		filters = [
			gte("start_time", day_start),
			lte("end_time", day_end),
		]
		if confirmed_only:
			filters.append(eq("status", AppointmentStatus.CONFIRMED.value))
		else:
			filters.append(neq("status", AppointmentStatus.CANCELLED.value))

		records = self.store.query("appointments", filters, order_by=[("start_time", True)])
		return self._with_procedures(records)

	def appointments_in_range(
		self,
		start: Optional[datetime] = None,
		end: Optional[datetime] = None,
		status: Optional[Union[AppointmentStatus, str]] = None
	) -> List[Appointment]:
		"""
		Citas cuyo inicio cae en [start, end], de la más reciente a la más antigua.

		Args:
			start: inicio del rango (None = sin límite)
			end: fin del rango, inclusivo (None = sin límite)
			status: sólo citas con este status (None = todas, incluidas canceladas)

		Returns:
			list[Appointment]: con su Procedure si existe
		"""
		filters = []
		if start is not None:
			filters.append(gte("start_time", start))
		if end is not None:
			filters.append(lte("start_time", end))
		if status is not None:
			try:
				filters.append(eq("status", AppointmentStatus(status).value))
			except ValueError:
				raise ValidationError(f"Status desconhecido: {status!r}")

		records = self.store.query("appointments", filters, order_by=[("start_time", False)])
		return self._with_procedures(records)

	def client_appointments(self, client_phone: str) -> List[Appointment]:
		"""Todas las citas de un teléfono, de la más reciente a la más antigua."""
		phone = (client_phone or "").strip()
		if not phone:
			raise ValidationError("O telefone do cliente é obrigatório")

		records = self.store.query(
			"appointments",
			[eq("client_phone", phone)],
			order_by=[("start_time", False)]
		)
		return self._with_procedures(records)

	def _with_procedures(self, records: List[dict]) -> List[Appointment]:
		if not records:
			return []

		procedures = {p.id: p for p in all_procedures(self.store)}

		appointments = []
		for record in records:
			appointment = Appointment.from_record(record)
			if appointment.procedure is None and appointment.procedure_id in procedures:
				appointment = replace(appointment, procedure=procedures[appointment.procedure_id])
			appointments.append(appointment)

		return appointments

	def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
		"""Cita por id con su Procedure, o None si no existe."""
		if not appointment_id:
			return None

		records = self.store.query("appointments", [eq("id", appointment_id)])
		if not records:
			return None

		appointment = Appointment.from_record(records[0])
		if appointment.procedure is None and appointment.procedure_id:
			appointment = replace(appointment, procedure=get_procedure(self.store, appointment.procedure_id))
		return appointment

	def day_blockages(self, target_date: date) -> List[Blockage]:
		"""
		Bloqueos que afectan a target_date.

		Consulta: (rango que toca el día) OR (day_of_week = día de la semana).
		"""
		day_start, day_end = day_bounds(target_date)

		records = self.store.query("blockages", [
			any_of(
				[lte("start_time", day_end), gte("end_time", day_start)],
				[eq("day_of_week", weekday_index(target_date))],
			)
		])

		return blockages_for_day(target_date, [Blockage.from_record(r) for r in records])

	def layout_for_day(self, target_date: date) -> Dict[str, ColumnPlacement]:
		"""Columnas de la agenda para las citas confirmadas del día."""
		return layout_day(self.day_appointments(target_date, confirmed_only=True))

	def bookable_dates(self, month_start: date, today: Optional[date] = None) -> List[date]:
		"""
		Días del mes de month_start que son hoy o posteriores y laborables.

		No consulta el almacenamiento: un día laborable puede igual
		quedar sin slots por bloqueos o citas.
		"""
		today = today or self.clock().date()
		_, days_in_month = calendar.monthrange(month_start.year, month_start.month)
		first = month_start.replace(day=1)

		result = []
		for offset in range(days_in_month):
			day = first + timedelta(days=offset)
			if day < today:
				continue
			if weekday_index(day) in self.hours.working_weekdays:
				result.append(day)

		return result

	def watch(self, on_change: Callable[[], None]) -> Callable[[], None]:
		"""
		Suscribe on_change a cambios en citas y bloqueos.

		El callback no recibe payload; quien lo recibe debe volver a leer.

		Returns:
			callable: cancela ambas suscripciones
		"""
		unsubscribers = [
			self.store.subscribe("appointments", on_change),
			self.store.subscribe("blockages", on_change),
		]

		def unsubscribe() -> None:
			for cancel in unsubscribers:
				cancel()

		return unsubscribe
