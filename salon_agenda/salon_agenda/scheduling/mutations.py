"""
Appointment Mutations

Validated state changes for appointments and blockages. Every operation
validates its input before touching the store and then performs a single
store call; WhatsApp notices are a best-effort side channel.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from ..config import BusinessHours
from ..exceptions import NotificationError, ValidationError, InvalidTransitionError
from ..models import (
	Appointment,
	AppointmentStatus,
	Blockage,
	Procedure,
	can_transition,
	normalize_blockage,
	to_datetime,
)
from ..notifications.base import Notification, NotificationChannel, NotificationKind
from ..store.base import DataStore, Filter, neq
from .catalog import get_procedure
from .interval import overlaps

MANUAL_PHONE = "Manual"


def _parse_date(value: Union[date, str]) -> date:
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	try:
		return date.fromisoformat(str(value).strip())
	except ValueError:
		raise ValidationError(f"Data inválida: {value!r}. Use YYYY-MM-DD")


def _parse_time(value: Union[time, str]) -> time:
	if isinstance(value, time):
		return value
	try:
		return datetime.strptime(str(value).strip(), "%H:%M").time()
	except ValueError:
		raise ValidationError(f"Horário inválido: {value!r}. Use HH:MM")


class AppointmentMutator:
	"""
	Operaciones de escritura sobre citas y bloqueos.

	Flujo de una cita:
	1. Cliente solicita -> "pending" (aviso al dueño)
	2. Staff confirma -> "confirmed" (aviso al cliente) o cancela -> "cancelled"
	3. Staff puede reprogramar -> "confirmed" con nuevo horario (aviso de ajuste)
	"""

	def __init__(
		self,
		store: DataStore,
		hours: Optional[BusinessHours] = None,
		notifier: Optional[NotificationChannel] = None,
		logger: Optional[logging.Logger] = None
	):
		self.store = store
		self.hours = hours or BusinessHours()
		self.notifier = notifier
		self.logger = logger or logging.getLogger("salon_agenda")

	# ===== APPOINTMENTS =====

	def create(
		self,
		client_name: str,
		client_phone: Optional[str],
		procedure: Optional[Procedure],
		on_date: Union[date, str],
		at_time: Union[time, str],
		staff_entry: bool = False
	) -> Appointment:
		"""
		Crea una cita.

		Args:
			client_name: nombre del cliente
			client_phone: teléfono (opcional en carga manual)
			procedure: servicio reservado; define la duración
			on_date: fecha (date o YYYY-MM-DD)
			at_time: hora de inicio (time o HH:MM)
			staff_entry: True para carga manual del staff (nace "confirmed")

		Returns:
			Appointment: la cita guardada con su id

		Raises:
			ValidationError: nombre vacío, sin servicio, duración <= 0, fecha/hora inválida
			DataStoreError: si falla la escritura
		"""
		client_name = (client_name or "").strip()
		client_phone = (client_phone or "").strip()

		if not client_name:
			raise ValidationError("O nome do cliente é obrigatório")

		if procedure is None:
			raise ValidationError("O serviço é obrigatório")

		if procedure.duration_minutes <= 0:
			raise ValidationError(f"Duração inválida para {procedure.name}: {procedure.duration_minutes} min")

		if not client_phone:
			if not staff_entry:
				raise ValidationError("O telefone do cliente é obrigatório")
			client_phone = MANUAL_PHONE

		start = datetime.combine(_parse_date(on_date), _parse_time(at_time))
		end = start + timedelta(minutes=procedure.duration_minutes)
		status = AppointmentStatus.CONFIRMED if staff_entry else AppointmentStatus.PENDING

		saved = self.store.insert("appointments", {
			"client_name": client_name,
			"client_phone": client_phone,
			"start_time": start,
			"end_time": end,
			"status": status.value,
			"procedure_id": procedure.id,
		})

		appointment = Appointment(
			id=str(saved["id"]),
			client_name=client_name,
			client_phone=client_phone,
			start=start,
			end=end,
			status=status,
			procedure_id=procedure.id,
			procedure=procedure,
			created_at=to_datetime(saved.get("created_at")),
		)

		if not staff_entry:
			self._notify(NotificationKind.NEW_REQUEST, appointment, procedure)

		return appointment

	def set_status(self, appointment: Appointment, new_status: Union[AppointmentStatus, str]) -> Appointment:
		"""
		Cambia el status de la cita.

		Transiciones permitidas: pending -> confirmed, pending -> cancelled,
		confirmed -> cancelled. Al confirmar se envía el aviso al cliente;
		un fallo del aviso no impide la escritura.

		Raises:
			InvalidTransitionError: transición no permitida
			DataStoreError: si falla la escritura
		"""
		try:
			new_status = AppointmentStatus(new_status)
		except ValueError:
			raise ValidationError(f"Status desconhecido: {new_status!r}")

		if not can_transition(appointment.status, new_status):
			raise InvalidTransitionError(appointment.status.value, new_status.value)

		updated = replace(appointment, status=new_status)

		if new_status == AppointmentStatus.CONFIRMED:
			self._notify(NotificationKind.CONFIRMATION, updated)

		self.store.update("appointments", appointment.id, {"status": new_status.value})
		return updated

	def reschedule(
		self,
		appointment: Appointment,
		new_start: Union[datetime, str],
		new_procedure: Optional[Procedure] = None
	) -> Appointment:
		"""
		Mueve la cita a new_start (y opcionalmente cambia el servicio).

		El fin se recalcula con la duración del servicio nuevo o actual; si no
		se conoce, se usa hours.default_duration_minutes. La cita queda
		"confirmed". Sólo se verifica choque con otras citas cuando
		hours.allow_overlap_on_reschedule es False.

		Raises:
			ValidationError: new_start inválido o choque de horario
			DataStoreError: si falla la lectura del servicio o la escritura
		"""
		start = to_datetime(new_start)
		if start is None:
			raise ValidationError("O novo horário é obrigatório")

		procedure = new_procedure or appointment.procedure
		if procedure is None:
			procedure = get_procedure(self.store, appointment.procedure_id)

		duration = self.hours.default_duration_minutes
		if procedure is not None and procedure.duration_minutes > 0:
			duration = procedure.duration_minutes
		end = start + timedelta(minutes=duration)

		if not self.hours.allow_overlap_on_reschedule:
			self._validate_no_collision(appointment.id, start, end)

		values = {
			"start_time": start,
			"end_time": end,
			"status": AppointmentStatus.CONFIRMED.value,
		}

		procedure_id = appointment.procedure_id
		if new_procedure is not None and new_procedure.id != appointment.procedure_id:
			values["procedure_id"] = new_procedure.id
			procedure_id = new_procedure.id

		updated = replace(
			appointment,
			start=start,
			end=end,
			status=AppointmentStatus.CONFIRMED,
			procedure_id=procedure_id,
			procedure=procedure,
		)

		self._notify(NotificationKind.ADJUSTMENT, updated, procedure)

		self.store.update("appointments", appointment.id, values)
		return updated

	def _validate_no_collision(self, appointment_id: str, start: datetime, end: datetime) -> None:
		"""Bloquea si otra cita no cancelada ocupa [start, end)."""
		records = self.store.query("appointments", [
			neq("status", AppointmentStatus.CANCELLED.value),
			Filter("start_time", "<", end),
			Filter("end_time", ">", start),
		])

		for record in records:
			if str(record["id"]) == str(appointment_id):
				continue
			other_start = to_datetime(record["start_time"])
			other_end = to_datetime(record["end_time"])
			if overlaps(start, end, other_start, other_end):
				raise ValidationError(
					f"O horário {start.strftime('%H:%M')}-{end.strftime('%H:%M')} "
					f"conflita com o agendamento de {record.get('client_name') or record['id']}"
				)

	# ===== BLOCKAGES =====

	def create_blockage(
		self,
		start: Union[datetime, str, None] = None,
		end: Union[datetime, str, None] = None,
		day_of_week: Union[int, str, None] = None,
		reason: Optional[str] = None
	) -> Blockage:
		"""
		Crea un bloqueo por rango [start, end) o semanal (day_of_week).

		Raises:
			ValidationError: ninguna o ambas formas, rango incompleto,
			end <= start, day_of_week fuera de 0..6
			DataStoreError: si falla la escritura
		"""
		start, end, day_of_week = normalize_blockage(start, end, day_of_week)

		saved = self.store.insert("blockages", {
			"start_time": start,
			"end_time": end,
			"day_of_week": day_of_week,
			"reason": (reason or "").strip() or None,
		})
		return Blockage.from_record(saved)

	def delete_blockage(self, blockage_id: str) -> None:
		"""Elimina el bloqueo; repetir la llamada no es error."""
		if not blockage_id:
			raise ValidationError("O id do bloqueio é obrigatório")
		self.store.delete("blockages", str(blockage_id))

	# ===== NOTIFICATIONS =====

	def _notify(
		self,
		kind: NotificationKind,
		appointment: Appointment,
		procedure: Optional[Procedure] = None
	) -> None:
		"""Envía el aviso sin propagar errores."""
		if self.notifier is None:
			return

		try:
			self.notifier.send(Notification(kind=kind, appointment=appointment, procedure=procedure))
		except NotificationError as e:
			self.logger.warning(
				f"Notification {kind.value} failed for appointment {appointment.id}: {str(e)}"
			)
		except Exception:
			# No bloquear la mutación si el canal falla de forma inesperada
			self.logger.exception(
				f"Unexpected error sending {kind.value} for appointment {appointment.id}"
			)
