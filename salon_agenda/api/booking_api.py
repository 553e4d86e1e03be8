"""
Booking API Endpoints

Whitelisted functions for the booking page and the staff agenda.
Guest endpoints carry security protections:
- Rate limiting by IP address
- Honeypot validation for bot detection
- Input sanitization

Staff endpoints require a logged-in user with a staff role.
"""

import frappe
from dataclasses import asdict
from datetime import date
from frappe import _
from frappe.utils import cint, getdate, now_datetime
from typing import Any, Dict, List, Optional, Union

from salon_agenda.salon_agenda.doctype.salon_settings.salon_settings import (
	get_business_hours,
	get_notification_channel,
)
from salon_agenda.salon_agenda.exceptions import SchedulingError, ValidationError
from salon_agenda.salon_agenda.models import Appointment, Blockage
from salon_agenda.salon_agenda.scheduling.availability import AvailabilityService
from salon_agenda.salon_agenda.scheduling.blockages import is_day_fully_blocked
from salon_agenda.salon_agenda.scheduling.catalog import (
	all_procedures,
	get_procedure,
	group_by_category,
	procedures_by_category,
)
from salon_agenda.salon_agenda.scheduling.layout import ColumnPlacement
from salon_agenda.salon_agenda.scheduling.mutations import AppointmentMutator
from salon_agenda.salon_agenda.scheduling.reports import (
	PERIODS,
	client_history,
	period_range,
	period_stats,
)
from salon_agenda.salon_agenda.store.frappe_store import FrappeDataStore

from salon_agenda.api.security import (
	check_rate_limit,
	check_honeypot,
	sanitize_string,
	validate_date_string,
	validate_datetime_string,
	validate_docname,
	validate_month_string,
	validate_time_string,
)

STAFF_ROLES = ("System Manager",)


# ===================
# Helpers
# ===================

def _logger():
	return frappe.logger("salon_agenda")


def _availability_service() -> AvailabilityService:
	return AvailabilityService(
		FrappeDataStore(),
		hours=get_business_hours(),
		clock=now_datetime,
		logger=_logger()
	)


def _mutator(ignore_permissions: bool = False) -> AppointmentMutator:
	return AppointmentMutator(
		FrappeDataStore(ignore_permissions=ignore_permissions),
		hours=get_business_hours(),
		notifier=get_notification_channel(),
		logger=_logger()
	)


def _handle_error(e: SchedulingError, action: str) -> None:
	"""
	Traduce errores del motor de agenda a errores de Frappe.

	ValidationError se muestra tal cual al usuario; cualquier otro error se
	registra en Error Log y se responde con un mensaje genérico.
	"""
	if isinstance(e, ValidationError):
		frappe.throw(_(str(e)), frappe.ValidationError)

	frappe.log_error(f"Error in {action}: {str(e)}", "Salon Agenda API Error")
	frappe.throw(_("Não foi possível concluir a operação. Tente novamente."))


def _require_procedure(store, procedure_name: str):
	procedure = get_procedure(store, validate_docname(procedure_name, "procedure"))
	if procedure is None:
		frappe.throw(_("Serviço '{0}' não encontrado").format(procedure_name), frappe.DoesNotExistError)
	return procedure


def _require_appointment(service: AvailabilityService, appointment_name: str) -> Appointment:
	appointment = service.get_appointment(validate_docname(appointment_name, "appointment"))
	if appointment is None:
		frappe.throw(_("Agendamento '{0}' não encontrado").format(appointment_name), frappe.DoesNotExistError)
	return appointment


def _appointment_dict(appointment: Appointment, placement: Optional[ColumnPlacement] = None) -> Dict[str, Any]:
	result = {
		"name": appointment.id,
		"client_name": appointment.client_name,
		"client_phone": appointment.client_phone,
		"start_time": appointment.start.isoformat(),
		"end_time": appointment.end.isoformat(),
		"status": appointment.status.value,
		"procedure": appointment.procedure_id,
		"procedure_name": appointment.procedure.name if appointment.procedure else None,
	}
	if placement is not None:
		result.update(placement.as_dict())
	return result


def _blockage_dict(blockage: Blockage) -> Dict[str, Any]:
	return {
		"name": blockage.id,
		"start_time": blockage.start.isoformat() if blockage.start else None,
		"end_time": blockage.end.isoformat() if blockage.end else None,
		"day_of_week": blockage.day_of_week,
		"reason": blockage.reason,
	}


def _parse_date(value: str, field_name: str = "date") -> date:
	return getdate(validate_date_string(value, field_name))


def _period_appointments(period: str, date: Optional[str], status: Optional[str] = None) -> List[Appointment]:
	"""
	Citas del período del dashboard.

	today/week/month usan date (YYYY-MM-DD, por defecto hoy) como referencia;
	custom recibe en date un día (YYYY-MM-DD) o un mes (YYYY-MM).
	"""
	period = sanitize_string(period, max_length=10) or "today"
	if period not in PERIODS:
		frappe.throw(_("Período inválido: {0}").format(period), frappe.ValidationError)

	custom = None
	base_date = getdate()
	if period == "custom":
		custom = validate_month_string(date) if len(date or "") == 7 else validate_date_string(date)
	elif date:
		base_date = _parse_date(date)

	service = _availability_service()
	bounds = period_range(period, base_date, custom)
	start, end = bounds if bounds else (None, None)
	return service.appointments_in_range(start, end, status=sanitize_string(status, max_length=20))


# ===================
# Guest Endpoints
# ===================

@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_available_slots(date: str, duration_minutes: Union[int, str]) -> Dict[str, Any]:
	"""
	Horarios disponibles de un día para la duración del servicio elegido.

	Rate limited: 30 requests per minute per IP.

	Args:
		date: fecha (YYYY-MM-DD)
		duration_minutes: duración del servicio

	Returns:
		dict: {
			"slots": ["10:00", "10:30", ...],
			"reason": None | "blocked" | "full" | "closed",
			"retry": bool
		}

	Example:
		```javascript
		frappe.call({
			method: "salon_agenda.api.booking_api.get_available_slots",
			args: {date: "2026-06-10", duration_minutes: 60},
			callback: function(r) {
				console.log(r.message.slots);
			}
		});
		```
	"""
	check_rate_limit("get_available_slots", limit=30, seconds=60)

	target_date = _parse_date(date)
	duration = cint(duration_minutes)
	if duration <= 0:
		frappe.throw(_("duration_minutes deve ser maior que 0"), frappe.ValidationError)

	try:
		service = _availability_service()
	except SchedulingError as e:
		_handle_error(e, "get_available_slots")

	return service.compute_available_slots(target_date, duration).as_dict()


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_bookable_dates(month: str) -> List[str]:
	"""
	Días reservables del mes (hoy o posteriores y laborables).

	Rate limited: 30 requests per minute per IP.

	Args:
		month: mes (YYYY-MM)

	Returns:
		list[str]: fechas YYYY-MM-DD
	"""
	check_rate_limit("get_bookable_dates", limit=30, seconds=60)

	month_start = getdate(validate_month_string(month) + "-01")

	try:
		service = _availability_service()
	except SchedulingError as e:
		_handle_error(e, "get_bookable_dates")

	return [d.isoformat() for d in service.bookable_dates(month_start, today=getdate())]


@frappe.whitelist(allow_guest=True, methods=['GET'])
def get_procedures(category: Optional[str] = None, grouped: Union[int, str] = 0) -> Any:
	"""
	Catálogo de servicios.

	Rate limited: 30 requests per minute per IP.

	Args:
		category: sólo servicios de esta categoría (ordenados por precio)
		grouped: 1 para agrupar por categoría

	Returns:
		list[dict] o dict[str, list[dict]] si grouped
	"""
	check_rate_limit("get_procedures", limit=30, seconds=60)

	category = sanitize_string(category, max_length=140)
	store = FrappeDataStore()

	try:
		if category:
			procedures = procedures_by_category(store, category)
		else:
			procedures = all_procedures(store)
	except SchedulingError as e:
		_handle_error(e, "get_procedures")

	if cint(grouped):
		return {
			name: [asdict(p) for p in items]
			for name, items in group_by_category(procedures).items()
		}

	return [asdict(p) for p in procedures]


@frappe.whitelist(allow_guest=True, methods=['POST'])
def request_appointment(
	client_name: str,
	client_phone: str,
	procedure: str,
	date: str,
	time: str,
	website: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Solicitud de cita desde la página pública. La cita nace "pending" y el
	dueño recibe el aviso.

	Rate limited: 5 requests per minute per IP.

	Args:
		client_name: nombre del cliente
		client_phone: teléfono (WhatsApp)
		procedure: name del Salon Procedure
		date: fecha (YYYY-MM-DD)
		time: horario elegido (HH:MM), debe estar entre los disponibles
		website: honeypot (debe venir vacío)

	Returns:
		dict: la cita creada
	"""
	check_honeypot(website)
	check_rate_limit("request_appointment", limit=5, seconds=60)

	client_name = sanitize_string(client_name, max_length=140)
	client_phone = sanitize_string(client_phone, max_length=30)
	target_date = _parse_date(date)
	time = validate_time_string(time)

	try:
		mutator = _mutator(ignore_permissions=True)
		selected = _require_procedure(mutator.store, procedure)

		service = AvailabilityService(mutator.store, hours=mutator.hours, clock=now_datetime, logger=_logger())
		available = service.compute_available_slots(target_date, selected.duration_minutes)
		if available.retry:
			frappe.throw(_("Não foi possível verificar os horários. Tente novamente."))
		if time not in available.slots:
			frappe.throw(_("O horário {0} não está mais disponível").format(time), frappe.ValidationError)

		appointment = mutator.create(client_name, client_phone, selected, target_date, time)
	except SchedulingError as e:
		_handle_error(e, "request_appointment")

	return _appointment_dict(appointment)


# ===================
# Staff Endpoints
# ===================

@frappe.whitelist(methods=['POST'])
def create_manual_appointment(
	client_name: str,
	procedure: str,
	date: str,
	time: str,
	client_phone: Optional[str] = None
) -> Dict[str, Any]:
	"""Carga manual del staff: la cita nace "confirmed" y no se envía aviso."""
	frappe.only_for(STAFF_ROLES)

	client_name = sanitize_string(client_name, max_length=140)
	client_phone = sanitize_string(client_phone, max_length=30)
	target_date = _parse_date(date)
	time = validate_time_string(time)

	try:
		mutator = _mutator()
		selected = _require_procedure(mutator.store, procedure)
		appointment = mutator.create(client_name, client_phone, selected, target_date, time, staff_entry=True)
	except SchedulingError as e:
		_handle_error(e, "create_manual_appointment")

	return _appointment_dict(appointment)


@frappe.whitelist(methods=['POST'])
def set_appointment_status(appointment: str, status: str) -> Dict[str, Any]:
	"""
	Confirma o cancela una cita.

	Transiciones: pending -> confirmed | cancelled, confirmed -> cancelled.
	"""
	frappe.only_for(STAFF_ROLES)

	status = sanitize_string(status, max_length=20)

	try:
		mutator = _mutator()
		service = AvailabilityService(mutator.store, hours=mutator.hours, logger=_logger())
		current = _require_appointment(service, appointment)
		updated = mutator.set_status(current, status)
	except SchedulingError as e:
		_handle_error(e, "set_appointment_status")

	return _appointment_dict(updated)


@frappe.whitelist(methods=['POST'])
def reschedule_appointment(appointment: str, new_start: str, procedure: Optional[str] = None) -> Dict[str, Any]:
	"""
	Mueve la cita a new_start (YYYY-MM-DD HH:MM:SS) y opcionalmente cambia
	el servicio. La cita queda "confirmed" y el cliente recibe el aviso.
	"""
	frappe.only_for(STAFF_ROLES)

	new_start = validate_datetime_string(new_start, "new_start")

	try:
		mutator = _mutator()
		service = AvailabilityService(mutator.store, hours=mutator.hours, logger=_logger())
		current = _require_appointment(service, appointment)
		new_procedure = _require_procedure(mutator.store, procedure) if procedure else None
		updated = mutator.reschedule(current, new_start, new_procedure)
	except SchedulingError as e:
		_handle_error(e, "reschedule_appointment")

	return _appointment_dict(updated)


@frappe.whitelist(methods=['GET'])
def get_day_layout(date: str) -> Dict[str, Any]:
	"""
	Agenda del día para el desk.

	Returns:
		dict: {
			"date": "2026-06-10",
			"appointments": [{..., "column": 0, "total_columns": 2}],
			"blockages": [...],
			"day_blocked": bool
		}
	"""
	frappe.only_for(STAFF_ROLES)

	target_date = _parse_date(date)

	try:
		service = _availability_service()
		appointments = service.day_appointments(target_date, confirmed_only=True)
		placements = service.layout_for_day(target_date)
		blockages = service.day_blockages(target_date)
	except SchedulingError as e:
		_handle_error(e, "get_day_layout")

	return {
		"date": target_date.isoformat(),
		"appointments": [_appointment_dict(a, placements.get(a.id)) for a in appointments],
		"blockages": [_blockage_dict(b) for b in blockages],
		"day_blocked": is_day_fully_blocked(
			target_date,
			blockages,
			service.hours.open_hour,
			service.hours.work_end_hour
		),
	}


@frappe.whitelist(methods=['GET'])
def get_appointments(period: str = "today", date: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
	"""
	Listado de citas del período, de la más reciente a la más antigua.

	Con status="pending" es la bandeja de solicitudes por confirmar.

	Args:
		period: "today" | "week" | "month" | "custom" | "all"
		date: referencia (YYYY-MM-DD) o, con custom, día o mes (YYYY-MM)
		status: filtro opcional de status
	"""
	frappe.only_for(STAFF_ROLES)

	try:
		appointments = _period_appointments(period, date, status)
	except SchedulingError as e:
		_handle_error(e, "get_appointments")

	return [_appointment_dict(a) for a in appointments]


@frappe.whitelist(methods=['GET'])
def get_period_stats(period: str = "month", date: Optional[str] = None) -> Dict[str, Any]:
	"""
	Ingresos y cantidades de las citas confirmadas del período.

	Returns:
		dict: {
			"total_earnings": 450.0,
			"total_count": 6,
			"participation": [{"name": "Cabelo", "value": 4}, ...],
			"revenue_per_service": [{"name": "Corte", "value": 320.0}, ...]
		}
	"""
	frappe.only_for(STAFF_ROLES)

	try:
		appointments = _period_appointments(period, date)
	except SchedulingError as e:
		_handle_error(e, "get_period_stats")

	return period_stats(appointments).as_dict()


@frappe.whitelist(methods=['GET'])
def get_client_history(client_phone: str) -> Dict[str, Any]:
	"""Visitas, total gastado e historial de citas de un cliente (por teléfono)."""
	frappe.only_for(STAFF_ROLES)

	client_phone = sanitize_string(client_phone, max_length=30)

	try:
		history = client_history(_availability_service().client_appointments(client_phone), client_phone)
	except SchedulingError as e:
		_handle_error(e, "get_client_history")

	return {
		"client_phone": history.client_phone,
		"client_name": history.client_name,
		"visits": history.visits,
		"total_spent": history.total_spent,
		"appointments": [_appointment_dict(a) for a in history.appointments],
	}


@frappe.whitelist(methods=['POST'])
def create_blockage(
	start_time: Optional[str] = None,
	end_time: Optional[str] = None,
	day_of_week: Optional[Union[int, str]] = None,
	reason: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea un bloqueo por período (start_time + end_time) o semanal (day_of_week).
	"""
	frappe.only_for(STAFF_ROLES)

	if start_time:
		start_time = validate_datetime_string(start_time, "start_time")
	if end_time:
		end_time = validate_datetime_string(end_time, "end_time")

	try:
		blockage = _mutator().create_blockage(
			start=start_time or None,
			end=end_time or None,
			day_of_week=day_of_week,
			reason=sanitize_string(reason)
		)
	except SchedulingError as e:
		_handle_error(e, "create_blockage")

	return _blockage_dict(blockage)


@frappe.whitelist(methods=['POST'])
def delete_blockage(blockage: str) -> Dict[str, Any]:
	"""Elimina un bloqueo. Un bloqueo inexistente no es error."""
	frappe.only_for(STAFF_ROLES)

	blockage = validate_docname(blockage, "blockage")

	try:
		_mutator().delete_blockage(blockage)
	except SchedulingError as e:
		_handle_error(e, "delete_blockage")

	return {"name": blockage, "deleted": True}
