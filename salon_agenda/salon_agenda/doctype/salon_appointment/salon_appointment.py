# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Salon Appointment DocType

One booked service for one client on the salon's single agenda.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import add_to_date, cint, get_datetime

from salon_agenda.salon_agenda.doctype.salon_settings.salon_settings import (
	get_business_hours,
	slot_exclusion_enabled,
)
from salon_agenda.salon_agenda.models import AppointmentStatus, requires_slot_exclusion

STATUSES = [status.value for status in AppointmentStatus]


class SalonAppointment(Document):
	"""
	Cita del salón.

	Flujo:
	1. Cliente solicita desde la web -> "pending"
	2. Staff confirma o cancela desde el desk o la API
	3. Reprogramar deja la cita "confirmed" con el nuevo horario
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.

		Ejecuta:
		1. Campos requeridos
		2. Calcular end_time desde el servicio si está vacío
		3. Validar end_time > start_time
		4. Validar status
		5. Rechazar solapamiento al insertar una solicitud (si Salon Settings lo exige)
		"""
		self._validate_required_fields()
		self._set_end_time()
		self._validate_time_range()
		self._validate_status()

		if self.is_new():
			self._validate_slot_exclusion()

	def _validate_required_fields(self) -> None:
		self.client_name = (self.client_name or "").strip()
		if not self.client_name:
			frappe.throw(_("O nome do cliente é obrigatório"))

		if not self.start_time:
			frappe.throw(_("O horário de início é obrigatório"))

	def _set_end_time(self) -> None:
		"""Si no hay fin, se usa la duración del servicio o la duración por defecto."""
		if self.end_time:
			return

		duration = 0
		if self.procedure:
			duration = cint(frappe.db.get_value("Salon Procedure", self.procedure, "duration_minutes"))
		if duration <= 0:
			duration = get_business_hours().default_duration_minutes

		self.end_time = add_to_date(get_datetime(self.start_time), minutes=duration)

	def _validate_time_range(self) -> None:
		if get_datetime(self.end_time) <= get_datetime(self.start_time):
			frappe.throw(_("O horário de término deve ser depois do início"))

	def _validate_status(self) -> None:
		if not self.status:
			self.status = AppointmentStatus.PENDING.value

		if self.status not in STATUSES:
			frappe.throw(_("Status desconhecido: {0}").format(self.status))

	def _validate_slot_exclusion(self) -> None:
		"""
		Rechaza una solicitud nueva ("pending") que se solapa con otra cita no cancelada.

		Los encaixes manuales del staff ("confirmed") y las actualizaciones
		(reprogramar) no pasan por aquí.
		"""
		if not requires_slot_exclusion(self.status) or not slot_exclusion_enabled():
			return

		conflicts = frappe.get_all(
			"Salon Appointment",
			filters=[
				["status", "!=", AppointmentStatus.CANCELLED.value],
				["start_time", "<", self.end_time],
				["end_time", ">", self.start_time],
				["name", "!=", self.name or ""],
			],
			fields=["name", "client_name", "start_time", "end_time"],
			limit=1
		)

		if conflicts:
			other = conflicts[0]
			frappe.throw(
				_("Horário indisponível: conflita com o agendamento de {0} ({1} - {2})").format(
					other.client_name or other.name,
					get_datetime(other.start_time).strftime("%H:%M"),
					get_datetime(other.end_time).strftime("%H:%M"),
				),
				title=_("Conflito de horário")
			)
