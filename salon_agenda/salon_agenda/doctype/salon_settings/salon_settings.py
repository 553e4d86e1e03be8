# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Salon Settings DocType

Single DocType holding the booking window, the notification channel and
the owner's phone number.
"""

import frappe
from dataclasses import replace
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint
from typing import Any, Dict, Optional

from salon_agenda.salon_agenda.config import BusinessHours
from salon_agenda.salon_agenda.exceptions import ValidationError
from salon_agenda.salon_agenda.notifications.base import NotificationChannel
from salon_agenda.salon_agenda.notifications.factory import get_channel

SETTINGS_DOCTYPE = "Salon Settings"

# Campos Int donde 0 significa "vacío" (Frappe guarda 0 para Int sin valor)
ZERO_MEANS_EMPTY = (
	"open_hour",
	"last_start_hour",
	"close_hour",
	"slot_interval_minutes",
	"lunch_hour",
	"default_duration_minutes",
)


class SalonSettings(Document):
	def validate(self) -> None:
		try:
			business_hours_from_doc(self)
		except ValidationError as e:
			frappe.throw(_(str(e)), frappe.ValidationError, title=_("Horário inválido"))

		if self.notification_channel == "whatsapp" and not self.owner_phone:
			frappe.msgprint(
				_("Sem telefone do salão, os avisos de novas solicitações não serão enviados."),
				indicator="orange",
				alert=True
			)


def business_hours_from_doc(doc: Any) -> BusinessHours:
	"""Convierte el doc Salon Settings en BusinessHours."""
	source: Dict[str, Any] = {
		"working_weekdays": doc.get("working_weekdays"),
		"allow_overlap_on_reschedule": doc.get("allow_overlap_on_reschedule"),
	}
	for fieldname in ZERO_MEANS_EMPTY:
		source[fieldname] = cint(doc.get(fieldname)) or None

	hours = BusinessHours.from_settings(source)
	if cint(doc.get("no_lunch_break")):
		hours = replace(hours, lunch_hour=None)
	return hours


def get_settings() -> Document:
	return frappe.get_cached_doc(SETTINGS_DOCTYPE)


def get_business_hours() -> BusinessHours:
	"""
	Horario vigente del salón.

	Raises:
		ValidationError: si la configuración guardada es incoherente
	"""
	return business_hours_from_doc(get_settings())


def get_notification_channel(user: Optional[str] = None) -> Optional[NotificationChannel]:
	"""
	Canal de avisos configurado; None si los avisos están desactivados.

	Args:
		user: destinatario realtime del link (por defecto la sesión actual)
	"""
	settings = get_settings()
	name = settings.notification_channel or "whatsapp"

	if name == "disabled":
		return None

	if name == "whatsapp":
		return get_channel(name, owner_phone=settings.owner_phone, user=user)

	return get_channel(name, owner_phone=settings.owner_phone, logger=frappe.logger("salon_agenda"))


def slot_exclusion_enabled() -> bool:
	return bool(cint(get_settings().enforce_slot_exclusion))
