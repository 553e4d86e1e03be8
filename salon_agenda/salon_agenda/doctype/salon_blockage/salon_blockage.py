# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document

from salon_agenda.salon_agenda.exceptions import ValidationError
from salon_agenda.salon_agenda.models import normalize_blockage


class SalonBlockage(Document):
	"""Bloqueo de agenda: un período puntual o un día de la semana completo."""

	def validate(self) -> None:
		try:
			start, end, day_of_week = normalize_blockage(
				self.start_time or None,
				self.end_time or None,
				self.day_of_week
			)
		except ValidationError as e:
			frappe.throw(_(str(e)))

		self.start_time = start
		self.end_time = end
		self.day_of_week = "" if day_of_week is None else str(day_of_week)
		self.reason = (self.reason or "").strip() or None
