# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import cint, flt


class SalonProcedure(Document):
	def validate(self) -> None:
		self.procedure_name = (self.procedure_name or "").strip()
		if not self.procedure_name:
			frappe.throw(_("O nome do serviço é obrigatório"))

		if cint(self.duration_minutes) <= 0:
			frappe.throw(_("A duração do serviço deve ser maior que 0 minutos"))

		if flt(self.price) < 0:
			frappe.throw(_("O preço do serviço não pode ser negativo"))

		self.category = (self.category or "").strip() or None
