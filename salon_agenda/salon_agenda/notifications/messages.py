"""
WhatsApp Link Builder

Builds the short text and the wa.me deep link for a notification.
"""

import re
from typing import Optional
from urllib.parse import quote

from .base import Notification, NotificationKind

WA_ME_URL = "https://wa.me/{phone}?text={text}"


def normalize_phone(phone: Optional[str]) -> str:
	"""Deja sólo dígitos ("+55 (13) 9975-3141" -> "551399753141")."""
	return re.sub(r"\D", "", phone or "")


def build_message(notification: Notification, manage_url: Optional[str] = None) -> str:
	"""Texto breve del aviso según su tipo."""
	appointment = notification.appointment
	day = appointment.start.strftime("%d/%m")
	hour = appointment.start.strftime("%H:%M")
	procedure = notification.procedure_name

	if notification.kind == NotificationKind.NEW_REQUEST:
		lines = [
			"*NOVA SOLICITACAO DE AGENDAMENTO*",
			"",
			f"- Cliente: {appointment.client_name}",
			f"- Servico: {procedure}",
			f"- Data: {day}",
			f"- Horario: {hour}",
		]
		if manage_url:
			lines += ["", f"Link para voce gerenciar: {manage_url}"]
		return "\n".join(lines)

	if notification.kind == NotificationKind.ADJUSTMENT:
		title = "*AJUSTE DE HORARIO*"
	else:
		title = "*AGENDAMENTO CONFIRMADO!*"

	return "\n".join([
		title,
		"",
		f"Ola *{appointment.client_name}*!",
		f"*{procedure}*",
		f"*Data:* {day}",
		f"*Horario:* {hour}",
	])


def build_whatsapp_link(phone: str, message: str) -> str:
	return WA_ME_URL.format(phone=normalize_phone(phone), text=quote(message, safe=""))


def resolve_recipient(notification: Notification, owner_phone: Optional[str]) -> str:
	"""
	Teléfono destino: el dueño del salón para solicitudes nuevas,
	el cliente para confirmaciones y ajustes.
	"""
	if notification.kind == NotificationKind.NEW_REQUEST:
		return normalize_phone(owner_phone)
	return normalize_phone(notification.appointment.client_phone)
