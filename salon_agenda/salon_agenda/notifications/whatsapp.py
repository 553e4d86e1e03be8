# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
WhatsApp Link Channel

Publishes a wa.me deep link to the desk over Frappe realtime; the browser
opens it so staff can send the message from their own WhatsApp.
"""

import frappe
from frappe.utils import get_url
from typing import Any, Dict, Optional

from .base import Notification, NotificationChannel, NotificationError, NotificationKind
from .messages import build_message, build_whatsapp_link, resolve_recipient

REALTIME_EVENT = "salon_agenda_whatsapp_link"


class WhatsAppLinkChannel(NotificationChannel):
	"""Canal que entrega el link de WhatsApp al usuario de la sesión."""

	def __init__(self, owner_phone: Optional[str] = None, user: Optional[str] = None):
		self.owner_phone = owner_phone
		self.user = user

	def send(self, notification: Notification) -> Dict[str, Any]:
		"""
		Construye el link y lo publica vía frappe.publish_realtime.

		Raises:
			NotificationError: sin teléfono destino o fallo al publicar
		"""
		recipient = resolve_recipient(notification, self.owner_phone)
		if not recipient:
			raise NotificationError(
				f"Sin teléfono destino para {notification.kind.value} de {notification.appointment.id}"
			)

		manage_url = None
		user = self.user or frappe.session.user
		if notification.kind == NotificationKind.NEW_REQUEST:
			manage_url = f"{get_url()}/app/salon-appointment/{notification.appointment.id}"
			# La solicitud llega de un Guest: se publica a todo el desk
			user = self.user

		url = build_whatsapp_link(recipient, build_message(notification, manage_url))
		payload = {
			"kind": notification.kind.value,
			"appointment": notification.appointment.id,
			"url": url,
		}

		try:
			frappe.publish_realtime(
				REALTIME_EVENT,
				payload,
				user=user,
				after_commit=True,
			)
		except Exception as e:
			raise NotificationError(f"No se pudo publicar el aviso: {str(e)}") from e

		frappe.logger("salon_agenda").info(
			f"WhatsApp link published for {notification.appointment.id} ({notification.kind.value})"
		)
		return {"recipient": recipient, "url": url}
