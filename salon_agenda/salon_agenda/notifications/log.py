"""
Log Notification Channel

Writes the WhatsApp link to the log instead of publishing it.
Used when no desk session is available (tests, scripts, local runs).
"""

import logging
from typing import Any, Dict, Optional

from .base import Notification, NotificationChannel, NotificationError
from .messages import build_message, build_whatsapp_link, resolve_recipient


class LogChannel(NotificationChannel):
	"""Canal que sólo registra el aviso."""

	def __init__(self, owner_phone: Optional[str] = None, logger: Optional[logging.Logger] = None):
		self.owner_phone = owner_phone
		self.logger = logger or logging.getLogger("salon_agenda")

	def send(self, notification: Notification) -> Dict[str, Any]:
		recipient = resolve_recipient(notification, self.owner_phone)
		if not recipient:
			raise NotificationError(
				f"Sin teléfono destino para {notification.kind.value} de {notification.appointment.id}"
			)

		url = build_whatsapp_link(recipient, build_message(notification))
		self.logger.info(
			"Notification %s for appointment %s: %s",
			notification.kind.value, notification.appointment.id, url
		)
		return {"recipient": recipient, "url": url}
