"""
Notification Channel Factory

Factory pattern to get the correct channel based on its name.
"""

from typing import Any

from .base import NotificationChannel


def get_channel(name: str, **options: Any) -> NotificationChannel:
	"""
	Factory para obtener el canal correcto según nombre.

	Args:
		name: "whatsapp" o "log"
		**options: argumentos del constructor del canal (owner_phone, ...)

	Returns:
		NotificationChannel: instancia del canal

	Raises:
		ValueError: si el canal no es soportado
	"""
	if name == "whatsapp":
		from .whatsapp import WhatsAppLinkChannel
		return WhatsAppLinkChannel(**options)
	elif name == "log":
		from .log import LogChannel
		return LogChannel(**options)
	else:
		raise ValueError(f"Unsupported notification channel: {name}")
