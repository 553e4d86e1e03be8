# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Base Notification Channel

Defines the interface every notification channel must implement.
Notifications are best-effort: callers log NotificationError and carry on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import NotificationError
from ..models import Appointment, Procedure


class NotificationKind(str, Enum):
	CONFIRMATION = "confirmation"
	ADJUSTMENT = "adjustment"
	NEW_REQUEST = "new_request"


@dataclass(frozen=True)
class Notification:
	kind: NotificationKind
	appointment: Appointment
	procedure: Optional[Procedure] = None

	@property
	def procedure_name(self) -> str:
		procedure = self.procedure or self.appointment.procedure
		return procedure.name if procedure else ""


class NotificationChannel(ABC):
	"""
	Interfaz base para canales de notificación.

	Todos los canales deben implementar send().
	"""

	@abstractmethod
	def send(self, notification: Notification) -> Dict[str, Any]:
		"""
		Envía (o prepara) el aviso.

		Args:
			notification: tipo de aviso + cita

		Returns:
			dict: datos del envío (ej. {"recipient": ..., "url": ...})

		Raises:
			NotificationError: si el canal no pudo completar el aviso
		"""
		pass


__all__ = [
	"Notification",
	"NotificationChannel",
	"NotificationError",
	"NotificationKind",
]
