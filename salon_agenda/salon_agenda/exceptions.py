"""
Scheduling Errors

Error taxonomy shared by the scheduling core, the data stores and the
notification channels:
- ValidationError: entrada inválida para una mutación (no se reintenta)
- DataStoreError: fallo de lectura/escritura en el almacenamiento
- NotificationError: fallo del canal de aviso (nunca bloquea la mutación)
"""


class SchedulingError(Exception):
	"""Base para todos los errores del motor de agenda."""
	pass


class ValidationError(SchedulingError):
	"""Entrada faltante o mal formada para una mutación."""
	pass


class InvalidTransitionError(ValidationError):
	"""Cambio de status no permitido para la cita."""

	def __init__(self, current: str, requested: str):
		self.current = current
		self.requested = requested
		super().__init__(f"Mudança de status não permitida: {current} -> {requested}")


class DataStoreError(SchedulingError):
	"""El almacenamiento externo no pudo completar la operación."""
	pass


class NotificationError(SchedulingError):
	"""El canal de notificación falló (best-effort)."""
	pass
