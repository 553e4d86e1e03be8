"""
Security Utilities for Public APIs

Provides rate limiting, honeypot validation, and input sanitization
for the booking endpoints that allow guest access.
"""

import re
import frappe
from frappe import _
from frappe.utils import cint


# ===================
# Rate Limiting
# ===================

def check_rate_limit(action: str, limit: int = 10, seconds: int = 60) -> None:
    """
    Check rate limit for an action by IP address.

    Uses Frappe's cache (Redis) to track request counts per IP.

    Args:
        action: Identifier for the action being rate limited
        limit: Maximum number of requests allowed
        seconds: Time window in seconds

    Raises:
        frappe.TooManyRequestsError: If rate limit exceeded
    """
    ip = get_client_ip()
    cache_key = f"rate_limit:salon_agenda:{action}:{ip}"

    current = cint(frappe.cache.get_value(cache_key) or 0)

    if current >= limit:
        frappe.log_error(
            title=_("Rate Limit Exceeded"),
            message=f"IP: {ip}, Action: {action}, Limit: {limit}/{seconds}s"
        )
        frappe.throw(
            _("Muitas solicitações. Aguarde um momento e tente novamente."),
            frappe.TooManyRequestsError
        )

    frappe.cache.set_value(cache_key, current + 1, expires_in_sec=seconds)


def get_client_ip() -> str:
    """
    Get the real client IP address, handling proxies.

    Returns:
        str: Client IP address
    """
    request = getattr(frappe.local, "request", None)
    if request is None:
        return "unknown"

    # X-Forwarded-For puede traer varias IPs; la primera es la del cliente
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP", "")
    if real_ip:
        return real_ip.strip()

    return request.remote_addr or "unknown"


# ===================
# Honeypot Validation
# ===================

def check_honeypot(honeypot_value: str = None) -> None:
    """
    Reject the request when the hidden honeypot field was filled.

    Args:
        honeypot_value: Value of the honeypot field

    Raises:
        frappe.ValidationError: If honeypot is filled (bot detected)
    """
    if honeypot_value:
        frappe.log_error(
            title=_("Bot Detected (Honeypot)"),
            message=f"IP: {get_client_ip()}, Honeypot value: {str(honeypot_value)[:100]}"
        )
        # Error genérico para no revelar la detección
        frappe.throw(_("Solicitação inválida"), frappe.ValidationError)


# ===================
# Input Validation
# ===================

def sanitize_string(value: str, max_length: int = 500) -> str:
    """
    Strip, truncate and remove control characters.

    Returns:
        str: Sanitized string, or None for empty input
    """
    if not value:
        return None

    value = str(value).strip()

    if len(value) > max_length:
        value = value[:max_length]

    value = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', value)

    return value or None


def _require(value, field_name: str) -> str:
    if value is None or str(value).strip() == "":
        frappe.throw(_("{0} é obrigatório").format(field_name), frappe.ValidationError)
    return str(value).strip()


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD).

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    date_str = _require(date_str, field_name)

    if not re.match(r'^\d{4}-\d{2}-\d{2}$', date_str):
        frappe.throw(_("Formato inválido para {0}. Use YYYY-MM-DD").format(field_name), frappe.ValidationError)

    return date_str


def validate_month_string(month_str: str, field_name: str = "month") -> str:
    """
    Validate month string format (YYYY-MM). A full date is accepted and
    truncated to its month.
    """
    month_str = _require(month_str, field_name)

    if re.match(r'^\d{4}-\d{2}-\d{2}$', month_str):
        month_str = month_str[:7]

    if not re.match(r'^\d{4}-(0[1-9]|1[0-2])$', month_str):
        frappe.throw(_("Formato inválido para {0}. Use YYYY-MM").format(field_name), frappe.ValidationError)

    return month_str


def validate_time_string(time_str: str, field_name: str = "time") -> str:
    """
    Validate time string format (HH:MM).

    Raises:
        frappe.ValidationError: If time format is invalid
    """
    time_str = _require(time_str, field_name)

    if not re.match(r'^([01]\d|2[0-3]):[0-5]\d$', time_str):
        frappe.throw(_("Formato inválido para {0}. Use HH:MM").format(field_name), frappe.ValidationError)

    return time_str


def validate_datetime_string(datetime_str: str, field_name: str = "datetime") -> str:
    """
    Validate datetime string format (YYYY-MM-DD HH:MM[:SS], "T" also accepted).

    Raises:
        frappe.ValidationError: If datetime format is invalid
    """
    datetime_str = _require(datetime_str, field_name)

    if not re.match(r'^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(:\d{2})?$', datetime_str):
        frappe.throw(
            _("Formato inválido para {0}. Use YYYY-MM-DD HH:MM:SS").format(field_name),
            frappe.ValidationError
        )

    return datetime_str


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Raises:
        frappe.ValidationError: If name is invalid
    """
    name = _require(name, field_name)

    if len(name) > 140:
        frappe.throw(_("{0} é muito longo").format(field_name), frappe.ValidationError)

    dangerous_patterns = [
        r'<script', r'javascript:', r'onclick', r'onerror',
        r'SELECT\s+', r'INSERT\s+', r'UPDATE\s+', r'DELETE\s+',
        r'DROP\s+', r'UNION\s+', r'--', r';'
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_("{0} inválido").format(field_name), frappe.ValidationError)

    return name
