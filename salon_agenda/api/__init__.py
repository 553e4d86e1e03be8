"""
Salon Agenda API

Structure:
    api/
    ├── __init__.py       # This file
    ├── booking_api.py    # Whitelisted endpoints (booking page + staff agenda)
    └── security.py       # Rate limiting, honeypot, input validation

Usage:
    frappe.call("salon_agenda.api.booking_api.get_available_slots", ...)
"""
