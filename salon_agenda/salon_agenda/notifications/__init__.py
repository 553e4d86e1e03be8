"""
Notifications Module

Short WhatsApp notices about appointment changes:
- Base channel interface (base.py)
- Message and wa.me link builders (messages.py)
- Factory for getting the right channel (factory.py)
- Log channel for standalone use (log.py)
- Desk realtime link channel (whatsapp.py)
"""
