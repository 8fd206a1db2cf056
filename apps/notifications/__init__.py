"""
Vendor notification pipeline.

Operational failures from vendor order flows are classified into a typed,
severity-ranked Notification and triaged by administrators:
pending → in_progress → resolved | dismissed

Key concepts:
- Severity and type are decided once, at classification time
- Status transitions are validated by the store (single source of truth)
- Tracking never breaks the business flow it instruments
"""
