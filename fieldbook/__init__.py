"""Availability and reschedule engine for hourly field bookings."""

__version__ = "0.1.0"
