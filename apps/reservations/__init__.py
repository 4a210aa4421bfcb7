"""Reservations app: lifecycle, orchestrated transitions and the event log."""
