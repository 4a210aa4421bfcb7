"""Vehicles app: listing snapshot read by reservations and the day-lock manager."""
