"""Appointment booking backend: slots, admission, deposits, sweeps."""

__version__ = "1.0.0"
