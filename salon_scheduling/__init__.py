"""Appointment scheduling core for the grooming salon."""
