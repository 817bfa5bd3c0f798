"""Clinic scheduling backend: appointment booking over doctor time slots."""
