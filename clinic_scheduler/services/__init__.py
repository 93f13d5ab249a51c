"""Scheduling and booking services."""
