"""Operational scripts for Forever Wall."""
