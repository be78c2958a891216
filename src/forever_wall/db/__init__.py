"""Database helpers for Forever Wall."""
