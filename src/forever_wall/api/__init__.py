"""HTTP API for Forever Wall."""
