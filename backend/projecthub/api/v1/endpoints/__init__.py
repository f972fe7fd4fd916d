"""Endpoint modules of the v1 API."""
