"""Vivario health endpoint."""
