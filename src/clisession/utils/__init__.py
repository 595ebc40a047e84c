"""Shared helpers for clisession."""
