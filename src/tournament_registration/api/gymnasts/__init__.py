"""Gymnast lookup endpoints."""
