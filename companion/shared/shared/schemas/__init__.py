"""Pydantic schemas shared by the companion services."""
