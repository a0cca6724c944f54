"""Pydantic schemas for reference data, rate entries and form fields."""
