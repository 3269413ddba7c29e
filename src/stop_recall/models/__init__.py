"""Pydantic models for transit data and responses."""
