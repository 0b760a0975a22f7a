"""Pydantic schemas for Users Service."""
