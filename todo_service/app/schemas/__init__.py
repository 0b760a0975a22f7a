"""Pydantic schemas for Todo Service."""
