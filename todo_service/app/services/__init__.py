"""Persistence services for Todo Service."""
