"""Core modules for Users Service."""
