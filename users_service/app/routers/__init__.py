"""API routers for Users Service."""
