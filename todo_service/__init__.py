"""Todo Service - category management microservice of the planner."""
