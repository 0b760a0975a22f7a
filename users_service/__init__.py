"""Users Service - user administration microservice backed by Keycloak."""
