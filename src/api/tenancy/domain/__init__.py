"""Domain layer for the tenancy bounded context."""
