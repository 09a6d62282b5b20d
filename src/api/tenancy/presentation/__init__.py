"""Presentation layer for the tenancy bounded context."""
