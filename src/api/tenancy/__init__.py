"""Tenancy bounded context.

Resolves which tenant an inbound request belongs to, authenticates callers
on privileged paths, and routes requests to tenant-scoped content.
"""
