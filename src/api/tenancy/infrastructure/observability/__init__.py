"""Domain-Oriented Observability for tenancy infrastructure."""

from tenancy.infrastructure.observability.store_probe import (
    DefaultStoreProbe,
    StoreProbe,
)

__all__ = [
    "DefaultStoreProbe",
    "StoreProbe",
]
