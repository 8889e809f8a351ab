"""
DuelVault services.

Business logic for catalog sync, collection valuation, decks and accounts.
"""

from duelvault.services.catalog_sync import (
    CatalogSyncEngine,
    build_localized_name_index,
    upsert_card,
    upsert_printings,
)
from duelvault.services.decks import (
    DeckStats,
    MissingCard,
    OwnedCard,
    OwnershipReport,
    validate_ownership,
)
from duelvault.services.valuation import (
    TopValueItem,
    compute_stats,
    export_collection,
    set_progress,
    top_value_items,
)

__all__ = [
    "CatalogSyncEngine",
    "DeckStats",
    "MissingCard",
    "OwnedCard",
    "OwnershipReport",
    "TopValueItem",
    "build_localized_name_index",
    "compute_stats",
    "export_collection",
    "set_progress",
    "top_value_items",
    "upsert_card",
    "upsert_printings",
    "validate_ownership",
]
