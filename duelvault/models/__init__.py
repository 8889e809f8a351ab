from duelvault.models.card import CatalogCard, CatalogPage, CatalogSet
from duelvault.models.collection import (
    CollectionStats,
    ExportRow,
    MissingPrinting,
    PortfolioSummary,
    SetProgress,
)
from duelvault.models.deck_builder import DeckBuilder, DeckCardSpec, zone_warnings
from duelvault.models.enums import (
    CardCondition,
    CardEdition,
    DeckZone,
    PortfolioType,
    SearchLanguage,
    UserTier,
)
from duelvault.models.failure import (
    ConflictError,
    DeckRuleError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    QuotaExceededError,
    UnauthorizedError,
    UpstreamUnavailableError,
)
from duelvault.models.sync import RecordOutcome, SyncResult

__all__ = [
    "CardCondition",
    "CardEdition",
    "CatalogCard",
    "CatalogPage",
    "CatalogSet",
    "CollectionStats",
    "ConflictError",
    "DeckBuilder",
    "DeckCardSpec",
    "DeckRuleError",
    "DeckZone",
    "ExportRow",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "MissingPrinting",
    "NotFoundError",
    "PortfolioSummary",
    "PortfolioType",
    "QuotaExceededError",
    "RecordOutcome",
    "SearchLanguage",
    "SetProgress",
    "SyncResult",
    "UnauthorizedError",
    "UpstreamUnavailableError",
    "UserTier",
    "zone_warnings",
]
