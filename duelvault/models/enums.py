from enum import Enum


class UserTier(str, Enum):
    """Account tier; FREE accounts have a capped collection size."""

    FREE = "FREE"
    PRO = "PRO"


class SearchLanguage(str, Enum):
    """Languages a user can search card names in."""

    DE = "DE"
    EN = "EN"
    FR = "FR"
    IT = "IT"
    PT = "PT"


class CardCondition(str, Enum):
    MINT = "MINT"
    NEAR_MINT = "NEAR_MINT"
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    LIGHT_PLAYED = "LIGHT_PLAYED"
    PLAYED = "PLAYED"
    POOR = "POOR"


class CardEdition(str, Enum):
    FIRST_EDITION = "FIRST_EDITION"
    UNLIMITED = "UNLIMITED"
    LIMITED = "LIMITED"


class PortfolioType(str, Enum):
    """Which pile an owned card belongs to."""

    COLLECTION = "COLLECTION"
    TRADES = "TRADES"
    BULK = "BULK"


class DeckZone(str, Enum):
    MAIN = "MAIN"
    EXTRA = "EXTRA"
    SIDE = "SIDE"
