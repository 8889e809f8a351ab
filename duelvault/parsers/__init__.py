from duelvault.parsers.ygoprodeck import (
    parse_card,
    parse_card_set,
    parse_cardinfo_response,
    parse_price,
)

__all__ = [
    "parse_card",
    "parse_card_set",
    "parse_cardinfo_response",
    "parse_price",
]
