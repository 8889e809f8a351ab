"""
YGOPRODeck response parser.

Converts the JSON returned by ``/cardinfo.php`` into ``CatalogCard`` records.

API docs: https://ygoprodeck.com/api-guide/
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from duelvault.models.card import CatalogCard, CatalogPage, CatalogSet

logger = logging.getLogger(__name__)


def parse_price(raw: Any) -> float | None:
    """
    Parse a price string from the API.

    Prices arrive as decimal strings ("1.23"). Missing, empty and
    unparseable values all map to None. Non-positive prices are kept as
    reported.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return float(value)


def parse_card_set(data: dict[str, Any]) -> CatalogSet:
    """
    Parse one entry of a card's ``card_sets`` list.

    Raises:
        KeyError: If the entry has no ``set_code``
    """
    return CatalogSet(
        set_name=data.get("set_name", ""),
        set_code=data["set_code"],
        rarity=data.get("set_rarity", ""),
        rarity_code=data.get("set_rarity_code") or None,
        price=parse_price(data.get("set_price")),
    )


def parse_card(data: dict[str, Any]) -> CatalogCard:
    """
    Parse a single card record.

    Raises:
        KeyError: If the record has no ``id`` or ``name``, or a set entry has
            no ``set_code``
    """
    images = data.get("card_images") or []
    first_image = images[0] if images else {}

    return CatalogCard(
        konami_id=int(data["id"]),
        name=data["name"],
        type=data.get("type", ""),
        frame_type=data.get("frameType", ""),
        description=data.get("desc", ""),
        race=data.get("race"),
        atk=data.get("atk"),
        defense=data.get("def"),
        level=data.get("level"),
        attribute=data.get("attribute"),
        archetype=data.get("archetype"),
        image_url=first_image.get("image_url", ""),
        image_url_small=first_image.get("image_url_small"),
        sets=tuple(parse_card_set(s) for s in data.get("card_sets") or []),
    )


def parse_cardinfo_response(payload: Any) -> CatalogPage:
    """
    Parse a full ``/cardinfo.php`` response body.

    Records are returned in API order. An entry that cannot be parsed is
    logged and counted in ``rejected``; its siblings are unaffected.

    Raises:
        ValueError: If the body is not an object with a ``data`` list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise ValueError("Expected an object with a 'data' list")

    page = CatalogPage()
    for index, entry in enumerate(payload["data"]):
        try:
            page.cards.append(parse_card(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed card record at index %d: %r", index, e)
            page.rejected += 1
    return page
