import pytest

from duelvault.parsers import parse_card, parse_card_set, parse_cardinfo_response, parse_price

BLUE_EYES = {
    "id": 89631139,
    "name": "Blue-Eyes White Dragon",
    "type": "Normal Monster",
    "frameType": "normal",
    "desc": "This legendary dragon is a powerful engine of destruction.",
    "atk": 3000,
    "def": 2500,
    "level": 8,
    "race": "Dragon",
    "attribute": "LIGHT",
    "archetype": "Blue-Eyes",
    "card_sets": [
        {
            "set_name": "Legend of Blue Eyes White Dragon",
            "set_code": "LOB-EN001",
            "set_rarity": "Ultra Rare",
            "set_rarity_code": "(UR)",
            "set_price": "12.34",
        },
        {
            "set_name": "Starter Deck: Kaiba",
            "set_code": "SDK-001",
            "set_rarity": "Ultra Rare",
            "set_rarity_code": "(UR)",
            "set_price": "",
        },
    ],
    "card_images": [
        {
            "id": 89631139,
            "image_url": "https://images.ygoprodeck.com/images/cards/89631139.jpg",
            "image_url_small": "https://images.ygoprodeck.com/images/cards_small/89631139.jpg",
        }
    ],
}

POT_OF_GREED = {
    "id": 55144522,
    "name": "Pot of Greed",
    "type": "Spell Card",
    "frameType": "spell",
    "desc": "Draw 2 cards.",
    "race": "Normal",
}


class TestParsePrice:
    def test_decimal_string(self) -> None:
        assert parse_price("1.23") == 1.23

    def test_numeric_value(self) -> None:
        assert parse_price(4.5) == 4.5

    def test_whitespace_is_trimmed(self) -> None:
        assert parse_price(" 0.50 ") == 0.5

    @pytest.mark.parametrize("raw", [None, "", "   ", "N/A", "abc", "NaN", "Infinity"])
    def test_missing_or_unparseable_is_none(self, raw: object) -> None:
        assert parse_price(raw) is None

    def test_zero_is_kept(self) -> None:
        assert parse_price("0.00") == 0.0


class TestParseCardSet:
    def test_all_fields(self) -> None:
        card_set = parse_card_set(BLUE_EYES["card_sets"][0])

        assert card_set.set_code == "LOB-EN001"
        assert card_set.set_name == "Legend of Blue Eyes White Dragon"
        assert card_set.rarity == "Ultra Rare"
        assert card_set.rarity_code == "(UR)"
        assert card_set.price == 12.34

    def test_empty_price_is_none(self) -> None:
        assert parse_card_set(BLUE_EYES["card_sets"][1]).price is None

    def test_missing_set_code_raises(self) -> None:
        with pytest.raises(KeyError):
            parse_card_set({"set_name": "No Code"})


class TestParseCard:
    def test_monster(self) -> None:
        card = parse_card(BLUE_EYES)

        assert card.konami_id == 89631139
        assert card.name == "Blue-Eyes White Dragon"
        assert card.frame_type == "normal"
        assert card.atk == 3000
        assert card.defense == 2500
        assert card.level == 8
        assert card.attribute == "LIGHT"
        assert card.archetype == "Blue-Eyes"
        assert card.image_url.endswith("/cards/89631139.jpg")
        assert card.image_url_small is not None
        assert [s.set_code for s in card.sets] == ["LOB-EN001", "SDK-001"]

    def test_spell_has_no_stats(self) -> None:
        """Spells and traps carry no atk/def/level/attribute."""
        card = parse_card(POT_OF_GREED)

        assert card.atk is None
        assert card.defense is None
        assert card.level is None
        assert card.attribute is None
        assert card.sets == ()
        assert card.image_url == ""
        assert card.image_url_small is None

    def test_string_id_is_coerced(self) -> None:
        assert parse_card({**POT_OF_GREED, "id": "55144522"}).konami_id == 55144522


class TestParseCardinfoResponse:
    def test_keeps_api_order(self) -> None:
        page = parse_cardinfo_response({"data": [POT_OF_GREED, BLUE_EYES]})

        assert [c.konami_id for c in page.cards] == [55144522, 89631139]
        assert page.rejected == 0

    def test_empty_data(self) -> None:
        page = parse_cardinfo_response({"data": []})

        assert page.cards == []
        assert page.total == 0

    @pytest.mark.parametrize("payload", [None, [], {"error": "nope"}, {"data": "x"}])
    def test_wrong_shape_raises(self, payload: object) -> None:
        with pytest.raises(ValueError):
            parse_cardinfo_response(payload)

    def test_record_without_id_is_skipped(self) -> None:
        page = parse_cardinfo_response({"data": [{"name": "Nameless"}, POT_OF_GREED]})

        assert [c.konami_id for c in page.cards] == [55144522]
        assert page.rejected == 1
        assert page.total == 2

    def test_set_without_code_rejects_only_its_card(self) -> None:
        broken = {**BLUE_EYES, "card_sets": [{"set_name": "Mystery", "set_rarity": "Common"}]}

        page = parse_cardinfo_response({"data": [POT_OF_GREED, broken, BLUE_EYES]})

        assert [c.konami_id for c in page.cards] == [55144522, 89631139]
        assert page.rejected == 1

    def test_non_object_entry_is_skipped(self) -> None:
        page = parse_cardinfo_response({"data": ["junk", POT_OF_GREED]})

        assert len(page.cards) == 1
        assert page.rejected == 1
