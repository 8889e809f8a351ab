"""
Catalog sync engine.

Keeps the cards and printings tables current with YGOPRODeck.

Reconciliation is by natural key: cards by Konami id, printings by
(card, set code). Each record is written in its own transaction so that a
failing record (bad data, a unique-constraint race with a concurrent sync)
is rolled back and counted without touching its siblings. Entries the
parser rejects are counted the same way. Only a failed catalog fetch
aborts a run.
"""

import asyncio
import logging
import math
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from duelvault.config import settings
from duelvault.db.database import session_scope
from duelvault.db.operations import get_card_by_konami_id, get_printing_by_card_and_set
from duelvault.models.card import CatalogCard, CatalogPage, CatalogSet
from duelvault.models.db import CardDB, PrintingDB
from duelvault.models.sync import RecordOutcome, SyncResult
from duelvault.sources.ygoprodeck import ENGLISH_LOCALE, YgoprodeckClient

logger = logging.getLogger(__name__)

PrintingUpdatePolicy = Literal["price_only", "overwrite"]

# Locale whose names are also stored as the German name
GERMAN_LOCALE = "de"


def build_localized_name_index(english_records: Iterable[CatalogCard]) -> dict[int, str]:
    """
    Map Konami id -> English name.

    The two locale fetches may not cover the same ids; callers fall back to
    the default-locale name for ids missing here.
    """
    return {record.konami_id: record.name for record in english_records}


def _apply_card_fields(
    card: CardDB, record: CatalogCard, english_name: str, locale: str
) -> None:
    card.name = record.name
    card.name_en = english_name
    if locale == GERMAN_LOCALE:
        card.name_de = record.name
    card.type = record.type
    card.frame_type = record.frame_type
    card.description = record.description
    card.race = record.race
    card.atk = record.atk
    card.def_ = record.defense
    card.level = record.level
    card.attribute = record.attribute
    card.archetype = record.archetype
    card.image_url = record.image_url
    card.image_url_small = record.image_url_small


async def upsert_card(
    session: AsyncSession,
    record: CatalogCard,
    english_name: str | None = None,
    locale: str = GERMAN_LOCALE,
) -> tuple[bool, int]:
    """
    Create or fully overwrite the card for a catalog record.

    ``record.name`` is in ``locale``; it fills the German name only when
    that locale is German, leaving ``name_de`` untouched otherwise.

    Returns:
        Tuple of (created, card_id)
    """
    card = await get_card_by_konami_id(session, record.konami_id)
    created = card is None
    if card is None:
        card = CardDB(konami_id=record.konami_id)
        session.add(card)

    _apply_card_fields(card, record, english_name or record.name, locale)
    await session.flush()
    return created, card.id


async def upsert_printings(
    session: AsyncSession,
    card_id: int,
    sets: Sequence[CatalogSet],
    policy: PrintingUpdatePolicy = "price_only",
) -> int:
    """
    Reconcile a card's printings.

    New printings are created with the parsed price. Existing printings get
    price and timestamp refreshed; set name and rarity are only refreshed
    under the ``overwrite`` policy.

    Returns:
        Number of printings created
    """
    created = 0
    now = datetime.now(UTC)

    for card_set in sets:
        printing = await get_printing_by_card_and_set(session, card_id, card_set.set_code)

        if printing is None:
            session.add(
                PrintingDB(
                    card_id=card_id,
                    set_code=card_set.set_code,
                    set_name=card_set.set_name,
                    rarity=card_set.rarity,
                    rarity_code=card_set.rarity_code,
                    price=card_set.price,
                    price_updated_at=now,
                )
            )
            # Flush per printing so a set code repeated within one record
            # is found by the next lookup instead of violating the constraint
            await session.flush()
            created += 1
            continue

        printing.price = card_set.price
        printing.price_updated_at = now
        if policy == "overwrite":
            printing.set_name = card_set.set_name
            printing.rarity = card_set.rarity
            printing.rarity_code = card_set.rarity_code

    await session.flush()
    return created


class CatalogSyncEngine:
    """
    Pulls the full catalog and upserts it into the store.

    Args:
        source: YGOPRODeck client used for both locale fetches
        session_factory: Factory for per-record sessions
        locale: Primary catalog locale (defaults to settings.catalog_locale)
        printing_update_policy: How existing printings are refreshed
    """

    def __init__(
        self,
        source: YgoprodeckClient,
        session_factory: async_sessionmaker[AsyncSession],
        locale: str | None = None,
        printing_update_policy: PrintingUpdatePolicy | None = None,
    ):
        self.source = source
        self.session_factory = session_factory
        self.locale = (locale or settings.catalog_locale).lower()
        self.printing_update_policy = printing_update_policy or settings.printing_update_policy

    async def fetch_catalogs(self) -> tuple[CatalogPage, dict[int, str]]:
        """
        Fetch the primary-locale catalog and the English name index.

        The two locales are fetched concurrently; if either fails the other
        is cancelled.

        Raises:
            UpstreamUnavailableError: If either fetch fails
        """
        if self.locale == ENGLISH_LOCALE:
            page = await self.source.fetch_catalog(ENGLISH_LOCALE)
            return page, build_localized_name_index(page.cards)

        primary = asyncio.create_task(self.source.fetch_catalog(self.locale))
        english = asyncio.create_task(self.source.fetch_catalog(ENGLISH_LOCALE))
        try:
            page, english_page = await asyncio.gather(primary, english)
        except BaseException:
            for task in (primary, english):
                task.cancel()
            raise
        return page, build_localized_name_index(english_page.cards)

    async def sync_record(self, record: CatalogCard, english_name: str) -> RecordOutcome | None:
        """
        Upsert one card and its printings in a dedicated transaction.

        Returns None (after logging) if the record could not be written.
        """
        try:
            async with session_scope(self.session_factory) as session:
                created, card_id = await upsert_card(session, record, english_name, self.locale)
                printings_created = await upsert_printings(
                    session, card_id, record.sets, self.printing_update_policy
                )
        except Exception:
            logger.exception(
                "Failed to sync card: %s (konami_id=%s)", record.name, record.konami_id
            )
            return None

        return RecordOutcome(created=created, card_id=card_id, printings_created=printings_created)

    def _start_result(self, page: CatalogPage) -> SyncResult:
        if page.rejected:
            logger.warning("%d catalog entries could not be parsed", page.rejected)
        return SyncResult(total_cards=page.total, errors=page.rejected)

    async def sync_all(self) -> SyncResult:
        """
        Sync every card sequentially.

        Raises:
            UpstreamUnavailableError: If the catalog cannot be fetched
        """
        logger.info("Starting full card sync from YGOPRODeck...")
        page, english_names = await self.fetch_catalogs()

        result = self._start_result(page)
        for record in page.cards:
            english_name = english_names.get(record.konami_id, record.name)
            result.record(await self.sync_record(record, english_name))

        self._log_summary(result)
        return result

    async def sync_in_batches(self, batch_size: int | None = None) -> SyncResult:
        """
        Sync every card in fixed-size batches.

        Records within a batch are upserted concurrently; batches run one
        after another, so at most ``batch_size`` records are in flight.

        Raises:
            ValueError: If batch_size is less than 1
            UpstreamUnavailableError: If the catalog cannot be fetched
        """
        if batch_size is None:
            batch_size = settings.sync_batch_size
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        logger.info("Starting batch sync with batch size %d...", batch_size)
        page, english_names = await self.fetch_catalogs()
        records = page.cards

        result = self._start_result(page)
        total_batches = math.ceil(len(records) / batch_size)

        for batch_number, start in enumerate(range(0, len(records), batch_size), start=1):
            batch = records[start : start + batch_size]
            outcomes = await asyncio.gather(
                *(
                    self.sync_record(record, english_names.get(record.konami_id, record.name))
                    for record in batch
                )
            )
            for outcome in outcomes:
                result.record(outcome)

            logger.info("Processed batch %d/%d (%d cards)", batch_number, total_batches, len(batch))

        self._log_summary(result)
        return result

    def _log_summary(self, result: SyncResult) -> None:
        logger.info(
            "Sync complete: %d created, %d updated, %d printings, %d errors",
            result.cards_created,
            result.cards_updated,
            result.printings_created,
            result.errors,
        )
