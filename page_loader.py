"""Catalog page loader: one page of summaries resolved into detail records."""

import asyncio
import logging

from catalog_client import CatalogClient
from constants import FETCH_ERROR_MESSAGE, PAGE_SIZE
from errors import CatalogError, PartialBatchFailure
from models import CollectionSummary, DetailRecord, PageState

logger = logging.getLogger(__name__)


class PageLoader:
    """
    Produces a fully resolved PageState for a page number.

    The client is blocking, so each request runs in a worker thread via
    ``asyncio.to_thread`` while the event loop stays free for other intents.
    Detail fetches for one page run concurrently and the page is
    all-or-nothing: one failed detail fails the whole page.
    """

    def __init__(self, client: CatalogClient, page_size: int = PAGE_SIZE):
        self.client = client
        self.page_size = page_size

    def offset_for(self, page_number: int) -> int:
        if page_number < 1:
            raise ValueError(f"Page numbers start at 1, got {page_number}")
        return (page_number - 1) * self.page_size

    async def _resolve(self, summary: CollectionSummary) -> DetailRecord:
        try:
            return await asyncio.to_thread(self.client.fetch_detail, summary.detail_url)
        except CatalogError as e:
            raise PartialBatchFailure(summary.detail_url, e) from e

    async def fetch_records(self, page_number: int) -> tuple:
        """Fetch and resolve a page, raising on the first failure."""
        offset = self.offset_for(page_number)
        summaries = await asyncio.to_thread(self.client.list_page, self.page_size, offset)
        # gather keeps input order and raises the first failure; fetches
        # already in flight finish in their threads and are dropped
        records = await asyncio.gather(*(self._resolve(s) for s in summaries))
        return tuple(records)

    async def load(self, page_number: int) -> PageState:
        """Load a page, collapsing any catalog failure into the page error."""
        try:
            records = await self.fetch_records(page_number)
        except CatalogError as e:
            logger.error("Error loading page %d: %s", page_number, e)
            return PageState(page_number=page_number, items=(), is_loading=False, error=FETCH_ERROR_MESSAGE)
        logger.info("Loaded page %d with %d records", page_number, len(records))
        return PageState(page_number=page_number, items=records, is_loading=False, error=None)
