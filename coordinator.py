"""View-state coordinator: the state machine behind the catalog window."""

import asyncio
import logging
from typing import Callable, List, Optional, Set, Tuple

from catalog_client import CatalogClient
from constants import FETCH_ERROR_MESSAGE
from errors import CatalogError
from favorites import FavoritesStore
from filters import apply_filter
from models import (
    CatalogItemView, CatalogViewModel, DetailRecord, FilterState, PageState
)
from page_loader import PageLoader

logger = logging.getLogger(__name__)

Listener = Callable[[CatalogViewModel], None]


class ViewStateCoordinator:
    """
    Owns page, filter, favorites and selection state and turns renderer
    intents into state changes.

    Everything here runs on one event loop thread. Page loads are tagged with
    a generation number so a late response for a page the user already left
    is dropped instead of overwriting the current page.

    Search and category filters only apply to the page that is loaded.
    """

    def __init__(self, client: CatalogClient, loader: PageLoader, favorites: FavoritesStore):
        self.client = client
        self.loader = loader
        self.favorites = favorites

        self.page_number = 1
        self.filter_state = FilterState()
        self.page_state = PageState.loading(1)
        self.category_catalog: Tuple[str, ...] = ()
        self.selected_detail_record: Optional[DetailRecord] = None

        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Listener] = []

    async def start(self) -> None:
        """Load favorites and categories, then the first page."""
        self.favorites.load_or_empty()
        await self._load_categories()
        self._notify()
        await self.set_page(1)

    async def _load_categories(self) -> None:
        try:
            names = await asyncio.to_thread(self.client.list_categories)
        except CatalogError as e:
            logger.error("Error fetching types: %s", e)
            self.category_catalog = ()
            return
        self.category_catalog = tuple(names)

    async def aclose(self) -> None:
        """Cancel outstanding loads and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view_model()
        for listener in list(self._listeners):
            listener(view)

    def set_search_term(self, search_term: str) -> None:
        self.filter_state = self.filter_state.with_search_term(search_term)
        self._notify()

    def toggle_category(self, category: str) -> None:
        self.filter_state = self.filter_state.with_category_toggled(category)
        self._notify()

    def clear_categories(self) -> None:
        self.filter_state = FilterState(self.filter_state.search_term)
        self._notify()

    def set_page(self, page_number: int) -> asyncio.Task:
        """Move to a page and start loading it. Returns the load task."""
        self.page_number = max(page_number, 1)
        return self._start_load()

    def next_page(self) -> asyncio.Task:
        return self.set_page(self.page_number + 1)

    def previous_page(self) -> asyncio.Task:
        return self.set_page(self.page_number - 1)

    def retry(self) -> asyncio.Task:
        """Reload the current page after an error."""
        return self._start_load()

    def select_item(self, record: DetailRecord) -> None:
        self.selected_detail_record = record
        self._notify()

    def close_detail(self) -> None:
        self.selected_detail_record = None
        self._notify()

    def toggle_favorite(self, record: DetailRecord) -> bool:
        """Toggle and persist a favorite. Returns whether it is now a favorite."""
        is_favorite = self.favorites.toggle(record)
        logger.info("%s %s (#%d)", "Favorited" if is_favorite else "Unfavorited", record.name, record.id)
        self._notify()
        return is_favorite

    def _start_load(self) -> asyncio.Task:
        self._generation += 1
        generation = self._generation
        page_number = self.page_number
        self.page_state = PageState.loading(page_number)
        self._notify()

        task = asyncio.get_running_loop().create_task(self._load(page_number, generation))
        self._tasks.add(task)
        task.add_done_callback(self._load_done)
        return task

    def _load_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Page load failed unexpectedly", exc_info=error)

    async def _load(self, page_number: int, generation: int) -> None:
        try:
            page_state = await self.loader.load(page_number)
        except Exception:
            # unexpected failures still end the load
            if generation == self._generation:
                self.page_state = PageState(page_number=page_number, error=FETCH_ERROR_MESSAGE)
                self._notify()
            raise
        if generation != self._generation:
            logger.debug("Discarding stale load for page %d", page_number)
            return
        self.page_state = page_state
        self._notify()

    def visible_records(self) -> List[DetailRecord]:
        return apply_filter(self.page_state.items, self.filter_state)

    def view_model(self) -> CatalogViewModel:
        return CatalogViewModel(
            visible_items=tuple(
                CatalogItemView(record=r, is_favorite=self.favorites.contains(r.id))
                for r in self.visible_records()
            ),
            is_loading=self.page_state.is_loading,
            error=self.page_state.error,
            page_number=self.page_number,
            category_catalog=self.category_catalog,
            selected_categories=self.filter_state.selected_categories,
            search_term=self.filter_state.search_term,
            selected_detail_record=self.selected_detail_record,
            favorite_count=len(self.favorites),
        )
