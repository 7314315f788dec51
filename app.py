"""Catalog window: draws view models and forwards user intents."""

import asyncio
import concurrent.futures
import logging
import threading
from tkinter import messagebox
from typing import Callable, Coroutine, Dict, Optional, Tuple

import customtkinter as ctk

from constants import (
    COLORS, CONTROL_FRAME_HEIGHT, DEFAULT_WINDOW_SIZE, GRID_COLUMNS,
    HEADER_HEIGHT, PAGINATION_FRAME_HEIGHT, SPRITE_SIZE
)
from coordinator import ViewStateCoordinator
from dialogs import DetailDialog
from models import CatalogItemView, CatalogViewModel, DetailRecord
from sprites import SpriteManager, label_setter

logger = logging.getLogger(__name__)


class AsyncRunner:
    """Runs an asyncio event loop in a daemon thread next to the Tk main loop."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="catalog-loop", daemon=True)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self) -> None:
        self._thread.start()

    def call(self, func: Callable, *args) -> None:
        """Run a plain callable on the loop thread."""
        self.loop.call_soon_threadsafe(func, *args)

    def submit(self, coro: Coroutine):
        """Schedule a coroutine on the loop thread and return its future."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self, timeout: float = 5.0) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout)


class CatalogApp:
    """Main window with search, category chips, card grid and pagination."""

    def __init__(self, root: ctk.CTk, coordinator: ViewStateCoordinator, runner: AsyncRunner):
        self.root = root
        self.root.title("Pokédex")
        self.root.geometry(DEFAULT_WINDOW_SIZE)

        self.coordinator = coordinator
        self.runner = runner
        self.sprite_manager = SpriteManager(root)

        self._grid_key: Optional[Tuple] = None
        self._chip_buttons: Dict[str, ctk.CTkButton] = {}
        self._chip_catalog: Tuple[str, ...] = ()
        self._detail_dialog: Optional[DetailDialog] = None
        self._closing = False

        self._setup_ui()
        self.root.protocol("WM_DELETE_WINDOW", self.shutdown)
        self.root.bind("<Control-f>", lambda e: self.search_entry.focus())
        self.root.bind("<Control-r>", lambda e: self._send(self.coordinator.retry))

        # The coordinator calls listeners on the loop thread
        self.coordinator.subscribe(self._on_view_model)

    def start(self) -> None:
        """Start the event loop thread and the first load."""
        self.runner.start()
        future = self.runner.submit(self.coordinator.start())
        future.add_done_callback(self._on_start_done)

    def _on_start_done(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Catalog failed to start", exc_info=error)

    def _send(self, intent: Callable, *args) -> None:
        self.runner.call(intent, *args)

    def _on_view_model(self, view: CatalogViewModel) -> None:
        if self._closing:
            return
        self.root.after(0, lambda: self._render(view))

    def _setup_ui(self) -> None:
        """Setup the main UI components."""
        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self._create_header()
        self._create_controls()
        self._create_main_area()
        self._create_pagination_controls()

    def _create_header(self) -> None:
        header_frame = ctk.CTkFrame(self.root, height=HEADER_HEIGHT, corner_radius=10)
        header_frame.pack(fill="x", padx=20, pady=10)
        header_frame.pack_propagate(False)

        ctk.CTkLabel(
            header_frame,
            text="Pokédex",
            font=ctk.CTkFont(size=28, weight="bold")
        ).pack(side="left", padx=20, pady=20)

        self.favorites_label = ctk.CTkLabel(
            header_frame,
            text="♥ 0",
            font=ctk.CTkFont(size=16, weight="bold"),
            text_color=COLORS["favorite"]
        )
        self.favorites_label.pack(side="right", padx=20)

    def _create_controls(self) -> None:
        """Create the search entry and the category filter chips."""
        controls_frame = ctk.CTkFrame(self.root, height=CONTROL_FRAME_HEIGHT, corner_radius=10)
        controls_frame.pack(fill="x", padx=20, pady=5)

        self.search_entry = ctk.CTkEntry(
            controls_frame,
            placeholder_text="Search Pokemon...",
            width=280
        )
        self.search_entry.pack(side="left", padx=15, pady=12)
        self.search_entry.bind(
            "<KeyRelease>", lambda e: self._send(self.coordinator.set_search_term, self.search_entry.get())
        )

        self.chips_frame = ctk.CTkScrollableFrame(
            controls_frame, orientation="horizontal", height=36, fg_color="transparent"
        )
        self.chips_frame.pack(side="left", fill="x", expand=True, padx=10, pady=6)

    def _create_main_area(self) -> None:
        """Create the scrollable area holding the card grid."""
        self.main_frame = ctk.CTkFrame(self.root, corner_radius=10)
        self.main_frame.pack(fill="both", expand=True, padx=20, pady=10)

        self.main_scrollable = ctk.CTkScrollableFrame(self.main_frame, corner_radius=10)
        self.main_scrollable.pack(fill="both", expand=True, padx=10, pady=10)
        for column in range(GRID_COLUMNS):
            self.main_scrollable.grid_columnconfigure(column, weight=1)

    def _create_pagination_controls(self) -> None:
        self.pagination_frame = ctk.CTkFrame(self.root, height=PAGINATION_FRAME_HEIGHT, corner_radius=10)
        self.pagination_frame.pack(fill="x", padx=20, pady=(0, 10))
        self.pagination_frame.pack_propagate(False)

        self.prev_button = ctk.CTkButton(
            self.pagination_frame,
            text="◄ Previous",
            command=lambda: self._send(self.coordinator.previous_page),
            width=120,
            height=30
        )
        self.prev_button.pack(side="left", padx=20, pady=10)

        self.page_info_label = ctk.CTkLabel(
            self.pagination_frame,
            text="Page 1",
            font=ctk.CTkFont(size=14, weight="bold")
        )
        self.page_info_label.pack(side="left", expand=True)

        self.next_button = ctk.CTkButton(
            self.pagination_frame,
            text="Next ►",
            command=lambda: self._send(self.coordinator.next_page),
            width=120,
            height=30
        )
        self.next_button.pack(side="right", padx=20, pady=10)

    def _render(self, view: CatalogViewModel) -> None:
        """Bring every widget in line with the latest view model."""
        if self._closing:
            return
        self.favorites_label.configure(text=f"♥ {view.favorite_count}")
        self._render_chips(view)
        self._render_grid(view)
        self._render_pagination(view)
        self._render_detail(view)

    def _render_chips(self, view: CatalogViewModel) -> None:
        if view.category_catalog != self._chip_catalog:
            for widget in self.chips_frame.winfo_children():
                widget.destroy()
            self._chip_buttons = {}
            for category in view.category_catalog:
                button = ctk.CTkButton(
                    self.chips_frame,
                    text=category,
                    width=70,
                    height=26,
                    corner_radius=13,
                    command=lambda c=category: self._send(self.coordinator.toggle_category, c)
                )
                button.pack(side="left", padx=3)
                self._chip_buttons[category] = button
            self._chip_catalog = view.category_catalog

        for category, button in self._chip_buttons.items():
            selected = category in view.selected_categories
            button.configure(fg_color=COLORS["chip_selected"] if selected else COLORS["chip"])

    def _render_grid(self, view: CatalogViewModel) -> None:
        grid_key = (
            view.is_loading,
            view.error,
            tuple((item.record.id, item.is_favorite) for item in view.visible_items),
        )
        if grid_key == self._grid_key:
            return
        self._grid_key = grid_key

        for widget in self.main_scrollable.winfo_children():
            widget.destroy()
        self.sprite_manager.cancel_pending_loads()

        if view.is_loading:
            self._show_message("🔄 Loading Pokémon...")
        elif view.error:
            self._show_error(view.error)
        elif not view.visible_items:
            self._show_message("No Pokémon on this page match the current filters.")
        else:
            for index, item in enumerate(view.visible_items):
                self._create_card(item, index // GRID_COLUMNS, index % GRID_COLUMNS)

    def _show_message(self, text: str) -> None:
        ctk.CTkLabel(
            self.main_scrollable,
            text=text,
            font=ctk.CTkFont(size=18, weight="bold")
        ).grid(row=0, column=0, columnspan=GRID_COLUMNS, pady=60)

    def _show_error(self, error: str) -> None:
        """Replace the grid with the error and a retry button."""
        ctk.CTkLabel(
            self.main_scrollable,
            text=error,
            text_color=COLORS["error"],
            font=ctk.CTkFont(size=18, weight="bold")
        ).grid(row=0, column=0, columnspan=GRID_COLUMNS, pady=(60, 10))
        ctk.CTkButton(
            self.main_scrollable,
            text="Retry",
            command=lambda: self._send(self.coordinator.retry)
        ).grid(row=1, column=0, columnspan=GRID_COLUMNS, pady=10)

    def _create_card(self, item: CatalogItemView, row: int, column: int) -> None:
        """Create one Pokemon card."""
        record = item.record
        card = ctk.CTkFrame(self.main_scrollable, corner_radius=10, fg_color=COLORS["card_default"])
        card.grid(row=row, column=column, sticky="nsew", padx=8, pady=8)

        ctk.CTkButton(
            card,
            text="♥" if item.is_favorite else "♡",
            width=32,
            height=28,
            fg_color="transparent",
            text_color=COLORS["favorite"] if item.is_favorite else COLORS["not_favorite"],
            font=ctk.CTkFont(size=20),
            command=lambda r=record: self._send(self._toggle_favorite, r)
        ).pack(anchor="ne", padx=6, pady=(6, 0))

        sprite_label = ctk.CTkLabel(card, text="", image=self.sprite_manager.placeholder(SPRITE_SIZE))
        sprite_label.pack()
        self.sprite_manager.request(record.sprite_url, SPRITE_SIZE, label_setter(sprite_label))

        name_label = ctk.CTkLabel(card, text=record.name.title(), font=ctk.CTkFont(size=16, weight="bold"))
        name_label.pack(pady=(4, 2))

        chips = ctk.CTkFrame(card, fg_color="transparent")
        chips.pack(pady=(0, 10))
        for category in record.category_names:
            ctk.CTkLabel(chips, text=category, corner_radius=12, fg_color=COLORS["chip"], padx=8).pack(side="left", padx=2)

        for widget in (card, sprite_label, name_label):
            widget.bind("<Button-1>", lambda e, r=record: self._send(self.coordinator.select_item, r))

    def _toggle_favorite(self, record: DetailRecord) -> None:
        """Runs on the loop thread; reports a failed save back on the Tk thread."""
        try:
            self.coordinator.toggle_favorite(record)
        except OSError as e:
            self.root.after(0, lambda: messagebox.showerror("Error", f"Could not save favorites:\n{e}"))

    def _render_pagination(self, view: CatalogViewModel) -> None:
        self.page_info_label.configure(text=f"Page {view.page_number}")
        self.prev_button.configure(state="normal" if view.can_go_back else "disabled")

    def _render_detail(self, view: CatalogViewModel) -> None:
        record = view.selected_detail_record
        current = self._detail_dialog
        if current is not None and (record is None or current.record != record):
            current.close(notify=False)
            self._detail_dialog = None
        if record is not None and self._detail_dialog is None:
            self._detail_dialog = DetailDialog(
                self.root,
                record,
                self.sprite_manager,
                on_close=self._on_detail_closed,
            )

    def _on_detail_closed(self) -> None:
        self._detail_dialog = None
        self._send(self.coordinator.close_detail)

    def shutdown(self) -> None:
        """Wait for in-flight loads, stop the loop and close the window."""
        self._closing = True
        self._send(self.coordinator.unsubscribe, self._on_view_model)
        try:
            self.runner.submit(self.coordinator.aclose()).result(timeout=5)
        except concurrent.futures.TimeoutError as e:
            logger.warning("Pending loads did not finish before shutdown: %s", e)
        self.runner.stop()
        self.coordinator.client.close()
        self.root.destroy()
