"""Dialog windows for the catalog viewer."""

from typing import Callable

import customtkinter as ctk

from constants import COLORS, DETAIL_SPRITE_SIZE
from models import DetailRecord
from sprites import SpriteManager, label_setter


class DetailDialog:
    """Modal showing the sprite, types, stats and abilities of one Pokemon."""

    def __init__(
        self,
        parent: ctk.CTk,
        record: DetailRecord,
        sprite_manager: SpriteManager,
        on_close: Callable[[], None],
    ):
        """
        Initialize the detail dialog.

        Args:
            parent: Parent window
            record: The Pokemon to show
            sprite_manager: Shared sprite loader
            on_close: Called once when the dialog is dismissed
        """
        self.dialog = ctk.CTkToplevel(parent)
        self.dialog.title(record.name.title())
        self.dialog.geometry("420x640")
        self.dialog.transient(parent)
        self.dialog.grab_set()

        self.record = record
        self.sprite_manager = sprite_manager
        self.on_close = on_close
        self._closed = False

        self._setup_ui()
        self._center_dialog(parent)

        self.dialog.protocol("WM_DELETE_WINDOW", self.close)
        self.dialog.bind("<Escape>", lambda e: self.close())
        self.dialog.focus()

    def _setup_ui(self) -> None:
        """Setup the dialog UI elements."""
        main_frame = ctk.CTkScrollableFrame(self.dialog)
        main_frame.pack(fill="both", expand=True, padx=15, pady=15)

        header = ctk.CTkFrame(main_frame, fg_color="transparent")
        header.pack(fill="x")
        ctk.CTkLabel(
            header,
            text=f"{self.record.name.title()}  #{self.record.id}",
            font=ctk.CTkFont(size=22, weight="bold")
        ).pack(side="left")
        ctk.CTkButton(header, text="✕", width=32, command=self.close).pack(side="right")

        sprite_label = ctk.CTkLabel(
            main_frame, text="", image=self.sprite_manager.placeholder(DETAIL_SPRITE_SIZE)
        )
        sprite_label.pack(pady=10)
        self.sprite_manager.request(
            self.record.sprite_url,
            DETAIL_SPRITE_SIZE,
            label_setter(sprite_label),
        )

        self._section_title(main_frame, "Types")
        self._chips(main_frame, self.record.category_names)

        self._section_title(main_frame, "Stats")
        for stat in self.record.stats:
            row = ctk.CTkFrame(main_frame, fg_color="transparent")
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(row, text=f"{stat.stat_name}:", width=110, anchor="w").pack(side="left")
            bar = ctk.CTkProgressBar(
                row,
                progress_color=COLORS["stat_bar"],
                fg_color=COLORS["stat_track"],
            )
            bar.set(stat.fraction)
            bar.pack(side="left", fill="x", expand=True, padx=6)
            ctk.CTkLabel(row, text=str(stat.base_value), width=32).pack(side="left")

        self._section_title(main_frame, "Abilities")
        self._chips(main_frame, [a.ability_name for a in self.record.abilities])

    def _section_title(self, parent, text: str) -> None:
        ctk.CTkLabel(
            parent, text=text, font=ctk.CTkFont(size=15, weight="bold"), anchor="w"
        ).pack(fill="x", pady=(12, 4))

    def _chips(self, parent, names) -> None:
        frame = ctk.CTkFrame(parent, fg_color="transparent")
        frame.pack(fill="x")
        for name in names:
            ctk.CTkLabel(
                frame, text=name, corner_radius=12, fg_color=COLORS["chip"], padx=8
            ).pack(side="left", padx=3)

    def _center_dialog(self, parent: ctk.CTk) -> None:
        """Center the dialog on the parent window."""
        self.dialog.update_idletasks()
        parent.update_idletasks()
        x = parent.winfo_x() + (parent.winfo_width() - self.dialog.winfo_width()) // 2
        y = parent.winfo_y() + (parent.winfo_height() - self.dialog.winfo_height()) // 2
        self.dialog.geometry(f"+{x}+{y}")

    def close(self, notify: bool = True) -> None:
        """Dismiss the dialog, telling the owner unless it asked for the close."""
        if self._closed:
            return
        self._closed = True
        if self.dialog.winfo_exists():
            self.dialog.destroy()
        if notify:
            self.on_close()
