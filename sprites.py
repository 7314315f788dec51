"""Sprite loading with memory and disk caches for the catalog window."""

import hashlib
import io
import logging
import os
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple

import customtkinter as ctk
import requests
from PIL import Image

from constants import (
    CACHE_REFRESH_DAYS, MAX_CONCURRENT_SPRITE_LOADS, REQUEST_TIMEOUT, SPRITE_CACHE_DIR, USER_AGENT
)

logger = logging.getLogger(__name__)

SpriteCallback = Callable[[ctk.CTkImage], None]


class SpriteManager:
    """Loads sprites in background threads and hands them back on the Tk thread."""

    def __init__(self, root: ctk.CTk, cache_dir: str = SPRITE_CACHE_DIR):
        self.root = root
        self.cache_dir = cache_dir
        self.cache: Dict[Tuple[str, Tuple[int, int]], ctk.CTkImage] = {}
        self.load_queue: Deque[Tuple[str, Tuple[int, int], SpriteCallback]] = deque()
        self.active_loads = 0
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._placeholders: Dict[Tuple[int, int], ctk.CTkImage] = {}

        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            logger.warning("Failed to initialize sprite cache: %s", e)

    def placeholder(self, size: Tuple[int, int]) -> ctk.CTkImage:
        """Get a grey placeholder shown while a sprite loads."""
        if size not in self._placeholders:
            img = Image.new("RGB", size, color=(128, 128, 128))
            self._placeholders[size] = ctk.CTkImage(light_image=img, size=size)
        return self._placeholders[size]

    def _get_cache_path(self, url: str) -> str:
        digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
        return os.path.join(self.cache_dir, f"{digest}.png")

    def _is_cache_valid(self, cache_path: str) -> bool:
        """Check if a cached sprite exists and is not expired."""
        if not os.path.exists(cache_path):
            return False
        days_old = (time.time() - os.path.getmtime(cache_path)) / (24 * 60 * 60)
        return days_old < CACHE_REFRESH_DAYS

    def _read_image(self, url: str) -> Image.Image:
        cache_path = self._get_cache_path(url)
        if self._is_cache_valid(cache_path):
            try:
                with Image.open(cache_path) as cached:
                    return cached.copy()
            except OSError as e:
                logger.warning("Discarding unreadable cached sprite %s: %s", cache_path, e)

        resp = self._session.get(url, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        image = Image.open(io.BytesIO(resp.content))
        image.load()
        try:
            image.save(cache_path, "PNG")
        except OSError as e:
            logger.warning("Failed to save sprite %s to cache: %s", url, e)
        return image

    def request(self, url: Optional[str], size: Tuple[int, int], callback: SpriteCallback) -> None:
        """Ask for a sprite; ``callback`` runs on the Tk thread once it is ready."""
        if not url:
            return
        key = (url, size)
        if key in self.cache:
            callback(self.cache[key])
            return
        self.load_queue.append((url, size, callback))
        self._process_queue()

    def cancel_pending_loads(self) -> None:
        """Drop queued loads, e.g. when the grid is rebuilt."""
        self.load_queue.clear()

    def _process_queue(self) -> None:
        while self.load_queue and self.active_loads < MAX_CONCURRENT_SPRITE_LOADS:
            url, size, callback = self.load_queue.popleft()
            self.active_loads += 1
            threading.Thread(
                target=self._load_sprite_thread,
                args=(url, size, callback),
                daemon=True,
            ).start()

    def _load_sprite_thread(self, url: str, size: Tuple[int, int], callback: SpriteCallback) -> None:
        """Load a sprite in a background thread."""
        try:
            image = self._read_image(url).resize(size, Image.Resampling.LANCZOS)
            self.root.after(0, lambda: self._deliver(url, size, image, callback))
        except (requests.RequestException, OSError) as e:
            logger.warning("Failed to load sprite %s: %s", url, e)
        finally:
            self.root.after(0, self._load_finished)

    def _deliver(self, url: str, size: Tuple[int, int], image: Image.Image, callback: SpriteCallback) -> None:
        ctk_image = ctk.CTkImage(light_image=image, size=size)
        self.cache[(url, size)] = ctk_image
        callback(ctk_image)

    def _load_finished(self) -> None:
        self.active_loads -= 1
        self._process_queue()


def label_setter(label: ctk.CTkLabel) -> SpriteCallback:
    """Callback that puts a loaded sprite on ``label`` if it still exists."""
    def _apply(image: ctk.CTkImage) -> None:
        if label.winfo_exists():
            label.configure(image=image)
    return _apply
