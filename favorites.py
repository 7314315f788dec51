"""Persisted favorites store."""

import json
import logging
import os
from typing import Dict, List, Optional

from constants import FAVORITES_FILE
from errors import DecodeError
from models import DetailRecord

logger = logging.getLogger(__name__)


class FavoritesStore:
    """
    Durable set of favorited Pokemon, keyed by id.

    The whole set is written to a JSON file on every toggle, so a toggle that
    has returned survives an unclean shutdown.
    """

    def __init__(self, path: str = FAVORITES_FILE):
        self.path = path
        self._favorites: Dict[int, DetailRecord] = {}

    def __len__(self) -> int:
        return len(self._favorites)

    def __contains__(self, record_id: int) -> bool:
        return record_id in self._favorites

    def contains(self, record_id: int) -> bool:
        return record_id in self._favorites

    @property
    def ids(self) -> frozenset:
        return frozenset(self._favorites)

    @property
    def records(self) -> List[DetailRecord]:
        return list(self._favorites.values())

    def load(self) -> Dict[int, DetailRecord]:
        """Load favorites from disk, replacing the in-memory set.

        A missing file means no favorites yet. Malformed or unreadable content
        raises DecodeError and leaves the in-memory set untouched.
        """
        if not os.path.exists(self.path):
            self._favorites = {}
            return dict(self._favorites)
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                saved_data = json.load(f)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Favorites file {self.path} is not valid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"Favorites file {self.path} is not UTF-8: {e}") from e
        except OSError as e:
            raise DecodeError(f"Favorites file {self.path} could not be read: {e}") from e
        if not isinstance(saved_data, list):
            raise DecodeError(f"Favorites file {self.path} should hold a JSON array")

        loaded = {}
        for entry in saved_data:
            record = DetailRecord.from_dict(entry)
            loaded[record.id] = record
        self._favorites = loaded
        logger.info("Loaded %d favorites from %s", len(loaded), self.path)
        return dict(loaded)

    def load_or_empty(self) -> Dict[int, DetailRecord]:
        """Load favorites, falling back to an empty set when the file is corrupt."""
        try:
            return self.load()
        except DecodeError as e:
            logger.warning("Ignoring unreadable favorites: %s", e)
            self._favorites = {}
            return {}

    def save(self) -> None:
        """Write the entire set, replacing whatever was stored before."""
        data = [record.to_dict() for record in self._favorites.values()]
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def toggle(self, record: DetailRecord) -> bool:
        """Flip membership of ``record`` and persist. Returns the new membership."""
        previous: Optional[DetailRecord] = self._favorites.pop(record.id, None)
        if previous is None:
            self._favorites[record.id] = record
        try:
            self.save()
        except OSError:
            # keep memory in line with what is on disk
            if previous is None:
                del self._favorites[record.id]
            else:
                self._favorites[record.id] = previous
            logger.exception("Error saving favorites to %s", self.path)
            raise
        return previous is None
