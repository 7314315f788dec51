"""Application constants and configuration."""

import os

# API configuration
API_BASE_URL = os.environ.get("POKEDEX_API_BASE_URL", "https://pokeapi.co/api/v2").rstrip("/")
API_POKEMON_URL = f"{API_BASE_URL}/pokemon"
API_TYPE_URL = f"{API_BASE_URL}/type"
REQUEST_TIMEOUT = 10  # seconds, applied to every request

# User agent for API requests
USER_AGENT = "PokedexCatalogViewer/1.0"

# Catalog settings
PAGE_SIZE = 12
MAX_STAT_VALUE = 255
FETCH_ERROR_MESSAGE = "Failed to fetch Pokemon"

# Persistence
FAVORITES_FILE = os.environ.get("POKEDEX_FAVORITES_FILE", "pokedex_favorites.json")

# Caching configuration
SPRITE_CACHE_DIR = ".sprite_cache"
CACHE_REFRESH_DAYS = 7  # Refresh sprites weekly
MAX_CONCURRENT_SPRITE_LOADS = 6

# UI Configuration
DEFAULT_WINDOW_SIZE = "1200x860"
HEADER_HEIGHT = 80
CONTROL_FRAME_HEIGHT = 60
PAGINATION_FRAME_HEIGHT = 50
GRID_COLUMNS = 4
SPRITE_SIZE = (96, 96)
DETAIL_SPRITE_SIZE = (192, 192)

# Colors
COLORS = {
    "favorite": ("#ef4444", "#dc2626"),
    "not_favorite": ("gray60", "gray40"),
    "chip": ("gray80", "gray25"),
    "chip_selected": ("#3B82F6", "#2563EB"),
    "error": ("#b91c1c", "#f87171"),
    "stat_bar": ("#3B82F6", "#3B82F6"),
    "stat_track": ("gray80", "gray30"),
    "card_default": ("gray90", "gray23"),
}
