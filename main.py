"""
Pokédex Catalog Viewer
Main entry point for the application.
"""

import logging
import os

import customtkinter as ctk

from app import AsyncRunner, CatalogApp
from catalog_client import CatalogClient
from coordinator import ViewStateCoordinator
from favorites import FavoritesStore
from page_loader import PageLoader


def main():
    """Main entry point for the catalog viewer."""
    logging.basicConfig(
        level=os.environ.get("POKEDEX_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = CatalogClient()
    coordinator = ViewStateCoordinator(
        client=client,
        loader=PageLoader(client),
        favorites=FavoritesStore(),
    )

    root = ctk.CTk()
    app = CatalogApp(root, coordinator, AsyncRunner())
    app.start()

    root.mainloop()


if __name__ == "__main__":
    main()
