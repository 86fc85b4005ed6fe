# routine_bot/catalog.py
"""
Product catalog source.

The catalog is a static JSON document shaped like
``{"products": [{id, name, brand, category, image, description}, ...]}``
served either over HTTP(S) or from a local file. It is read fresh on every
call; nothing is cached between category changes.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, List

import requests

from .errors import CatalogError
from .models import Product
from .utils.helpers import unique
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("catalog")

TIMEOUT = 10


class CatalogSource:
    def __init__(self, location: str, timeout: float = TIMEOUT) -> None:
        self.location = location
        self.timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.location.startswith(("http://", "https://"))

    def load(self) -> List[Product]:
        """Fetch and decode the whole catalog. Raises CatalogError on any failure."""
        start = time.time()
        data = self._fetch_remote() if self.is_remote else self._read_local()

        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise CatalogError(f"Catalog at {self.location} has no 'products' list")

        # Fields are used as-is; entries that are not objects are skipped.
        items = [Product.from_dict(p) for p in products if isinstance(p, dict)]
        smart_log.catalog_loaded(self.location, len(items), int((time.time() - start) * 1000))
        return items

    def load_category(self, category: str) -> List[Product]:
        if not category:
            return []
        return filter_by_category(self.load(), category)

    def categories(self) -> List[str]:
        return unique([p.category for p in self.load() if p.category])

    def _fetch_remote(self) -> Any:
        try:
            response = requests.get(self.location, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            log.error(f"CATALOG_FETCH_TIMEOUT | url={self.location} | timeout={self.timeout}s")
            raise CatalogError(f"Timed out fetching catalog from {self.location}") from e
        except requests.exceptions.RequestException as e:
            log.error(f"CATALOG_FETCH_ERROR | url={self.location} | error={e}")
            raise CatalogError(f"Could not fetch catalog from {self.location}: {e}") from e
        except ValueError as e:
            log.error(f"CATALOG_DECODE_ERROR | url={self.location} | error={e}")
            raise CatalogError(f"Catalog at {self.location} is not valid JSON") from e

    def _read_local(self) -> Any:
        path = Path(self.location)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            log.error(f"CATALOG_READ_ERROR | file={path} | error=File not found")
            raise CatalogError(f"Catalog file not found: {path}") from e
        except json.JSONDecodeError as e:
            log.error(f"CATALOG_READ_ERROR | file={path} | error=Invalid JSON: {e}")
            raise CatalogError(f"Catalog file is not valid JSON: {path}") from e
        except OSError as e:
            log.error(f"CATALOG_READ_ERROR | file={path} | error={e}")
            raise CatalogError(f"Could not read catalog file {path}: {e}") from e


def filter_by_category(products: List[Product], category: str) -> List[Product]:
    """Exact category match, catalog order preserved."""
    return [p for p in products if p.category == category]
