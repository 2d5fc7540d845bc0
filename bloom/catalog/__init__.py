from bloom.catalog.loader import (
    Catalog,
    CatalogValidationError,
    get_catalog,
    load_catalog,
    reload_catalog,
)

__all__ = [
    "Catalog",
    "CatalogValidationError",
    "get_catalog",
    "load_catalog",
    "reload_catalog",
]
