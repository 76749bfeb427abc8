"""Service catalog with base prices, per-area prices and bilingual names."""

import logging
from typing import Optional

from fieldops.schemas.quote_schema import ServiceCatalogEntry

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "Residential Cleaning": {
        "name_es": "Limpieza Residencial",
        "base_price": 80.0,
        "price_per_area_unit": 0.08,
    },
    "Commercial Cleaning": {
        "name_es": "Limpieza Comercial",
        "base_price": 150.0,
        "price_per_area_unit": 0.10,
    },
    "Deep Cleaning": {
        "name_es": "Limpieza Profunda",
        "base_price": 150.0,
        "price_per_area_unit": 0.12,
    },
    "Post-Construction Cleaning": {
        "name_es": "Limpieza Post-Construcción",
        "base_price": 250.0,
        "price_per_area_unit": 0.20,
    },
    "Window Cleaning": {
        "name_es": "Limpieza de Ventanas",
        "base_price": 60.0,
        "price_per_area_unit": 0.05,
    },
    "Carpet Cleaning": {
        "name_es": "Limpieza de Alfombras",
        "base_price": 90.0,
        "price_per_area_unit": 0.15,
    },
    "Office Cleaning": {
        "name_es": "Limpieza de Oficinas",
        "base_price": 300.0,
        "price_per_area_unit": 0.09,
    },
}

SERVICE_ALIASES: dict[str, str] = {
    "house": "Residential Cleaning", "home": "Residential Cleaning",
    "apartment": "Residential Cleaning", "regular": "Residential Cleaning",
    "business": "Commercial Cleaning", "store": "Commercial Cleaning",
    "deep": "Deep Cleaning", "move out": "Deep Cleaning", "move-out": "Deep Cleaning",
    "construction": "Post-Construction Cleaning", "renovation": "Post-Construction Cleaning",
    "window": "Window Cleaning", "glass": "Window Cleaning",
    "carpet": "Carpet Cleaning", "rug": "Carpet Cleaning", "upholstery": "Carpet Cleaning",
    "office": "Office Cleaning", "workspace": "Office Cleaning",
}


def get_catalog_entry(service_type: str) -> Optional[ServiceCatalogEntry]:
    """Look up pricing reference data for an exact service name (case-insensitive)."""
    normalized = service_type.lower().strip()
    for name, info in SERVICE_CATALOG.items():
        if name.lower() == normalized:
            return ServiceCatalogEntry(
                service_type=name,
                name_en=name,
                name_es=info["name_es"],
                base_price=info["base_price"],
                price_per_area_unit=info["price_per_area_unit"],
            )
    return None


def match_service(query: str) -> Optional[str]:
    """Match free text to a catalog service name. Returns None if no match."""
    normalized = query.lower().strip()
    if not normalized:
        return None
    for name in SERVICE_CATALOG:
        if name.lower() == normalized:
            return name
    for alias, name in SERVICE_ALIASES.items():
        if alias in normalized:
            return name
    for name in SERVICE_CATALOG:
        if normalized in name.lower():
            return name
    return None


def resolve_service(query: str) -> Optional[ServiceCatalogEntry]:
    """Catalog entry for an exact service name, falling back to alias matching."""
    entry = get_catalog_entry(query)
    if entry is None:
        matched = match_service(query)
        entry = get_catalog_entry(matched) if matched else None
    return entry
