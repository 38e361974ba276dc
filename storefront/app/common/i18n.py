"""Message lookup for shopper-facing texts.

Catalogs come from the TRANSLATIONS config mapping; anything not found is
returned as given so the English source strings double as the default.
"""

from __future__ import annotations

from flask import current_app


def translate(domain: str, msgid: str) -> str:
    catalog = (current_app.config.get("TRANSLATIONS") or {}).get(domain) or {}
    return catalog.get(msgid, msgid)
