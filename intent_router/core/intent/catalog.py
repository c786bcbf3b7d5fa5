"""Intent template catalog loading.

The catalog is a JSON document::

    {
      "version": 1,
      "placeholders": {"company": "\\\\w+", "details": ".+"},
      "intents": [
        {"intent": "...", "canonical": "...", "patterns": [...], "examples": [...]}
      ]
    }

Entry order is the pattern matcher's priority order.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from intent_router.core.errors import CatalogError
from intent_router.core.logging import get_logger

from .types import UNKNOWN_INTENT, IntentTemplate

_log = get_logger("intent.catalog")

DEFAULT_PLACEHOLDERS: dict[str, str] = {
    "company": r"\w+",
    "product": r"\w+",
    "date": r"\w+",
    "month": r"\w+",
    "name": r"\w+",
    "details": r".+",
}


@dataclass(frozen=True)
class IntentCatalog:
    templates: tuple[IntentTemplate, ...]
    placeholders: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PLACEHOLDERS))
    source: str = "<memory>"

    @property
    def intents(self) -> list[str]:
        return [t.intent for t in self.templates]

    def get(self, intent: str) -> IntentTemplate | None:
        for template in self.templates:
            if template.intent == intent:
                return template
        return None

    def __len__(self) -> int:
        return len(self.templates)


def _require_str_list(value: Any, what: str, source: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise CatalogError(f"{what} must be a list of non-empty strings", path=source)
    return tuple(v.strip().lower() for v in value)


def parse_catalog(data: Any, source: str = "<memory>") -> IntentCatalog:
    """Validate a decoded catalog document and build the immutable catalog."""
    if not isinstance(data, dict) or not isinstance(data.get("intents"), list):
        raise CatalogError("catalog must be an object with an 'intents' list", path=source)

    placeholders = dict(DEFAULT_PLACEHOLDERS)
    extra = data.get("placeholders", {})
    if not isinstance(extra, dict):
        raise CatalogError("'placeholders' must be an object", path=source)
    for name, pattern in extra.items():
        try:
            re.compile(pattern)
        except (re.error, TypeError) as e:
            raise CatalogError(f"invalid placeholder regex for {name!r}: {e}", path=source) from e
        placeholders[name] = pattern

    templates: list[IntentTemplate] = []
    seen: set[str] = set()
    for i, entry in enumerate(data["intents"]):
        if not isinstance(entry, dict):
            raise CatalogError(f"intent entry #{i} is not an object", path=source)
        intent = entry.get("intent")
        if not isinstance(intent, str) or not intent.strip():
            raise CatalogError(f"intent entry #{i} has no intent label", path=source)
        intent = intent.strip()
        if intent == UNKNOWN_INTENT:
            raise CatalogError(f"{UNKNOWN_INTENT!r} is reserved", path=source)
        if intent in seen:
            raise CatalogError(f"duplicate intent {intent!r}", path=source)
        seen.add(intent)

        canonical = entry.get("canonical")
        if not isinstance(canonical, str) or not canonical.strip():
            raise CatalogError(f"intent {intent!r} has no canonical phrase", path=source)

        patterns = _require_str_list(entry.get("patterns", []), f"{intent}.patterns", source)
        examples = _require_str_list(entry.get("examples", []), f"{intent}.examples", source)
        templates.append(IntentTemplate(
            intent=intent,
            patterns=patterns,
            canonical=canonical.strip().lower(),
            examples=examples,
        ))

    if not templates:
        raise CatalogError("catalog has no intents", path=source)

    return IntentCatalog(templates=tuple(templates), placeholders=placeholders, source=source)


def load_catalog(path: str | Path) -> IntentCatalog:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"cannot read catalog: {e}", path=str(path)) from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CatalogError(f"catalog is not valid JSON: {e}", path=str(path)) from e

    catalog = parse_catalog(data, source=str(path))
    _log.info(
        "Catalog loaded",
        path=str(path),
        intents=len(catalog),
        patterns=sum(len(t.patterns) for t in catalog.templates),
    )
    return catalog
