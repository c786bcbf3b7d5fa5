"""Template matcher: highest precision, narrow recall."""

import re
from dataclasses import dataclass

from intent_router.core.errors import CatalogError
from intent_router.core.logging import get_logger

from .catalog import IntentCatalog
from .types import ClassificationResult

_log = get_logger("intent.pattern")

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class CompiledPattern:
    intent: str
    template: str
    regex: re.Pattern


def compile_template(template: str, placeholders: dict[str, str]) -> re.Pattern:
    """Turn ``"who owns {company}"`` into ``who\\ owns\\ \\w+``.

    Literal text is escaped; each ``{name}`` becomes its wildcard.
    """
    parts: list[str] = []
    pos = 0
    for m in _PLACEHOLDER_RE.finditer(template):
        parts.append(re.escape(template[pos:m.start()]))
        name = m.group(1)
        if name not in placeholders:
            raise CatalogError(f"unknown placeholder {{{name}}} in {template!r}")
        parts.append(f"(?:{placeholders[name]})")
        pos = m.end()
    parts.append(re.escape(template[pos:]))
    return re.compile("".join(parts))


class PatternMatcher:
    """First matching template wins, in catalog order."""

    method = "pattern"

    def __init__(self, catalog: IntentCatalog, confidence: float = 0.95):
        self.catalog = catalog
        self.confidence = confidence
        self._compiled: list[CompiledPattern] = [
            CompiledPattern(t.intent, p, compile_template(p, catalog.placeholders))
            for t in catalog.templates
            for p in t.patterns
        ]

    @property
    def pattern_count(self) -> int:
        return len(self._compiled)

    def match_pattern(self, query: str) -> ClassificationResult:
        text = query.lower().strip()
        if text:
            for compiled in self._compiled:
                if compiled.regex.search(text):
                    _log.debug("Pattern hit", intent=compiled.intent, pattern=compiled.template)
                    return ClassificationResult(
                        intent=compiled.intent,
                        confidence=self.confidence,
                        method=self.method,
                        matched_pattern=compiled.template,
                    )
        return ClassificationResult.unknown(self.method)

    async def classify(self, query: str) -> ClassificationResult:
        return self.match_pattern(query)
