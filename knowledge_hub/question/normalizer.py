"""Question text normalization.

The normalizer makes a single left-to-right pass over the original text so
every recorded change carries its offset in the original string. Replacement
tables are chosen so that normalized output never matches again, which
keeps normalization idempotent.
"""

import logging
import re
from typing import Any

from pydantic import BaseModel

from .lexicon import ABBREVIATIONS, MISSPELLINGS
from .models import ChangeType, NormalizationChange, NormalizationResult

logger = logging.getLogger(__name__)

_TERMINAL_PUNCTUATION = "?!.,;:"


class NormalizerConfig(BaseModel):
    """Configuration for the question normalizer."""

    enable_spell_check: bool = True


class QuestionNormalizer:
    """Cleans up whitespace, abbreviations and common misspellings."""

    def __init__(self, config: NormalizerConfig | None = None, **kwargs: Any) -> None:
        self.config = config or NormalizerConfig(**kwargs)
        self._replacements: dict[str, tuple[str, ChangeType]] = {
            key: (value, ChangeType.ABBREVIATION) for key, value in ABBREVIATIONS.items()
        }
        if self.config.enable_spell_check:
            self._replacements.update(
                {key: (value, ChangeType.SPELLING) for key, value in MISSPELLINGS.items()}
            )
        self._pattern = self._compile()

    def _compile(self) -> re.Pattern[str]:
        terms = "|".join(
            re.escape(key).replace(r"\ ", r"\s+")
            for key in sorted(self._replacements, key=len, reverse=True)
        )
        return re.compile(
            rf"(?P<term>(?<![\w-])(?:{terms})(?![\w-]))"
            r"|(?P<punct>[?!](?:\s*[?!])+)"
            r"|(?P<space>\s+)",
            re.IGNORECASE,
        )

    def normalize(self, raw_text: str) -> NormalizationResult:
        """Normalize a question.

        Args:
            raw_text: Question text as typed

        Returns:
            NormalizationResult with the normalized text and ordered changes
        """
        text = raw_text or ""
        pieces: list[str] = []
        changes: list[NormalizationChange] = []
        cursor = 0

        for match in self._pattern.finditer(text):
            start, end = match.span()
            pieces.append(text[cursor:start])
            cursor = end

            original = match.group(0)
            replacement, change_type = self._replacement_for(match, text)
            pieces.append(replacement)

            if replacement == original:
                continue
            if change_type in (ChangeType.ABBREVIATION, ChangeType.SPELLING) and replacement.lower() == original.lower():
                change_type = ChangeType.CASE
            changes.append(
                NormalizationChange(
                    type=change_type,
                    original=original,
                    normalized=replacement,
                    position=start,
                )
            )

        pieces.append(text[cursor:])
        normalized = "".join(pieces)

        if changes:
            logger.debug(f"Normalized question with {len(changes)} changes")

        return NormalizationResult(original=text, normalized=normalized, changes=changes)

    def _replacement_for(self, match: re.Match[str], text: str) -> tuple[str, ChangeType]:
        if match.group("term") is not None:
            key = re.sub(r"\s+", " ", match.group("term").lower())
            return self._replacements[key]

        if match.group("punct") is not None:
            return match.group("punct")[0], ChangeType.PUNCTUATION

        start, end = match.span()
        if start == 0 or end == len(text):
            return "", ChangeType.WHITESPACE
        if text[end] in _TERMINAL_PUNCTUATION:
            return "", ChangeType.PUNCTUATION
        return " ", ChangeType.WHITESPACE
