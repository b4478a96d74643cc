"""
Language detection using langdetect.

Detection never raises: empty input, detector failures and low-confidence
guesses all fall back to the configured default language.
"""

import asyncio
from typing import List

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

from lingostat.extractors.base import LanguageDetector
from lingostat.models import LanguageGuess
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

# Deterministic results across runs
DetectorFactory.seed = 0

# Probability reported for fallback guesses
FALLBACK_CONFIDENCE = 0.5


def _base_code(code: str) -> str:
    """Strip region suffixes such as zh-cn -> zh."""
    return code.split("-")[0].lower()


class LangdetectLanguageDetector(LanguageDetector):
    """Content and title language detector backed by langdetect."""

    def __init__(
        self,
        default_language: str = "en",
        min_confidence: float = 0.0,
        sample_chars: int = 2000,
    ) -> None:
        self.default_language = default_language
        self.min_confidence = min_confidence
        self.sample_chars = sample_chars

    def _fallback(self) -> LanguageGuess:
        return LanguageGuess(
            language=self.default_language,
            confidence=FALLBACK_CONFIDENCE,
            is_reliable=False,
        )

    def _detect(self, text: str) -> LanguageGuess:
        sample = text.strip()[: self.sample_chars]
        if not sample:
            return self._fallback()

        try:
            candidates: List = detect_langs(sample)
        except LangDetectException as e:
            logger.debug(f"Language detection failed: {e}")
            return self._fallback()

        if not candidates:
            return self._fallback()

        best = candidates[0]
        if best.prob < self.min_confidence:
            logger.debug(f"Low-confidence detection {best.lang}={best.prob:.2f}, using default")
            return self._fallback()

        return LanguageGuess(language=_base_code(best.lang), confidence=min(best.prob, 1.0))

    async def detect(self, text: str) -> LanguageGuess:
        return await asyncio.get_event_loop().run_in_executor(None, lambda: self._detect(text))

    async def detect_short(self, text: str) -> str:
        guess = await self.detect(text)
        return guess.language
