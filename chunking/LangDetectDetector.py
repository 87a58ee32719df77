# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: LangDetectDetector
# -----------------------------------------------------------------------------
from typing import Tuple

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

# langdetect is probabilistic; a fixed seed keeps chunk metadata reproducible
DetectorFactory.seed = 0


class LangDetectDetector:
    """Tags chunk text with an ISO 639-1 code, or 'und' when unsure."""

    def __init__(self, min_chars: int = 20):
        self.min_chars = min_chars

    def detect(self, text: str) -> Tuple[str, float]:
        if not text or len(text.strip()) < self.min_chars:
            return "und", 0.0

        try:
            detections = detect_langs(text)
        except LangDetectException:
            return "und", 0.0

        if not detections:
            return "und", 0.0

        top = detections[0]  # most probable language
        return top.lang, float(top.prob)
