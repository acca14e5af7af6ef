# Heuristic confidence score from an agent's free-text answer
import random
import re
from typing import List, Optional, Tuple

PERCENT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*%")

MIN_PLAUSIBLE = 60.0
MAX_PLAUSIBLE = 99.0
KEYWORD_WINDOW = 20

CONFIDENCE_KEYWORDS = ("信心", "确信", "把握", "可能", "概率", "confidence")
BULLISH_KEYWORDS = ("买入", "buy", "看涨", "上涨", "突破", "强势")
BEARISH_KEYWORDS = ("卖出", "sell", "看跌", "下跌", "风险", "谨慎")

KEYWORD_BASE = 75
KEYWORD_STEP = 5
KEYWORD_CAP = 95
TIE_RANGE = (70, 90)


class ConfidenceExtractor:
    """Best-effort 0-100 confidence signal; not a sentiment model.

    Order of preference: a plausible percentage next to a confidence keyword,
    then any plausible percentage, then the bullish/bearish keyword balance.
    A balanced text with no percentage gets a random score in ``TIE_RANGE``.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def extract(self, text: str) -> float:
        text = text or ""
        lowered = text.lower()

        candidates = self._plausible_percentages(text)
        if candidates:
            for value, start, end in candidates:
                window = lowered[max(0, start - KEYWORD_WINDOW):end + KEYWORD_WINDOW]
                if any(keyword in window for keyword in CONFIDENCE_KEYWORDS):
                    return self._clamp(value)
            return self._clamp(candidates[0][0])

        bullish = self._count_keywords(lowered, BULLISH_KEYWORDS)
        bearish = self._count_keywords(lowered, BEARISH_KEYWORDS)
        if bullish > bearish:
            return float(min(KEYWORD_BASE + KEYWORD_STEP * bullish, KEYWORD_CAP))
        if bearish > bullish:
            return float(min(KEYWORD_BASE + KEYWORD_STEP * bearish, KEYWORD_CAP))
        # No usable signal either way
        return float(self.rng.randint(*TIE_RANGE))

    @staticmethod
    def _plausible_percentages(text: str) -> List[Tuple[float, int, int]]:
        found = []
        for match in PERCENT_PATTERN.finditer(text):
            value = float(match.group(1))
            if MIN_PLAUSIBLE <= value <= MAX_PLAUSIBLE:
                found.append((value, match.start(), match.end()))
        return found

    @staticmethod
    def _count_keywords(lowered: str, keywords) -> int:
        """Number of distinct keywords present"""
        return sum(1 for keyword in keywords if keyword in lowered)

    @staticmethod
    def _clamp(value: float) -> float:
        return max(0.0, min(100.0, value))
