"""Placeholder keyword data provider.

Returns plausible-looking but randomly generated metrics after an
artificial delay. Swap in a real keyword API behind the same
`research_keyword` contract.
"""

import random
import time

from config import MOCK_SERVICE_DELAY_SECONDS


class KeywordService:
    def __init__(self, delay_seconds: float = MOCK_SERVICE_DELAY_SECONDS, seed: int | None = None) -> None:
        self.delay_seconds = delay_seconds
        self._random = random.Random(seed)

    def research_keyword(self, keyword: str, max_suggestions: int = 10) -> dict:
        """
        Returns:
            {"keyword", "search_volume", "difficulty", "cpc",
             "related_keywords": [str], "questions": [str]}
        """
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)

        related = [
            f"best {keyword}",
            f"{keyword} guide",
            f"{keyword} tips",
            f"how to {keyword}",
            f"{keyword} tools",
            f"{keyword} software",
            f"{keyword} service",
            f"{keyword} platform",
            f"{keyword} for beginners",
            f"{keyword} examples",
        ]
        return {
            "keyword": keyword,
            "search_volume": self._random.randint(100, 10099),
            "difficulty": self._random.randint(0, 99),
            "cpc": round(self._random.uniform(0.5, 5.5), 2),
            "related_keywords": related[:max_suggestions],
            "questions": [
                f"What is {keyword}?",
                f"How to use {keyword}?",
                f"Best {keyword} practices?",
                f"{keyword} vs alternatives?",
            ],
        }
