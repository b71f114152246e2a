"""Placeholder backlink index.

There is no real link index behind this: totals and authority scores are
random, the sample links are fixed.
"""

import random
import time

from config import MOCK_SERVICE_DELAY_SECONDS

SAMPLE_LINKING_DOMAINS = [
    "industry-blog.com",
    "news-site.com",
    "partner-site.org",
    "directory.net",
]


class BacklinkService:
    def __init__(self, delay_seconds: float = MOCK_SERVICE_DELAY_SECONDS, seed: int | None = None) -> None:
        self.delay_seconds = delay_seconds
        self._random = random.Random(seed)

    def check_backlinks(self, domain: str, limit: int = 100) -> dict:
        """
        Returns:
            {"domain", "total", "referring_domains", "domain_authority",
             "backlinks": [{"source_url", "anchor_text", "domain_authority", "link_type"}],
             "top_linking_domains": [str]}
        """
        if self.delay_seconds > 0:
            time.sleep(self.delay_seconds)

        backlinks = [
            {
                "source_url": "https://example1.com/article",
                "anchor_text": "quality content",
                "domain_authority": 65,
                "link_type": "dofollow",
            },
            {
                "source_url": "https://example2.com/blog",
                "anchor_text": domain,
                "domain_authority": 45,
                "link_type": "nofollow",
            },
            {
                "source_url": "https://example3.com/resources",
                "anchor_text": "click here",
                "domain_authority": 72,
                "link_type": "dofollow",
            },
        ]
        return {
            "domain": domain,
            "total": self._random.randint(100, 5099),
            "referring_domains": self._random.randint(50, 249),
            "domain_authority": self._random.randint(0, 99),
            "backlinks": backlinks[:limit],
            "top_linking_domains": list(SAMPLE_LINKING_DOMAINS),
        }
