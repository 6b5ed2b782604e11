# services/trending.py
from typing import List

from models.podcast import Podcast
from utils.database import Database
from utils.logger import setup_logger

logger = setup_logger(__name__)

class TrendingRanker:
    """Most viewed podcasts.

    The store returns podcasts oldest first and the sort is stable, so
    podcasts with equal views keep their creation order.
    """

    def __init__(self, database: Database, limit: int = 8):
        if limit < 0:
            raise ValueError("limit must be non-negative")
        self.database = database
        self.limit = limit

    def rank(self, podcasts: List[Podcast]) -> List[Podcast]:
        return sorted(podcasts, key=lambda p: p.views, reverse=True)[:self.limit]

    def get_trending(self) -> List[Podcast]:
        podcasts = self.database.get_all_podcasts(descending=False)
        trending = self.rank(podcasts)
        logger.info(f"Ranked {len(podcasts)} podcasts, returning top {len(trending)}")
        return trending
