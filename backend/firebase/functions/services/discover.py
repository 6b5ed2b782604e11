# services/discover.py
import asyncio
from typing import List

from pydantic import BaseModel, Field

from models.podcast import Podcast, PodcastCategory
from services.category_aggregator import CategoryAggregator, CategoryPodcasts
from services.trending import TrendingRanker
from utils.logger import setup_logger

logger = setup_logger(__name__)


class DiscoverSection(BaseModel):
    category: PodcastCategory
    title: str
    podcasts: List[Podcast] = Field(default_factory=list)


class DiscoverFeed(BaseModel):
    """Everything the discover page shows, in display order."""
    trending: List[Podcast] = Field(default_factory=list)
    sections: List[DiscoverSection] = Field(default_factory=list)


def build_sections(grouped: CategoryPodcasts) -> List[DiscoverSection]:
    """One section per non-empty category; empty categories are left out."""
    return [
        DiscoverSection(
            category=category,
            title=f"{category.display_name} Podcasts",
            podcasts=podcasts,
        )
        for category, podcasts in grouped.items()
        if podcasts
    ]


class DiscoverService:
    def __init__(self, ranker: TrendingRanker, aggregator: CategoryAggregator):
        self.ranker = ranker
        self.aggregator = aggregator

    async def get_feed_async(self) -> DiscoverFeed:
        """Resolve the trending list and every category, then assemble the feed.

        Nothing is returned until both have resolved; a failure in either
        propagates.
        """
        trending, grouped = await asyncio.gather(
            asyncio.to_thread(self.ranker.get_trending),
            self.aggregator.collect_async(),
        )
        sections = build_sections(grouped)
        logger.info(f"Discover feed: {len(trending)} trending, {len(sections)} non-empty sections")
        return DiscoverFeed(trending=trending, sections=sections)

    def get_feed(self) -> DiscoverFeed:
        return asyncio.run(self.get_feed_async())
