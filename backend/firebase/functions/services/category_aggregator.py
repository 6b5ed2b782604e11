# services/category_aggregator.py
import asyncio
from typing import Dict, List, Optional, Sequence

from models.podcast import Podcast, PodcastCategory
from utils.database import Database
from utils.logger import setup_logger

logger = setup_logger(__name__)

CategoryPodcasts = Dict[PodcastCategory, List[Podcast]]

class CategoryAggregator:
    """Groups podcasts by category label.

    Each label is resolved with its own filter query. Labels do not depend on
    each other, so the queries run concurrently; the result is keyed by label
    and follows the configured label order, not completion order.
    """

    def __init__(self, database: Database, categories: Sequence[PodcastCategory]):
        self.database = database
        self.categories = tuple(categories)

    def _fetch(self, category: PodcastCategory) -> List[Podcast]:
        podcasts = self.database.get_podcasts_by_category(category)
        # Cards always render an image, an empty URL is the placeholder
        return [
            p if p.image_url else p.model_copy(update={'image_url': ''})
            for p in podcasts
        ]

    async def collect_async(self, categories: Optional[Sequence[PodcastCategory]] = None) -> CategoryPodcasts:
        """Fetch every category concurrently.

        Args:
            categories: Labels to fetch, defaults to the configured ones

        Returns:
            CategoryPodcasts: label -> podcasts, in label order. Labels with
            no podcasts map to an empty list.
        """
        labels = tuple(categories) if categories is not None else self.categories
        logger.info(f"Fetching podcasts for {len(labels)} categories")
        results = await asyncio.gather(
            *(asyncio.to_thread(self._fetch, category) for category in labels)
        )
        grouped = dict(zip(labels, results))
        logger.info(
            "Category sizes: "
            + ", ".join(f"{c.label}={len(p)}" for c, p in grouped.items())
        )
        return grouped

    def collect(self, categories: Optional[Sequence[PodcastCategory]] = None) -> CategoryPodcasts:
        """Synchronous variant of collect_async, for callers without a running loop."""
        return asyncio.run(self.collect_async(categories))
