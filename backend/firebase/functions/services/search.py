# services/search.py
from dataclasses import dataclass
from typing import List, Sequence

from models.podcast import Podcast
from utils.database import Database
from utils.logger import setup_logger

logger = setup_logger(__name__)

@dataclass(frozen=True)
class SearchStrategy:
    """Full-text lookup on one column, capped at limit hits."""
    column: str
    limit: int = 10

class SearchResolver:
    """Priority-ordered search.

    Strategies are tried in order and the first non-empty result is returned
    as is; results of different columns are never merged. An author match
    therefore hides title and description matches. The last strategy's result
    is returned even when empty. An empty term lists every podcast, newest
    first.
    """

    def __init__(self, database: Database, strategies: Sequence[SearchStrategy]):
        if not strategies:
            raise ValueError("At least one search strategy is required")
        self.database = database
        self.strategies = tuple(strategies)

    @classmethod
    def from_columns(cls, database: Database, columns: Sequence[str], limit: int = 10) -> "SearchResolver":
        return cls(database, [SearchStrategy(column=c, limit=limit) for c in columns])

    def search(self, term: str) -> List[Podcast]:
        term = (term or '').strip()
        if not term:
            logger.info("Empty search term, returning full listing")
            return self.database.get_all_podcasts(descending=True)

        results: List[Podcast] = []
        for strategy in self.strategies:
            results = self.database.search_podcasts(strategy.column, term, limit=strategy.limit)
            if results:
                logger.info(f"Search {term!r} matched {len(results)} podcasts on {strategy.column}")
                return results

        logger.info(f"Search {term!r} matched nothing")
        return results
