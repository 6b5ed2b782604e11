# services/author_stats.py
from models.podcast import AuthorPodcasts
from utils.database import Database
from utils.logger import setup_logger

logger = setup_logger(__name__)

class AuthorStatistics:
    def __init__(self, database: Database):
        self.database = database

    def get_author_podcasts(self, author_id: str) -> AuthorPodcasts:
        """Podcasts of an author and the total views across them."""
        podcasts = self.database.get_podcasts_by_author(author_id)
        listeners = sum(p.views for p in podcasts)
        logger.info(f"Author {author_id} has {len(podcasts)} podcasts and {listeners} listeners")
        return AuthorPodcasts(podcasts=podcasts, listeners=listeners)
