"""
Podcast callable functions.
Translates callable requests into service calls and service errors into
callable error codes.
"""

import uuid
from functools import wraps
from typing import Any, Dict, Optional

from firebase_functions import https_fn
from pydantic import BaseModel, ValidationError

from models.podcast import CreatePodcastRequest, PodcastCategory, PodcastUpdate
from models.user_info import Identity
from services.author_stats import AuthorStatistics
from services.category_aggregator import CategoryAggregator
from services.discover import DiscoverService
from services.podcast_service import PodcastService, UnauthenticatedError
from services.search import SearchResolver
from services.trending import TrendingRanker
from utils.database import RecordNotFoundError
from utils.logger import setup_logger

logger = setup_logger(__name__)

ErrorCode = https_fn.FunctionsErrorCode


def _dump(value: Any) -> Any:
    """JSON-ready form of a model or list of models."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def _callable(func):
    """Map service errors to HttpsError codes and dump models to JSON."""
    @wraps(func)
    def wrapper(self, req: https_fn.CallableRequest):
        try:
            return _dump(func(self, req))
        except https_fn.HttpsError:
            raise
        except UnauthenticatedError as e:
            raise https_fn.HttpsError(ErrorCode.UNAUTHENTICATED, str(e))
        except RecordNotFoundError as e:
            raise https_fn.HttpsError(ErrorCode.NOT_FOUND, str(e))
        except (ValidationError, ValueError) as e:
            raise https_fn.HttpsError(ErrorCode.INVALID_ARGUMENT, str(e))
        except Exception as e:
            logger.exception(f"Error in {func.__name__}: {e}")
            raise https_fn.HttpsError(ErrorCode.INTERNAL, f"Error in {func.__name__}")
    return wrapper


def _data(req: https_fn.CallableRequest) -> Dict[str, Any]:
    return req.data or {}


def _podcast_id(req: https_fn.CallableRequest) -> uuid.UUID:
    podcast_id = _data(req).get("podcast_id")
    if not podcast_id:
        raise ValueError("podcast_id is required")
    return uuid.UUID(str(podcast_id))


class PodcastHandler:
    """Class containing all podcast callable functions."""

    def __init__(
        self,
        podcasts: PodcastService,
        ranker: TrendingRanker,
        aggregator: CategoryAggregator,
        authors: AuthorStatistics,
        resolver: SearchResolver,
    ):
        self.podcasts = podcasts
        self.ranker = ranker
        self.aggregator = aggregator
        self.authors = authors
        self.resolver = resolver
        self.discover = DiscoverService(ranker, aggregator)

    @staticmethod
    def identity(req: https_fn.CallableRequest) -> Optional[Identity]:
        return Identity.from_auth(req.auth)

    def signed_in(self, req: https_fn.CallableRequest) -> Identity:
        """Identity of the caller, checked before the payload is read."""
        identity = self.identity(req)
        if identity is None:
            raise UnauthenticatedError("User not authenticated")
        return identity

    #- Mutations
    @_callable
    def create_podcast(self, req: https_fn.CallableRequest):
        identity = self.signed_in(req)
        request = CreatePodcastRequest(**_data(req))
        podcast = self.podcasts.create_podcast(identity, request)
        return {"podcast_id": str(podcast.id)}

    @_callable
    def update_podcast(self, req: https_fn.CallableRequest):
        identity = self.signed_in(req)
        data = {k: v for k, v in _data(req).items() if k != "podcast_id"}
        update = PodcastUpdate(**data)
        return self.podcasts.update_podcast(identity, _podcast_id(req), update)

    @_callable
    def update_podcast_views(self, req: https_fn.CallableRequest):
        return self.podcasts.increment_views(_podcast_id(req))

    @_callable
    def delete_podcast(self, req: https_fn.CallableRequest):
        identity = self.signed_in(req)
        return {"deleted": self.podcasts.delete_podcast(identity, _podcast_id(req))}

    @_callable
    def get_url(self, req: https_fn.CallableRequest):
        storage_id = _data(req).get("storage_id")
        if not storage_id:
            raise ValueError("storage_id is required")
        return {"url": self.podcasts.get_storage_url(storage_id)}

    #- Queries
    @_callable
    def get_podcast_by_id(self, req: https_fn.CallableRequest):
        return self.podcasts.get_podcast(_podcast_id(req))

    @_callable
    def get_all_podcasts(self, req: https_fn.CallableRequest):
        return self.podcasts.get_all_podcasts()

    @_callable
    def get_trending_podcasts(self, req: https_fn.CallableRequest):
        return self.ranker.get_trending()

    @_callable
    def get_podcast_by_category_type(self, req: https_fn.CallableRequest):
        category = PodcastCategory(_data(req).get("category_type", ""))
        grouped = self.aggregator.collect([category])
        return {"podcasts": _dump(grouped[category])}

    @_callable
    def get_podcasts_by_category(self, req: https_fn.CallableRequest):
        grouped = self.aggregator.collect()
        return {category.label: _dump(podcasts) for category, podcasts in grouped.items()}

    @_callable
    def get_podcast_by_author_id(self, req: https_fn.CallableRequest):
        author_id = _data(req).get("author_id")
        if not author_id:
            raise ValueError("author_id is required")
        return self.authors.get_author_podcasts(author_id)

    @_callable
    def get_podcast_by_search(self, req: https_fn.CallableRequest):
        return self.resolver.search(_data(req).get("search", ""))

    @_callable
    def get_podcast_by_voice_type(self, req: https_fn.CallableRequest):
        return self.podcasts.get_similar_podcasts(_podcast_id(req))

    @_callable
    def get_user_podcasts(self, req: https_fn.CallableRequest):
        return self.podcasts.get_user_podcasts(self.identity(req))

    @_callable
    def get_discover_feed(self, req: https_fn.CallableRequest):
        return self.discover.get_feed()
