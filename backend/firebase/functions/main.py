# main.py
# Firebase callable functions entry point.
from firebase_admin import initialize_app
from firebase_functions import https_fn, options

from handlers.podcast_handlers import PodcastHandler
from services.author_stats import AuthorStatistics
from services.category_aggregator import CategoryAggregator
from services.podcast_service import PodcastService
from services.search import SearchResolver
from services.trending import TrendingRanker
from utils.config import config
from utils.database import Database
from utils.storage import Storage

initialize_app()
options.set_global_options(max_instances=10)

database = Database()
discovery = config.discovery

handler = PodcastHandler(
    podcasts=PodcastService(database, Storage(database)),
    ranker=TrendingRanker(database, limit=discovery.trending_limit),
    aggregator=CategoryAggregator(database, discovery.categories),
    authors=AuthorStatistics(database),
    resolver=SearchResolver.from_columns(database, discovery.search_columns, limit=discovery.search_limit),
)


@https_fn.on_call()
def create_podcast(req: https_fn.CallableRequest):
    return handler.create_podcast(req)


@https_fn.on_call()
def update_podcast(req: https_fn.CallableRequest):
    return handler.update_podcast(req)


@https_fn.on_call()
def update_podcast_views(req: https_fn.CallableRequest):
    return handler.update_podcast_views(req)


@https_fn.on_call()
def delete_podcast(req: https_fn.CallableRequest):
    return handler.delete_podcast(req)


@https_fn.on_call()
def get_url(req: https_fn.CallableRequest):
    return handler.get_url(req)


@https_fn.on_call()
def get_podcast_by_id(req: https_fn.CallableRequest):
    return handler.get_podcast_by_id(req)


@https_fn.on_call()
def get_all_podcasts(req: https_fn.CallableRequest):
    return handler.get_all_podcasts(req)


@https_fn.on_call()
def get_trending_podcasts(req: https_fn.CallableRequest):
    return handler.get_trending_podcasts(req)


@https_fn.on_call()
def get_podcast_by_category_type(req: https_fn.CallableRequest):
    return handler.get_podcast_by_category_type(req)


@https_fn.on_call()
def get_podcasts_by_category(req: https_fn.CallableRequest):
    return handler.get_podcasts_by_category(req)


@https_fn.on_call()
def get_podcast_by_author_id(req: https_fn.CallableRequest):
    return handler.get_podcast_by_author_id(req)


@https_fn.on_call()
def get_podcast_by_search(req: https_fn.CallableRequest):
    return handler.get_podcast_by_search(req)


@https_fn.on_call()
def get_podcast_by_voice_type(req: https_fn.CallableRequest):
    return handler.get_podcast_by_voice_type(req)


@https_fn.on_call()
def get_user_podcasts(req: https_fn.CallableRequest):
    return handler.get_user_podcasts(req)


@https_fn.on_call()
def get_discover_feed(req: https_fn.CallableRequest):
    return handler.get_discover_feed(req)
