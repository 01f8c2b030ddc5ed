"""HTTP endpoints for deduplication and the cached feed."""

import logging

from flask import Flask, jsonify

from biasfeed.config import BiasFeedConfig, create_from_config, create_store
from biasfeed.errors import BiasFeedError, DedupInProgressError
from biasfeed.feed import fetch_cached_news
from biasfeed.storage.base import BlobStore

logger = logging.getLogger(__name__)


def create_app(config: BiasFeedConfig | None = None, *, store: BlobStore | None = None) -> Flask:
    """Build the Flask app.

    Args:
        config: Root configuration (defaults apply when omitted).
        store: Use this store instead of building one from ``config.storage``.
    """
    config = config or BiasFeedConfig()
    store = store if store is not None else create_store(config.storage)
    deduplicator, _run_logger = create_from_config(config, store=store)

    app = Flask(__name__)

    @app.errorhandler(405)
    def method_not_allowed(_error: Exception):
        return jsonify({"message": "Method Not Allowed"}), 405

    @app.route("/api/dedupe", methods=["POST"])
    async def dedupe():
        try:
            report = await deduplicator.run()
        except DedupInProgressError as e:
            logger.warning(str(e))
            return jsonify({"message": str(e)}), 409
        except Exception as e:
            logger.exception(f"Error during deduplication: {e}")
            return jsonify({"message": f"Deduplication failed: {e}"}), 500
        return jsonify(report.to_response()), 200

    @app.route("/api/cached-news", methods=["GET"])
    async def cached_news():
        try:
            items = await fetch_cached_news(store, config.dedup.global_prefix)
        except BiasFeedError as e:
            logger.error(f"Error fetching cached news: {e}")
            return jsonify({"error": str(e)}), 500
        return jsonify([item.to_json_dict() for item in items]), 200

    return app
