from flask import Blueprint, Response, jsonify, request

from auth import require_auth
from common.logging import Logger, NullLogger
from medialib import MediaCollection


def create_search_blueprint(
    collection: MediaCollection, logger: Logger | None = None
) -> Blueprint:
    """
    Creates the blueprint exposing catalog search, on-demand rebuilds and indexing status.

    Args:
        collection (MediaCollection): The media collection to search and rebuild.
        logger (Logger | None): Optional logger. Uses NullLogger if not provided.

    Returns:
        Blueprint: The configured Flask blueprint.
    """
    searcher = Blueprint("searcher", __name__)

    logger: Logger = logger or NullLogger()

    @searcher.route("/search")
    @require_auth
    def search() -> Response:
        """
        Returns the catalog items matching the `q` parameter as a JSON list.

        A missing or blank query falls back to recently added items, then to a random
        folder; a query never produces an error, at worst an empty list.

        Returns:
            Response: JSON list of {pathname, album, artist, name, disc, track, year, genre}.
        """
        query = request.args.get("q", "")
        matches = collection.search_with_fallback(query)
        logger.info(f"Search {query!r}: {len(matches)} matches")
        return jsonify([item.to_dict() for item in matches])

    @searcher.route("/rebuild", methods=["POST"])
    @require_auth
    def rebuild() -> tuple[Response, int]:
        """
        Starts a catalog rebuild in the background.

        Returns:
            tuple[Response, int]: {"started": bool} with status 202; "started" is False when a
            rebuild was already running.
        """
        started = collection.request_rebuild()
        logger.info(f"On-demand rebuild {'started' if started else 'skipped'} for {request.remote_addr}")
        return jsonify({"started": started}), 202

    @searcher.route("/status")
    @require_auth
    def status() -> Response:
        """
        Reports the catalog size, its last sync time and the progress of a running rebuild.

        Returns:
            Response: JSON object with "items", "synced_at" and "indexing".
        """
        catalog = collection.catalog
        return jsonify(
            {
                "items": len(catalog),
                "synced_at": catalog.synced_at or None,
                "indexing": collection.indexing_status(),
            }
        )

    return searcher
