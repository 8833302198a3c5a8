import logging
import os
import sys

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from config import BaseConfig, DevelopmentConfig, ProductionConfig, TestConfig
from logtools import get_logger, setup_logging
from medialib import MediaCollection
from routes import create_authentication_blueprint, create_search_blueprint


def create_app(
    config_cls: type[BaseConfig] | None = None,
    collection: MediaCollection | None = None,
) -> Flask:
    """
    Builds the Flask application around a media collection.

    Args:
        config_cls: Configuration class; selected from APP_ENV when omitted.
        collection: Pre-built collection, mainly for tests. When omitted one is created from
            the configuration and, unless the configuration disables it, its catalog is loaded
            in the background and the rebuild triggers are started.

    Returns:
        Flask: The configured application.
    """
    config_cls = config_cls or get_configuration()

    # === Create Flask app ===
    app = Flask(__name__)

    app.secret_key = config_cls.PASSWORD
    app.config.from_object(config_cls)
    CORS(app)

    limiter = Limiter(
        get_remote_address,
        default_limits=["5000 per day", "500 per hour"],
    )
    limiter.init_app(app=app)

    logger_setup(config=config_cls)
    if "gunicorn" in sys.modules:
        gunicorn_logger = logging.getLogger("gunicorn.error")
        app.logger.handlers = gunicorn_logger.handlers
        app.logger.setLevel(gunicorn_logger.level)
        logging.root.handlers = gunicorn_logger.handlers
        logging.root.setLevel(gunicorn_logger.level)

    logger = get_logger(name=__name__)

    # === Media collection ===
    if collection is None:
        collection = MediaCollection(
            media_root=config_cls.MEDIA_ROOT,
            cache_path=config_cls.CACHE_PATH,
            status_dir=config_cls.DATA_ROOT,
            audio_extensions=config_cls.AUDIO_EXTENSIONS,
            video_extensions=config_cls.VIDEO_EXTENSIONS,
            rebuild_interval=config_cls.REBUILD_INTERVAL,
            watch_changes=config_cls.WATCH_CHANGES,
            logger=get_logger("medialib"),
        )
        if config_cls.START_TRIGGERS:
            collection.start()
    app.extensions["media_collection"] = collection

    # === Blueprints ===
    app.register_blueprint(
        create_authentication_blueprint(logger=logger, limiter=limiter),
        url_prefix="/auth",
    )
    app.register_blueprint(create_search_blueprint(collection=collection, logger=logger))

    return app


def get_configuration() -> type[BaseConfig]:
    """
    Determines and returns the configuration class for the current environment.

    Selects the class from the APP_ENV environment variable and ensures the data directory
    exists.

    Returns:
        type[BaseConfig]: The configuration class for the current environment.
    """
    config_map = {
        "development": DevelopmentConfig,
        "test": TestConfig,
        "production": ProductionConfig,
    }

    env = os.getenv("APP_ENV", "development")

    config = config_map.get(env, DevelopmentConfig)
    config.ensure_dirs()
    return config


def logger_setup(config: type[BaseConfig]) -> None:
    log_dir = config.DATA_ROOT / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(
        dir_output=str(log_dir),
        base_file="app.log",
        log_level=config.LOG_LEVEL,
    )


def serve(debug: bool = True) -> None:
    """
    Starts the Flask development server on all interfaces, port 5000.

    Args:
        debug: Whether to run the server in debug mode. Defaults to True.
    """
    app = create_app()
    app.run(debug=debug, use_reloader=False, host="0.0.0.0", port=5000)


if __name__ == "__main__":
    serve(debug=True)
