import logging
import logging.config
from pathlib import Path


def get_logging_config(dir_output: str, base_file: str) -> dict:
    """Generates the logging configuration dictionary for the media server.
    Creates the output directory if it does not exist and configures a rotating JSON file
    handler next to a human-readable stdout handler.

    Args:
        dir_output: Directory where log files will be stored.
        base_file: Name of the log file.

    Returns:
        dict: Logging configuration dictionary compatible with logging.config.dictConfig.
    """
    path_output = Path(dir_output)
    path_output.mkdir(parents=True, exist_ok=True)

    path_json = path_output / base_file

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s %(module)s %(funcName)s %(process)d",
                "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
            },
            "plain": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "json",
                "filename": str(path_json),
                "maxBytes": 204800,
                "backupCount": 10,
                "encoding": "utf-8",
            },
        },
        "loggers": {"": {"handlers": ["stdout", "file"], "level": "WARNING"}},
    }


def setup_logging(dir_output: str, base_file: str, log_level: str = "INFO") -> None:
    """Sends the media server's logs to stdout and to a rotating JSON file.
    Both `create_app` and the test suite may call this; handlers are installed once per process.

    Args:
        dir_output: Directory where log files will be stored.
        base_file: Name of the log file.
        log_level: Logging level to set for the root logger.

    Returns:
        None
    """
    root = logging.getLogger()

    if getattr(root, "_configured_by_app", False):
        return

    # Drop handlers installed by Werkzeug or debug mode
    for h in root.handlers[:]:
        root.removeHandler(h)

    config = get_logging_config(dir_output=dir_output, base_file=base_file)
    logging.config.dictConfig(config)

    root.setLevel(log_level.upper())
    root._configured_by_app = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Returns the named logger; it propagates to the handlers `setup_logging` installed."""
    return logging.getLogger(name)
