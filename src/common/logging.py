from typing import Protocol


class Logger(Protocol):
    """
    What the scanner, catalog store, collection and blueprints need from a logger.

    A stdlib `logging.Logger` from `logtools.get_logger` satisfies it.
    """
    def debug(self, msg: str, *args, **kwargs) -> None: ...
    def info(self, msg: str, *args, **kwargs) -> None: ...
    def warning(self, msg: str, *args, **kwargs) -> None: ...
    def error(self, msg: str, *args, **kwargs) -> None: ...
    def exception(self, msg: str, *args, **kwargs) -> None: ...


class NullLogger:
    """Default for components built without a logger, e.g. in tests."""
    def debug(self, msg: str, *args, **kwargs) -> None: pass
    def info(self, msg: str, *args, **kwargs) -> None: pass
    def warning(self, msg: str, *args, **kwargs) -> None: pass
    def error(self, msg: str, *args, **kwargs) -> None: pass
    def exception(self, msg: str, *args, **kwargs) -> None: pass
