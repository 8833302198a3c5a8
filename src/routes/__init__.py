from .authentication import create_authentication_blueprint
from .search import create_search_blueprint

__all__ = [
    "create_authentication_blueprint",
    "create_search_blueprint",
]
