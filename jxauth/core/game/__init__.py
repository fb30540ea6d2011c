"""Game-session API and offline character cache."""

from .cache import CacheMissError, CharacterCache
from .client import CharacterRecord, GameApiError, GameSessionClient

__all__ = [
    "CacheMissError",
    "CharacterCache",
    "CharacterRecord",
    "GameApiError",
    "GameSessionClient",
]
