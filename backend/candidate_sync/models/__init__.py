from .profile_document import CachedProfileDocument

__all__ = [
    "CachedProfileDocument",
]
