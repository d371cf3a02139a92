# Core package - Infrastructure components
from .browser import RemoteBrowserSession
from .cache import (
    ProfileStore,
    StoreUnavailableError,
    get_profile_store,
    close_profile_store,
)
from .tracing import get_tracer, traced

__all__ = [
    # Remote browser
    "RemoteBrowserSession",
    # Profile store
    "ProfileStore",
    "StoreUnavailableError",
    "get_profile_store",
    "close_profile_store",
    # Tracing
    "get_tracer",
    "traced",
]
