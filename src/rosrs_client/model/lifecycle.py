from enum import Enum


class LoadState(Enum):
    """Lifecycle of lazily loaded entities."""

    UNLOADED = "unloaded"
    """Only the reference (and metadata known from elsewhere) is available."""

    LOADING = "loading"
    """The entity is currently fetching and parsing its document."""

    LOADED = "loaded"
