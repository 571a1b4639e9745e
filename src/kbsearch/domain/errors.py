class KbSearchError(Exception):
    """Base error for the knowledge search core."""


class ConfigError(KbSearchError):
    pass


class EmptyInputError(KbSearchError):
    """Text was empty or whitespace-only."""


class EmbeddingServiceError(KbSearchError):
    """The remote embedding call failed (network, auth, quota, timeout, bad payload)."""


class DimensionMismatchError(KbSearchError):
    """Dense vectors of different dimensionality met in one store."""


class StoreLoadError(KbSearchError):
    """A persisted store file is missing, unreadable or structurally invalid."""


class IngestionError(KbSearchError):
    pass
