"""Pipeline exceptions."""


class InputError(ValueError):
    """Caller supplied unusable input (no highlights, missing source, ...)."""
    pass


class FallbackError(Exception):
    """Every fallback tier failed to produce an artifact."""
    pass
