"""Exception hierarchy for the load generator."""


class LoadGenError(Exception):
    """Base class for all load generator errors."""


class ConfigError(LoadGenError):
    """Invalid or missing configuration, detected before the loop starts."""


class DeliveryError(LoadGenError):
    """A batch could not be written or transmitted. Always fatal."""
