# geonav/errors.py


class GeoNavError(Exception):
    """Base class for geonav errors."""


class ConfigurationError(GeoNavError):
    """A mandatory collaborator is missing; the component refuses to start."""


class FeatureCollectionParseError(GeoNavError):
    def __init__(self, source: str, reason: str):
        super().__init__(f"parse failure for source {source!r}: {reason}")
        self.source = source
        self.reason = reason
