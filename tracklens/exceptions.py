"""Custom exceptions for tracklens."""


class DecodeError(Exception):
    """Raised when an audio payload cannot be decoded."""

    pass


class CorpusLoadError(Exception):
    """Raised when the reference corpus file cannot be read."""

    pass


class ModelWeightsError(Exception):
    """Raised when classifier weights are missing layers or mis-shaped."""

    pass
