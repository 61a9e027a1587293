class KouseiError(Exception):
    """Base class for errors raised by the linting engine."""


class TokenizerError(KouseiError):
    """The tokenizer could not be loaded or failed on a paragraph."""


class InferenceError(KouseiError):
    """An inference call failed, timed out, or returned nothing usable."""


class InferenceCancelled(InferenceError):
    """An inference call was abandoned because cancellation was requested."""
