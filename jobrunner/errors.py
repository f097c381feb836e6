"""Errors raised along the dispatch path.

``retryable`` tells the retry controller whether another launch attempt can
help. Only spawn failures (and anything unexpected) are worth retrying.
"""


class DispatchError(Exception):
    retryable = True


class ValidationError(DispatchError):
    """Unknown class, class outside the allowed namespaces, or bad method."""

    retryable = False


class SpawnError(DispatchError):
    """The worker process could not be launched."""

    retryable = True


class CodecError(DispatchError):
    """Parameters could not be encoded, or a payload could not be decoded."""

    retryable = False


class FactoryError(DispatchError):
    """The factory call failed or did not return a queueable job."""

    retryable = False
