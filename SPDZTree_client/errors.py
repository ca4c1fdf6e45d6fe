"""
errors.py

Error taxonomy for the client. Every class here is fatal for a session:
a secret-sharing round that has consumed part of its triples cannot be resumed.
Data-quality problems are not errors; they are reported via logger.secure_log.
"""


class SPDZClientError(RuntimeError):
    """Base class for fatal client errors."""


class ProtocolViolation(SPDZClientError):
    """An engine sent inconsistent triples or an unauthenticated result."""


class WireFormatError(ProtocolViolation):
    """A received buffer does not hold what the protocol step expects."""


class TransportFailure(SPDZClientError):
    """A connection to an engine could not be opened or was lost."""


class ConfigurationError(SPDZClientError):
    """Missing field parameters, bad CLI values or a malformed dataset."""
