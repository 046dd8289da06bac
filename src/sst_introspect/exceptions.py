class IntrospectError(Exception):
    """Base class for errors surfaced to the caller as a readable message."""


class InvalidRequestError(IntrospectError):
    """Malformed tab name, resource URI or unknown stage."""


class ServerNotRunningError(IntrospectError):
    """No dev server was discovered, or it did not answer the liveness probe."""
