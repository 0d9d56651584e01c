"""
Infrastructure failures raised by adapters.

Use cases catch these, log the cause and return a coded Error so the
caller only ever sees a generic server error.
"""


class InfrastructureError(Exception):
    """Base class for collaborator failures"""

    code = "INFRASTRUCTURE_ERROR"


class DirectoryUnavailable(InfrastructureError):
    """User store could not be read or written"""

    code = "STORAGE_UNAVAILABLE"


class EntropyUnavailable(InfrastructureError):
    """Secure random source failed"""

    code = "ENTROPY_UNAVAILABLE"


class DeliveryFailed(InfrastructureError):
    """Mail transport rejected or could not send a message"""

    code = "EMAIL_DELIVERY_FAILED"
