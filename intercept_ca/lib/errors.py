"""Exceptions raised by root CA lifecycle operations."""


class CAError(Exception):
    """Base class for root CA errors."""


class GenerationError(CAError):
    """Raised when a root or leaf certificate could not be created."""


class MissingAuthorityError(CAError):
    """Raised when an operation needs a root CA and none has been bound or stored."""


class ExtractionError(CAError, ValueError):
    """Raised when a PEM section holds content that is not valid base64."""


class AssemblyError(CAError):
    """Raised when a certificate and private key cannot be combined into a root CA."""


class BindingError(CAError):
    """Raised when the certificate service cannot be handed to the transport layer."""


class LeafIssuanceError(CAError, OSError):
    """Raised when a leaf certificate for a host could not be issued."""
