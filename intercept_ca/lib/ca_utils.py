"""Reusable CA utility functions for root CA creation."""

from .cert_utils import generate_private_key
from .certificate_builder import CertificateBuilder
from .config import CAConfig
from .errors import GenerationError
from .models import RootCertificateAuthority


def create_root_ca(config: CAConfig) -> RootCertificateAuthority:
    """Generate a new root CA key pair and self-signed certificate.

    Args:
        config: CA configuration with subject fields, key size and validity

    Returns:
        RootCertificateAuthority carrying the config it was built from

    Raises:
        GenerationError: If key generation or signing fails
    """
    if config.root_validity_days <= 0:
        raise GenerationError(f"root CA validity must be positive: {config.root_validity_days}")

    try:
        private_key = generate_private_key(config.key_size)
        certificate = CertificateBuilder.build_root_ca(
            subject_dn=config.subject_dn(),
            private_key=private_key,
            validity_days=config.root_validity_days,
        )
    except (ValueError, TypeError) as e:
        raise GenerationError(f"failed to create root CA: {e}") from e

    return RootCertificateAuthority(private_key=private_key, certificate=certificate, config=config)
