"""Leaf certificate issuance for intercepted TLS connections."""

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import generate_private_key
from .certificate_builder import CertificateBuilder
from .config import CAConfig
from .errors import GenerationError
from .models import HostIdentity, LeafCertificate, RootCertificateAuthority


class LeafCertificateIssuer:
    """Issues per-host leaf certificates signed by a root CA.

    One leaf key pair is generated up front and shared by every certificate
    this issuer signs, so a handshake only pays for the signature.
    """

    def __init__(self, config: CAConfig | None = None) -> None:
        """Initialize issuer and generate the shared leaf key pair.

        Args:
            config: Source of leaf validity and key size, defaults to CAConfig()
        """
        self.config = config or CAConfig()
        self._leaf_key: RSAPrivateKey = generate_private_key(self.config.key_size)

    def issue(self, authority: RootCertificateAuthority, host: HostIdentity) -> LeafCertificate:
        """Issue a leaf certificate for host signed by authority.

        Raises:
            GenerationError: If the host identity is unusable or signing fails
        """
        if not host.common_name:
            raise GenerationError("host identity has no common name")

        try:
            certificate = CertificateBuilder.build_leaf_certificate(
                host=host,
                public_key=self._leaf_key.public_key(),
                issuer_cert=authority.certificate,
                issuer_key=authority.private_key,
                validity_days=self.config.leaf_validity_days,
            )
        except (ValueError, TypeError) as e:
            raise GenerationError(f"failed to issue certificate for {host.common_name}: {e}") from e

        return LeafCertificate(
            certificate=certificate,
            private_key=self._leaf_key,
            issuer_certificate=authority.certificate,
        )
