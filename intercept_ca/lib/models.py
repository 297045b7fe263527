"""Data models for root CA lifecycle operations."""

import ipaddress
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes

from .config import CAConfig


class OwnershipMode(Enum):
    """Which subsystem is responsible for the root CA, fixed for the process lifetime."""

    OWNS_CA_HANDLING = "owns-ca-handling"
    DELEGATES_TO_LEGACY = "delegates-to-legacy"


class AuthorityStatus(Enum):
    """Outcome of bringing up the root CA at startup."""

    DELEGATED = "delegated"
    GENERATED_AND_BOUND = "generated-and-bound"
    BOUND = "bound"
    BOUND_EXPIRED = "bound-expired"
    UNAVAILABLE = "unavailable"


class ImportFailure(Enum):
    """Reasons a PEM import did not replace the root CA."""

    READ_FAILED = "importpem.failedreadfile"
    NO_CERT_SECTION = "importpem.nocertsection"
    CERT_NOT_BASE64 = "importpem.certnobase64"
    NO_KEY_SECTION = "importpem.noprivkeysection"
    KEY_NOT_BASE64 = "importpem.privkeynobase64"
    KEYSTORE_FAILED = "importpem.failedkeystore"
    LEGACY_FAILED = "importpem.legacyfailed"
    UNAVAILABLE = "importpem.unavailable"

    @property
    def message_key(self) -> str:
        return self.value


@dataclass(frozen=True)
class ImportResult:
    """Result of a root CA import: either success or exactly one failure reason."""

    failure: ImportFailure | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls) -> "ImportResult":
        return cls()


@dataclass(frozen=True)
class RootCertificateAuthority:
    """Root CA signing material.

    config is the generation configuration for generated authorities and None
    for authorities assembled from imported PEM.
    """

    private_key: CertificateIssuerPrivateKeyTypes
    certificate: x509.Certificate
    config: CAConfig | None = None

    @property
    def certificate_pem(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    @property
    def private_key_pem(self) -> bytes:
        """Private key as unencrypted PKCS8 PEM."""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    @property
    def keystore_pem(self) -> bytes:
        """Certificate block followed by private key block, the persisted form."""
        return self.certificate_pem + self.private_key_pem

    @property
    def not_after(self) -> datetime:
        return self.certificate.not_valid_after_utc

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True if the certificate's not-valid-after instant is in the past."""
        if now is None:
            now = datetime.now(timezone.utc)
        return self.not_after < now


@dataclass(frozen=True)
class HostIdentity:
    """Host a leaf certificate is requested for.

    The common name is always added as a subject alternative name, followed
    by any extra names (DNS names or IP address literals).
    """

    common_name: str
    alt_names: tuple[str, ...] = field(default_factory=tuple)

    def subject_alt_names(self) -> list[x509.GeneralName]:
        names: list[x509.GeneralName] = []
        seen: set[str] = set()
        for name in (self.common_name, *self.alt_names):
            if not name or name in seen:
                continue
            seen.add(name)
            try:
                names.append(x509.IPAddress(ipaddress.ip_address(name)))
            except ValueError:
                names.append(x509.DNSName(name))
        return names


@dataclass(frozen=True)
class LeafCertificate:
    """Leaf certificate presented to a client in place of the real site's certificate."""

    certificate: x509.Certificate
    private_key: CertificateIssuerPrivateKeyTypes
    issuer_certificate: x509.Certificate

    def certificate_chain_pem(self) -> bytes:
        """Leaf certificate followed by the root CA certificate, PEM encoded."""
        return self.certificate.public_bytes(
            serialization.Encoding.PEM
        ) + self.issuer_certificate.public_bytes(serialization.Encoding.PEM)

    def private_key_pem(self) -> bytes:
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
