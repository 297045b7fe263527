"""Certificate builder for the root CA and the per-host leaf certificates it signs."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.types import (
    CertificateIssuerPrivateKeyTypes,
    CertificatePublicKeyTypes,
)
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from .cert_utils import generate_serial_number
from .config import DistinguishedName
from .models import HostIdentity

MAX_COMMON_NAME_LENGTH = 64


class CertificateBuilder:
    """Builds the self-signed root CA and leaf certificates for intercepted hosts."""

    @staticmethod
    def build_root_ca(
        subject_dn: DistinguishedName,
        private_key: CertificateIssuerPrivateKeyTypes,
        validity_days: int,
        not_before: datetime | None = None,
    ) -> x509.Certificate:
        """Build self-signed Root CA certificate.

        Args:
            subject_dn: Distinguished name for certificate subject and issuer
            private_key: Private key for signing
            validity_days: Certificate validity period in days
            not_before: Start of validity, defaults to now

        Returns:
            Self-signed X.509 certificate with CA extensions
        """
        subject = subject_dn.to_x509_name()
        if not_before is None:
            not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)
        public_key = private_key.public_key()

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=0),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=False,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=True,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(public_key),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_leaf_certificate(
        host: HostIdentity,
        public_key: CertificatePublicKeyTypes,
        issuer_cert: x509.Certificate,
        issuer_key: CertificateIssuerPrivateKeyTypes,
        validity_days: int,
    ) -> x509.Certificate:
        """Build a TLS server certificate for host, signed by the root CA.

        The validity period does not extend past the issuer's expiry unless the
        issuer has already expired.

        Args:
            host: Host identity providing CN and subject alternative names
            public_key: Public key of the leaf key pair
            issuer_cert: Root CA certificate (issuer)
            issuer_key: Root CA private key for signing
            validity_days: Requested validity period in days

        Returns:
            X.509 end-entity certificate signed by the root CA
        """
        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)
        if not_before < issuer_cert.not_valid_after_utc < not_after:
            not_after = issuer_cert.not_valid_after_utc

        # CN is capped at 64 characters; longer hosts are named by the SAN only
        if len(host.common_name) <= MAX_COMMON_NAME_LENGTH:
            subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, host.common_name)])
        else:
            subject = x509.Name([])

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer_cert.subject)
            .public_key(public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                critical=False,
            )
            .add_extension(
                x509.SubjectAlternativeName(host.subject_alt_names()),
                critical=len(subject) == 0,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
                critical=False,
            )
        )

        return builder.sign(issuer_key, hashes.SHA256())
