"""Test fixtures for intercept_ca tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from intercept_ca.lib.cert_utils import (
    generate_private_key,
    serialize_certificate,
    serialize_private_key,
)
from intercept_ca.lib.certificate_builder import CertificateBuilder
from intercept_ca.lib.certificate_service import CertificateServiceBinding
from intercept_ca.lib.config import CAConfig, DistinguishedName
from intercept_ca.lib.leaf_issuer import LeafCertificateIssuer
from intercept_ca.lib.models import RootCertificateAuthority
from intercept_ca.tests.doubles import RecordingSink


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Return temporary directory for test output artifacts."""
    return tmp_path


@pytest.fixture
def ca_config() -> CAConfig:
    """Return test CA configuration with short validity periods."""
    return CAConfig(
        country="GB",
        state="London",
        locality="London",
        organization="Test Org",
        organizational_unit="Test Unit",
        common_name="Test Root CA",
        root_validity_days=30,
        leaf_validity_days=7,
        key_size=2048,
    )


@pytest.fixture
def root_dn() -> DistinguishedName:
    """Return test Root CA distinguished name."""
    return DistinguishedName(
        country="GB",
        state="London",
        locality="London",
        organization="Test Org",
        organizational_unit="Test Unit",
        common_name="Test Root CA",
    )


@pytest.fixture
def root_key() -> RSAPrivateKey:
    """Generate RSA private key for Root CA."""
    return generate_private_key(key_size=2048)


@pytest.fixture
def root_cert(root_key: RSAPrivateKey, root_dn: DistinguishedName) -> x509.Certificate:
    """Generate self-signed Root CA certificate."""
    return CertificateBuilder.build_root_ca(
        subject_dn=root_dn,
        private_key=root_key,
        validity_days=30,
    )


@pytest.fixture
def root_authority(
    root_key: RSAPrivateKey, root_cert: x509.Certificate, ca_config: CAConfig
) -> RootCertificateAuthority:
    """Return a valid root CA."""
    return RootCertificateAuthority(private_key=root_key, certificate=root_cert, config=ca_config)


@pytest.fixture
def expired_authority(
    root_key: RSAPrivateKey, root_dn: DistinguishedName
) -> RootCertificateAuthority:
    """Return a root CA whose certificate expired one second ago."""
    not_before = datetime.now(timezone.utc) - timedelta(days=1, seconds=1)
    certificate = CertificateBuilder.build_root_ca(
        subject_dn=root_dn,
        private_key=root_key,
        validity_days=1,
        not_before=not_before,
    )
    return RootCertificateAuthority(private_key=root_key, certificate=certificate)


@pytest.fixture
def root_ca_pem(root_key: RSAPrivateKey, root_cert: x509.Certificate) -> bytes:
    """Return PEM text with the root certificate followed by its private key."""
    return serialize_certificate(root_cert) + serialize_private_key(root_key)


@pytest.fixture
def leaf_issuer(ca_config: CAConfig) -> LeafCertificateIssuer:
    """Return leaf issuer using the test configuration."""
    return LeafCertificateIssuer(ca_config)


@pytest.fixture
def sink() -> RecordingSink:
    """Return recording transport layer."""
    return RecordingSink()


@pytest.fixture
def binding(sink: RecordingSink, leaf_issuer: LeafCertificateIssuer) -> CertificateServiceBinding:
    """Return binding to the recording transport layer."""
    return CertificateServiceBinding(sink, leaf_issuer)
