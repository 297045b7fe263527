"""Root CA configuration dataclasses."""

from dataclasses import dataclass

from cryptography import x509
from cryptography.x509 import oid


@dataclass(frozen=True)
class CAConfig:
    """Parameters used to generate a root CA and the leaf certificates it signs."""

    country: str = "GB"
    state: str = "London"
    locality: str = "London"
    organization: str = "Intercepting Proxy"
    organizational_unit: str = "Intercepting Proxy Root CA"
    common_name: str = "Intercepting Proxy Root CA"
    root_validity_days: int = 365
    leaf_validity_days: int = 368
    key_size: int = 2048

    def subject_dn(self) -> "DistinguishedName":
        """Return the root CA subject built from the configured fields."""
        return DistinguishedName(
            country=self.country,
            state=self.state,
            locality=self.locality,
            organization=self.organization,
            organizational_unit=self.organizational_unit,
            common_name=self.common_name,
        )


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name."""

    country: str
    state: str
    locality: str
    organization: str
    organizational_unit: str
    common_name: str

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        return x509.Name(
            [
                x509.NameAttribute(oid.NameOID.COUNTRY_NAME, self.country),
                x509.NameAttribute(oid.NameOID.STATE_OR_PROVINCE_NAME, self.state),
                x509.NameAttribute(oid.NameOID.LOCALITY_NAME, self.locality),
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit),
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
            ]
        )
