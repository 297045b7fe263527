"""Root CA lifecycle: load, generate, import, expiry handling, export and binding."""

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from .authority_store import AuthorityStore
from .ca_utils import create_root_ca
from .cert_utils import (
    BEGIN_CERTIFICATE_TOKEN,
    BEGIN_PRIVATE_KEY_TOKEN,
    END_CERTIFICATE_TOKEN,
    END_PRIVATE_KEY_TOKEN,
    extract_certificate,
    extract_private_key,
    get_certificate_serial_hex,
    pem_to_authority,
    write_certificate_pem,
)
from .certificate_service import CertificateServiceBinding, CertificateServiceSink
from .errors import CAError, ExtractionError, MissingAuthorityError
from .leaf_issuer import LeafCertificateIssuer
from .logging_config import LOGGER
from .messages import get_message
from .models import (
    AuthorityStatus,
    ImportFailure,
    ImportResult,
    OwnershipMode,
    RootCertificateAuthority,
)
from .ownership import LegacyCASubsystem, detect_ownership_mode
from .s3_client import S3Client


class ConfirmationPrompt(Protocol):
    """Interactive channel to the operator, when the host has one."""

    def confirm(self, message: str) -> bool: ...

    def warn(self, message: str) -> None: ...


def _import_failure(failure: ImportFailure, *args: object) -> ImportResult:
    message = get_message(failure.message_key, *args)
    LOGGER.warning("Root CA import failed: %s", message)
    return ImportResult(failure=failure, message=message)


class ManagedAuthority:
    """Root CA handling when this package owns it."""

    def __init__(
        self,
        store: AuthorityStore,
        binding: CertificateServiceBinding,
        prompt: ConfirmationPrompt | None = None,
    ) -> None:
        self.store = store
        self.binding = binding
        self.prompt = prompt

    def ensure_active_authority(self) -> AuthorityStatus:
        try:
            authority = self.store.get_authority()
        except CAError:
            LOGGER.error("Failed to load the stored root CA certificate", exc_info=True)
            return AuthorityStatus.UNAVAILABLE

        if authority is None:
            if self.generate_root_certificate():
                return AuthorityStatus.GENERATED_AND_BOUND
            return AuthorityStatus.UNAVAILABLE

        if not self.binding.bind(authority, self.store.config):
            return AuthorityStatus.UNAVAILABLE

        now = datetime.now(timezone.utc)
        if not authority.is_expired(now):
            return AuthorityStatus.BOUND

        warn_msg = get_message(
            "warn.cert.expired", authority.not_after.isoformat(), now.isoformat()
        )
        LOGGER.warning(warn_msg)
        if self.prompt is not None and self.prompt.confirm(warn_msg):
            if not self.generate_root_certificate():
                self.prompt.warn(get_message("warn.cert.failed"))
        return AuthorityStatus.BOUND_EXPIRED

    def generate_root_certificate(self) -> bool:
        try:
            LOGGER.info("Creating new root CA certificate.")
            authority = create_root_ca(self.store.config)
            self.store.set_authority(authority)
        except Exception:
            LOGGER.error("Failed to create new root CA certificate", exc_info=True)
            return False

        LOGGER.info(
            "New root CA certificate created: serial %s, valid until %s",
            get_certificate_serial_hex(authority.certificate),
            authority.not_after.isoformat(),
        )
        return self.binding.bind(authority, self.store.config)

    def import_root_certificate(self, source: Path | bytes) -> ImportResult:
        if isinstance(source, bytes):
            data = source
        else:
            try:
                data = Path(source).read_bytes()
            except OSError as e:
                return _import_failure(ImportFailure.READ_FAILED, e)
        try:
            pem = data.decode("ascii")
        except UnicodeDecodeError as e:
            return _import_failure(ImportFailure.READ_FAILED, e)

        try:
            certificate = extract_certificate(pem)
        except ExtractionError:
            return _import_failure(ImportFailure.CERT_NOT_BASE64)
        if not certificate:
            return _import_failure(
                ImportFailure.NO_CERT_SECTION, BEGIN_CERTIFICATE_TOKEN, END_CERTIFICATE_TOKEN
            )

        try:
            key = extract_private_key(pem)
        except ExtractionError:
            return _import_failure(ImportFailure.KEY_NOT_BASE64)
        if not key:
            return _import_failure(
                ImportFailure.NO_KEY_SECTION, BEGIN_PRIVATE_KEY_TOKEN, END_PRIVATE_KEY_TOKEN
            )

        try:
            authority = pem_to_authority(certificate, key)
            self.store.set_authority(authority)
        except Exception as e:
            return _import_failure(ImportFailure.KEYSTORE_FAILED, e)

        LOGGER.info(
            "Root CA certificate imported: serial %s",
            get_certificate_serial_hex(authority.certificate),
        )
        if not self.binding.bind(authority, self.store.config):
            LOGGER.warning("Imported root CA certificate was stored but could not be bound")
        return ImportResult.success()

    def get_root_ca_material(self) -> RootCertificateAuthority | None:
        return self.store.get_authority()

    def shutdown(self) -> None:
        self.binding.unbind()


class LegacyDelegate:
    """Root CA handling forwarded to the legacy certificate subsystem."""

    def __init__(self, legacy: LegacyCASubsystem | None) -> None:
        self.legacy = legacy

    def ensure_active_authority(self) -> AuthorityStatus:
        return AuthorityStatus.DELEGATED

    def generate_root_certificate(self) -> bool:
        if self.legacy is None:
            LOGGER.warning("No legacy certificate subsystem to create the root CA certificate")
            return False
        try:
            self.legacy.create_new_root_ca()
            return True
        except Exception:
            LOGGER.error("Failed to create the new root CA certificate", exc_info=True)
        return False

    def import_root_certificate(self, source: Path | bytes) -> ImportResult:
        if self.legacy is None:
            return _import_failure(ImportFailure.UNAVAILABLE)
        try:
            answer = self.legacy.import_root_ca_certificate(source)
        except Exception as e:
            LOGGER.error("Legacy certificate subsystem failed to import", exc_info=True)
            return _import_failure(ImportFailure.LEGACY_FAILED, e)
        if answer:
            return _import_failure(ImportFailure.LEGACY_FAILED, answer)
        return ImportResult.success()

    def get_root_ca_material(self) -> RootCertificateAuthority | None:
        if self.legacy is None:
            return None
        return self.legacy.get_root_ca()

    def shutdown(self) -> None:
        pass


class RootCertificateManager:
    """Root CA lifecycle manager for the intercepting proxy.

    The ownership mode is fixed at construction and selects one strategy;
    every public operation dispatches through it. Operations that change the
    stored or bound root CA are serialized by one lock.
    """

    def __init__(
        self,
        mode: OwnershipMode,
        store: AuthorityStore | None = None,
        binding: CertificateServiceBinding | None = None,
        legacy: LegacyCASubsystem | None = None,
        prompt: ConfirmationPrompt | None = None,
    ) -> None:
        """Initialize manager with its collaborators.

        Args:
            mode: Ownership mode, decided once by the host
            store: Root CA store, required when owning CA handling
            binding: Transport layer binding, required when owning CA handling
            legacy: Legacy certificate subsystem, used when delegating
            prompt: Interactive confirmation channel, if any

        Raises:
            ValueError: If owning CA handling without a store or binding
        """
        self.mode = mode
        self._lock = threading.RLock()
        self._strategy: ManagedAuthority | LegacyDelegate
        if mode is OwnershipMode.OWNS_CA_HANDLING:
            if store is None or binding is None:
                raise ValueError("owning CA handling requires a store and a binding")
            self._strategy = ManagedAuthority(store, binding, prompt)
        else:
            self._strategy = LegacyDelegate(legacy)

    @classmethod
    def create(
        cls,
        sink: CertificateServiceSink | None,
        store: AuthorityStore,
        legacy: LegacyCASubsystem | None = None,
        handle_server_certs: bool | None = None,
        prompt: ConfirmationPrompt | None = None,
    ) -> "RootCertificateManager":
        """Compose a manager for the hosting proxy.

        Args:
            sink: Transport layer receiving the certificate service
            store: Root CA store
            legacy: Legacy certificate subsystem, if still installed
            handle_server_certs: Host override for the ownership decision
            prompt: Interactive confirmation channel, if any
        """
        mode = detect_ownership_mode(legacy, handle_server_certs)
        if mode is OwnershipMode.OWNS_CA_HANDLING:
            binding = CertificateServiceBinding(sink, LeafCertificateIssuer(store.config))
            return cls(mode, store=store, binding=binding, prompt=prompt)
        return cls(mode, legacy=legacy)

    def ensure_active_authority(self) -> AuthorityStatus:
        """Load, generate or accept the root CA and bind it to the transport layer."""
        with self._lock:
            status = self._strategy.ensure_active_authority()
        LOGGER.info("Root CA status: %s", status.value)
        return status

    def generate_root_certificate(self) -> bool:
        """Create a new root CA and bind it.

        Returns:
            True if a new root CA was created (and, when owning, bound).
        """
        with self._lock:
            return self._strategy.generate_root_certificate()

    def import_root_certificate(self, source: Path | bytes) -> ImportResult:
        """Replace the root CA with the certificate and private key in a PEM file or bytes."""
        with self._lock:
            return self._strategy.import_root_certificate(source)

    def get_root_ca_material(self) -> RootCertificateAuthority | None:
        return self._strategy.get_root_ca_material()

    def write_root_ca_cert_as_pem(self, destination: Path) -> None:
        """Write the root CA certificate (not the key) to destination in PEM format.

        Raises:
            OSError: If there is no root CA or the certificate could not be written
        """
        try:
            authority = self.get_root_ca_material()
        except CAError as e:
            raise OSError(f"failed to read the root CA: {e}") from e
        if authority is None:
            raise OSError("no root CA certificate to export")
        write_certificate_pem(authority.certificate, Path(destination))

    def publish_root_ca_cert(
        self, s3_client: S3Client, bucket_name: str, key: str = "root-ca.pem"
    ) -> str:
        """Upload the root CA certificate to S3 for clients to install.

        Returns:
            S3 version ID if versioning enabled, empty string otherwise

        Raises:
            MissingAuthorityError: If there is no root CA
        """
        authority = self.get_root_ca_material()
        if authority is None:
            raise MissingAuthorityError("no root CA certificate to publish")
        return s3_client.upload_root_ca_cert(bucket_name, authority.certificate_pem, key)

    def shutdown(self) -> None:
        """Remove the certificate service from the transport layer."""
        with self._lock:
            self._strategy.shutdown()
