"""Persistence boundary for the configured root CA."""

import os
import tempfile
import threading
from pathlib import Path

from .cert_utils import keystore_pem_to_authority
from .config import CAConfig
from .errors import CAError
from .logging_config import LOGGER
from .models import RootCertificateAuthority


class AuthorityStore:
    """Holds the persisted root CA and the configuration used to generate new ones.

    Readers observe a complete authority or None: the cached reference is
    only swapped after the backend accepted the new authority.
    Subclasses implement _load and _save.
    """

    def __init__(self, config: CAConfig | None = None) -> None:
        self._config = config or CAConfig()
        self._authority: RootCertificateAuthority | None = None
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def config(self) -> CAConfig:
        return self._config

    @config.setter
    def config(self, config: CAConfig) -> None:
        self._config = config

    def get_authority(self) -> RootCertificateAuthority | None:
        """Return the stored root CA, loading it from the backend on first access.

        Raises:
            CAError: If persisted material is corrupt or the backend cannot be read
        """
        with self._lock:
            if not self._loaded:
                self._authority = self._load()
                self._loaded = True
            return self._authority

    def set_authority(self, authority: RootCertificateAuthority) -> None:
        """Persist authority and make it the current one."""
        with self._lock:
            self._save(authority)
            self._authority = authority
            self._loaded = True

    def _load(self) -> RootCertificateAuthority | None:
        return None

    def _save(self, authority: RootCertificateAuthority) -> None:
        pass


class InMemoryAuthorityStore(AuthorityStore):
    """Process-local store, for embedding and tests."""

    def __init__(
        self,
        authority: RootCertificateAuthority | None = None,
        config: CAConfig | None = None,
    ) -> None:
        super().__init__(config)
        self._initial = authority

    def _load(self) -> RootCertificateAuthority | None:
        return self._initial


class FileAuthorityStore(AuthorityStore):
    """Stores the root CA as a single keystore PEM file (certificate + private key)."""

    KEYSTORE_FILENAME = "RootCA.pem"

    def __init__(self, base_dir: Path, config: CAConfig | None = None) -> None:
        """Initialize file store.

        Args:
            base_dir: Base directory, the keystore lives in {base_dir}/root-ca/
            config: Generation configuration for new root CAs
        """
        super().__init__(config)
        self.keystore_path = base_dir / "root-ca" / self.KEYSTORE_FILENAME

    def _load(self) -> RootCertificateAuthority | None:
        if not self.keystore_path.exists():
            LOGGER.info("No root CA keystore at %s", self.keystore_path)
            return None
        try:
            keystore_pem = self.keystore_path.read_bytes()
        except OSError as e:
            raise CAError(f"failed to read root CA keystore {self.keystore_path}: {e}") from e
        return keystore_pem_to_authority(keystore_pem)

    def _save(self, authority: RootCertificateAuthority) -> None:
        directory = self.keystore_path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".RootCA-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(authority.keystore_pem)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.keystore_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        LOGGER.info("Root CA keystore written to %s", self.keystore_path)
