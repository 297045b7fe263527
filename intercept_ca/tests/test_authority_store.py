"""Tests for root CA stores."""

import stat
from pathlib import Path

import pytest

from intercept_ca.lib.authority_store import FileAuthorityStore, InMemoryAuthorityStore
from intercept_ca.lib.config import CAConfig
from intercept_ca.lib.errors import CAError
from intercept_ca.lib.models import RootCertificateAuthority


class TestInMemoryAuthorityStore:
    """Tests for InMemoryAuthorityStore."""

    def test_empty_store_returns_none(self) -> None:
        """A fresh store has no authority."""
        assert InMemoryAuthorityStore().get_authority() is None

    def test_initial_authority_returned(self, root_authority: RootCertificateAuthority) -> None:
        """Authority passed at construction is the stored one."""
        store = InMemoryAuthorityStore(root_authority)

        assert store.get_authority() is root_authority

    def test_set_replaces_authority(
        self,
        root_authority: RootCertificateAuthority,
        expired_authority: RootCertificateAuthority,
    ) -> None:
        """set_authority replaces the current authority."""
        store = InMemoryAuthorityStore(root_authority)
        store.set_authority(expired_authority)

        assert store.get_authority() is expired_authority

    def test_config_defaults_and_setter(self, ca_config: CAConfig) -> None:
        """Generation config defaults to CAConfig() and can be replaced."""
        store = InMemoryAuthorityStore()
        assert store.config == CAConfig()

        store.config = ca_config

        assert store.config is ca_config


class TestFileAuthorityStore:
    """Tests for FileAuthorityStore."""

    def test_missing_file_returns_none(self, temp_output_dir: Path) -> None:
        """No keystore on disk means no authority."""
        assert FileAuthorityStore(temp_output_dir).get_authority() is None

    def test_set_writes_keystore(
        self, temp_output_dir: Path, root_authority: RootCertificateAuthority
    ) -> None:
        """Keystore PEM holds certificate and private key under root-ca/."""
        store = FileAuthorityStore(temp_output_dir)
        store.set_authority(root_authority)

        path = temp_output_dir / "root-ca" / "RootCA.pem"
        assert store.keystore_path == path
        assert path.read_bytes() == root_authority.keystore_pem

    def test_keystore_is_owner_only(
        self, temp_output_dir: Path, root_authority: RootCertificateAuthority
    ) -> None:
        """Keystore holding the private key is not group/world readable."""
        store = FileAuthorityStore(temp_output_dir)
        store.set_authority(root_authority)

        mode = stat.S_IMODE(store.keystore_path.stat().st_mode)
        assert mode == 0o600

    def test_persists_across_instances(
        self, temp_output_dir: Path, root_authority: RootCertificateAuthority
    ) -> None:
        """A new store over the same directory loads the saved authority."""
        FileAuthorityStore(temp_output_dir).set_authority(root_authority)

        loaded = FileAuthorityStore(temp_output_dir).get_authority()

        assert loaded is not None
        assert loaded.certificate_pem == root_authority.certificate_pem
        assert loaded.private_key_pem == root_authority.private_key_pem

    def test_overwrite_leaves_no_temp_files(
        self,
        temp_output_dir: Path,
        root_authority: RootCertificateAuthority,
        expired_authority: RootCertificateAuthority,
    ) -> None:
        """Replacing the keystore leaves only the keystore file behind."""
        store = FileAuthorityStore(temp_output_dir)
        store.set_authority(root_authority)
        store.set_authority(expired_authority)

        assert [p.name for p in (temp_output_dir / "root-ca").iterdir()] == ["RootCA.pem"]
        assert store.keystore_path.read_bytes() == expired_authority.keystore_pem

    def test_corrupt_keystore_raises(self, temp_output_dir: Path) -> None:
        """Corrupt material is reported instead of being treated as absent."""
        path = temp_output_dir / "root-ca" / "RootCA.pem"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"-----BEGIN CERTIFICATE-----\n@@@\n-----END CERTIFICATE-----\n")

        with pytest.raises(CAError):
            FileAuthorityStore(temp_output_dir).get_authority()

    def test_failed_write_keeps_previous_authority(
        self,
        temp_output_dir: Path,
        root_authority: RootCertificateAuthority,
        expired_authority: RootCertificateAuthority,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A failing write neither changes the file nor the cached authority."""
        store = FileAuthorityStore(temp_output_dir)
        store.set_authority(root_authority)

        def failing_replace(src: str, dst: Path) -> None:
            raise OSError("disk full")

        monkeypatch.setattr("intercept_ca.lib.authority_store.os.replace", failing_replace)

        with pytest.raises(OSError, match="disk full"):
            store.set_authority(expired_authority)

        assert store.get_authority() is root_authority
        assert store.keystore_path.read_bytes() == root_authority.keystore_pem
        assert [p.name for p in (temp_output_dir / "root-ca").iterdir()] == ["RootCA.pem"]

    def test_unreadable_keystore_raises_ca_error(self, temp_output_dir: Path) -> None:
        """Backend read failures surface as CAError, not OSError."""
        (temp_output_dir / "root-ca" / "RootCA.pem").mkdir(parents=True)

        with pytest.raises(CAError):
            FileAuthorityStore(temp_output_dir).get_authority()
