"""Decides whether this package or the legacy certificate subsystem owns the root CA."""

from pathlib import Path
from typing import Protocol

from .logging_config import LOGGER
from .models import OwnershipMode, RootCertificateAuthority


class LegacyCASubsystem(Protocol):
    """Capability surface of the deprecated certificate subsystem."""

    deprecated: bool

    def create_new_root_ca(self) -> None: ...

    def import_root_ca_certificate(self, source: Path | bytes) -> str | None: ...

    def get_root_ca(self) -> RootCertificateAuthority | None: ...


def detect_ownership_mode(
    legacy: LegacyCASubsystem | None,
    handle_server_certs: bool | None = None,
) -> OwnershipMode:
    """Resolve the ownership mode once, at startup composition.

    An explicit handle_server_certs flag from the host wins. Otherwise this
    package owns CA handling when there is no legacy subsystem or the legacy
    subsystem is marked deprecated.
    """
    if handle_server_certs is not None:
        owns = handle_server_certs
    else:
        owns = legacy is None or bool(getattr(legacy, "deprecated", False))

    mode = OwnershipMode.OWNS_CA_HANDLING if owns else OwnershipMode.DELEGATES_TO_LEGACY
    LOGGER.info("Root CA ownership mode: %s", mode.value)
    return mode
