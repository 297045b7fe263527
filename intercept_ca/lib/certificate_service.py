"""Binds the active root CA's signing capability to the transport layer."""

import threading
from collections import OrderedDict
from typing import Protocol

from .config import CAConfig
from .errors import BindingError, GenerationError, LeafIssuanceError, MissingAuthorityError
from .leaf_issuer import LeafCertificateIssuer
from .logging_config import LOGGER
from .models import HostIdentity, LeafCertificate, RootCertificateAuthority


class CertificateService:
    """Mints leaf certificates from one root CA.

    Never mutated after construction apart from its leaf cache. A new root CA
    always gets a new service.
    """

    MAX_CACHED_LEAVES = 1000

    def __init__(self, authority: RootCertificateAuthority, issuer: LeafCertificateIssuer) -> None:
        self.authority = authority
        self._issuer = issuer
        self._cache: OrderedDict[HostIdentity, LeafCertificate] = OrderedDict()
        self._cache_lock = threading.Lock()

    def issue_leaf(self, host: HostIdentity | str) -> LeafCertificate:
        """Return a leaf certificate for host, signed by this service's root CA.

        Raises:
            LeafIssuanceError: If the certificate could not be generated
        """
        if isinstance(host, str):
            host = HostIdentity(host)

        with self._cache_lock:
            leaf = self._cache.get(host)
            if leaf is not None:
                self._cache.move_to_end(host)
                return leaf

        try:
            leaf = self._issuer.issue(self.authority, host)
        except GenerationError as e:
            raise LeafIssuanceError(str(e)) from e

        with self._cache_lock:
            self._cache[host] = leaf
            if len(self._cache) > self.MAX_CACHED_LEAVES:
                self._cache.popitem(last=False)
        return leaf


class CertificateServiceSink(Protocol):
    """Implemented by the transport layer that terminates intercepted TLS."""

    def set_certificate_service(self, service: CertificateService | None) -> None: ...


class CertificateServiceBinding:
    """Installs and removes the certificate service on the transport layer.

    The bound service is published by replacing a single reference, so
    concurrent issue_leaf calls use either the old or the new service.
    """

    def __init__(
        self,
        sink: CertificateServiceSink | None,
        issuer: LeafCertificateIssuer,
    ) -> None:
        self._sink = sink
        self._issuer = issuer
        self._service: CertificateService | None = None

    @property
    def service(self) -> CertificateService | None:
        return self._service

    def _get_issuer(self, config: CAConfig | None) -> LeafCertificateIssuer:
        if config is not None and config != self._issuer.config:
            self._issuer = LeafCertificateIssuer(config)
        return self._issuer

    def _set_on_sink(self, service: CertificateService | None) -> None:
        if self._sink is None:
            raise BindingError("no transport layer registered for the certificate service")
        self._sink.set_certificate_service(service)

    def bind(self, authority: RootCertificateAuthority, config: CAConfig | None = None) -> bool:
        """Build a service for authority and hand it to the transport layer.

        When config differs from the current issuer's, leaves of the new service
        are issued with a fresh issuer built from it.

        Returns:
            True if the transport layer accepted the new service. On failure the
            previously bound service, if any, stays in place.
        """
        try:
            service = CertificateService(authority, self._get_issuer(config))
            self._set_on_sink(service)
        except Exception:
            LOGGER.error("An error occurred while setting the certificate service", exc_info=True)
            return False

        self._service = service
        return True

    def unbind(self) -> None:
        """Remove the certificate service from the transport layer."""
        self._service = None
        try:
            self._set_on_sink(None)
        except Exception:
            LOGGER.error("An error occurred while removing the certificate service", exc_info=True)

    def issue_leaf(self, host: HostIdentity | str) -> LeafCertificate:
        """Issue a leaf certificate from the currently bound service.

        Raises:
            MissingAuthorityError: If no root CA has been bound
            LeafIssuanceError: If the certificate could not be generated
        """
        service = self._service
        if service is None:
            raise MissingAuthorityError("The root CA certificate was not set.")
        return service.issue_leaf(host)
