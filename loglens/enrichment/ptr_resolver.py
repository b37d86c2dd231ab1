"""
PTR (reverse DNS) resolver
"""

import logging
import socket
from typing import Optional, Sequence

import dns.exception
import dns.resolver

from ..config import DEFAULT_RESOLVER_TIMEOUT


logger = logging.getLogger(__name__)


class PTRResolver:
    """
    Reverse DNS lookup for a single address.

    Backends:
    - system: platform resolver (hosts file + DNS) via socket.gethostbyaddr;
      timeout does not apply, the platform resolver uses its own
    - dns: PTR query through dnspython, optionally against given nameservers;
      timeout bounds each query

    Every failure maps to None; callers never see an exception.
    """

    BACKENDS = ('system', 'dns')

    def __init__(self, timeout: float = DEFAULT_RESOLVER_TIMEOUT,
                 backend: str = 'system',
                 nameservers: Optional[Sequence[str]] = None):
        backend = backend.lower()
        if backend not in self.BACKENDS:
            raise ValueError(
                f"Unknown resolver backend '{backend}'. "
                f"Supported: {', '.join(self.BACKENDS)}"
            )
        if nameservers and backend != 'dns':
            backend = 'dns'

        self.timeout = timeout
        self.backend = backend
        self._resolver: Optional[dns.resolver.Resolver] = None

        if backend == 'dns':
            try:
                self._resolver = dns.resolver.Resolver(configure=not nameservers)
            except dns.resolver.NoResolverConfiguration as e:
                raise ValueError(f"No system DNS configuration, pass nameservers: {e}")
            if nameservers:
                self._resolver.nameservers = list(nameservers)
            self._resolver.timeout = timeout
            self._resolver.lifetime = timeout

    def _resolve_system(self, ip: str) -> Optional[str]:
        """Platform reverse lookup"""
        try:
            hostname, _, _ = socket.gethostbyaddr(ip)
            return hostname
        except (socket.herror, socket.gaierror, socket.timeout, OSError,
                UnicodeError, ValueError):
            return None

    def _resolve_dns(self, ip: str) -> Optional[str]:
        """PTR query via dnspython"""
        try:
            answers = self._resolver.resolve_address(ip)
            for rdata in answers:
                return rdata.target.to_text(omit_final_dot=True)
        except (dns.exception.DNSException, ValueError):
            # NXDOMAIN, NoAnswer, timeouts and malformed addresses alike
            return None
        return None

    def resolve(self, ip: str) -> Optional[str]:
        """
        Reverse lookup for one IP.

        Args:
            ip: IP address to resolve

        Returns:
            Hostname or None if not found
        """
        if not ip:
            return None

        if self.backend == 'dns':
            hostname = self._resolve_dns(ip)
        else:
            hostname = self._resolve_system(ip)

        if hostname is None:
            logger.debug("No PTR for %s (%s backend)", ip, self.backend)
        return hostname
