"""
IP address classifier
"""

import ipaddress
from enum import Enum
from typing import Optional, Union


class IPType(Enum):
    """IP address classification types"""
    PRIVATE = "private"
    CGNAT = "cgnat"
    LOOPBACK = "loopback"
    LINKLOCAL = "linklocal"
    MULTICAST = "multicast"
    RESERVED = "reserved"
    PUBLIC = "public"
    INVALID = "invalid"


class IPClassifier:
    """
    Classify client addresses found in access logs.

    Categories:
    - private: RFC1918 (10/8, 172.16/12, 192.168/16), IPv6 ULA
    - cgnat: Carrier-grade NAT (100.64/10)
    - loopback: 127/8, ::1
    - linklocal: 169.254/16, fe80::/10
    - multicast: 224/4, ff00::/8
    - reserved: Other reserved ranges
    - public: Globally routable
    - invalid: token is not an IP address at all
    """

    CGNAT_NETWORK = ipaddress.IPv4Network('100.64.0.0/10')

    @classmethod
    def parse(cls, ip: str) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
        """Parse an IPv4/IPv6 address, None if the token is not one"""
        if not ip:
            return None
        try:
            return ipaddress.ip_address(ip.strip('[]'))
        except ValueError:
            return None

    @classmethod
    def classify(cls, ip: str) -> IPType:
        """
        Classify an IP address.

        Args:
            ip: IPv4 or IPv6 address string

        Returns:
            IPType enum value
        """
        addr = cls.parse(ip)
        if addr is None:
            return IPType.INVALID

        if addr.is_loopback:
            return IPType.LOOPBACK

        if addr.is_link_local:
            return IPType.LINKLOCAL

        if addr.is_multicast:
            return IPType.MULTICAST

        # CGNAT range (not covered by is_private)
        if addr.version == 4 and addr in cls.CGNAT_NETWORK:
            return IPType.CGNAT

        if addr.is_private:
            return IPType.PRIVATE

        if addr.is_reserved:
            return IPType.RESERVED

        if addr.is_global:
            return IPType.PUBLIC

        return IPType.RESERVED
