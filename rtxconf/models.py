"""
RTX Config Translator — Domain Records

One dataclass per configuration domain, each identified by a natural key.

Optional fields use None for "not specified". The device does not echo
default values in `show config`, so an unspecified field must stay
distinguishable from an explicit off/zero/empty. Update commands omit
untouched fields rather than clobbering device state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ============================================================
# Networks & Next-Hops
# ============================================================

@dataclass(frozen=True)
class NetworkSpec:
    """Destination address + dotted mask. 'default' is 0.0.0.0/0.0.0.0."""
    address: str
    mask: str

    @property
    def is_default(self) -> bool:
        return self.address == "0.0.0.0" and self.mask == "0.0.0.0"

    @property
    def prefix_len(self) -> int:
        """-1 when the mask is not contiguous."""
        from .notation import mask_to_prefix_len
        return mask_to_prefix_len(self.mask)

    def __str__(self) -> str:
        from .notation import format_network
        return format_network(self)


@dataclass(frozen=True)
class AddressRange:
    start: str
    end: str
    prefix_len: int


class GatewayKind(Enum):
    IP = "ip"
    INTERFACE = "interface"


@dataclass
class NextHop:
    """
    One gateway for a static route. Exactly one of address/interface.

    interface carries symbolic targets verbatim: "pp 1", "tunnel 3",
    "dhcp lan2", "null", "loopback".
    """
    address: Optional[str] = None
    interface: Optional[str] = None
    weight: Optional[int] = None        # device default 1 when absent
    filter: Optional[int] = None
    hide: bool = False
    keepalive: bool = False             # permanent route flag

    @property
    def distance(self) -> int:
        return self.weight if self.weight is not None else 1

    @property
    def kind(self) -> Optional[GatewayKind]:
        if self.address and not self.interface:
            return GatewayKind.IP
        if self.interface and not self.address:
            return GatewayKind.INTERFACE
        return None

    @property
    def target(self) -> str:
        return self.address or self.interface or ""


@dataclass
class StaticRoute:
    """`ip route` intent. Several gateways → ECMP, kept in declaration order."""
    destination: NetworkSpec
    next_hops: list[NextHop] = field(default_factory=list)

    @property
    def key(self) -> NetworkSpec:
        return self.destination


# ============================================================
# Live Routing Table
# ============================================================

class RouteProtocol(Enum):
    STATIC = "static"
    CONNECTED = "connected"
    RIP = "rip"
    OSPF = "ospf"
    BGP = "bgp"
    DHCP = "dhcp"
    UNKNOWN = "unknown"


@dataclass
class Route:
    """One row of `show ip route`. Runtime view, not config intent."""
    destination: NetworkSpec
    protocol: RouteProtocol = RouteProtocol.UNKNOWN
    gateway: Optional[str] = None       # None for connected
    interface: Optional[str] = None
    metric: Optional[int] = None

    @property
    def is_connected(self) -> bool:
        return self.protocol == RouteProtocol.CONNECTED


# ============================================================
# DHCP
# ============================================================

@dataclass
class DhcpScope:
    scope_id: int
    range_start: str
    range_end: str
    prefix_len: int
    gateway: Optional[str] = None
    dns_servers: Optional[list[str]] = None
    lease_seconds: Optional[int] = None
    max_expire_seconds: Optional[int] = None
    domain_name: Optional[str] = None

    @property
    def key(self) -> int:
        return self.scope_id


@dataclass
class DhcpClientConfig:
    """`dhcp client ...` settings for one interface."""
    interface: str
    hostname: Optional[str] = None
    client_identifier: Optional[str] = None
    vendor_class_identifier: Optional[str] = None
    require_dns: Optional[bool] = None
    release_on_linkdown: Optional[bool] = None

    @property
    def key(self) -> str:
        return self.interface


@dataclass
class DhcpRelaySelect:
    scope_id: int
    server: str


# Device limit on `dhcp relay server`
MAX_RELAY_SERVERS = 4


@dataclass
class DhcpRelayConfig:
    servers: Optional[list[str]] = None
    selects: list[DhcpRelaySelect] = field(default_factory=list)


@dataclass
class DhcpLeaseType:
    scope_id: int
    lease_type: str                     # bind-only, bind-priority, lease-only

    @property
    def key(self) -> int:
        return self.scope_id


# ============================================================
# Admin & Users
# ============================================================

@dataclass
class UserAttributes:
    administrator: Optional[bool] = None
    connection: Optional[list[str]] = None      # [] means "none"
    gui_pages: Optional[list[str]] = None
    login_timer: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.administrator is None
            and self.connection is None
            and self.gui_pages is None
            and self.login_timer is None
        )


@dataclass
class UserConfig:
    """
    A `login user` account.

    password is never present after a parse of `show config` unless the
    device echoed the encrypted form; treat a None password as unknown.
    """
    username: str
    password: Optional[str] = None
    encrypted: bool = False
    attributes: UserAttributes = field(default_factory=UserAttributes)

    @property
    def key(self) -> str:
        return self.username


@dataclass
class AdminConfig:
    login_password: Optional[str] = None
    admin_password: Optional[str] = None
    users: list[UserConfig] = field(default_factory=list)

    def user(self, username: str) -> Optional[UserConfig]:
        for u in self.users:
            if u.username == username:
                return u
        return None


# ============================================================
# Bridge / IPsec
# ============================================================

@dataclass
class BridgeConfig:
    name: str
    members: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.name


@dataclass
class IPsecTransport:
    transport_id: int
    tunnel_id: int
    protocol: str
    port: int

    @property
    def key(self) -> int:
        return self.transport_id


# ============================================================
# IPv6
# ============================================================

@dataclass
class IPv6InterfaceAddress:
    """
    Either a static address ("2001:db8::1/64") or a prefix reference
    ("ra-prefix@lan2" + interface id "::1/64").
    """
    address: Optional[str] = None
    prefix_ref: Optional[str] = None
    interface_id: Optional[str] = None


@dataclass
class RtadvConfig:
    prefix_ids: list[int] = field(default_factory=list)
    o_flag: Optional[bool] = None
    m_flag: Optional[bool] = None
    lifetime: Optional[int] = None


@dataclass
class IPv6InterfaceConfig:
    interface: str
    addresses: list[IPv6InterfaceAddress] = field(default_factory=list)
    rtadv: Optional[RtadvConfig] = None
    dhcpv6_service: Optional[str] = None
    mtu: Optional[int] = None
    secure_filter_in: Optional[list[int]] = None
    secure_filter_out: Optional[list[int]] = None
    dynamic_filter_out: Optional[list[int]] = None

    @property
    def key(self) -> str:
        return self.interface


class PrefixSource(Enum):
    STATIC = "static"
    RA = "ra"
    DHCPV6_PD = "dhcpv6-pd"


@dataclass
class IPv6Prefix:
    prefix_id: int
    prefix_length: int
    source: PrefixSource = PrefixSource.STATIC
    prefix: Optional[str] = None        # static only, e.g. "2001:db8:1234::"
    interface: Optional[str] = None     # ra / dhcpv6-pd only

    @property
    def key(self) -> int:
        return self.prefix_id


# ============================================================
# NAT
# ============================================================

@dataclass
class NatStaticEntry:
    outside_global: str
    inside_local: str
    outside_global_port: Optional[int] = None
    inside_local_port: Optional[int] = None
    protocol: Optional[str] = None

    @property
    def is_port_based(self) -> bool:
        return (
            self.outside_global_port is not None
            or self.inside_local_port is not None
            or bool(self.protocol)
        )


@dataclass
class NatStatic:
    descriptor_id: int
    entries: list[NatStaticEntry] = field(default_factory=list)

    @property
    def key(self) -> int:
        return self.descriptor_id


# ============================================================
# OSPF
# ============================================================

@dataclass
class OspfArea:
    area_id: str
    area_type: str = "normal"           # normal, stub, nssa
    no_summary: bool = False


@dataclass
class OspfNetwork:
    """`ip <interface> ospf area <area>`"""
    interface: str
    area_id: str


@dataclass
class OspfConfig:
    enabled: Optional[bool] = None
    router_id: Optional[str] = None
    areas: list[OspfArea] = field(default_factory=list)
    networks: list[OspfNetwork] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)   # "static", "rip", ...


# ============================================================
# System
# ============================================================

@dataclass
class ConsoleConfig:
    character: Optional[str] = None
    lines: Optional[str] = None         # integer string or "infinity"
    prompt: Optional[str] = None


@dataclass
class PacketBuffer:
    size: str                           # small, middle, large
    max_buffer: Optional[int] = None
    max_free: Optional[int] = None


@dataclass
class StatisticsConfig:
    traffic: Optional[bool] = None
    nat: Optional[bool] = None


@dataclass
class SystemConfig:
    timezone: Optional[str] = None
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    packet_buffers: list[PacketBuffer] = field(default_factory=list)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
