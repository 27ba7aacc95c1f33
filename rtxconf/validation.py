"""
RTX Config Translator — Validators

Semantic checks run before synthesis. The parser accepts anything
structurally well formed, so a record straight from `show config` can be
inspected or diffed even when writing it back would be rejected here.

Each validator raises ValidationError(field, message) on the first
problem found.
"""

from __future__ import annotations
from ipaddress import IPv6Address, IPv6Interface, AddressValueError, NetmaskValueError
from typing import Any, Callable, Optional
import re

from .errors import ValidationError
from .models import (
    StaticRoute, NextHop,
    DhcpScope, DhcpClientConfig, DhcpRelayConfig, DhcpLeaseType, MAX_RELAY_SERVERS,
    AdminConfig, UserConfig,
    BridgeConfig, IPsecTransport,
    IPv6InterfaceConfig, IPv6InterfaceAddress,
    IPv6Prefix, PrefixSource,
    NatStatic, NatStaticEntry,
    OspfConfig, OspfArea,
    SystemConfig,
)
from .notation import is_ipv4, ipv4_to_int


# ============================================================
# Vocabularies
# ============================================================

NEXT_HOP_INTERFACE_PREFIXES = ("pp ", "tunnel ", "dhcp ", "lan", "bridge", "null", "loopback")

DHCP_LEASE_TYPES = {"bind-only", "bind-priority", "lease-only"}

USER_CONNECTION_TYPES = {"serial", "telnet", "remote", "ssh", "sftp", "http"}
USER_GUI_PAGES = {"dashboard", "lan-map", "config"}

TRANSPORT_PROTOCOLS = {"tcp", "udp"}

OSPF_AREA_TYPES = {"normal", "stub", "nssa"}
OSPF_IMPORT_PROTOCOLS = {"static", "rip", "bgp"}

DHCPV6_SERVICES = {"server", "client", "off"}

CONSOLE_CHARACTER_SETS = {"ja.utf8", "ja.sjis", "ascii", "euc-jp"}
PACKET_BUFFER_SIZES = {"small", "middle", "large"}

_USERNAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_BRIDGE_NAME = re.compile(r"^bridge\d+$")
_BRIDGE_MEMBER = re.compile(r"^(lan\d+(/\d+)?|tunnel\d+|pp\d+|loopback\d+|bridge\d+)$")
_IPV6_INTERFACE = re.compile(r"^(lan|bridge|pp|tunnel)\d+$")
_DHCP_CLIENT_INTERFACE = re.compile(r"^(lan\d+(/\d+)?|bridge\d+|pp\d+|tunnel\d+|wan\d+)$")
_PREFIX_REF = re.compile(r"^(ra-prefix|dhcp-prefix)@\S+$")
_TIMEZONE = re.compile(r"^[+-]\d{2}:\d{2}$")


# ============================================================
# Helpers
# ============================================================

def _check_range(value: Optional[int], low: int, high: int, field: str) -> None:
    if value is None or not low <= value <= high:
        raise ValidationError(field, f"must be between {low} and {high}, got {value}")


def _check_ipv4(value: Optional[str], field: str) -> None:
    if not value:
        raise ValidationError(field, "is required")
    if not is_ipv4(value):
        raise ValidationError(field, f"invalid IPv4 address {value!r}")


def _check_positive(values: Optional[list[int]], field: str) -> None:
    for i, v in enumerate(values or []):
        if v <= 0:
            raise ValidationError(f"{field}[{i}]", f"must be positive, got {v}")


def _is_area_id(area_id: str) -> bool:
    if area_id == "backbone":
        return True
    if area_id.isdigit():
        return True
    return is_ipv4(area_id)


# ============================================================
# Static Routes
# ============================================================

def validate_next_hop(hop: NextHop, field: str = "next_hop") -> None:
    if hop.address and hop.interface:
        raise ValidationError(field, "specify either address or interface, not both")
    if not hop.address and not hop.interface:
        raise ValidationError(field, "must specify an address or an interface")
    if hop.address and not is_ipv4(hop.address):
        raise ValidationError(f"{field}.address", f"invalid IPv4 address {hop.address!r}")
    if hop.interface and not hop.interface.startswith(NEXT_HOP_INTERFACE_PREFIXES):
        raise ValidationError(f"{field}.interface", f"unsupported gateway interface {hop.interface!r}")
    if hop.weight is not None:
        _check_range(hop.weight, 0, 100, f"{field}.distance")
    if hop.filter is not None and hop.filter < 0:
        raise ValidationError(f"{field}.filter", f"must not be negative, got {hop.filter}")


def validate_static_route(route: StaticRoute) -> None:
    if route.destination is None:
        raise ValidationError("destination", "is required")
    if not is_ipv4(route.destination.address):
        raise ValidationError("destination.address", f"invalid IPv4 address {route.destination.address!r}")
    if not is_ipv4(route.destination.mask):
        raise ValidationError("destination.mask", f"invalid mask {route.destination.mask!r}")
    if not route.next_hops:
        raise ValidationError("next_hops", "at least one next hop is required")
    for i, hop in enumerate(route.next_hops):
        validate_next_hop(hop, f"next_hops[{i}]")


# ============================================================
# DHCP
# ============================================================

def validate_dhcp_scope(scope: DhcpScope) -> None:
    _check_range(scope.scope_id, 1, 255, "scope_id")
    _check_ipv4(scope.range_start, "range_start")
    _check_ipv4(scope.range_end, "range_end")
    _check_range(scope.prefix_len, 8, 32, "prefix_len")

    if scope.gateway is not None:
        _check_ipv4(scope.gateway, "gateway")
    for i, server in enumerate(scope.dns_servers or []):
        _check_ipv4(server, f"dns_servers[{i}]")
    for name, value in (("lease_seconds", scope.lease_seconds),
                        ("max_expire_seconds", scope.max_expire_seconds)):
        if value is None:
            continue
        if value < 0:
            raise ValidationError(name, f"must not be negative, got {value}")
        if value % 60:
            raise ValidationError(name, "must be a whole number of minutes")

    if ipv4_to_int(scope.range_start) >= ipv4_to_int(scope.range_end):
        raise ValidationError("range_start", "range_start must be less than range_end")


def validate_dhcp_client(client: DhcpClientConfig) -> None:
    if not client.interface or not _DHCP_CLIENT_INTERFACE.match(client.interface):
        raise ValidationError("interface", f"invalid interface {client.interface!r}")
    for name in ("hostname", "client_identifier", "vendor_class_identifier"):
        value = getattr(client, name)
        if value is not None and not value.strip():
            raise ValidationError(name, "must not be blank")


def validate_dhcp_relay(relay: DhcpRelayConfig) -> None:
    servers = relay.servers or []
    if len(servers) > MAX_RELAY_SERVERS:
        raise ValidationError("servers", f"at most {MAX_RELAY_SERVERS} relay servers, got {len(servers)}")
    for i, server in enumerate(servers):
        _check_ipv4(server, f"servers[{i}]")
    for i, select in enumerate(relay.selects):
        _check_range(select.scope_id, 1, 255, f"selects[{i}].scope_id")
        _check_ipv4(select.server, f"selects[{i}].server")


def validate_dhcp_lease_type(lease: DhcpLeaseType) -> None:
    _check_range(lease.scope_id, 1, 255, "scope_id")
    if lease.lease_type not in DHCP_LEASE_TYPES:
        raise ValidationError(
            "lease_type",
            f"must be one of {', '.join(sorted(DHCP_LEASE_TYPES))}, got {lease.lease_type!r}",
        )


# ============================================================
# Admin & Users
# ============================================================

def validate_user(user: UserConfig, require_password: bool = False) -> None:
    """
    require_password=True for account creation. Otherwise a user without
    a password is an attribute-only update and needs at least one attribute.
    """
    if not user.username or not _USERNAME.match(user.username):
        raise ValidationError(
            "username",
            f"must start with a letter and contain only letters, digits and _: {user.username!r}",
        )
    if not user.password and (require_password or user.attributes.is_empty):
        raise ValidationError("password", "is required")

    attrs = user.attributes
    for i, conn in enumerate(attrs.connection or []):
        if conn not in USER_CONNECTION_TYPES:
            raise ValidationError(f"connection[{i}]", f"unknown connection type {conn!r}")
    for i, page in enumerate(attrs.gui_pages or []):
        if page not in USER_GUI_PAGES:
            raise ValidationError(f"gui_pages[{i}]", f"unknown GUI page {page!r}")
    if attrs.login_timer is not None and attrs.login_timer < 0:
        raise ValidationError("login_timer", f"must not be negative, got {attrs.login_timer}")


def validate_admin(admin: AdminConfig) -> None:
    seen = set()
    for user in admin.users:
        if user.username in seen:
            raise ValidationError("users", f"duplicate user {user.username!r}")
        seen.add(user.username)
        validate_user(user)


# ============================================================
# Bridge / IPsec
# ============================================================

def validate_bridge(bridge: BridgeConfig) -> None:
    if not bridge.name or not _BRIDGE_NAME.match(bridge.name):
        raise ValidationError("name", f"must look like bridgeN, got {bridge.name!r}")
    if not bridge.members:
        raise ValidationError("members", "at least one member is required")
    seen = set()
    for i, member in enumerate(bridge.members):
        if not _BRIDGE_MEMBER.match(member):
            raise ValidationError(f"members[{i}]", f"invalid member interface {member!r}")
        if member in seen:
            raise ValidationError(f"members[{i}]", f"duplicate member {member!r}")
        seen.add(member)


def validate_ipsec_transport(t: IPsecTransport) -> None:
    if t.transport_id is None or t.transport_id <= 0:
        raise ValidationError("transport_id", f"must be positive, got {t.transport_id}")
    if t.tunnel_id is None or t.tunnel_id <= 0:
        raise ValidationError("tunnel_id", f"must be positive, got {t.tunnel_id}")
    if not t.protocol or t.protocol.lower() not in TRANSPORT_PROTOCOLS:
        raise ValidationError("protocol", f"must be tcp or udp, got {t.protocol!r}")
    _check_range(t.port, 1, 65535, "port")


# ============================================================
# IPv6
# ============================================================

def _validate_ipv6_address(addr: IPv6InterfaceAddress, field: str) -> None:
    if addr.address and addr.prefix_ref:
        raise ValidationError(field, "specify either address or prefix_ref, not both")
    if addr.address:
        try:
            IPv6Interface(addr.address)
        except (AddressValueError, NetmaskValueError, ValueError):
            raise ValidationError(f"{field}.address", f"invalid IPv6 address {addr.address!r}") from None
        return
    if not addr.prefix_ref:
        raise ValidationError(field, "must specify address or prefix_ref")
    if not _PREFIX_REF.match(addr.prefix_ref):
        raise ValidationError(f"{field}.prefix_ref", f"invalid prefix reference {addr.prefix_ref!r}")
    if not addr.interface_id or not addr.interface_id.startswith("::"):
        raise ValidationError(f"{field}.interface_id", f"invalid interface id {addr.interface_id!r}")


def validate_ipv6_interface(cfg: IPv6InterfaceConfig) -> None:
    if not cfg.interface or not _IPV6_INTERFACE.match(cfg.interface):
        raise ValidationError("interface", f"invalid interface {cfg.interface!r}")
    for i, addr in enumerate(cfg.addresses):
        _validate_ipv6_address(addr, f"addresses[{i}]")

    if cfg.rtadv is not None:
        if not cfg.rtadv.prefix_ids:
            raise ValidationError("rtadv.prefix_ids", "at least one prefix id is required")
        _check_positive(cfg.rtadv.prefix_ids, "rtadv.prefix_ids")
        if cfg.rtadv.lifetime is not None and cfg.rtadv.lifetime < 0:
            raise ValidationError("rtadv.lifetime", f"must not be negative, got {cfg.rtadv.lifetime}")

    if cfg.dhcpv6_service is not None and cfg.dhcpv6_service not in DHCPV6_SERVICES:
        raise ValidationError("dhcpv6_service", f"must be server, client or off, got {cfg.dhcpv6_service!r}")

    if cfg.mtu is not None and cfg.mtu != 0 and not 1280 <= cfg.mtu <= 65535:
        raise ValidationError("mtu", f"must be 0 or between 1280 and 65535, got {cfg.mtu}")

    _check_positive(cfg.secure_filter_in, "secure_filter_in")
    _check_positive(cfg.secure_filter_out, "secure_filter_out")
    _check_positive(cfg.dynamic_filter_out, "dynamic_filter_out")


def validate_ipv6_prefix(p: IPv6Prefix) -> None:
    _check_range(p.prefix_id, 1, 255, "prefix_id")
    _check_range(p.prefix_length, 1, 128, "prefix_length")
    if not isinstance(p.source, PrefixSource):
        raise ValidationError("source", f"unknown prefix source {p.source!r}")

    if p.source == PrefixSource.STATIC:
        if not p.prefix:
            raise ValidationError("prefix", "is required for a static prefix")
        try:
            IPv6Address(p.prefix)
        except (AddressValueError, ValueError):
            raise ValidationError("prefix", f"invalid IPv6 prefix {p.prefix!r}") from None
    elif not p.interface:
        raise ValidationError("interface", f"is required for a {p.source.value} prefix")


# ============================================================
# NAT Static
# ============================================================

def validate_nat_static_entry(entry: NatStaticEntry, field: str = "entry") -> None:
    _check_ipv4(entry.outside_global, f"{field}.outside_global")
    _check_ipv4(entry.inside_local, f"{field}.inside_local")
    if not entry.is_port_based:
        return

    if not entry.inside_local_port:
        raise ValidationError(f"{field}.inside_local_port", "port-based NAT requires inside_local_port")
    if not entry.outside_global_port:
        raise ValidationError(f"{field}.outside_global_port", "port-based NAT requires outside_global_port")
    _check_range(entry.inside_local_port, 1, 65535, f"{field}.inside_local_port")
    _check_range(entry.outside_global_port, 1, 65535, f"{field}.outside_global_port")
    if not entry.protocol:
        raise ValidationError(f"{field}.protocol", "port-based NAT requires protocol")
    if entry.protocol.lower() not in TRANSPORT_PROTOCOLS:
        raise ValidationError(f"{field}.protocol", f"must be tcp or udp, got {entry.protocol!r}")


def validate_nat_static(nat: NatStatic) -> None:
    _check_range(nat.descriptor_id, 1, 65535, "descriptor_id")
    for i, entry in enumerate(nat.entries):
        validate_nat_static_entry(entry, f"entries[{i}]")


# ============================================================
# OSPF
# ============================================================

def validate_ospf_area(area: OspfArea, field: str = "area") -> None:
    if not area.area_id or not _is_area_id(area.area_id):
        raise ValidationError(f"{field}.area_id", f"must be decimal or dotted, got {area.area_id!r}")
    if area.area_type not in OSPF_AREA_TYPES:
        raise ValidationError(
            f"{field}.area_type",
            f"must be one of {', '.join(sorted(OSPF_AREA_TYPES))}, got {area.area_type!r}",
        )
    if area.no_summary and area.area_type == "normal":
        raise ValidationError(f"{field}.no_summary", "only valid on stub or nssa areas")


def validate_ospf(cfg: OspfConfig) -> None:
    if cfg.router_id is not None:
        _check_ipv4(cfg.router_id, "router_id")
    for i, area in enumerate(cfg.areas):
        validate_ospf_area(area, f"areas[{i}]")
    for i, net in enumerate(cfg.networks):
        if not net.interface:
            raise ValidationError(f"networks[{i}].interface", "is required")
        if not _is_area_id(net.area_id):
            raise ValidationError(f"networks[{i}].area_id", f"must be decimal or dotted, got {net.area_id!r}")
    for proto in cfg.imports:
        if proto not in OSPF_IMPORT_PROTOCOLS:
            raise ValidationError("imports", f"cannot import from {proto!r}")


# ============================================================
# System
# ============================================================

def validate_system(cfg: SystemConfig) -> None:
    if cfg.timezone is not None and not _TIMEZONE.match(cfg.timezone):
        raise ValidationError("timezone", f"must look like +09:00, got {cfg.timezone!r}")

    console = cfg.console
    if console.character is not None and console.character not in CONSOLE_CHARACTER_SETS:
        raise ValidationError("console.character", f"unsupported character set {console.character!r}")
    if console.lines is not None and console.lines != "infinity":
        if not console.lines.isdigit() or int(console.lines) <= 0:
            raise ValidationError("console.lines", f"must be a positive integer or infinity, got {console.lines!r}")
    if console.prompt is not None and '"' in console.prompt:
        raise ValidationError("console.prompt", "must not contain double quotes")

    seen = set()
    for i, buf in enumerate(cfg.packet_buffers):
        field = f"packet_buffers[{i}]"
        if buf.size not in PACKET_BUFFER_SIZES:
            raise ValidationError(f"{field}.size", f"must be small, middle or large, got {buf.size!r}")
        if buf.size in seen:
            raise ValidationError(f"{field}.size", f"duplicate packet-buffer {buf.size!r}")
        seen.add(buf.size)
        for name in ("max_buffer", "max_free"):
            value = getattr(buf, name)
            if value is not None and value <= 0:
                raise ValidationError(f"{field}.{name}", f"must be positive, got {value}")
        if buf.max_buffer is not None and buf.max_free is not None and buf.max_free > buf.max_buffer:
            raise ValidationError(f"{field}.max_free", "must not exceed max_buffer")


# ============================================================
# Dispatch
# ============================================================

_VALIDATORS: dict[type, Callable[[Any], None]] = {
    StaticRoute:         validate_static_route,
    DhcpScope:           validate_dhcp_scope,
    DhcpClientConfig:    validate_dhcp_client,
    DhcpRelayConfig:     validate_dhcp_relay,
    DhcpLeaseType:       validate_dhcp_lease_type,
    AdminConfig:         validate_admin,
    UserConfig:          validate_user,
    BridgeConfig:        validate_bridge,
    IPsecTransport:      validate_ipsec_transport,
    IPv6InterfaceConfig: validate_ipv6_interface,
    IPv6Prefix:          validate_ipv6_prefix,
    NatStatic:           validate_nat_static,
    OspfConfig:          validate_ospf,
    SystemConfig:        validate_system,
}


def validate(record: Any) -> None:
    """Run the validator for the record's type. Raises ValidationError."""
    validator = _VALIDATORS.get(type(record))
    if validator is None:
        raise ValidationError("record", f"no validator for {type(record).__name__}")
    validator(record)


def is_valid(record: Any) -> bool:
    try:
        validate(record)
        return True
    except ValidationError:
        return False
