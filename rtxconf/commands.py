"""
RTX Config Translator — Command Synthesis

Domain records → exact RTX CLI lines. The inverse of parsers.py:
parse(build(record)) reproduces the record on every field the device
echoes back. Passwords are the documented exception; `show config`
never prints them in plaintext.

Rules every builder follows:
  - A record missing a mandatory field raises SynthesisError before
    any text is produced. No partial command ever reaches the transport.
  - Unspecified (None) fields are omitted, so an update never clobbers
    device-side state the caller did not touch.

Updates:
  Some objects cannot be edited in place. A DHCP scope or a static NAT
  descriptor is deleted under its old key and recreated. The resulting
  CommandPlan keeps the two halves apart so the caller can tell a
  failed create after a successful delete from an ordinary failure.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
import logging

from .errors import SynthesisError
from .models import (
    StaticRoute, NextHop,
    DhcpScope, DhcpClientConfig, DhcpRelayConfig, DhcpLeaseType, MAX_RELAY_SERVERS,
    AdminConfig, UserConfig, UserAttributes,
    BridgeConfig, IPsecTransport,
    IPv6InterfaceConfig, IPv6InterfaceAddress, RtadvConfig,
    IPv6Prefix, PrefixSource,
    NatStatic, NatStaticEntry,
    OspfConfig, OspfArea,
    SystemConfig, PacketBuffer,
)
from .notation import format_network, format_duration, format_on_off
from .registry import (
    DOMAIN_ADMIN, DOMAIN_BRIDGE,
    DOMAIN_DHCP_CLIENT, DOMAIN_DHCP_SCOPE, DOMAIN_DHCP_RELAY, DOMAIN_DHCP_LEASE_TYPE,
    DOMAIN_IPSEC_TRANSPORT, DOMAIN_IPV6_INTERFACE, DOMAIN_IPV6_PREFIX,
    DOMAIN_NAT_STATIC, DOMAIN_OSPF, DOMAIN_ROUTES, DOMAIN_STATIC_ROUTE, DOMAIN_SYSTEM,
)

logger = logging.getLogger("rtxconf.commands")


# ============================================================
# Show Commands — what to run to get each parser's input
# ============================================================

SHOW_COMMANDS: dict[str, str] = {
    DOMAIN_ADMIN:           "show config",
    DOMAIN_BRIDGE:          'show config | grep "bridge member"',
    DOMAIN_DHCP_CLIENT:     'show config | grep "dhcp client"',
    DOMAIN_DHCP_SCOPE:      'show config | grep "dhcp scope"',
    DOMAIN_DHCP_RELAY:      'show config | grep "dhcp relay"',
    DOMAIN_DHCP_LEASE_TYPE: 'show config | grep "dhcp scope lease type"',
    DOMAIN_IPSEC_TRANSPORT: 'show config | grep "ipsec transport"',
    DOMAIN_IPV6_INTERFACE:  'show config | grep "ipv6"',
    DOMAIN_IPV6_PREFIX:     'show config | grep "ipv6 prefix"',
    DOMAIN_NAT_STATIC:      'show config | grep "nat descriptor"',
    DOMAIN_OSPF:            'show config | grep "ospf"',
    DOMAIN_ROUTES:          "show ip route",
    DOMAIN_STATIC_ROUTE:    'show config | grep "ip route"',
    DOMAIN_SYSTEM:          "show config",
}


# ============================================================
# Command Plan
# ============================================================

@dataclass
class CommandPlan:
    """
    Ordered commands for one logical change.

    `delete` runs first, then `create`. When both are non-empty the plan
    is a recreate: the object is absent between the two halves.
    """
    delete: list[str] = field(default_factory=list)
    create: list[str] = field(default_factory=list)

    @property
    def commands(self) -> list[str]:
        return self.delete + self.create

    @property
    def is_recreate(self) -> bool:
        return bool(self.delete) and bool(self.create)

    @property
    def is_empty(self) -> bool:
        return not self.delete and not self.create


def _require(value: Any, what: str) -> None:
    if value is None or value == "" or value == []:
        raise SynthesisError(f"cannot build command: {what} is required")


# ============================================================
# Static Routes
# ============================================================

def build_next_hop_clause(hop: NextHop) -> str:
    """'gateway 192.168.1.1 weight 2 hide'"""
    if hop.address and hop.interface:
        raise SynthesisError(
            f"next hop has both address {hop.address!r} and interface {hop.interface!r}"
        )
    if not hop.address and not hop.interface:
        raise SynthesisError("next hop has neither address nor interface")

    parts = ["gateway", hop.target]
    if hop.weight is not None:
        parts.append(f"weight {hop.weight}")
    if hop.filter is not None:
        parts.append(f"filter {hop.filter}")
    if hop.keepalive:
        parts.append("keepalive")
    if hop.hide:
        parts.append("hide")
    return " ".join(parts)


def build_static_route_commands(route: StaticRoute) -> list[str]:
    """One `ip route` line per next hop, in declaration order."""
    _require(route.destination, "route destination")
    if not route.next_hops:
        raise SynthesisError(f"route {route.destination} has no next hops")
    destination = format_network(route.destination)
    clauses = [build_next_hop_clause(hop) for hop in route.next_hops]
    return [f"ip route {destination} {clause}" for clause in clauses]


def build_static_route_delete_commands(route: StaticRoute) -> list[str]:
    _require(route.destination, "route destination")
    return [f"no ip route {format_network(route.destination)}"]


def build_next_hop_delete_command(route: StaticRoute, hop: NextHop) -> str:
    return f"no ip route {format_network(route.destination)} gateway {hop.target}"


def _static_route_update(old: StaticRoute, new: StaticRoute) -> CommandPlan:
    create = build_static_route_commands(new)
    if old.destination != new.destination:
        return CommandPlan(delete=build_static_route_delete_commands(old), create=create)

    kept = {hop.target for hop in new.next_hops}
    delete = [
        build_next_hop_delete_command(old, hop)
        for hop in old.next_hops
        if hop.target not in kept
    ]
    return CommandPlan(delete=delete, create=create)


# ============================================================
# DHCP
# ============================================================

def build_dhcp_scope_command(scope: DhcpScope) -> str:
    """dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 dns 8.8.8.8 expire 12:00"""
    _require(scope.scope_id, "scope id")
    _require(scope.range_start, "range start")
    _require(scope.range_end, "range end")
    if scope.prefix_len is None:
        raise SynthesisError("cannot build command: prefix length is required")

    parts = [f"dhcp scope {scope.scope_id} {scope.range_start}-{scope.range_end}/{scope.prefix_len}"]
    if scope.gateway:
        parts.append(f"gateway {scope.gateway}")
    if scope.dns_servers:
        parts.append("dns " + " ".join(scope.dns_servers))
    try:
        if scope.lease_seconds is not None:
            parts.append(f"expire {format_duration(scope.lease_seconds)}")
        if scope.max_expire_seconds is not None:
            parts.append(f"maxexpire {format_duration(scope.max_expire_seconds)}")
    except ValueError as e:
        raise SynthesisError(f"dhcp scope {scope.scope_id}: {e}") from None
    if scope.domain_name:
        parts.append(f"domain {scope.domain_name}")
    return " ".join(parts)


def build_dhcp_scope_delete_command(scope_id: int) -> str:
    return f"no dhcp scope {scope_id}"


def build_dhcp_scope_update(old: DhcpScope, new: DhcpScope) -> CommandPlan:
    """The device cannot edit a scope in place: delete, then recreate."""
    create = [build_dhcp_scope_command(new)]
    return CommandPlan(delete=[build_dhcp_scope_delete_command(old.scope_id)], create=create)


def build_dhcp_client_commands(client: DhcpClientConfig) -> list[str]:
    _require(client.interface, "interface")
    iface = client.interface
    commands = []
    if client.hostname is not None:
        commands.append(f"dhcp client hostname {iface} {client.hostname}")
    if client.client_identifier is not None:
        commands.append(f"dhcp client client-identifier {iface} {client.client_identifier}")
    if client.vendor_class_identifier is not None:
        commands.append(f"dhcp client vendor-class-identifier {iface} {client.vendor_class_identifier}")
    if client.require_dns is not None:
        commands.append(f"dhcp client require-dns {iface} {format_on_off(client.require_dns)}")
    if client.release_on_linkdown:
        commands.append(f"dhcp client release linkdown {iface}")
    return commands


def build_dhcp_client_delete_commands(client: DhcpClientConfig) -> list[str]:
    _require(client.interface, "interface")
    iface = client.interface
    commands = []
    if client.hostname is not None:
        commands.append(f"no dhcp client hostname {iface}")
    if client.client_identifier is not None:
        commands.append(f"no dhcp client client-identifier {iface}")
    if client.vendor_class_identifier is not None:
        commands.append(f"no dhcp client vendor-class-identifier {iface}")
    if client.require_dns is not None:
        commands.append(f"no dhcp client require-dns {iface}")
    if client.release_on_linkdown:
        commands.append(f"no dhcp client release linkdown {iface}")
    return commands


def build_dhcp_relay_commands(relay: DhcpRelayConfig) -> list[str]:
    commands = []
    if relay.servers:
        servers = relay.servers
        if len(servers) > MAX_RELAY_SERVERS:
            logger.warning(
                f"dhcp relay: {len(servers)} servers given, device takes "
                f"{MAX_RELAY_SERVERS}; truncating"
            )
            servers = servers[:MAX_RELAY_SERVERS]
        commands.append("dhcp relay server " + " ".join(servers))
    for select in relay.selects:
        _require(select.server, f"relay server for scope {select.scope_id}")
        commands.append(f"dhcp relay select {select.scope_id} {select.server}")
    return commands


def build_dhcp_relay_delete_commands(relay: DhcpRelayConfig) -> list[str]:
    commands = [f"no dhcp relay select {s.scope_id}" for s in relay.selects]
    if relay.servers:
        commands.append("no dhcp relay server")
    return commands


def build_dhcp_lease_type_command(lease: DhcpLeaseType) -> str:
    _require(lease.scope_id, "scope id")
    _require(lease.lease_type, "lease type")
    return f"dhcp scope lease type {lease.scope_id} {lease.lease_type}"


def build_dhcp_lease_type_delete_command(lease: DhcpLeaseType) -> str:
    return f"no dhcp scope lease type {lease.scope_id}"


# ============================================================
# Admin & Users
# ============================================================

def build_user_attribute_command(username: str, attrs: UserAttributes) -> Optional[str]:
    """None when no attribute is specified."""
    parts = []
    if attrs.administrator is not None:
        parts.append(f"administrator={format_on_off(attrs.administrator)}")
    if attrs.connection is not None:
        parts.append(f"connection={','.join(attrs.connection) or 'none'}")
    if attrs.gui_pages is not None:
        parts.append(f"gui-page={','.join(attrs.gui_pages) or 'none'}")
    if attrs.login_timer is not None:
        parts.append(f"login-timer={attrs.login_timer}")
    if not parts:
        return None
    return f"user attribute {username} " + " ".join(parts)


def build_user_commands(user: UserConfig) -> list[str]:
    """
    `login user` (only when a password is known) + `user attribute`.

    A user parsed back from the device has no plaintext password; building
    from it yields the attribute line alone, which updates without
    touching the credential.
    """
    _require(user.username, "username")
    commands = []
    if user.password:
        if user.encrypted:
            commands.append(f"login user {user.username} encrypted {user.password}")
        else:
            commands.append(f"login user {user.username} {user.password}")
    attr_cmd = build_user_attribute_command(user.username, user.attributes)
    if attr_cmd:
        commands.append(attr_cmd)
    if not commands:
        raise SynthesisError(f"user {user.username!r} has neither password nor attributes")
    return commands


def build_user_delete_commands(user: UserConfig) -> list[str]:
    _require(user.username, "username")
    return [
        f"no user attribute {user.username}",
        f"no login user {user.username}",
    ]


def build_admin_commands(admin: AdminConfig) -> list[str]:
    commands = []
    if admin.login_password:
        commands.append(f"login password {admin.login_password}")
    if admin.admin_password:
        commands.append(f"administrator password {admin.admin_password}")
    for user in admin.users:
        commands.extend(build_user_commands(user))
    return commands


def build_admin_delete_commands(admin: AdminConfig) -> list[str]:
    commands = []
    for user in admin.users:
        commands.extend(build_user_delete_commands(user))
    if admin.login_password:
        commands.append("no login password")
    if admin.admin_password:
        commands.append("no administrator password")
    return commands


# ============================================================
# Bridge / IPsec
# ============================================================

def build_bridge_command(bridge: BridgeConfig) -> str:
    _require(bridge.name, "bridge name")
    _require(bridge.members, f"members of {bridge.name}")
    return f"bridge member {bridge.name} " + " ".join(bridge.members)


def build_bridge_delete_command(bridge: BridgeConfig) -> str:
    _require(bridge.name, "bridge name")
    return f"no bridge member {bridge.name}"


def build_ipsec_transport_command(t: IPsecTransport) -> str:
    _require(t.transport_id, "transport id")
    _require(t.tunnel_id, "tunnel id")
    _require(t.protocol, "protocol")
    _require(t.port, "port")
    return f"ipsec transport {t.transport_id} {t.tunnel_id} {t.protocol} {t.port}"


def build_ipsec_transport_delete_command(t: IPsecTransport) -> str:
    return f"no ipsec transport {t.transport_id}"


# ============================================================
# IPv6
# ============================================================

def _format_ipv6_address(addr: IPv6InterfaceAddress) -> str:
    if addr.address and addr.prefix_ref:
        raise SynthesisError("ipv6 address has both a static address and a prefix reference")
    if addr.address:
        return addr.address
    if addr.prefix_ref and addr.interface_id:
        return f"{addr.prefix_ref}{addr.interface_id}"
    raise SynthesisError("ipv6 address needs a static address or a prefix reference + interface id")


def build_rtadv_command(iface: str, rtadv: RtadvConfig) -> str:
    _require(rtadv.prefix_ids, "rtadv prefix id")
    parts = [f"ipv6 {iface} rtadv send " + " ".join(str(p) for p in rtadv.prefix_ids)]
    if rtadv.o_flag is not None:
        parts.append(f"o_flag={format_on_off(rtadv.o_flag)}")
    if rtadv.m_flag is not None:
        parts.append(f"m_flag={format_on_off(rtadv.m_flag)}")
    if rtadv.lifetime is not None:
        parts.append(f"lifetime={rtadv.lifetime}")
    return " ".join(parts)


def build_ipv6_interface_commands(cfg: IPv6InterfaceConfig) -> list[str]:
    _require(cfg.interface, "interface")
    iface = cfg.interface
    commands = [f"ipv6 {iface} address {_format_ipv6_address(a)}" for a in cfg.addresses]
    if cfg.rtadv is not None:
        commands.append(build_rtadv_command(iface, cfg.rtadv))
    if cfg.dhcpv6_service is not None:
        commands.append(f"ipv6 {iface} dhcp service {cfg.dhcpv6_service}")
    if cfg.mtu is not None:
        commands.append(f"ipv6 {iface} mtu {cfg.mtu}")
    if cfg.secure_filter_in:
        commands.append(f"ipv6 {iface} secure filter in " + " ".join(map(str, cfg.secure_filter_in)))
    if cfg.secure_filter_out or cfg.dynamic_filter_out:
        line = f"ipv6 {iface} secure filter out"
        if cfg.secure_filter_out:
            line += " " + " ".join(map(str, cfg.secure_filter_out))
        if cfg.dynamic_filter_out:
            line += " dynamic " + " ".join(map(str, cfg.dynamic_filter_out))
        commands.append(line)
    return commands


def build_ipv6_interface_delete_commands(cfg: IPv6InterfaceConfig) -> list[str]:
    _require(cfg.interface, "interface")
    iface = cfg.interface
    commands = [f"no ipv6 {iface} address {_format_ipv6_address(a)}" for a in cfg.addresses]
    if cfg.rtadv is not None:
        commands.append(f"no ipv6 {iface} rtadv send")
    if cfg.dhcpv6_service is not None:
        commands.append(f"no ipv6 {iface} dhcp service")
    if cfg.mtu is not None:
        commands.append(f"no ipv6 {iface} mtu")
    if cfg.secure_filter_in:
        commands.append(f"no ipv6 {iface} secure filter in")
    if cfg.secure_filter_out or cfg.dynamic_filter_out:
        commands.append(f"no ipv6 {iface} secure filter out")
    return commands


def build_ipv6_prefix_command(p: IPv6Prefix) -> str:
    _require(p.prefix_id, "prefix id")
    _require(p.prefix_length, "prefix length")
    if p.source == PrefixSource.STATIC:
        _require(p.prefix, f"static prefix {p.prefix_id}")
        return f"ipv6 prefix {p.prefix_id} {p.prefix}/{p.prefix_length}"
    _require(p.interface, f"interface for prefix {p.prefix_id}")
    keyword = "ra-prefix" if p.source == PrefixSource.RA else "dhcp-prefix"
    return f"ipv6 prefix {p.prefix_id} {keyword}@{p.interface}::/{p.prefix_length}"


def build_ipv6_prefix_delete_command(p: IPv6Prefix) -> str:
    return f"no ipv6 prefix {p.prefix_id}"


# ============================================================
# NAT Static
# ============================================================

def build_nat_static_entry_command(descriptor_id: int, entry: NatStaticEntry) -> str:
    _require(entry.outside_global, "outside global address")
    _require(entry.inside_local, "inside local address")
    if not entry.is_port_based:
        return f"nat descriptor static {descriptor_id} {entry.outside_global}={entry.inside_local}"

    if entry.outside_global_port is None or entry.inside_local_port is None or not entry.protocol:
        raise SynthesisError(
            f"nat descriptor {descriptor_id}: port mapping needs both ports and a protocol"
        )
    return (
        f"nat descriptor static {descriptor_id} "
        f"{entry.outside_global}:{entry.outside_global_port}="
        f"{entry.inside_local}:{entry.inside_local_port} {entry.protocol}"
    )


def build_nat_static_commands(nat: NatStatic) -> list[str]:
    _require(nat.descriptor_id, "descriptor id")
    mappings = [build_nat_static_entry_command(nat.descriptor_id, e) for e in nat.entries]
    return [f"nat descriptor type {nat.descriptor_id} static"] + mappings


def build_nat_static_delete_commands(nat: NatStatic) -> list[str]:
    return [f"no nat descriptor type {nat.descriptor_id}"]


# ============================================================
# OSPF
# ============================================================

def build_ospf_area_command(area: OspfArea) -> str:
    _require(area.area_id, "area id")
    line = f"ospf area {area.area_id}"
    if area.area_type and area.area_type != "normal":
        line += f" {area.area_type}"
        if area.no_summary:
            line += " no-summary"
    return line


def build_ospf_commands(cfg: OspfConfig) -> list[str]:
    commands = []
    if cfg.router_id:
        commands.append(f"ospf router id {cfg.router_id}")
    commands.extend(build_ospf_area_command(a) for a in cfg.areas)
    for net in cfg.networks:
        _require(net.area_id, f"area for {net.interface}")
        commands.append(f"ip {net.interface} ospf area {net.area_id}")
    commands.extend(f"ospf import from {proto}" for proto in cfg.imports)
    if cfg.enabled is not None:
        commands.append(f"ospf use {format_on_off(cfg.enabled)}")
    return commands


def build_ospf_delete_commands(cfg: OspfConfig) -> list[str]:
    commands = ["ospf use off"]
    commands.extend(f"no ip {net.interface} ospf area" for net in cfg.networks)
    commands.extend(f"no ospf import from {proto}" for proto in cfg.imports)
    commands.extend(f"no ospf area {a.area_id}" for a in cfg.areas)
    if cfg.router_id:
        commands.append("no ospf router id")
    return commands


# ============================================================
# System
# ============================================================

def _format_prompt(prompt: str) -> str:
    return f'"{prompt}"' if " " in prompt else prompt


def build_packet_buffer_command(buf: PacketBuffer) -> Optional[str]:
    _require(buf.size, "packet-buffer size")
    parts = []
    if buf.max_buffer is not None:
        parts.append(f"max-buffer={buf.max_buffer}")
    if buf.max_free is not None:
        parts.append(f"max-free={buf.max_free}")
    if not parts:
        return None
    return f"system packet-buffer {buf.size} " + " ".join(parts)


def build_system_commands(cfg: SystemConfig) -> list[str]:
    commands = []
    if cfg.timezone:
        commands.append(f"timezone {cfg.timezone}")
    if cfg.console.character:
        commands.append(f"console character {cfg.console.character}")
    if cfg.console.lines:
        commands.append(f"console lines {cfg.console.lines}")
    if cfg.console.prompt:
        commands.append(f"console prompt {_format_prompt(cfg.console.prompt)}")
    for buf in cfg.packet_buffers:
        line = build_packet_buffer_command(buf)
        if line:
            commands.append(line)
    if cfg.statistics.traffic is not None:
        commands.append(f"statistics traffic {format_on_off(cfg.statistics.traffic)}")
    if cfg.statistics.nat is not None:
        commands.append(f"statistics nat {format_on_off(cfg.statistics.nat)}")
    return commands


def build_system_delete_commands(cfg: SystemConfig) -> list[str]:
    commands = []
    if cfg.timezone:
        commands.append("no timezone")
    if cfg.console.character:
        commands.append("no console character")
    if cfg.console.lines:
        commands.append("no console lines")
    if cfg.console.prompt:
        commands.append("no console prompt")
    commands.extend(f"no system packet-buffer {buf.size}" for buf in cfg.packet_buffers)
    if cfg.statistics.traffic is not None:
        commands.append("no statistics traffic")
    if cfg.statistics.nat is not None:
        commands.append("no statistics nat")
    return commands


# ============================================================
# Dispatch — by record type
# ============================================================

def _one(builder: Callable[[Any], str]) -> Callable[[Any], list[str]]:
    return lambda record: [builder(record)]


_CREATE_BUILDERS: dict[type, Callable[[Any], list[str]]] = {
    StaticRoute:         build_static_route_commands,
    DhcpScope:           _one(build_dhcp_scope_command),
    DhcpClientConfig:    build_dhcp_client_commands,
    DhcpRelayConfig:     build_dhcp_relay_commands,
    DhcpLeaseType:       _one(build_dhcp_lease_type_command),
    AdminConfig:         build_admin_commands,
    UserConfig:          build_user_commands,
    BridgeConfig:        _one(build_bridge_command),
    IPsecTransport:      _one(build_ipsec_transport_command),
    IPv6InterfaceConfig: build_ipv6_interface_commands,
    IPv6Prefix:          _one(build_ipv6_prefix_command),
    NatStatic:           build_nat_static_commands,
    OspfConfig:          build_ospf_commands,
    SystemConfig:        build_system_commands,
}

_DELETE_BUILDERS: dict[type, Callable[[Any], list[str]]] = {
    StaticRoute:         build_static_route_delete_commands,
    DhcpScope:           lambda s: [build_dhcp_scope_delete_command(s.scope_id)],
    DhcpClientConfig:    build_dhcp_client_delete_commands,
    DhcpRelayConfig:     build_dhcp_relay_delete_commands,
    DhcpLeaseType:       _one(build_dhcp_lease_type_delete_command),
    AdminConfig:         build_admin_delete_commands,
    UserConfig:          build_user_delete_commands,
    BridgeConfig:        _one(build_bridge_delete_command),
    IPsecTransport:      _one(build_ipsec_transport_delete_command),
    IPv6InterfaceConfig: build_ipv6_interface_delete_commands,
    IPv6Prefix:          _one(build_ipv6_prefix_delete_command),
    NatStatic:           build_nat_static_delete_commands,
    OspfConfig:          build_ospf_delete_commands,
    SystemConfig:        build_system_delete_commands,
}

# Object types the device cannot modify in place
_RECREATE_ON_UPDATE: dict[type, Callable[[Any, Any], CommandPlan]] = {
    DhcpScope:   build_dhcp_scope_update,
    NatStatic:   lambda old, new: CommandPlan(
        delete=build_nat_static_delete_commands(old),
        create=build_nat_static_commands(new),
    ),
    StaticRoute: _static_route_update,
}


def _builder(table: dict[type, Callable], record: Any) -> Callable:
    builder = table.get(type(record))
    if builder is None:
        raise SynthesisError(f"no command builder for {type(record).__name__}")
    return builder


def build_create_commands(record: Any) -> list[str]:
    return _builder(_CREATE_BUILDERS, record)(record)


def build_delete_commands(record: Any) -> list[str]:
    return _builder(_DELETE_BUILDERS, record)(record)


def build_update_plan(old: Any, new: Any) -> CommandPlan:
    """
    Commands to move the device from `old` to `new`.

    The create half is built first so an incomplete `new` fails before
    any delete is planned.
    """
    if type(old) is not type(new):
        raise SynthesisError(
            f"cannot update {type(old).__name__} with {type(new).__name__}"
        )
    recreate = _RECREATE_ON_UPDATE.get(type(new))
    if recreate is not None:
        plan = recreate(old, new)
    else:
        plan = CommandPlan(create=build_create_commands(new))
    logger.debug(
        f"update plan for {type(new).__name__}: "
        f"{len(plan.delete)} delete, {len(plan.create)} create"
    )
    return plan
