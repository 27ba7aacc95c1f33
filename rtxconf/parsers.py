"""
RTX Config Translator — Domain Parsers

Raw `show config` / `show ip route` text → domain records.

Every domain parser:
  - Takes the full raw dump (str), picks out only its own directives
  - Skips blank lines, comments (# / !) and negations (no ...)
  - Classifies each line with an ordered matcher list: one Enum per
    domain naming the directive shape, most specific pattern first
  - Hands free-form option tails to the option grammar
  - Merges repeated natural keys per the domain's rule

Strictness is per domain. Lenient parsers skip a malformed line, log
it at debug and append a ParseError to the optional `errors` list.
Strict parsers (DHCP scope) raise on the first malformed line.

Value checks (ranges, enums) are not done here; see validation.py.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional
import logging
import re

from .errors import ParseError
from .models import (
    NetworkSpec, NextHop, StaticRoute,
    Route, RouteProtocol,
    DhcpScope, DhcpClientConfig, DhcpRelayConfig, DhcpRelaySelect, DhcpLeaseType, MAX_RELAY_SERVERS,
    AdminConfig, UserConfig, UserAttributes,
    BridgeConfig, IPsecTransport,
    IPv6InterfaceConfig, IPv6InterfaceAddress, RtadvConfig,
    IPv6Prefix, PrefixSource,
    NatStatic, NatStaticEntry,
    OspfConfig, OspfArea, OspfNetwork,
    SystemConfig, PacketBuffer,
)
from .notation import (
    is_ipv4, parse_network, parse_range, parse_duration,
    parse_on_off, split_csv, optional_int,
)
from .options import Arity, Keyword, OptionGrammar, Strictness
from .registry import (
    DOMAIN_ADMIN, DOMAIN_BRIDGE,
    DOMAIN_DHCP_CLIENT, DOMAIN_DHCP_SCOPE, DOMAIN_DHCP_RELAY, DOMAIN_DHCP_LEASE_TYPE,
    DOMAIN_IPSEC_TRANSPORT, DOMAIN_IPV6_INTERFACE, DOMAIN_IPV6_PREFIX,
    DOMAIN_NAT_STATIC, DOMAIN_OSPF, DOMAIN_ROUTES, DOMAIN_STATIC_ROUTE, DOMAIN_SYSTEM,
)

logger = logging.getLogger("rtxconf.parsers")


# ============================================================
# Utility — line iteration & directive matching
# ============================================================

def iter_config_lines(raw: str) -> Iterator[tuple[int, str]]:
    """Yield (line_number, stripped_line) for directive lines only."""
    if not raw:
        return
    for lineno, line in enumerate(raw.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if line[0] in ("#", "!"):
            continue
        if line.startswith("no "):
            continue
        yield lineno, line


def join_wrapped_lines(raw: str) -> str:
    """
    Re-join lines the terminal wrapped.

    Long filter lists come back as
      ipv6 lan2 secure filter in 101000 101001 101002
      101003 101099
    A line starting with a digit continues the previous one.
    """
    joined: list[str] = []
    for line in (raw or "").splitlines():
        stripped = line.strip()
        if stripped and stripped[0].isdigit() and joined:
            joined[-1] = f"{joined[-1].rstrip()} {stripped}"
        else:
            joined.append(line)
    return "\n".join(joined)


@dataclass(frozen=True)
class Matcher:
    kind: Enum
    pattern: re.Pattern


def match_directive(line: str, matchers: list[Matcher]) -> Optional[tuple[Enum, re.Match]]:
    """First matcher wins; order the list most specific first."""
    for matcher in matchers:
        m = matcher.pattern.match(line)
        if m:
            return matcher.kind, m
    return None


def _rx(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def _int_list(tokens: list[str], context: str) -> list[int]:
    values = []
    for token in tokens:
        try:
            values.append(int(token))
        except ValueError:
            logger.debug(f"{context}: skipping non-numeric {token!r}")
    return values


class ConfigParser:
    """
    Base for domain parsers.

    Parsers hold no per-call state; one instance serves every thread.
    `malformed_prefixes` are line starts that belong to this domain, so a
    line starting with one but matching no directive is malformed rather
    than unrelated.
    """
    name = "config"
    domain = ""
    strictness = Strictness.LENIENT
    malformed_prefixes: tuple[str, ...] = ()

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> Any:
        raise NotImplementedError

    def __call__(self, raw: str) -> Any:
        return self.parse(raw)

    def _malformed(
        self,
        message: str,
        line: str,
        lineno: int,
        errors: Optional[list[ParseError]],
    ) -> None:
        err = ParseError(f"{self.domain}: {message}", line, lineno)
        if self.strictness == Strictness.STRICT:
            raise err
        logger.debug(f"skipping malformed line: {err}")
        if errors is not None:
            errors.append(err)

    def _unmatched(self, line: str, lineno: int, errors: Optional[list[ParseError]]) -> None:
        if self.malformed_prefixes and line.startswith(self.malformed_prefixes):
            self._malformed("unrecognised directive", line, lineno, errors)


# ============================================================
# Static Routes — `ip route` intent
# ============================================================

class StaticRouteDirective(Enum):
    ROUTE_CHANGE = "route-change"       # runtime tweak, not intent
    ROUTE = "route"


STATIC_ROUTE_MATCHERS = [
    Matcher(StaticRouteDirective.ROUTE_CHANGE, _rx(r"^ip\s+route\s+change\s")),
    Matcher(StaticRouteDirective.ROUTE, _rx(r"^ip\s+route\s+(\S+)\s*(.*)$")),
]

NEXT_HOP_GRAMMAR = OptionGrammar(
    [
        Keyword("weight", Arity.SINGLE, int),
        Keyword("filter", Arity.SINGLE, int),
        Keyword("hide", Arity.FLAG),
        Keyword("keepalive", Arity.FLAG),
    ],
    unknown=Strictness.LENIENT,
    values=Strictness.LENIENT,
    name="ip route gateway",
)

# Interface keywords that take the following token as their argument
_PAIRED_GATEWAY_KEYWORDS = ("pp", "tunnel", "dhcp")
_BARE_GATEWAY_KEYWORDS = ("null", "loopback")


def classify_gateway(tokens: list[str]) -> tuple[NextHop, list[str]]:
    """
    Turn the tokens after `gateway` into a NextHop plus leftover option tokens.

    Precedence:
      1. pp / tunnel / dhcp + next token → interface ("pp 1")
      2. null / loopback                 → interface
      3. IPv4 literal                    → address
      4. anything else                   → interface, verbatim
    """
    head = tokens[0]
    if head in _PAIRED_GATEWAY_KEYWORDS and len(tokens) > 1:
        return NextHop(interface=f"{head} {tokens[1]}"), tokens[2:]
    if head in _BARE_GATEWAY_KEYWORDS:
        return NextHop(interface=head), tokens[1:]
    if is_ipv4(head):
        return NextHop(address=head), tokens[1:]
    return NextHop(interface=head), tokens[1:]


def parse_gateway_segments(tail: str) -> list[NextHop]:
    """
    Split 'gateway A weight 2 gateway B hide' into one NextHop per gateway.
    Tokens before the first `gateway` are ignored.
    """
    segments: list[list[str]] = []
    for token in tail.split():
        if token == "gateway":
            segments.append([])
        elif segments:
            segments[-1].append(token)

    hops = []
    for segment in segments:
        if not segment:
            continue
        hop, rest = classify_gateway(segment)
        opts = NEXT_HOP_GRAMMAR.parse(rest)
        hop.weight = opts.get("weight")
        hop.filter = opts.get("filter")
        hop.hide = opts.flag("hide")
        hop.keepalive = opts.flag("keepalive")
        hops.append(hop)
    return hops


class StaticRouteParser(ConfigParser):
    """
    ip route 10.0.0.0/8 gateway 192.168.1.1 weight 2
    ip route default gateway pp 1 hide gateway 192.168.2.1

    Lines for the same destination accumulate next-hops in input order;
    duplicates are kept, the device load-balances by declaration order.
    """
    name = "static-route"
    domain = DOMAIN_STATIC_ROUTE
    malformed_prefixes = ("ip route ",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[StaticRoute]:
        routes: dict[NetworkSpec, StaticRoute] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, STATIC_ROUTE_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            if kind == StaticRouteDirective.ROUTE_CHANGE:
                continue

            try:
                destination = parse_network(m.group(1))
            except ValueError as e:
                self._malformed(str(e), line, lineno, errors)
                continue

            hops = parse_gateway_segments(m.group(2))
            if not hops:
                self._malformed("route has no gateway", line, lineno, errors)
                continue

            route = routes.get(destination)
            if route is None:
                route = routes[destination] = StaticRoute(destination=destination)
            route.next_hops.extend(hops)

        logger.debug(f"static routes: {len(routes)} destinations")
        return list(routes.values())


# ============================================================
# Live Routing Table — dialect per family
# ============================================================

_PROTOCOL_CODES = {
    "S": RouteProtocol.STATIC,
    "C": RouteProtocol.CONNECTED,
    "R": RouteProtocol.RIP,
    "O": RouteProtocol.OSPF,
    "B": RouteProtocol.BGP,
    "D": RouteProtocol.DHCP,
}


def _classify_protocol(proto_str: str) -> RouteProtocol:
    p = proto_str.lower()
    if p.startswith("static"):
        return RouteProtocol.STATIC
    if p in ("connected", "implicit", "direct"):
        return RouteProtocol.CONNECTED
    if p.startswith("rip"):
        return RouteProtocol.RIP
    if p.startswith("ospf"):
        return RouteProtocol.OSPF
    if p.startswith("bgp"):
        return RouteProtocol.BGP
    if p.startswith("dhcp"):
        return RouteProtocol.DHCP
    return RouteProtocol.UNKNOWN


def _optional_field(value: Optional[str]) -> Optional[str]:
    if value is None or value in ("-", "*"):
        return None
    return value


class RTX830RoutesParser(ConfigParser):
    """
    RTX830 `show ip route`:

      S 0.0.0.0/0 via 192.168.1.1 dev lan2
      C 192.168.100.0/24 dev lan1
      O 10.10.0.0/16 via 192.168.1.254 dev lan2 metric 20
    """
    name = "routes-rtx830"
    domain = DOMAIN_ROUTES

    ROW = _rx(
        r"^([SCROBD])\s+(\S+)"
        r"(?:\s+via\s+(\S+))?"
        r"(?:\s+dev\s+(\S+))?"
        r"(?:\s+metric\s+(\d+))?"
    )

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[Route]:
        routes = []
        for lineno, line in iter_config_lines(raw):
            m = self.ROW.match(line)
            if not m:
                continue
            code, dest, via, dev, metric = m.groups()
            try:
                destination = parse_network(dest)
            except ValueError as e:
                self._malformed(str(e), line, lineno, errors)
                continue
            routes.append(Route(
                destination=destination,
                protocol=_PROTOCOL_CODES.get(code, RouteProtocol.UNKNOWN),
                gateway=_optional_field(via),
                interface=dev,
                metric=optional_int(metric),
            ))
        return routes


class RTX12xxRoutesParser(ConfigParser):
    """
    RTX1210 / RTX1220 `show ip route`:

      Destination         Gateway          Interface       Protocol  Metric
      default             192.168.1.1      LAN2            static    -
      192.168.100.0/24    192.168.100.1    LAN1            implicit  -
      10.10.0.0/16        192.168.1.254    LAN2            OSPF      20

    Rows before the header are ignored.
    """
    name = "routes-rtx12xx"
    domain = DOMAIN_ROUTES

    HEADER = _rx(r"^Destination\s+Gateway\s+Interface\s+Protocol\s+Metric")
    ROW = _rx(r"^(\S+)\s+(\S+)\s+(\S+)\s+(\S+)(?:\s+(\S+))?$")

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[Route]:
        routes = []
        in_table = False
        for lineno, line in iter_config_lines(raw):
            if self.HEADER.match(line):
                in_table = True
                continue
            if not in_table or line.startswith("-"):
                continue
            m = self.ROW.match(line)
            if not m:
                self._malformed("unrecognised routing table row", line, lineno, errors)
                continue
            dest, gateway, interface, protocol, metric = m.groups()
            try:
                destination = parse_network(dest)
            except ValueError as e:
                self._malformed(str(e), line, lineno, errors)
                continue
            routes.append(Route(
                destination=destination,
                protocol=_classify_protocol(protocol),
                gateway=_optional_field(gateway),
                interface=_optional_field(interface),
                metric=optional_int(metric),
            ))
        return routes


# ============================================================
# DHCP Scope — strict
# ============================================================

class DhcpScopeDirective(Enum):
    BIND = "bind"                       # other domains' `dhcp scope ...` lines
    OPTION = "option"
    LEASE_TYPE = "lease-type"
    SCOPE = "scope"


DHCP_SCOPE_MATCHERS = [
    Matcher(DhcpScopeDirective.BIND, _rx(r"^dhcp\s+scope\s+bind\s")),
    Matcher(DhcpScopeDirective.OPTION, _rx(r"^dhcp\s+scope\s+option\s")),
    Matcher(DhcpScopeDirective.LEASE_TYPE, _rx(r"^dhcp\s+scope\s+lease\s+type\s")),
    Matcher(DhcpScopeDirective.SCOPE, _rx(r"^dhcp\s+scope\s")),
]

_DHCP_SCOPE_LINE = _rx(r"^dhcp\s+scope\s+(\S+)\s+(\S+)\s*(.*)$")

# Unknown tokens are ignored (firmware drift); a recognised keyword with a
# bad value aborts. `ma` is known but carries nothing we model. `lease` and
# `expire` share one slot, so the later one on the line wins.
DHCP_SCOPE_GRAMMAR = OptionGrammar(
    [
        Keyword("gateway"),
        Keyword("dns", Arity.GREEDY),
        Keyword("lease", Arity.SINGLE, parse_duration),
        Keyword("expire", Arity.SINGLE, parse_duration, dest="lease"),
        Keyword("maxexpire", Arity.SINGLE, parse_duration),
        Keyword("domain"),
        Keyword("ma", Arity.FLAG),
    ],
    unknown=Strictness.LENIENT,
    values=Strictness.STRICT,
    name="dhcp scope",
)


def parse_dhcp_scope_line(line: str, lineno: Optional[int] = None) -> DhcpScope:
    """
    dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 dns 8.8.8.8 expire 12:00

    Raises ParseError naming the line.
    """
    m = _DHCP_SCOPE_LINE.match(line.strip())
    if not m:
        raise ParseError("dhcp scope: expected 'dhcp scope <id> <range>'", line, lineno)

    id_str, range_str, tail = m.groups()
    if not id_str.isdigit():
        raise ParseError(f"dhcp scope: invalid scope id {id_str!r}", line, lineno)

    try:
        addr_range = parse_range(range_str)
    except ValueError as e:
        raise ParseError(f"dhcp scope: {e}", line, lineno) from None

    try:
        opts = DHCP_SCOPE_GRAMMAR.parse(tail)
    except ParseError as e:
        raise ParseError(e.message, line, lineno) from None

    return DhcpScope(
        scope_id=int(id_str),
        range_start=addr_range.start,
        range_end=addr_range.end,
        prefix_len=addr_range.prefix_len,
        gateway=opts.get("gateway"),
        dns_servers=opts.get("dns"),
        lease_seconds=opts.get("lease"),
        max_expire_seconds=opts.get("maxexpire"),
        domain_name=opts.get("domain"),
    )


class DhcpScopeParser(ConfigParser):
    """Any malformed `dhcp scope` line aborts the whole parse."""
    name = "dhcp-scope"
    domain = DOMAIN_DHCP_SCOPE
    strictness = Strictness.STRICT

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[DhcpScope]:
        scopes: dict[int, DhcpScope] = {}
        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, DHCP_SCOPE_MATCHERS)
            if hit is None or hit[0] != DhcpScopeDirective.SCOPE:
                continue
            scope = parse_dhcp_scope_line(line, lineno)
            if scope.scope_id in scopes:
                logger.debug(f"dhcp scope {scope.scope_id} redefined at line {lineno}")
            scopes[scope.scope_id] = scope
        return list(scopes.values())


# ============================================================
# DHCP Client / Relay / Lease Type
# ============================================================

class DhcpClientDirective(Enum):
    HOSTNAME = "hostname"
    CLIENT_ID = "client-identifier"
    VENDOR_CLASS = "vendor-class-identifier"
    REQUIRE_DNS = "require-dns"
    RELEASE_LINKDOWN = "release-linkdown"


DHCP_CLIENT_MATCHERS = [
    Matcher(DhcpClientDirective.HOSTNAME, _rx(r"^dhcp\s+client\s+hostname\s+(\S+)\s+(\S+)$")),
    Matcher(DhcpClientDirective.CLIENT_ID,
            _rx(r"^dhcp\s+client\s+client-identifier\s+(\S+)\s+(.+)$")),
    Matcher(DhcpClientDirective.VENDOR_CLASS,
            _rx(r"^dhcp\s+client\s+vendor-class-identifier\s+(\S+)\s+(.+)$")),
    Matcher(DhcpClientDirective.REQUIRE_DNS,
            _rx(r"^dhcp\s+client\s+require-dns\s+(\S+)\s+(\S+)$")),
    Matcher(DhcpClientDirective.RELEASE_LINKDOWN,
            _rx(r"^dhcp\s+client\s+release\s+linkdown\s+(\S+)$")),
]


class DhcpClientParser(ConfigParser):
    name = "dhcp-client"
    domain = DOMAIN_DHCP_CLIENT
    malformed_prefixes = ("dhcp client ",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[DhcpClientConfig]:
        clients: dict[str, DhcpClientConfig] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, DHCP_CLIENT_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            iface = m.group(1)
            client = clients.setdefault(iface, DhcpClientConfig(interface=iface))

            if kind == DhcpClientDirective.HOSTNAME:
                client.hostname = m.group(2)
            elif kind == DhcpClientDirective.CLIENT_ID:
                client.client_identifier = m.group(2).strip()
            elif kind == DhcpClientDirective.VENDOR_CLASS:
                client.vendor_class_identifier = m.group(2).strip()
            elif kind == DhcpClientDirective.REQUIRE_DNS:
                try:
                    client.require_dns = parse_on_off(m.group(2))
                except ValueError as e:
                    self._malformed(str(e), line, lineno, errors)
            elif kind == DhcpClientDirective.RELEASE_LINKDOWN:
                client.release_on_linkdown = True

        return list(clients.values())


class DhcpRelayDirective(Enum):
    SERVER = "server"
    SELECT = "select"


DHCP_RELAY_MATCHERS = [
    Matcher(DhcpRelayDirective.SERVER, _rx(r"^dhcp\s+relay\s+server\s+(.+)$")),
    Matcher(DhcpRelayDirective.SELECT, _rx(r"^dhcp\s+relay\s+select\s+(\d+)\s+(\S+)$")),
]


class DhcpRelayParser(ConfigParser):
    """
    Server list: last line wins, cut to the device limit with a warning.
    Selects: last wins per scope id.
    """
    name = "dhcp-relay"
    domain = DOMAIN_DHCP_RELAY
    malformed_prefixes = ("dhcp relay server", "dhcp relay select")

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> DhcpRelayConfig:
        relay = DhcpRelayConfig()
        selects: dict[int, DhcpRelaySelect] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, DHCP_RELAY_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            if kind == DhcpRelayDirective.SERVER:
                servers = m.group(1).split()
                if len(servers) > MAX_RELAY_SERVERS:
                    logger.warning(
                        f"dhcp relay: line {lineno} lists {len(servers)} servers, "
                        f"keeping the first {MAX_RELAY_SERVERS}"
                    )
                    servers = servers[:MAX_RELAY_SERVERS]
                relay.servers = servers
            else:
                scope_id = int(m.group(1))
                selects[scope_id] = DhcpRelaySelect(scope_id=scope_id, server=m.group(2))

        relay.selects = list(selects.values())
        return relay


_LEASE_TYPE_LINE = _rx(r"^dhcp\s+scope\s+lease\s+type\s+(\d+)\s+(\S+)$")


class DhcpLeaseTypeParser(ConfigParser):
    name = "dhcp-lease-type"
    domain = DOMAIN_DHCP_LEASE_TYPE
    malformed_prefixes = ("dhcp scope lease type",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[DhcpLeaseType]:
        leases: dict[int, DhcpLeaseType] = {}
        for lineno, line in iter_config_lines(raw):
            m = _LEASE_TYPE_LINE.match(line)
            if not m:
                self._unmatched(line, lineno, errors)
                continue
            scope_id = int(m.group(1))
            leases[scope_id] = DhcpLeaseType(scope_id=scope_id, lease_type=m.group(2))
        return list(leases.values())


# ============================================================
# Admin & Users
# ============================================================

class AdminDirective(Enum):
    LOGIN_USER_ENCRYPTED = "login-user-encrypted"
    LOGIN_USER = "login-user"
    LOGIN_USER_BARE = "login-user-bare"
    USER_ATTRIBUTE = "user-attribute"


ADMIN_MATCHERS = [
    Matcher(AdminDirective.LOGIN_USER_ENCRYPTED,
            _rx(r"^login\s+user\s+(\S+)\s+encrypted\s+(\S+)$")),
    Matcher(AdminDirective.LOGIN_USER, _rx(r"^login\s+user\s+(\S+)\s+(\S+)$")),
    Matcher(AdminDirective.LOGIN_USER_BARE, _rx(r"^login\s+user\s+(\S+)$")),
    Matcher(AdminDirective.USER_ATTRIBUTE, _rx(r"^user\s+attribute\s+(\S+)\s+(.+)$")),
]


def parse_administrator(value: str) -> bool:
    """on / 1 / 2 grant admin rights, off revokes."""
    if value in ("on", "1", "2"):
        return True
    if value == "off":
        return False
    raise ValueError(f"invalid administrator value {value!r}")


USER_ATTRIBUTE_GRAMMAR = OptionGrammar(
    [
        Keyword("administrator", Arity.ASSIGN, parse_administrator),
        Keyword("connection", Arity.ASSIGN, split_csv),
        Keyword("gui-page", Arity.ASSIGN, split_csv),
        Keyword("login-timer", Arity.ASSIGN, int),
    ],
    unknown=Strictness.LENIENT,
    values=Strictness.LENIENT,
    name="user attribute",
)


def parse_user_attributes(tail: str) -> UserAttributes:
    opts = USER_ATTRIBUTE_GRAMMAR.parse(tail)
    return UserAttributes(
        administrator=opts.get("administrator"),
        connection=opts.get("connection"),
        gui_pages=opts.get("gui-page"),
        login_timer=opts.get("login-timer"),
    )


class AdminParser(ConfigParser):
    """
    login user admin encrypted $1$abc...
    user attribute admin administrator=on connection=ssh,http

    `login user` and `user attribute` lines merge into one UserConfig by
    name. `login password` / `administrator password` are never echoed
    in plaintext, so they stay None after a parse.
    """
    name = "admin"
    domain = DOMAIN_ADMIN
    malformed_prefixes = ("login user ", "user attribute ")

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> AdminConfig:
        users: dict[str, UserConfig] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, ADMIN_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            name = m.group(1)
            user = users.setdefault(name, UserConfig(username=name))

            if kind == AdminDirective.LOGIN_USER_ENCRYPTED:
                user.password = m.group(2)
                user.encrypted = True
            elif kind == AdminDirective.LOGIN_USER:
                user.password = m.group(2)
                user.encrypted = False
            elif kind == AdminDirective.USER_ATTRIBUTE:
                user.attributes = _merge_attributes(user.attributes, parse_user_attributes(m.group(2)))

        return AdminConfig(users=list(users.values()))


def _merge_attributes(base: UserAttributes, update: UserAttributes) -> UserAttributes:
    return UserAttributes(
        administrator=update.administrator if update.administrator is not None else base.administrator,
        connection=update.connection if update.connection is not None else base.connection,
        gui_pages=update.gui_pages if update.gui_pages is not None else base.gui_pages,
        login_timer=update.login_timer if update.login_timer is not None else base.login_timer,
    )


# ============================================================
# Bridge / IPsec Transport
# ============================================================

_BRIDGE_LINE = _rx(r"^bridge\s+member\s+(\S+)\s+(.+)$")


class BridgeParser(ConfigParser):
    """bridge member bridge1 lan1 tunnel1. A repeated name replaces members."""
    name = "bridge"
    domain = DOMAIN_BRIDGE
    malformed_prefixes = ("bridge member",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[BridgeConfig]:
        bridges: dict[str, BridgeConfig] = {}
        for lineno, line in iter_config_lines(raw):
            m = _BRIDGE_LINE.match(line)
            if not m:
                self._unmatched(line, lineno, errors)
                continue
            name = m.group(1)
            bridges[name] = BridgeConfig(name=name, members=m.group(2).split())
        return list(bridges.values())


_IPSEC_TRANSPORT_LINE = _rx(r"^ipsec\s+transport\s+(\d+)\s+(\d+)\s+(\S+)\s+(\d+)$")


class IPsecTransportParser(ConfigParser):
    """ipsec transport 1 101 udp 1701"""
    name = "ipsec-transport"
    domain = DOMAIN_IPSEC_TRANSPORT
    malformed_prefixes = ("ipsec transport ",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[IPsecTransport]:
        transports: dict[int, IPsecTransport] = {}
        for lineno, line in iter_config_lines(raw):
            m = _IPSEC_TRANSPORT_LINE.match(line)
            if not m:
                self._unmatched(line, lineno, errors)
                continue
            transport_id = int(m.group(1))
            transports[transport_id] = IPsecTransport(
                transport_id=transport_id,
                tunnel_id=int(m.group(2)),
                protocol=m.group(3),
                port=int(m.group(4)),
            )
        return list(transports.values())


# ============================================================
# IPv6 Interface
# ============================================================

class IPv6InterfaceDirective(Enum):
    ADDRESS = "address"
    RTADV = "rtadv"
    DHCP_SERVICE = "dhcp-service"
    MTU = "mtu"
    FILTER_IN = "filter-in"
    FILTER_OUT = "filter-out"


IPV6_INTERFACE_MATCHERS = [
    Matcher(IPv6InterfaceDirective.ADDRESS, _rx(r"^ipv6\s+(\S+)\s+address\s+(\S+)$")),
    Matcher(IPv6InterfaceDirective.RTADV, _rx(r"^ipv6\s+(\S+)\s+rtadv\s+send\s+(.+)$")),
    Matcher(IPv6InterfaceDirective.DHCP_SERVICE, _rx(r"^ipv6\s+(\S+)\s+dhcp\s+service\s+(\S+)$")),
    Matcher(IPv6InterfaceDirective.MTU, _rx(r"^ipv6\s+(\S+)\s+mtu\s+(\d+)$")),
    Matcher(IPv6InterfaceDirective.FILTER_IN, _rx(r"^ipv6\s+(\S+)\s+secure\s+filter\s+in\s+(.+)$")),
    Matcher(IPv6InterfaceDirective.FILTER_OUT, _rx(r"^ipv6\s+(\S+)\s+secure\s+filter\s+out\s+(.+)$")),
]

RTADV_GRAMMAR = OptionGrammar(
    [
        Keyword("o_flag", Arity.ASSIGN, parse_on_off),
        Keyword("m_flag", Arity.ASSIGN, parse_on_off),
        Keyword("lifetime", Arity.ASSIGN, int),
    ],
    unknown=Strictness.LENIENT,
    values=Strictness.LENIENT,
    positional=16,
    name="rtadv send",
)


def parse_ipv6_address(value: str) -> IPv6InterfaceAddress:
    """
    '2001:db8::1/64'          → static address
    'ra-prefix@lan2::1/64'    → prefix_ref 'ra-prefix@lan2', interface_id '::1/64'
    """
    if "@" not in value:
        return IPv6InterfaceAddress(address=value)
    at = value.index("@")
    split = value.find("::", at)
    if split < 0:
        raise ValueError(f"prefix reference {value!r} has no interface id")
    return IPv6InterfaceAddress(prefix_ref=value[:split], interface_id=value[split:])


def parse_rtadv(tail: str) -> RtadvConfig:
    opts = RTADV_GRAMMAR.parse(tail)
    return RtadvConfig(
        prefix_ids=_int_list(opts.positional, "rtadv send"),
        o_flag=opts.get("o_flag"),
        m_flag=opts.get("m_flag"),
        lifetime=opts.get("lifetime"),
    )


class IPv6InterfaceParser(ConfigParser):
    """
    ipv6 lan1 address ra-prefix@lan2::1/64
    ipv6 lan1 rtadv send 1 o_flag=on
    ipv6 lan1 dhcp service server
    ipv6 lan2 secure filter in 101000 101001 101099
    ipv6 lan2 secure filter out 101099 dynamic 101080 101081

    Settings merge per interface; addresses accumulate.
    """
    name = "ipv6-interface"
    domain = DOMAIN_IPV6_INTERFACE

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[IPv6InterfaceConfig]:
        interfaces: dict[str, IPv6InterfaceConfig] = {}

        for lineno, line in iter_config_lines(join_wrapped_lines(raw)):
            hit = match_directive(line, IPV6_INTERFACE_MATCHERS)
            if hit is None:
                continue
            kind, m = hit
            iface = m.group(1)
            value = m.group(2)
            cfg = interfaces.setdefault(iface, IPv6InterfaceConfig(interface=iface))

            if kind == IPv6InterfaceDirective.ADDRESS:
                try:
                    cfg.addresses.append(parse_ipv6_address(value))
                except ValueError as e:
                    self._malformed(str(e), line, lineno, errors)
            elif kind == IPv6InterfaceDirective.RTADV:
                cfg.rtadv = parse_rtadv(value)
            elif kind == IPv6InterfaceDirective.DHCP_SERVICE:
                cfg.dhcpv6_service = value
            elif kind == IPv6InterfaceDirective.MTU:
                cfg.mtu = int(value)
            elif kind == IPv6InterfaceDirective.FILTER_IN:
                cfg.secure_filter_in = _int_list(value.split(), "secure filter in")
            elif kind == IPv6InterfaceDirective.FILTER_OUT:
                tokens = value.split()
                if "dynamic" in tokens:
                    split = tokens.index("dynamic")
                    cfg.secure_filter_out = _int_list(tokens[:split], "secure filter out")
                    cfg.dynamic_filter_out = _int_list(tokens[split + 1:], "secure filter out dynamic")
                else:
                    cfg.secure_filter_out = _int_list(tokens, "secure filter out")

        return list(interfaces.values())


# ============================================================
# IPv6 Prefix
# ============================================================

class IPv6PrefixDirective(Enum):
    RA = "ra"
    DHCP_PD = "dhcp-pd"
    STATIC = "static"


IPV6_PREFIX_MATCHERS = [
    Matcher(IPv6PrefixDirective.RA, _rx(r"^ipv6\s+prefix\s+(\d+)\s+ra-prefix@([^:\s]+)::/(\d+)$")),
    Matcher(IPv6PrefixDirective.DHCP_PD,
            _rx(r"^ipv6\s+prefix\s+(\d+)\s+dhcp-prefix@([^:\s]+)::/(\d+)$")),
    Matcher(IPv6PrefixDirective.STATIC, _rx(r"^ipv6\s+prefix\s+(\d+)\s+([0-9A-Fa-f:]+::)/(\d+)$")),
]


class IPv6PrefixParser(ConfigParser):
    """
    ipv6 prefix 1 2001:db8:1234::/64
    ipv6 prefix 2 ra-prefix@lan2::/64
    ipv6 prefix 3 dhcp-prefix@lan2::/48
    """
    name = "ipv6-prefix"
    domain = DOMAIN_IPV6_PREFIX
    malformed_prefixes = ("ipv6 prefix ",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[IPv6Prefix]:
        prefixes: dict[int, IPv6Prefix] = {}
        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, IPV6_PREFIX_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            prefix_id = int(m.group(1))
            length = int(m.group(3))
            if kind == IPv6PrefixDirective.STATIC:
                record = IPv6Prefix(prefix_id, length, PrefixSource.STATIC, prefix=m.group(2))
            elif kind == IPv6PrefixDirective.RA:
                record = IPv6Prefix(prefix_id, length, PrefixSource.RA, interface=m.group(2))
            else:
                record = IPv6Prefix(prefix_id, length, PrefixSource.DHCPV6_PD, interface=m.group(2))
            prefixes[prefix_id] = record
        return list(prefixes.values())


# ============================================================
# NAT Static
# ============================================================

class NatStaticDirective(Enum):
    DESCRIPTOR_TYPE = "descriptor-type"
    PORT_MAPPING = "port-mapping"
    STATIC_MAPPING = "static-mapping"


# The simple mapping takes bare addresses only; a port pair without a
# protocol matches neither and is reported as malformed.
NAT_STATIC_MATCHERS = [
    Matcher(NatStaticDirective.DESCRIPTOR_TYPE,
            _rx(r"^nat\s+descriptor\s+type\s+(\d+)\s+static$")),
    Matcher(NatStaticDirective.PORT_MAPPING,
            _rx(r"^nat\s+descriptor\s+static\s+(\d+)\s+([^\s:=]+):(\d+)=([^\s:=]+):(\d+)\s+(\S+)$")),
    Matcher(NatStaticDirective.STATIC_MAPPING,
            _rx(r"^nat\s+descriptor\s+static\s+(\d+)\s+([0-9.]+)=([0-9.]+)$")),
]


class NatStaticParser(ConfigParser):
    """
    nat descriptor type 1 static
    nat descriptor static 1 203.0.113.10=192.168.1.10
    nat descriptor static 1 203.0.113.10:443=192.168.1.10:8443 tcp

    Mappings accumulate per descriptor. Port values are taken as given,
    including 0. The validator decides.
    """
    name = "nat-static"
    domain = DOMAIN_NAT_STATIC
    malformed_prefixes = ("nat descriptor static ",)

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> list[NatStatic]:
        descriptors: dict[int, NatStatic] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, NAT_STATIC_MATCHERS)
            if hit is None:
                self._unmatched(line, lineno, errors)
                continue
            kind, m = hit
            descriptor_id = int(m.group(1))
            nat = descriptors.setdefault(descriptor_id, NatStatic(descriptor_id=descriptor_id))

            if kind == NatStaticDirective.PORT_MAPPING:
                nat.entries.append(NatStaticEntry(
                    outside_global=m.group(2),
                    outside_global_port=int(m.group(3)),
                    inside_local=m.group(4),
                    inside_local_port=int(m.group(5)),
                    protocol=m.group(6),
                ))
            elif kind == NatStaticDirective.STATIC_MAPPING:
                nat.entries.append(NatStaticEntry(
                    outside_global=m.group(2),
                    inside_local=m.group(3),
                ))

        return list(descriptors.values())


# ============================================================
# OSPF
# ============================================================

class OspfDirective(Enum):
    USE = "use"
    ROUTER_ID = "router-id"
    IMPORT = "import"
    AREA = "area"
    NETWORK = "network"


OSPF_MATCHERS = [
    Matcher(OspfDirective.USE, _rx(r"^ospf\s+use\s+(\S+)$")),
    Matcher(OspfDirective.ROUTER_ID, _rx(r"^ospf\s+router\s+id\s+(\S+)$")),
    Matcher(OspfDirective.IMPORT, _rx(r"^ospf\s+import\s+from\s+(\S+)")),
    Matcher(OspfDirective.AREA, _rx(r"^ospf\s+area\s+(\S+)\s*(.*)$")),
    Matcher(OspfDirective.NETWORK, _rx(r"^ip\s+(\S+)\s+ospf\s+area\s+(\S+)")),
]

_OSPF_AREA_SUBCOMMANDS = ("network", "range", "stubhost", "virtual-link")


class OspfParser(ConfigParser):
    """
    ospf use on
    ospf router id 10.0.0.1
    ospf area backbone
    ospf area 1 stub no-summary
    ospf import from static
    ip lan1 ospf area backbone
    """
    name = "ospf"
    domain = DOMAIN_OSPF

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> OspfConfig:
        cfg = OspfConfig()
        areas: dict[str, OspfArea] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, OSPF_MATCHERS)
            if hit is None:
                continue
            kind, m = hit

            if kind == OspfDirective.USE:
                try:
                    cfg.enabled = parse_on_off(m.group(1))
                except ValueError as e:
                    self._malformed(str(e), line, lineno, errors)
            elif kind == OspfDirective.ROUTER_ID:
                cfg.router_id = m.group(1)
            elif kind == OspfDirective.IMPORT:
                if m.group(1) not in cfg.imports:
                    cfg.imports.append(m.group(1))
            elif kind == OspfDirective.AREA:
                area_id = m.group(1)
                if area_id in _OSPF_AREA_SUBCOMMANDS:
                    continue
                tokens = m.group(2).split()
                area_type = "normal"
                if tokens and tokens[0] != "no-summary":
                    area_type = tokens[0]
                areas[area_id] = OspfArea(
                    area_id=area_id,
                    area_type=area_type,
                    no_summary="no-summary" in tokens,
                )
            elif kind == OspfDirective.NETWORK:
                cfg.networks.append(OspfNetwork(interface=m.group(1), area_id=m.group(2)))

        cfg.areas = list(areas.values())
        return cfg


# ============================================================
# System
# ============================================================

class SystemDirective(Enum):
    TIMEZONE = "timezone"
    CONSOLE_CHARACTER = "console-character"
    CONSOLE_LINES = "console-lines"
    CONSOLE_PROMPT = "console-prompt"
    PACKET_BUFFER = "packet-buffer"
    STATISTICS = "statistics"


SYSTEM_MATCHERS = [
    Matcher(SystemDirective.TIMEZONE, _rx(r"^timezone\s+(\S+)$")),
    Matcher(SystemDirective.CONSOLE_CHARACTER, _rx(r"^console\s+character\s+(\S+)$")),
    Matcher(SystemDirective.CONSOLE_LINES, _rx(r"^console\s+lines\s+(\S+)$")),
    Matcher(SystemDirective.CONSOLE_PROMPT, _rx(r"^console\s+prompt\s+(.+)$")),
    Matcher(SystemDirective.PACKET_BUFFER,
            _rx(r"^system\s+packet-buffer\s+(small|middle|large)\s+(.+)$")),
    Matcher(SystemDirective.STATISTICS, _rx(r"^statistics\s+(traffic|nat)\s+(\S+)$")),
]

PACKET_BUFFER_GRAMMAR = OptionGrammar(
    [
        Keyword("max-buffer", Arity.ASSIGN, int),
        Keyword("max-free", Arity.ASSIGN, int),
    ],
    unknown=Strictness.LENIENT,
    values=Strictness.LENIENT,
    name="system packet-buffer",
)


class SystemParser(ConfigParser):
    """
    timezone +09:00
    console character ja.utf8
    console lines infinity
    console prompt "RTX1210 main"
    system packet-buffer small max-buffer=5000 max-free=1300
    statistics traffic on
    """
    name = "system"
    domain = DOMAIN_SYSTEM

    def parse(self, raw: str, errors: Optional[list[ParseError]] = None) -> SystemConfig:
        cfg = SystemConfig()
        buffers: dict[str, PacketBuffer] = {}

        for lineno, line in iter_config_lines(raw):
            hit = match_directive(line, SYSTEM_MATCHERS)
            if hit is None:
                continue
            kind, m = hit

            if kind == SystemDirective.TIMEZONE:
                cfg.timezone = m.group(1)
            elif kind == SystemDirective.CONSOLE_CHARACTER:
                cfg.console.character = m.group(1)
            elif kind == SystemDirective.CONSOLE_LINES:
                cfg.console.lines = m.group(1)
            elif kind == SystemDirective.CONSOLE_PROMPT:
                cfg.console.prompt = _strip_quotes(m.group(1).strip())
            elif kind == SystemDirective.PACKET_BUFFER:
                opts = PACKET_BUFFER_GRAMMAR.parse(m.group(2))
                size = m.group(1)
                buffers[size] = PacketBuffer(
                    size=size,
                    max_buffer=opts.get("max-buffer"),
                    max_free=opts.get("max-free"),
                )
            elif kind == SystemDirective.STATISTICS:
                try:
                    enabled = parse_on_off(m.group(2))
                except ValueError as e:
                    self._malformed(str(e), line, lineno, errors)
                    continue
                setattr(cfg.statistics, m.group(1), enabled)

        cfg.packet_buffers = list(buffers.values())
        return cfg


# ============================================================
# Parser table — dialect-neutral domains
# ============================================================
#
# The live routing table is the only domain whose text layout differs
# by family; its parsers are registered per model in registry.new_registry().
#

COMMON_PARSERS: dict[str, ConfigParser] = {
    DOMAIN_STATIC_ROUTE:    StaticRouteParser(),
    DOMAIN_DHCP_SCOPE:      DhcpScopeParser(),
    DOMAIN_DHCP_CLIENT:     DhcpClientParser(),
    DOMAIN_DHCP_RELAY:      DhcpRelayParser(),
    DOMAIN_DHCP_LEASE_TYPE: DhcpLeaseTypeParser(),
    DOMAIN_ADMIN:           AdminParser(),
    DOMAIN_BRIDGE:          BridgeParser(),
    DOMAIN_IPSEC_TRANSPORT: IPsecTransportParser(),
    DOMAIN_IPV6_INTERFACE:  IPv6InterfaceParser(),
    DOMAIN_IPV6_PREFIX:     IPv6PrefixParser(),
    DOMAIN_NAT_STATIC:      NatStaticParser(),
    DOMAIN_OSPF:            OspfParser(),
    DOMAIN_SYSTEM:          SystemParser(),
}


def get_parser_name(parser: Any) -> str:
    """Human-readable parser name for diagnostics."""
    return getattr(parser, "name", None) or type(parser).__name__
