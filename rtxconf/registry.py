"""
RTX Config Translator — Model Registry

Dispatch: (domain, device model) → parser.

Lookup order for resolve(domain, model):
  1. exact key                      ("routes", "RTX1210")
  2. family wildcard, narrow first  ("routes", "RTX12xx")
  3. family wildcard, broad         ("routes", "RTX1xxx")
  4. NotFoundError

The registry is an explicit value owned by the caller; there is no
module-level instance. Registration happens at startup. Writes take a
lock and swap in a new table, so readers never see a half-built dict
and never need the lock themselves.
"""

from __future__ import annotations
from typing import Any, Optional
import logging
import threading

from .errors import NotFoundError

logger = logging.getLogger("rtxconf.registry")


# ============================================================
# Domains
# ============================================================

DOMAIN_ADMIN = "admin"
DOMAIN_BRIDGE = "bridge"
DOMAIN_DHCP_CLIENT = "dhcp_client"
DOMAIN_DHCP_SCOPE = "dhcp_scope"
DOMAIN_DHCP_RELAY = "dhcp_relay"
DOMAIN_DHCP_LEASE_TYPE = "dhcp_lease_type"
DOMAIN_IPSEC_TRANSPORT = "ipsec_transport"
DOMAIN_IPV6_INTERFACE = "ipv6_interface"
DOMAIN_IPV6_PREFIX = "ipv6_prefix"
DOMAIN_NAT_STATIC = "nat_static"
DOMAIN_OSPF = "ospf"
DOMAIN_ROUTES = "routes"                # live routing table
DOMAIN_STATIC_ROUTE = "static_route"    # `ip route` intent
DOMAIN_SYSTEM = "system"

ALL_DOMAINS = [
    DOMAIN_ADMIN,
    DOMAIN_BRIDGE,
    DOMAIN_DHCP_CLIENT,
    DOMAIN_DHCP_SCOPE,
    DOMAIN_DHCP_RELAY,
    DOMAIN_DHCP_LEASE_TYPE,
    DOMAIN_IPSEC_TRANSPORT,
    DOMAIN_IPV6_INTERFACE,
    DOMAIN_IPV6_PREFIX,
    DOMAIN_NAT_STATIC,
    DOMAIN_OSPF,
    DOMAIN_ROUTES,
    DOMAIN_STATIC_ROUTE,
    DOMAIN_SYSTEM,
]


# ============================================================
# Models
# ============================================================

SUPPORTED_MODELS = [
    "vRX",
    "RTX5000",
    "RTX3510",
    "RTX3500",
    "RTX1300",
    "RTX1220",
    "RTX1210",
    "RTX840",
    "RTX830",
]

# Older/adjacent hardware that shares the CLI but is not tested against
LEGACY_MODELS = ["RTX810", "NVR700W", "NVR510", "NVR500"]

ALL_KNOWN_MODELS = SUPPORTED_MODELS + LEGACY_MODELS


def normalize_model(model: str) -> str:
    return (model or "").strip()


def is_model_supported(model: str) -> bool:
    return normalize_model(model) in SUPPORTED_MODELS


def is_model_known(model: str) -> bool:
    return normalize_model(model) in ALL_KNOWN_MODELS


def family_keys(model: str) -> list[str]:
    """
    Wildcard keys a model may fall back to, narrowest first.

    'RTX1220' → ['RTX12xx', 'RTX1xxx']. Models outside the RTX line,
    or too short to carry a family digit, have no fallback.
    """
    model = normalize_model(model)
    if len(model) < 5 or not model.startswith("RTX"):
        return []
    keys = []
    if len(model) >= 6:
        keys.append(f"RTX{model[3:5]}xx")
    keys.append(f"RTX{model[3]}xxx")
    return keys


# ============================================================
# Registry
# ============================================================

class Registry:
    """Parser table keyed by (domain, model)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._table: dict[tuple[str, str], Any] = {}

    def register(self, domain: str, model: str, parser: Any) -> None:
        key = (domain, normalize_model(model))
        with self._lock:
            table = dict(self._table)
            table[key] = parser
            self._table = table
        logger.debug(f"registered {domain}:{key[1]} → {_parser_name(parser)}")

    def register_alias(self, domain: str, model: str, alias_model: str) -> None:
        """Copy the parser at (domain, model) to (domain, alias_model)."""
        source = (domain, normalize_model(model))
        with self._lock:
            parser = self._table.get(source)
            if parser is None:
                raise NotFoundError(domain, source[1])
            table = dict(self._table)
            table[(domain, normalize_model(alias_model))] = parser
            self._table = table
        logger.debug(f"aliased {domain}:{alias_model} → {domain}:{source[1]}")

    def resolve(self, domain: str, model: str) -> Any:
        """Return the parser for (domain, model) or raise NotFoundError."""
        parser = self.lookup(domain, model)
        if parser is None:
            raise NotFoundError(domain, normalize_model(model))
        return parser

    def lookup(self, domain: str, model: str) -> Optional[Any]:
        """Like resolve() but returns None on a miss."""
        table = self._table
        model = normalize_model(model)

        parser = table.get((domain, model))
        if parser is not None:
            return parser

        for family in family_keys(model):
            parser = table.get((domain, family))
            if parser is not None:
                logger.debug(f"{domain}:{model} resolved via family {family}")
                return parser
        return None

    def has(self, domain: str, model: str) -> bool:
        return self.lookup(domain, model) is not None

    def keys(self) -> list[tuple[str, str]]:
        return sorted(self._table)

    def domains(self) -> list[str]:
        return sorted({domain for domain, _ in self._table})

    def models(self, domain: str) -> list[str]:
        return sorted(model for d, model in self._table if d == domain)

    def __len__(self) -> int:
        return len(self._table)


def _parser_name(parser: Any) -> str:
    return getattr(parser, "name", None) or type(parser).__name__


def new_registry() -> Registry:
    """
    Build a registry with every built-in parser.

    Dialect-neutral domains are registered for each supported model.
    The live routing table differs by family: RTX830 has its own format,
    RTX1210/RTX1220 share the RTX12xx table layout.
    """
    from . import parsers

    registry = Registry()

    for domain, parser in parsers.COMMON_PARSERS.items():
        for model in SUPPORTED_MODELS:
            registry.register(domain, model, parser)

    registry.register(DOMAIN_ROUTES, "RTX830", parsers.RTX830RoutesParser())
    registry.register(DOMAIN_ROUTES, "RTX1210", parsers.RTX12xxRoutesParser())
    registry.register(DOMAIN_ROUTES, "RTX1220", parsers.RTX12xxRoutesParser())
    registry.register_alias(DOMAIN_ROUTES, "RTX1210", "RTX12xx")

    logger.debug(f"registry built: {len(registry)} entries")
    return registry
