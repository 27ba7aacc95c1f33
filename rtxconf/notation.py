"""
RTX Config Translator — Notation Converters

Pure functions between equivalent textual encodings:
  prefix length ⇄ dotted mask
  "default" ⇄ 0.0.0.0/0.0.0.0
  minutes / "HH:MM" ⇄ seconds
  address-range "A-B/P" decomposition

No dependencies beyond the stdlib ipaddress module.
"""

from __future__ import annotations
from ipaddress import IPv4Address, IPv6Address, AddressValueError
from typing import Optional

from .models import NetworkSpec, AddressRange

DEFAULT_ALIAS = "default"
ZERO_ADDRESS = "0.0.0.0"


# ============================================================
# Address validation
# ============================================================

def is_ipv4(text: str) -> bool:
    if not text:
        return False
    try:
        IPv4Address(text)
        return True
    except (AddressValueError, ValueError):
        return False


def is_ipv6(text: str) -> bool:
    if not text:
        return False
    try:
        IPv6Address(text)
        return True
    except (AddressValueError, ValueError):
        return False


def ipv4_to_int(text: str) -> int:
    """Raises ValueError on a bad address."""
    return int(IPv4Address(text))


# ============================================================
# CIDR ⇄ dotted mask
# ============================================================

def prefix_len_to_mask(prefix_len: int) -> str:
    """24 → '255.255.255.0'. Raises ValueError outside [0, 32]."""
    if not 0 <= prefix_len <= 32:
        raise ValueError(f"prefix length {prefix_len} out of range 0-32")
    bits = (0xFFFFFFFF << (32 - prefix_len)) & 0xFFFFFFFF
    return str(IPv4Address(bits))


def mask_to_prefix_len(mask: str) -> int:
    """
    '255.255.255.0' → 24.

    Returns -1 for anything that is not a contiguous IPv4 netmask;
    callers fall back to emitting the dotted form verbatim.
    """
    try:
        bits = int(IPv4Address(mask))
    except (AddressValueError, ValueError):
        return -1

    prefix_len = bin(bits).count("1")
    expected = (0xFFFFFFFF << (32 - prefix_len)) & 0xFFFFFFFF
    if bits != expected:
        return -1
    return prefix_len


# ============================================================
# Network notation
# ============================================================

def parse_network(text: str) -> NetworkSpec:
    """
    Parse a route destination.

    Accepted:
      default
      10.0.0.0/8
      10.0.0.0/255.0.0.0   (mask need not be contiguous)
    """
    text = (text or "").strip()
    if text == DEFAULT_ALIAS:
        return NetworkSpec(address=ZERO_ADDRESS, mask=ZERO_ADDRESS)

    if "/" not in text:
        raise ValueError(f"network {text!r} has no /prefix")

    address, _, suffix = text.partition("/")
    if not is_ipv4(address):
        raise ValueError(f"invalid network address {address!r}")

    if suffix.isdigit():
        prefix_len = int(suffix)
        if not 0 <= prefix_len <= 32:
            raise ValueError(f"prefix length {prefix_len} out of range 0-32")
        return NetworkSpec(address=address, mask=prefix_len_to_mask(prefix_len))

    if is_ipv4(suffix):
        return NetworkSpec(address=address, mask=suffix)

    raise ValueError(f"invalid prefix or mask {suffix!r}")


def format_network(spec: NetworkSpec) -> str:
    """'default' for the zero route, CIDR when possible, dotted otherwise."""
    if spec.is_default:
        return DEFAULT_ALIAS
    prefix_len = mask_to_prefix_len(spec.mask)
    if prefix_len < 0:
        return f"{spec.address}/{spec.mask}"
    return f"{spec.address}/{prefix_len}"


def parse_range(text: str) -> AddressRange:
    """
    Decompose 'A-B/P' into (start, end, prefix_len).

    Start >= end is accepted here; the validator rejects it.
    """
    if "/" not in text:
        raise ValueError(f"range {text!r} has no /prefix")
    span, _, suffix = text.rpartition("/")
    if not suffix.isdigit():
        raise ValueError(f"invalid prefix length {suffix!r}")
    prefix_len = int(suffix)
    if not 0 <= prefix_len <= 32:
        raise ValueError(f"prefix length {prefix_len} out of range 0-32")

    start, sep, end = span.partition("-")
    if not sep:
        raise ValueError(f"range {text!r} has no start-end pair")
    if not is_ipv4(start):
        raise ValueError(f"invalid range start {start!r}")
    if not is_ipv4(end):
        raise ValueError(f"invalid range end {end!r}")

    return AddressRange(start=start, end=end, prefix_len=prefix_len)


# ============================================================
# Durations
# ============================================================
#
# Firmware revisions echo lease times either as bare minutes
# ("720") or as "HH:MM" ("12:00"). Both normalize to seconds.
#

def parse_duration(text: str) -> int:
    """'12:00' → 43200, '720' → 43200. Raises ValueError."""
    text = (text or "").strip()
    if ":" in text:
        hours_str, _, minutes_str = text.partition(":")
        try:
            hours = int(hours_str)
            minutes = int(minutes_str)
        except ValueError:
            raise ValueError(f"invalid duration {text!r}") from None
        if hours < 0 or minutes < 0:
            raise ValueError(f"negative component in duration {text!r}")
        if minutes >= 60:
            raise ValueError(f"minutes must be below 60 in {text!r}")
        return hours * 3600 + minutes * 60

    try:
        minutes = int(text)
    except ValueError:
        raise ValueError(f"invalid duration {text!r}") from None
    if minutes < 0:
        raise ValueError(f"negative duration {text!r}")
    return minutes * 60


def format_duration(seconds: int) -> str:
    """43200 → '12:00'. Hours are not wrapped at 24."""
    if seconds < 0 or seconds % 60:
        raise ValueError(f"duration {seconds}s is not a whole number of minutes")
    total_minutes = seconds // 60
    return f"{total_minutes // 60}:{total_minutes % 60:02d}"


# ============================================================
# Small token helpers shared by parsers
# ============================================================

def parse_on_off(text: str) -> bool:
    value = text.strip().lower()
    if value == "on":
        return True
    if value == "off":
        return False
    raise ValueError(f"expected on/off, got {text!r}")


def format_on_off(value: bool) -> str:
    return "on" if value else "off"


def parse_int(text: str) -> int:
    return int(text.strip())


def split_csv(text: str) -> list[str]:
    """'telnet,ssh' → ['telnet', 'ssh']; 'none' → [] (explicitly cleared)."""
    text = text.strip()
    if not text or text == "none":
        return []
    return [item for item in text.split(",") if item]


def optional_int(text: Optional[str]) -> Optional[int]:
    if text is None or text == "-":
        return None
    try:
        return int(text)
    except ValueError:
        return None
