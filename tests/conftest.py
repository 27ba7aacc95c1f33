"""Shared config dumps, shaped like real `show config` / `show ip route` output."""

import logging

import pytest

from rtxconf.registry import new_registry
from rtxconf.translator import ConfigTranslator, TranslatorConfig


SHOW_CONFIG = """\
# RTX1210 Rev.14.01.38 (Fri Jul 10 10:00:00 2020)
# MAC Address : 00:a0:de:00:00:01, 00:a0:de:00:00:02, 00:a0:de:00:00:03
# Memory 256Mbytes, 3LAN, 1BRI
# main:  RTX1210 ver=00 serial=S00000000 MAC-Address=00:a0:de:00:00:01
# Reporting Date: Jan 1 00:00:00 2024
login user admin encrypted $1$RsA0eW4m$6O1lIWwA3T0Y0
login user guest plainpw
login user viewer
user attribute admin administrator=on connection=ssh,http gui-page=dashboard,config login-timer=300
user attribute guest connection=none
timezone +09:00
console character ja.utf8
console lines infinity
console prompt "RTX1210 main"
system packet-buffer small max-buffer=5000 max-free=1300
ip route default gateway 192.168.1.1
ip route 10.0.0.0/8 gateway 192.168.1.254 weight 2
ip route 10.0.0.0/8 gateway pp 1 hide
ip route 172.16.0.0/255.255.0.0 gateway tunnel 3
ip lan1 address 192.168.100.1/24
ip lan1 ospf area backbone
ipv6 prefix 1 ra-prefix@lan2::/64
ipv6 lan1 address ra-prefix@lan2::1/64
ipv6 lan1 rtadv send 1 o_flag=on
ipv6 lan2 secure filter in 101000 101001 101099
ipv6 lan2 secure filter out 101099 dynamic 101080 101081
bridge member bridge1 lan1 tunnel1
ospf use on
ospf router id 10.0.0.1
ospf area backbone
ospf import from static
nat descriptor type 1 static
nat descriptor static 1 203.0.113.10=192.168.1.10
nat descriptor static 1 203.0.113.11:443=192.168.1.11:8443 tcp
ipsec transport 1 101 udp 1701
dhcp service server
dhcp client hostname lan2 rtx-office
dhcp relay server 10.0.0.10 10.0.0.11
dhcp scope 1 192.168.100.2-192.168.100.191/24 gateway 192.168.100.1 dns 8.8.8.8 8.8.4.4 expire 12:00
dhcp scope bind 1 192.168.100.10 01 00:a0:de:12:34:56
dhcp scope lease type 1 bind-priority
statistics traffic on
"""

RTX830_ROUTES = """\
Codes: S - static, C - connected, O - OSPF
S 0.0.0.0/0 via 192.168.1.1 dev lan2
C 192.168.100.0/24 dev lan1
O 10.10.0.0/16 via 192.168.1.254 dev lan2 metric 20
"""

RTX12XX_ROUTES = """\
# show ip route
Destination         Gateway          Interface       Protocol  Metric
default             192.168.1.1      LAN2            static    -
192.168.100.0/24    192.168.100.1    LAN1            implicit  -
10.10.0.0/16        192.168.1.254    LAN2            OSPF      20
"""


@pytest.fixture
def show_config():
    return SHOW_CONFIG


@pytest.fixture
def rtx830_routes():
    return RTX830_ROUTES


@pytest.fixture
def rtx12xx_routes():
    return RTX12XX_ROUTES


@pytest.fixture
def registry():
    return new_registry()


@pytest.fixture
def translator(registry):
    return ConfigTranslator(TranslatorConfig(model="RTX1210"), registry=registry)


@pytest.fixture
def clean_logger():
    """Restore the package logger after a test reconfigures it."""
    logger = logging.getLogger("rtxconf")
    saved = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in saved:
            handler.close()
    logger.handlers[:] = saved
    logger.setLevel(level)
