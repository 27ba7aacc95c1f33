from rtxconf.models import RouteProtocol
from rtxconf.parsers import RTX830RoutesParser, RTX12xxRoutesParser


class TestRTX830Routes:

    def test_parse(self, rtx830_routes):
        routes = RTX830RoutesParser().parse(rtx830_routes)
        assert len(routes) == 3

        default, connected, ospf = routes
        assert default.destination.is_default
        assert default.protocol == RouteProtocol.STATIC
        assert default.gateway == "192.168.1.1"
        assert default.interface == "lan2"

        assert connected.is_connected
        assert connected.gateway is None
        assert connected.interface == "lan1"

        assert ospf.protocol == RouteProtocol.OSPF
        assert ospf.metric == 20

    def test_other_dialect_yields_nothing(self, rtx12xx_routes):
        assert RTX830RoutesParser().parse(rtx12xx_routes) == []


class TestRTX12xxRoutes:

    def test_parse(self, rtx12xx_routes):
        routes = RTX12xxRoutesParser().parse(rtx12xx_routes)
        assert len(routes) == 3

        default, implicit, ospf = routes
        assert default.destination.is_default
        assert default.protocol == RouteProtocol.STATIC
        assert default.metric is None
        assert implicit.protocol == RouteProtocol.CONNECTED
        assert str(implicit.destination) == "192.168.100.0/24"
        assert ospf.protocol == RouteProtocol.OSPF
        assert ospf.metric == 20
        assert ospf.interface == "LAN2"

    def test_rows_before_header_ignored(self):
        raw = "default 192.168.1.1 LAN2 static -\n"
        assert RTX12xxRoutesParser().parse(raw) == []

    def test_bad_row_reported(self, rtx12xx_routes):
        errors = []
        routes = RTX12xxRoutesParser().parse(rtx12xx_routes + "garbage\n", errors)
        assert len(routes) == 3
        assert len(errors) == 1

    def test_same_routes_both_dialects(self, rtx830_routes, rtx12xx_routes):
        a = RTX830RoutesParser().parse(rtx830_routes)
        b = RTX12xxRoutesParser().parse(rtx12xx_routes)
        assert [r.destination for r in a] == [r.destination for r in b]
        assert [r.protocol for r in a] == [r.protocol for r in b]
