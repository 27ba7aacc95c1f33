import pytest

from rtxconf.errors import ParseError
from rtxconf.notation import parse_on_off
from rtxconf.options import Arity, Keyword, OptionGrammar, Strictness


def grammar(unknown=Strictness.LENIENT, values=Strictness.LENIENT, positional=0):
    return OptionGrammar(
        [
            Keyword("gateway"),
            Keyword("dns", Arity.GREEDY),
            Keyword("weight", Arity.SINGLE, int),
            Keyword("hide", Arity.FLAG),
            Keyword("filter", Arity.SINGLE, int, repeat=True),
            Keyword("o_flag", Arity.ASSIGN, parse_on_off),
        ],
        unknown=unknown,
        values=values,
        positional=positional,
        name="test",
    )


class TestArity:

    def test_single(self):
        opts = grammar().parse("gateway 192.168.1.1 weight 3")
        assert opts["gateway"] == "192.168.1.1"
        assert opts["weight"] == 3

    def test_flag(self):
        opts = grammar().parse("hide")
        assert opts.flag("hide") is True
        assert grammar().parse("").flag("hide") is False

    def test_greedy_stops_at_next_keyword(self):
        opts = grammar().parse("dns 8.8.8.8 8.8.4.4 gateway 10.0.0.1")
        assert opts["dns"] == ["8.8.8.8", "8.8.4.4"]
        assert opts["gateway"] == "10.0.0.1"

    def test_greedy_runs_to_end(self):
        assert grammar().parse("dns a b c")["dns"] == ["a", "b", "c"]

    def test_assign(self):
        assert grammar().parse("o_flag=on")["o_flag"] is True
        assert grammar().parse("o_flag=off")["o_flag"] is False

    def test_repeat_accumulates(self):
        assert grammar().parse("filter 1 filter 2")["filter"] == [1, 2]

    def test_unspecified_key_absent(self):
        opts = grammar().parse("gateway 10.0.0.1")
        assert "weight" not in opts
        assert opts.get("weight") is None

    def test_shared_dest_last_occurrence_wins(self):
        g = OptionGrammar([
            Keyword("lease", Arity.SINGLE, int),
            Keyword("expire", Arity.SINGLE, int, dest="lease"),
        ])
        assert g.parse("lease 1 expire 2")["lease"] == 2
        assert g.parse("expire 2 lease 1")["lease"] == 1
        assert "expire" not in g.parse("expire 2")

    def test_accepts_token_list(self):
        assert grammar().parse(["weight", "5"])["weight"] == 5

    def test_positional(self):
        opts = grammar(positional=2).parse("1 2 o_flag=on")
        assert opts.positional == ["1", "2"]
        assert opts["o_flag"] is True

    def test_positional_stops_at_keyword(self):
        opts = grammar(positional=4).parse("1 hide")
        assert opts.positional == ["1"]
        assert opts.flag("hide")


class TestUnknownPolicy:

    def test_lenient_collects_unknown(self):
        opts = grammar().parse("gateway 10.0.0.1 frobnicate hide")
        assert opts.unknown == ["frobnicate"]
        assert opts.flag("hide")

    def test_strict_raises(self):
        with pytest.raises(ParseError, match="frobnicate"):
            grammar(unknown=Strictness.STRICT).parse("gateway 10.0.0.1 frobnicate")

    def test_assign_with_unknown_key_is_unknown(self):
        opts = grammar().parse("x_flag=on")
        assert opts.unknown == ["x_flag=on"]


class TestValuePolicy:

    def test_lenient_skips_bad_value(self):
        opts = grammar().parse("weight heavy hide")
        assert "weight" not in opts
        assert opts.flag("hide")

    def test_strict_raises_on_bad_value(self):
        with pytest.raises(ParseError, match="weight"):
            grammar(values=Strictness.STRICT).parse("weight heavy")

    def test_strict_raises_on_missing_value(self):
        with pytest.raises(ParseError):
            grammar(values=Strictness.STRICT).parse("weight")

    def test_policies_independent(self):
        g = grammar(unknown=Strictness.LENIENT, values=Strictness.STRICT)
        assert g.parse("junk weight 2")["weight"] == 2
        with pytest.raises(ParseError):
            g.parse("junk weight two")

    def test_keywords_listed(self):
        assert grammar().keywords == ["dns", "filter", "gateway", "hide", "o_flag", "weight"]
