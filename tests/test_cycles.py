"""Tests for circular reference detection and the active-marker lifecycle."""

import pytest

from mmd import Engine, CircularReferenceError
from mmd._tracking import building


def _define_cycle(engine):
    engine.define("circ.1", ["circ.2"], lambda mod2: "mod1")
    engine.define("circ.2", ["circ.3"], lambda mod3: "mod2")
    engine.define("circ.3", ["circ.1"], lambda mod1: "mod3")


class TestCircularReferences:
    def test_cycle_through_three_modules(self):
        engine = Engine()
        _define_cycle(engine)
        with pytest.raises(CircularReferenceError) as info:
            engine.require("circ.1")
        assert info.value.module_id == "circ.1"
        assert info.value.path == ("circ.1", "circ.2", "circ.3")
        assert "circ.1 -> circ.2 -> circ.3 -> circ.1" in str(info.value)

    def test_reports_first_reentered_id(self):
        engine = Engine()
        _define_cycle(engine)
        with pytest.raises(CircularReferenceError) as info:
            engine.require("circ.3")
        assert info.value.module_id == "circ.3"

    def test_self_cycle(self):
        engine = Engine()
        engine.define("circ.4", ["circ.4"], lambda mod4: "mod4")
        with pytest.raises(CircularReferenceError, match="circular reference to circ.4"):
            engine.require("circ.4")

    def test_cycle_below_the_entry_point(self):
        engine = Engine()
        engine.define("entry", ["loop.a"], lambda a: a)
        engine.define("loop.a", ["loop.b"], lambda b: b)
        engine.define("loop.b", ["loop.a"], lambda a: a)
        with pytest.raises(CircularReferenceError) as info:
            engine.require("entry")
        assert info.value.module_id == "loop.a"

    def test_cycle_through_nested_require(self):
        engine = Engine()
        engine.define("a", ["mmd"], lambda mmd: mmd.require("b"))
        engine.define("b", ["mmd"], lambda mmd: mmd.require("a"))
        with pytest.raises(CircularReferenceError) as info:
            engine.require("a")
        assert info.value.module_id == "a"

    def test_diamond_is_not_a_cycle(self):
        engine = Engine()
        engine.define("base", lambda: "base")
        engine.define("left", ["base"], lambda base: "left")
        engine.define("right", ["base"], lambda base: "right")
        engine.define("top", ["left", "right", "base"], lambda *deps: deps)
        assert engine.require("top") == ("left", "right", "base")


class TestActiveMarker:
    def test_cleared_after_circular_failure(self):
        engine = Engine()
        _define_cycle(engine)
        with pytest.raises(CircularReferenceError):
            engine.require("circ.1")
        assert building.get() == ()

        # Breaking the cycle makes every module buildable again.
        engine.define("circ.3", lambda: "mod3")
        assert engine.require("circ.1") == "mod1"

    def test_cleared_after_factory_error(self):
        engine = Engine()

        def broken(dep):
            raise ValueError("bad factory")

        engine.define("dep", lambda: "dep")
        engine.define("broken", ["dep"], broken)
        with pytest.raises(ValueError, match="bad factory"):
            engine.require("broken")
        assert building.get() == ()

        # A retry must fail the same way, not as a circular reference.
        with pytest.raises(ValueError, match="bad factory"):
            engine.require("broken")

    def test_active_only_while_building(self):
        engine = Engine()
        seen = []

        def factory(mmd):
            seen.append(mmd._registry.get("watched").active)
            return "done"

        engine.define("watched", ["mmd"], factory)
        record = engine._registry.get("watched")
        assert not record.active
        engine.require("watched")
        assert seen == [True]
        assert not record.active
        assert engine.require("watched") == "done"

    def test_deep_cycle_is_detected(self):
        engine = Engine()
        for i in range(1000):
            engine.define(f"m{i}", [f"m{(i + 1) % 1000}"], lambda nxt: nxt)
        with pytest.raises(CircularReferenceError) as info:
            engine.require("m0")
        assert info.value.module_id == "m0"
        assert len(info.value.path) == 1000
        assert building.get() == ()


class TestCrossEngine:
    def test_path_only_names_the_raising_engine(self):
        outer = Engine()
        inner = Engine()
        inner.define("loop", ["loop"], lambda me: me)
        outer.define("host", lambda: inner.require("loop"))
        with pytest.raises(CircularReferenceError) as info:
            outer.require("host")
        assert info.value.module_id == "loop"
        assert info.value.path == ("loop",)
        assert building.get() == ()

    def test_same_id_in_two_engines_is_not_a_cycle(self):
        outer = Engine()
        inner = Engine()
        inner.define("shared", lambda: "inner")
        outer.define("shared", lambda: "outer:" + inner.require("shared"))
        assert outer.require("shared") == "outer:inner"
