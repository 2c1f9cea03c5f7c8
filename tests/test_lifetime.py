import unittest

from bindbox import Container


class TestLifetimeControl(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_get_singleton_returns_same_instance(self):
        class A: ...

        self.cont.singleton(A)
        a1 = self.cont.get(A)
        a2 = self.cont.get(A)
        assert a2 is a1, "singleton should return the cached instance"

    def test_get_transient_returns_new_instances(self):
        class A: ...

        self.cont.transient(A)
        a1 = self.cont.get(A)
        a2 = self.cont.get(A)
        assert a2 is not a1, "transient should return new instances"

    def test_singleton_factory_is_called_once(self):
        calls = []

        def factory(container):
            calls.append(container)
            return object()

        self.cont.singleton("service", factory)
        first = self.cont.get("service")
        second = self.cont.get("service")

        assert first is second
        assert len(calls) == 1

    def test_singleton_is_cached_under_abstract_not_concrete(self):
        class Base: ...

        class Impl(Base): ...

        self.cont.singleton(Base, Impl)
        shared = self.cont.get(Base)

        assert self.cont.get(Base) is shared
        assert self.cont.get(Impl) is not shared

    def test_instance_is_always_returned(self):
        class A: ...

        inst = A()
        self.cont.instance(A, inst)
        assert self.cont.get(A) is inst
        assert self.cont.make(A) is inst

    def test_instance_wins_over_earlier_binding(self):
        class A: ...

        built = []
        self.cont.transient("key", lambda c: built.append(1) or A())

        obj = A()
        self.cont.instance("key", obj)

        assert self.cont.get("key") is obj
        assert self.cont.get("key") is obj
        assert built == []

    def test_instance_can_be_any_value(self):
        self.cont.instance("config.debug", False)
        self.cont.instance("config.name", "shop")

        assert self.cont.get("config.debug") is False
        assert self.cont.get("config.name") == "shop"

    def test_instance_replaces_previous_instance(self):
        self.cont.instance("a", 1)
        self.cont.instance("a", 2)
        assert self.cont.get("a") == 2


class TestRebindingInvalidatesCache(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_singleton_rebinding_builds_new_object(self):
        class A: ...

        self.cont.singleton(A)
        first = self.cont.get(A)

        self.cont.singleton(A)
        second = self.cont.get(A)

        assert second is not first
        assert self.cont.get(A) is second

    def test_transient_rebinding_discards_registered_instance(self):
        class A: ...

        inst = A()
        self.cont.instance(A, inst)
        self.cont.transient(A)

        assert self.cont.get(A) is not inst
        assert self.cont.get(A) is not self.cont.get(A)

    def test_rebinding_switches_concrete(self):
        class Base: ...

        class First(Base): ...

        class Second(Base): ...

        self.cont.singleton(Base, First)
        assert isinstance(self.cont.get(Base), First)

        self.cont.singleton(Base, Second)
        assert isinstance(self.cont.get(Base), Second)


class TestParameterOverridesBypassCache(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_make_with_parameters_builds_fresh_object_and_keeps_cache(self):
        class Connection:
            def __init__(self, dsn: str = "sqlite://"):
                self.dsn = dsn

        self.cont.singleton(Connection)
        cached = self.cont.get(Connection)

        other = self.cont.make(Connection, {"dsn": "postgres://db"})

        assert other is not cached
        assert other.dsn == "postgres://db"
        assert self.cont.get(Connection) is cached
        assert self.cont.get(Connection).dsn == "sqlite://"

    def test_make_with_parameters_does_not_populate_cache(self):
        class Connection:
            def __init__(self, dsn: str = "sqlite://"):
                self.dsn = dsn

        self.cont.singleton(Connection)
        built = self.cont.make(Connection, {"dsn": "postgres://db"})

        assert self.cont.get(Connection) is not built
        assert self.cont.get(Connection).dsn == "sqlite://"

    def test_make_with_parameters_ignores_registered_instance(self):
        class Connection:
            def __init__(self, dsn: str = "sqlite://"):
                self.dsn = dsn

        registered = Connection("memory://")
        self.cont.instance(Connection, registered)

        built = self.cont.make(Connection, {"dsn": "postgres://db"})

        assert built is not registered
        assert built.dsn == "postgres://db"
        assert self.cont.get(Connection) is registered
