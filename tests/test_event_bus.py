from tumble.events.bus import EventBus


def test_event_bus_emit_subscribe():
    bus = EventBus()
    received = {}

    def handler(sender, **kwargs):
        received.update(kwargs)

    bus.subscribe("test", handler)
    bus.emit("test", value=42, msg="hello")

    assert received["value"] == 42
    assert received["msg"] == "hello"


def test_emit_without_subscribers_is_silent():
    bus = EventBus()
    bus.emit("nobody_listens", value=1)


def test_unsubscribe_stops_delivery():
    bus = EventBus()
    calls = []

    def handler(sender, **kwargs):
        calls.append(kwargs["n"])

    bus.subscribe("count", handler)
    bus.emit("count", n=1)
    bus.unsubscribe("count", handler)
    bus.emit("count", n=2)

    assert calls == [1]


def test_closures_stay_connected_without_references():
    bus = EventBus()
    seen = []
    bus.subscribe("ping", (lambda sender, **kw: seen.append(kw["x"])))
    bus.emit("ping", x="a")
    assert seen == ["a"]
