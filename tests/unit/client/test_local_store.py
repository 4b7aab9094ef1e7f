from src.client.local_store import LocalStore


def test_values_round_trip_as_json():
    store = LocalStore()

    store.set("sessions:1", [{"session_token": "a"}])

    assert store.get("sessions:1") == [{"session_token": "a"}]
    assert store.get("missing", default=[]) == []


def test_every_subscriber_hears_writes():
    store = LocalStore()
    heard_a, heard_b = [], []
    store.subscribe(lambda key, value: heard_a.append((key, value)))
    store.subscribe(lambda key, value: heard_b.append((key, value)))

    store.set("k", 1)
    store.remove("k")

    assert heard_a == [("k", 1), ("k", None)]
    assert heard_b == heard_a


def test_unsubscribe_stops_notifications():
    store = LocalStore()
    heard = []
    unsubscribe = store.subscribe(lambda key, value: heard.append(key))

    unsubscribe()
    store.set("k", 1)

    assert heard == []


def test_failing_subscriber_does_not_block_others():
    store = LocalStore()
    heard = []

    def broken(key, value):
        raise RuntimeError("tab crashed")

    store.subscribe(broken)
    store.subscribe(lambda key, value: heard.append(key))

    store.set("k", 1)

    assert heard == ["k"]
