from catnip.async_map import FutureMap
from catnip.waker_page import PENDING


class Oneshot:
    def __init__(self, value=PENDING):
        self.value = value
        self.waker = None

    def send(self, value):
        self.value = value
        if self.waker is not None:
            self.waker()

    def poll(self, waker):
        if self.value is PENDING:
            self.waker = waker
            return PENDING
        return self.value


def noop():
    pass


def test_insert_and_get():
    fmap = FutureMap()
    fut = Oneshot()
    assert fmap.insert("a", fut) is None
    assert fmap.get("a") is fut
    assert "a" in fmap
    assert len(fmap) == 1
    assert fmap.get("b") is None


def test_collision_returns_proposed_pair():
    fmap = FutureMap()
    original = Oneshot()
    proposed = Oneshot()
    fmap.insert("a", original)
    assert fmap.insert("a", proposed) == ("a", proposed)
    assert fmap.get("a") is original


def test_remove():
    fmap = FutureMap()
    fmap.insert(1, Oneshot())
    assert fmap.remove(1) is True
    assert fmap.remove(1) is False
    assert len(fmap) == 0


def test_poll_pending_then_ready():
    fmap = FutureMap()
    fut = Oneshot()
    fmap.insert("k", fut)
    assert fmap.poll(noop) is PENDING
    fut.send("out")
    assert fmap.poll(noop) == ("k", "out")
    assert "k" not in fmap
    assert fmap.poll(noop) is PENDING


def test_poll_passes_waker_to_futures():
    calls = []
    fmap = FutureMap()
    fut = Oneshot()
    fmap.insert("k", fut)
    fmap.poll(lambda: calls.append("child"))
    fut.send(1)
    assert calls == ["child"]


def test_insert_wakes_parent():
    calls = []
    fmap = FutureMap()
    assert fmap.poll(lambda: calls.append("parent")) is PENDING
    fmap.insert("k", Oneshot())
    assert calls == ["parent"]