"""
Tests for the installed package index.
"""

import threading

from launcher.storage.package_index import InstalledPackageIndex
from tests.test_utils import full_stable


def test_snapshot_does_not_follow_later_changes():
    index = InstalledPackageIndex([full_stable("5.1.1")])
    before = index.snapshot()

    index.add(full_stable("5.2.0"))

    assert before == frozenset({full_stable("5.1.1")})
    assert index.snapshot() == frozenset({full_stable("5.1.1"), full_stable("5.2.0")})


def test_membership_ignores_engine_version():
    index = InstalledPackageIndex([full_stable()])
    assert full_stable(engine_version="5.1.1") in index
    assert full_stable("6.0.0") not in index
    assert len(index) == 1


def test_discard_missing_is_harmless():
    index = InstalledPackageIndex()
    index.discard(full_stable())
    assert len(index) == 0


class TestSubscribe:
    def test_listener_receives_snapshots(self):
        index = InstalledPackageIndex()
        seen = []
        index.subscribe(seen.append)

        index.add(full_stable("5.1.1"))
        index.discard(full_stable("5.1.1"))

        assert seen == [frozenset({full_stable("5.1.1")}), frozenset()]

    def test_unsubscribe(self):
        index = InstalledPackageIndex()
        seen = []
        unsubscribe = index.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        index.add(full_stable())

        assert seen == []

    def test_failing_listener_does_not_block_others(self):
        index = InstalledPackageIndex()
        seen = []

        def broken(snapshot):
            raise RuntimeError("listener bug")

        index.subscribe(broken)
        index.subscribe(seen.append)
        index.add(full_stable())

        assert seen == [frozenset({full_stable()})]
        assert full_stable() in index

    def test_listener_may_read_the_index(self):
        index = InstalledPackageIndex()
        sizes = []
        index.subscribe(lambda snapshot: sizes.append(len(index)))

        index.add(full_stable())

        assert sizes == [1]


def test_concurrent_writers():
    index = InstalledPackageIndex()
    versions = [f"1.0.{n}" for n in range(200)]

    def add_all(chunk):
        for version in chunk:
            index.add(full_stable(version))

    threads = [threading.Thread(target=add_all, args=(versions[i::4],)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert index.snapshot() == {full_stable(v) for v in versions}
