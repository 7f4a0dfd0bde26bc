import threading

import pytest

from flatconf.store import PathRegistry, get_default_registry
from flatconf.utils.exceptions import AlreadyBoundException


class TestPathRegistry:
    def test_try_claim_once(self):
        registry = PathRegistry()
        assert registry.try_claim("/tmp/a") is True
        assert registry.try_claim("/tmp/a") is False
        assert "/tmp/a" in registry
        assert len(registry) == 1

    def test_claim_raises_when_taken(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        with pytest.raises(AlreadyBoundException) as exc_info:
            registry.claim("/tmp/a")
        assert exc_info.value.error_code == 2002
        assert exc_info.value.details == {"file_path": "/tmp/a"}

    def test_release(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        assert registry.release("/tmp/a") is True
        assert registry.release("/tmp/a") is False
        assert registry.release(None) is False
        assert registry.claimed_paths() == []

    def test_swap_moves_claim(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        registry.swap("/tmp/a", "/tmp/b")
        assert registry.claimed_paths() == ["/tmp/b"]

    def test_swap_to_taken_path_keeps_state(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        registry.claim("/tmp/b")
        with pytest.raises(AlreadyBoundException):
            registry.swap("/tmp/a", "/tmp/b")
        assert registry.claimed_paths() == ["/tmp/a", "/tmp/b"]

    def test_swap_same_path_is_noop(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        registry.swap("/tmp/a", "/tmp/a")
        assert registry.claimed_paths() == ["/tmp/a"]

    def test_claimed_paths_is_a_copy(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        paths = registry.claimed_paths()
        paths.append("/tmp/z")
        assert registry.claimed_paths() == ["/tmp/a"]

    def test_clear(self):
        registry = PathRegistry()
        registry.claim("/tmp/a")
        registry.clear()
        assert len(registry) == 0

    def test_contended_claims(self):
        registry = PathRegistry()
        results = []
        barrier = threading.Barrier(10)

        def worker():
            barrier.wait()
            results.append(registry.try_claim("/tmp/shared"))

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert results.count(False) == 9


def test_default_registry_is_shared():
    assert get_default_registry() is get_default_registry()
