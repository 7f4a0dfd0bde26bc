import pytest

from flatconf.store import ConfigStore, PathRegistry


@pytest.fixture
def registry():
    """
    Isolated path registry for each test, so claims never leak into the
    process-wide default registry.
    """
    return PathRegistry()


@pytest.fixture
def make_store(registry):
    """
    Factory creating stores bound to the isolated registry.
    Every store created through it is closed after the test.
    """
    created = []

    def _make(path, entries=None, **kwargs):
        kwargs.setdefault("registry", registry)
        store = ConfigStore(path, entries, **kwargs)
        created.append(store)
        return store

    yield _make

    for store in created:
        store.close()
