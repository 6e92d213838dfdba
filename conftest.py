import pytest


class FixedHasher:
    """Maps items to chosen home slots; unknown items hash to 0."""

    def __init__(self, homes=None):
        self.homes = dict(homes or {})

    def __call__(self, item):
        return self.homes.get(item, 0)


class SaveCounter:
    def __init__(self, table, monkeypatch):
        self.calls = 0
        real = table._save

        def counting():
            self.calls += 1
            real()
        monkeypatch.setattr(table, "_save", counting)


@pytest.fixture
def table_path(tmp_path):
    return tmp_path / "table.bin"


@pytest.fixture
def count_saves(monkeypatch):
    return lambda table: SaveCounter(table, monkeypatch)


@pytest.fixture
def fixed_hasher():
    return FixedHasher
