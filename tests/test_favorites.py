import json
import os

import pytest

from conftest import make_payload, make_record
from errors import DecodeError
from favorites import FavoritesStore


def test_missing_file_loads_empty(favorites_store):
    assert favorites_store.load() == {}
    assert len(favorites_store) == 0


def test_toggle_adds_and_persists(favorites_store, favorites_path):
    assert favorites_store.toggle(make_record(25, "pikachu")) is True

    assert 25 in favorites_store
    with open(favorites_path, encoding="utf-8") as f:
        saved = json.load(f)
    assert [entry["id"] for entry in saved] == [25]


def test_toggle_twice_restores_membership(favorites_store):
    favorites_store.toggle(make_record(1))
    before = favorites_store.ids

    favorites_store.toggle(make_record(25))
    assert favorites_store.toggle(make_record(25)) is False

    assert favorites_store.ids == before
    assert len(favorites_store) == 1


def test_favorites_survive_restart(favorites_path):
    first = FavoritesStore(favorites_path)
    first.toggle(make_record(25, "pikachu", ["electric"]))
    first.toggle(make_record(6, "charizard", ["fire", "flying"]))

    second = FavoritesStore(favorites_path)
    loaded = second.load()

    assert set(loaded) == {6, 25}
    assert loaded[6].category_names == ("fire", "flying")


def test_save_of_loaded_set_changes_nothing(favorites_path):
    store = FavoritesStore(favorites_path)
    store.toggle(make_record(25))
    store.toggle(make_record(7))
    loaded = store.load()

    store.save()

    assert FavoritesStore(favorites_path).load() == loaded


def test_identity_is_id(favorites_store):
    favorites_store.toggle(make_record(25, "pikachu"))
    # same id, different payload: still the same entity
    assert favorites_store.toggle(make_record(25, "pikachu-rock-star")) is False
    assert len(favorites_store) == 0


@pytest.mark.parametrize("content", ["{not json", '{"id": 25}', '[{"id": "x"}]'])
def test_corrupt_file_raises_decode_error(favorites_path, content):
    with open(favorites_path, "w", encoding="utf-8") as f:
        f.write(content)
    with pytest.raises(DecodeError):
        FavoritesStore(favorites_path).load()


def test_load_or_empty_recovers_from_corruption(favorites_path, caplog):
    with open(favorites_path, "w", encoding="utf-8") as f:
        f.write("{not json")
    store = FavoritesStore(favorites_path)

    assert store.load_or_empty() == {}
    assert "Ignoring unreadable favorites" in caplog.text


def test_reads_records_written_in_api_shape(favorites_path):
    with open(favorites_path, "w", encoding="utf-8") as f:
        json.dump([make_payload(25, "pikachu", ["electric"])], f)

    loaded = FavoritesStore(favorites_path).load()

    assert loaded[25].name == "pikachu"


def test_failed_save_rolls_back_toggle(favorites_store, monkeypatch):
    def broken_save():
        raise OSError("disk full")

    monkeypatch.setattr(favorites_store, "save", broken_save)

    with pytest.raises(OSError):
        favorites_store.toggle(make_record(25))
    assert 25 not in favorites_store


def test_unreadable_path_raises_decode_error(favorites_path):
    os.mkdir(favorites_path)
    store = FavoritesStore(favorites_path)

    with pytest.raises(DecodeError):
        store.load()
    assert store.load_or_empty() == {}


def test_failed_write_leaves_no_temp_file(favorites_path):
    os.mkdir(favorites_path)
    store = FavoritesStore(favorites_path)

    with pytest.raises(OSError):
        store.toggle(make_record(25))

    assert not os.path.exists(f"{favorites_path}.tmp")
    assert 25 not in store
