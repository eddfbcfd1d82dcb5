import json
import os
import threading

import pytest

from database import CorruptStorage, JsonRecordStore


def test_load_missing_collection_creates_it(store):
    path = store.path_for("orders")
    assert not os.path.exists(path)

    assert store.load("orders") == []
    assert os.path.exists(path)
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == []
    assert store.load("orders") == []


def test_load_empty_file(store):
    os.makedirs(store.data_dir)
    with open(store.path_for("menu"), "w", encoding="utf-8") as f:
        f.write("")
    assert store.load("menu") == []


def test_load_whitespace_file(store):
    os.makedirs(store.data_dir)
    with open(store.path_for("menu"), "w", encoding="utf-8") as f:
        f.write("  \n")
    assert store.load("menu") == []


def test_load_malformed_json(store):
    os.makedirs(store.data_dir)
    with open(store.path_for("customers"), "w", encoding="utf-8") as f:
        f.write('[{"id": 1,')
    with pytest.raises(CorruptStorage):
        store.load("customers")


def test_load_non_array_document(store):
    os.makedirs(store.data_dir)
    with open(store.path_for("customers"), "w", encoding="utf-8") as f:
        f.write('{"id": 1}')
    with pytest.raises(CorruptStorage):
        store.load("customers")


def test_save_load_round_trip_is_fixed_point(store):
    records = [
        {"id": 1, "name": "Paneer Tikka", "price": 180.5, "tags": ["veg", "grill"]},
        {"id": 2, "name": "Rasmalai ₹", "extra": {"sweet": True, "note": None}},
    ]
    store.save("menu", records)
    assert store.load("menu") == records

    with open(store.path_for("menu"), encoding="utf-8") as f:
        before = f.read()
    store.save("menu", store.load("menu"))
    with open(store.path_for("menu"), encoding="utf-8") as f:
        assert f.read() == before


def test_save_is_human_readable_and_leaves_no_temp_file(store):
    store.save("orders", [{"id": 1}])
    with open(store.path_for("orders"), encoding="utf-8") as f:
        assert f.read() == '[\n  {\n    "id": 1\n  }\n]'
    assert os.listdir(store.data_dir) == ["orders.json"]


def test_save_overwrites_whole_collection(store):
    store.save("menu", [{"name": "Dal"}, {"name": "Naan"}])
    store.save("menu", [{"name": "Roti"}])
    assert store.load("menu") == [{"name": "Roti"}]


@pytest.mark.parametrize("name", ["", "../etc", "a/b", "menu.json"])
def test_invalid_collection_name(store, name):
    with pytest.raises(ValueError):
        store.load(name)


def test_collections_lists_files_on_disk(tmp_path):
    store = JsonRecordStore(str(tmp_path / "missing"))
    assert store.collections() == []
    store.load("orders")
    store.save("menu", [])
    assert store.collections() == ["menu", "orders"]


def test_concurrent_loads_of_missing_collection(tmp_path):
    errors = []
    for round_no in range(50):
        store = JsonRecordStore(str(tmp_path / f"round{round_no}"))
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                assert store.load("menu") == []
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert os.listdir(store.data_dir) == ["menu.json"]

    assert errors == []


def test_read_create_does_not_clobber_concurrent_writes(store):
    errors = []
    barrier = threading.Barrier(10)

    def writer(n):
        barrier.wait()
        try:
            with store.lock("orders"):
                records = store.load("orders")
                records.append({"n": n})
                store.save("orders", records)
        except Exception as e:
            errors.append(e)

    def reader():
        barrier.wait()
        try:
            store.load("orders")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(5)]
    threads += [threading.Thread(target=reader) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sorted(r["n"] for r in store.load("orders")) == list(range(5))
