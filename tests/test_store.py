from io_utils.store import JsonFileStore, MemoryStore
from io_utils.writers import write_collections
from merge.models import LLC, Client, Collections, Property, dumps, loads


def test_json_file_store_round_trip(tmp_path):
    store = JsonFileStore(tmp_path / "data")
    assert store.load("llcs") is None
    assert store.save("llcs", '[{"id": 1, "name": "Acme LLC"}]')
    assert (tmp_path / "data" / "llcs.json").exists()
    assert store.load("llcs") == '[{"id": 1, "name": "Acme LLC"}]'
    assert list((tmp_path / "data").glob("*.tmp")) == []


def test_json_file_store_reports_failed_save(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    assert JsonFileStore(blocker).save("llcs", "[]") is False


def test_memory_store():
    store = MemoryStore({"clients": "[]"})
    assert store.load("clients") == "[]"
    assert store.load("llcs") is None
    assert store.save("llcs", "[]")
    assert store.blobs["llcs"] == "[]"


def test_loads_tolerates_bad_blobs_and_unknown_keys():
    assert loads(LLC, None) == []
    assert loads(LLC, "not json") == []
    assert loads(LLC, '{"id": 1}') == []
    assert loads(LLC, "[1, 2]") == []
    llcs = loads(LLC, '[{"id": 1, "name": "Acme LLC", "legacy": true}]')
    assert llcs == [LLC(id=1, name="Acme LLC")]


def test_dumps_uses_snake_case_fields():
    blob = dumps([Client(id=1, name="Acme", llc_id=2, property_ids=[3])])
    assert '"llc_id": 2' in blob and '"property_ids": [3]' in blob
    assert loads(Client, blob)[0].property_ids == [3]


def test_write_collections(tmp_path):
    state = Collections(
        llcs=[LLC(id=1, name="Acme LLC")],
        clients=[Client(id=1, name="Acme LLC", llc_id=1, property_ids=[1, 2])],
        properties=[Property(id=1, address="1 A St", llc_id=1), Property(id=2, address="2 B St", llc_id=1)],
    )
    write_collections(state, tmp_path / "out")
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["clients.csv", "llcs.csv", "properties.csv"]
    assert "1;2" in (tmp_path / "out" / "clients.csv").read_text()
