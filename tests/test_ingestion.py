"""
Ingestion Pipeline Tests

End-to-end runs of the ingestion driver against spell books written to a
temporary directory and an in-memory stand-in for the search backend.
"""

import json
from unittest.mock import AsyncMock

import pytest

from spell_search.config import Settings
from spell_search.core.errors import CollectionNotFoundError, SourceAccessError
from spell_search.ingestion.driver import normalize_records, run_ingestion
from spell_search.search.client import TypesenseClient


class FakeTypesense:
    """In-memory backend keeping collections as id -> document dicts."""

    def __init__(self):
        self.collections = {}
        self.import_calls = 0

    async def delete_collection(self, name):
        if name not in self.collections:
            raise CollectionNotFoundError("Not Found", status=404)
        del self.collections[name]

    async def create_collection(self, schema):
        self.collections[schema["name"]] = {}
        return schema

    async def import_documents(self, name, documents, action="upsert"):
        self.import_calls += 1
        for doc in documents:
            self.collections[name][doc["id"]] = dict(doc)
        return [{"success": True} for _ in documents]


BOOK_PHB = {
    "spell": [
        {
            "name": "Fireball",
            "level": 3,
            "school": "V",
            "source": "PHB",
            "classes": {"fromClassList": [{"name": "Wizard"}, {"name": "Sorcerer"}]},
            "entries": ["A bright streak flashes...", {"type": "entries", "entries": ["Secondary burst."]}],
        },
        {"name": "Light", "level": 0, "school": "E", "source": "PHB"},
        {"name": "Broken", "school": "E", "source": "PHB"},
    ]
}

BOOK_XGE = {
    "spell": [
        {"name": "Toll the Dead", "level": 0, "school": "N", "source": "XGE",
         "fromClassList": [{"name": "Cleric"}, {"name": "Warlock"}, {"name": "Cleric"}]},
    ]
}


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "spells-phb.json").write_text(json.dumps(BOOK_PHB), encoding="utf-8")
    (tmp_path / "spells-xge.json").write_text(json.dumps(BOOK_XGE), encoding="utf-8")
    (tmp_path / "index.json").write_text("{not even json", encoding="utf-8")
    return tmp_path

@pytest.fixture
def test_settings():
    return Settings(collection_name="spells", import_batch_size=500)

@pytest.mark.asyncio
async def test_full_run_publishes_normalized_documents(data_dir, test_settings):
    backend = FakeTypesense()

    result = await run_ingestion(backend, data_dir=data_dir, settings=test_settings)

    assert result.files == 2
    assert result.records == 4
    assert result.rejected == 1
    assert result.report.documents == 3
    assert result.report.batches == 1

    docs = backend.collections["spells"]
    assert set(docs) == {"fireball", "light", "toll-the-dead"}
    assert docs["fireball"]["description"] == "A bright streak flashes... Secondary burst."
    assert docs["fireball"]["school"] == "Evocation"
    assert docs["fireball"]["classes"] == ["Wizard", "Sorcerer"]
    assert docs["toll-the-dead"]["classes"] == ["Cleric", "Warlock"]
    assert docs["toll-the-dead"]["school"] == "Necromancy"

@pytest.mark.asyncio
async def test_rerun_is_idempotent(data_dir, test_settings):
    backend = FakeTypesense()

    await run_ingestion(backend, data_dir=data_dir, settings=test_settings)
    first = {k: dict(v) for k, v in backend.collections["spells"].items()}

    await run_ingestion(backend, data_dir=data_dir, settings=test_settings)
    second = backend.collections["spells"]

    assert len(first) == len(second)
    assert first == second

@pytest.mark.asyncio
async def test_missing_directory_aborts_before_touching_backend(tmp_path, test_settings):
    backend = AsyncMock(spec=TypesenseClient)

    with pytest.raises(SourceAccessError):
        await run_ingestion(backend, data_dir=tmp_path / "nope", settings=test_settings)

    backend.delete_collection.assert_not_called()

@pytest.mark.asyncio
async def test_unparsable_book_aborts_before_touching_backend(data_dir, test_settings):
    (data_dir / "spells-bad.json").write_text("{\"spell\": [", encoding="utf-8")
    backend = AsyncMock(spec=TypesenseClient)

    with pytest.raises(SourceAccessError):
        await run_ingestion(backend, data_dir=data_dir, settings=test_settings)

    backend.delete_collection.assert_not_called()
    backend.create_collection.assert_not_called()

@pytest.mark.asyncio
async def test_collection_override(data_dir, test_settings):
    backend = FakeTypesense()
    result = await run_ingestion(backend, data_dir=data_dir, collection="grimoire", settings=test_settings)
    assert result.report.collection == "grimoire"
    assert "grimoire" in backend.collections

def test_normalize_records_counts_rejections():
    docs, rejected = normalize_records(
        [{"name": "Shield", "level": 1}, {"name": "Shield"}, {"name": "Odd", "level": "²"}, "junk"],
        origin="spells-test.json",
    )
    assert [d.id for d in docs] == ["shield"]
    assert rejected == 3
