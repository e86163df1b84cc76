from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from db import KIND_SEIZURES, KIND_SLAUGHTER, Database, StorageError, resolve_db_path


@pytest.mark.asyncio
async def test_repeated_slaughter_upserts_accumulate(store: Database) -> None:
    await store.upsert_slaughter("2024-12-15", "ovine", 10, 100)
    await store.upsert_slaughter("2024-12-15", "ovine", 5, 20)

    result = await store.query_month("2024-12")
    assert len(result.slaughter) == 1
    row = result.slaughter[0]
    assert (row.species, row.total_number, row.total_weight) == ("ovine", 15, 120)


@pytest.mark.asyncio
async def test_upserts_are_commutative(tmp_path: Path) -> None:
    totals = []
    for order in ([(3, 7.5), (4, 2.25)], [(4, 2.25), (3, 7.5)]):
        database = Database()
        await database.connect(str(tmp_path / f"{order[0][0]}.db"))
        for n, w in order:
            await database.upsert_slaughter("2024-03-01", "bovine", n, w)
        row = (await database.query_month("2024-03")).slaughter[0]
        totals.append((row.total_number, row.total_weight))
        await database.close()
    assert totals[0] == totals[1] == (7, 9.75)


@pytest.mark.asyncio
async def test_seizure_upsert_keyed_on_cause(store: Database) -> None:
    await store.upsert_seizure("2024-12-16", "caprine", "liver", "Parasite", 2)
    await store.upsert_seizure("2024-12-16", "caprine", "liver", "Parasite", 3)
    await store.upsert_seizure("2024-12-16", "caprine", "liver", "Fasciolose", 1)

    seizures = (await store.query_month("2024-12")).seizures
    by_cause = {s.cause: s.total_number for s in seizures}
    assert by_cause == {"Parasite": 5, "Fasciolose": 1}


@pytest.mark.asyncio
async def test_concurrent_upserts_on_same_key_lose_nothing(store: Database) -> None:
    await asyncio.gather(
        *(store.upsert_slaughter("2024-05-05", "caprine", 1, 0.5) for _ in range(50)),
        *(store.upsert_seizure("2024-05-05", "caprine", "lung", "Pneumonie", 2) for _ in range(25)),
    )
    result = await store.query_month("2024-05")
    assert [(r.total_number, r.total_weight) for r in result.slaughter] == [(50, 25.0)]
    assert [r.total_number for r in result.seizures] == [50]


@pytest.mark.asyncio
async def test_writes_are_durable_across_connections(tmp_path: Path) -> None:
    path = str(tmp_path / "durable.db")
    first = Database()
    await first.connect(path)
    await first.upsert_slaughter("2024-07-01", "ovine", 4, 40)
    await first.close()

    second = Database()
    await second.connect(path)
    rows = (await second.query_month("2024-07")).slaughter
    await second.close()
    assert [(r.total_number, r.total_weight) for r in rows] == [(4, 40.0)]


@pytest.mark.asyncio
async def test_month_query_never_leaks_other_months(store: Database) -> None:
    for year in (2023, 2024):
        for month in range(1, 13):
            for day in (1, 15, 28):
                await store.upsert_slaughter(f"{year}-{month:02d}-{day:02d}", "ovine", 1, 1)
                await store.upsert_seizure(f"{year}-{month:02d}-{day:02d}", "ovine", "head", "Autre", 1)

    for year in (2023, 2024):
        for month in range(1, 13):
            prefix = f"{year}-{month:02d}-"
            result = await store.query_month(prefix[:-1])
            assert len(result.slaughter) == 3
            assert len(result.seizures) == 3
            assert all(r.date.startswith(prefix) for r in result.slaughter)
            assert all(r.date.startswith(prefix) for r in result.seizures)


@pytest.mark.asyncio
async def test_month_query_sorted_by_date_desc(store: Database) -> None:
    for date in ("2024-12-02", "2024-12-20", "2024-12-11"):
        await store.upsert_slaughter(date, "ovine", 1, 1)
    await store.upsert_slaughter("2024-12-20", "bovine", 1, 1)

    rows = (await store.query_month("2024-12")).slaughter
    assert [r.date for r in rows] == ["2024-12-20", "2024-12-20", "2024-12-11", "2024-12-02"]
    # при равной дате — порядок вставки
    assert [r.species for r in rows[:2]] == ["ovine", "bovine"]


@pytest.mark.asyncio
async def test_empty_month_gives_empty_lists(store: Database) -> None:
    result = await store.query_month("1999-01")
    assert result.slaughter == [] and result.seizures == []
    assert await store.query_aggregate_by_month("1999-01", KIND_SLAUGHTER) == []
    assert await store.query_aggregate_by_month("1999-01", KIND_SEIZURES) == []


@pytest.mark.asyncio
async def test_aggregate_by_month(store: Database) -> None:
    await store.upsert_slaughter("2024-12-01", "ovine", 10, 100)
    await store.upsert_slaughter("2024-12-02", "ovine", 5, 20.5)
    await store.upsert_slaughter("2024-12-02", "bovine", 2, 600)
    await store.upsert_slaughter("2024-11-30", "ovine", 99, 999)
    await store.upsert_seizure("2024-12-01", "ovine", "liver", "Parasite", 2)
    await store.upsert_seizure("2024-12-03", "ovine", "liver", "Parasite", 3)
    await store.upsert_seizure("2024-12-03", "ovine", "meat", "Abcès", 1)

    slaughter = await store.query_aggregate_by_month("2024-12", KIND_SLAUGHTER)
    assert slaughter == [
        {"species": "bovine", "total_number": 2, "total_weight": 600.0},
        {"species": "ovine", "total_number": 15, "total_weight": 120.5},
    ]
    seizures = await store.query_aggregate_by_month("2024-12", KIND_SEIZURES)
    assert seizures == [
        {"species": "ovine", "organ": "liver", "cause": "Parasite", "total_number": 5},
        {"species": "ovine", "organ": "meat", "cause": "Abcès", "total_number": 1},
    ]


@pytest.mark.asyncio
async def test_unknown_aggregate_kind(store: Database) -> None:
    with pytest.raises(ValueError):
        await store.query_aggregate_by_month("2024-12", "porcs")


@pytest.mark.asyncio
async def test_not_connected_raises_storage_error() -> None:
    database = Database()
    with pytest.raises(StorageError):
        await database.query_month("2024-12")
    with pytest.raises(StorageError):
        await database.upsert_slaughter("2024-12-01", "ovine", 1, 1)


@pytest.mark.asyncio
async def test_number_beyond_integer_range_raises_storage_error(store: Database) -> None:
    with pytest.raises(StorageError):
        await store.upsert_slaughter("2024-12-01", "ovine", 10**20, 1)
    with pytest.raises(StorageError):
        await store.upsert_seizure("2024-12-01", "ovine", "liver", "Parasite", 10**20)
    await store.upsert_slaughter("2024-12-01", "ovine", 1, 1)
    assert [r.total_number for r in (await store.query_month("2024-12")).slaughter] == [1]


@pytest.mark.asyncio
async def test_failed_write_does_not_undo_concurrent_writes(store: Database) -> None:
    results = await asyncio.gather(
        *(store.upsert_slaughter("2024-06-01", "bovine", 1, 2.0) for _ in range(20)),
        *(store._write("INSERT INTO missing_table VALUES (?)", (1,)) for _ in range(5)),
        return_exceptions=True,
    )
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 5
    assert all(isinstance(f, StorageError) for f in failures)

    result = await store.query_month("2024-06")
    assert [(r.total_number, r.total_weight) for r in result.slaughter] == [(20, 40.0)]


def test_fallback_path_when_directory_cannot_be_created(tmp_path: Path, caplog) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    fallback = tmp_path / "fallback" / "abattoir.db"

    with caplog.at_level(logging.WARNING, logger="db"):
        path = resolve_db_path(str(blocker / "sub" / "abattoir.db"), str(fallback))

    assert path == str(fallback)
    assert fallback.parent.is_dir()
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_primary_path_directory_is_created(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "abattoir.db"
    assert resolve_db_path(str(target), str(tmp_path / "fb.db")) == str(target)
    assert target.parent.is_dir()
