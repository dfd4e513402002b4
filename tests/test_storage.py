import json
from pathlib import Path

from usaco_standings.models import (
    Camp,
    FinalistEntry,
    InviteCategory,
    Season,
    UsacoData,
)
from usaco_standings.storage import Storage


def _data() -> UsacoData:
    return UsacoData(
        camps=[
            Camp(
                season=Season(2024),
                entries=[FinalistEntry("Alice Smith", InviteCategory.FINALIST, 2024)],
            )
        ]
    )


def test_save_writes_envelope(temp_json_file: Path) -> None:
    Storage(str(temp_json_file)).save(_data())

    with open(temp_json_file) as f:
        payload = json.load(f)

    assert payload["schema_version"] == "1.0"
    assert "last_scraped_at" in payload
    assert payload["data"]["camps"][0]["season"] == "2023-24"


def test_save_and_load(temp_json_file: Path) -> None:
    storage = Storage(str(temp_json_file))
    storage.save(_data())

    assert storage.load() == _data()


def test_save_creates_parent_directory(tmp_path: Path) -> None:
    path = tmp_path / "out" / "usaco.json"

    Storage(str(path)).save(UsacoData())

    assert path.exists()


def test_load_missing_file(temp_json_file: Path) -> None:
    assert Storage(str(temp_json_file)).load() is None


def test_load_corrupt_file(temp_json_file: Path) -> None:
    temp_json_file.write_text("{not json", encoding="utf-8")

    assert Storage(str(temp_json_file)).load() is None
