"""
Unit tests for router export functionality.

Tests verify that the export method correctly writes router state to files
in JSON format.
"""

import json
from pathlib import Path

import topics


def test_export_creates_valid_json_file(tmp_path: Path) -> None:
    """Test that export creates a valid JSON file with correct content."""
    router = topics.PubSub()

    def handler(evt: topics.Event) -> None:
        pass

    router.subscribe("/test/event", handler)
    router.subscribe("/app/startup", handler, filter={"ready": True})

    output_file = tmp_path / "topics_export.json"
    router.export(output_file)

    assert output_file.exists()

    with open(output_file) as f:
        data = json.load(f)

    assert data == router.to_dict()
    assert "/test/event" in data
    assert "/app/startup" in data


def test_export_with_string_and_path_types(tmp_path: Path) -> None:
    """Test that export accepts both string and Path objects."""
    router = topics.PubSub()
    router.subscribe("/test/event", lambda evt: None)

    path_file = tmp_path / "path_export.json"
    router.export(path_file)
    assert path_file.exists()

    string_file = str(tmp_path / "string_export.json")
    router.export(string_file)
    assert Path(string_file).exists()


def test_export_empty_router(tmp_path: Path) -> None:
    """Test exporting an empty router creates valid empty JSON."""
    output_file = tmp_path / "empty_router.json"
    topics.PubSub().export(output_file)

    with open(output_file) as f:
        data = json.load(f)

    assert data == {}
