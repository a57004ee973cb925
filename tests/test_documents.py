from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from proxiscan.core.documents import StrictLoader, load_mapping, validate
from proxiscan.core.errors import SettingsValidationError, SignatureLoadError, SignatureValidationError


def test_yes_no_words_stay_strings() -> None:
    loaded = yaml.load("name_keywords: [on, no, yes, off]\n", Loader=StrictLoader)

    assert loaded == {"name_keywords": ["on", "no", "yes", "off"]}


def test_plain_safe_loader_still_resolves_booleans() -> None:
    assert yaml.safe_load("flag: on\n") == {"flag": True}


def test_repeated_nested_key_is_a_yaml_error() -> None:
    with pytest.raises(yaml.YAMLError, match="duplicate key 'name_keywords'"):
        yaml.load(
            "tracker:\n  name_keywords: [a]\n  name_keywords: [b]\n",
            Loader=StrictLoader,
        )


def test_merge_keys_are_not_duplicates() -> None:
    loaded = yaml.load(
        "base: &base {a: 1}\nchild:\n  <<: *base\n  b: 2\n",
        Loader=StrictLoader,
    )

    assert loaded["child"] == {"a": 1, "b": 2}


def test_load_mapping_raises_the_callers_errors(tmp_path: Path) -> None:
    missing = tmp_path / "missing.yaml"
    with pytest.raises(SignatureLoadError):
        load_mapping(missing, invalid=SignatureValidationError, unreadable=SignatureLoadError)

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(SettingsValidationError, match="mapping at root"):
        load_mapping(listing, invalid=SettingsValidationError, unreadable=SignatureLoadError)

    repeated = tmp_path / "repeated.yaml"
    repeated.write_text("a: 1\na: 2\n", encoding="utf-8")
    with pytest.raises(SettingsValidationError, match="duplicate key 'a'"):
        load_mapping(repeated, invalid=SettingsValidationError, unreadable=SignatureLoadError)


def test_empty_document_is_empty_mapping(tmp_path: Path) -> None:
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")

    assert load_mapping(empty, invalid=SignatureValidationError, unreadable=SignatureLoadError) == {}


def test_validate_reports_the_failing_path() -> None:
    with pytest.raises(SettingsValidationError, match=r"config\.yaml \(reference_rssi\)"):
        validate(
            {"reference_rssi": "loud"},
            "settings.schema.json",
            source="config.yaml",
            error=SettingsValidationError,
        )
