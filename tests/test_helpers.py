"""Tests for the shared helpers."""

from preaccounting.utils.helpers import clamp_confidence, ensure_directory, merge_dicts


def test_merge_dicts_keeps_untouched_keys():
    base = {"incoming": {"strong": ["achat"], "weak": ["reçu"]}}
    merged = merge_dicts(base, {"incoming": {"strong": ["achats"]}})

    assert merged == {"incoming": {"strong": ["achats"], "weak": ["reçu"]}}
    assert base["incoming"]["strong"] == ["achat"]


def test_clamp_confidence():
    assert clamp_confidence(1.15) == 1.0
    assert clamp_confidence(-0.2) == 0.0
    assert clamp_confidence(0.4) == 0.4


def test_ensure_directory(tmp_path):
    target = ensure_directory(tmp_path / "outputs" / "analyses")
    assert target.is_dir()
