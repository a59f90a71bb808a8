from __future__ import annotations

from citation_metrics.preprocess.labels import PROMPT_KEY_LENGTH, truncate_prompt
from factories import make_record, prepare


def test_truncate_prompt_keeps_first_hundred_ascii_characters() -> None:
    assert truncate_prompt("x" * 150) == "x" * PROMPT_KEY_LENGTH
    assert truncate_prompt("short prompt") == "short prompt"
    assert truncate_prompt(None) == ""
    assert truncate_prompt(float("nan")) == ""


def test_truncate_prompt_counts_astral_characters_as_two_units() -> None:
    emoji = "\U0001F600"

    assert truncate_prompt(emoji * 60) == emoji * 50
    assert truncate_prompt(emoji * 50) == emoji * 50
    assert truncate_prompt("é" * 120) == "é" * 100


def test_truncate_prompt_drops_surrogate_pair_split_at_boundary() -> None:
    emoji = "\U0001F600"

    assert truncate_prompt("a" + emoji * 60) == "a" + emoji * 49


def test_group_labels_fall_back_to_intent_label_then_unknown() -> None:
    prepared = prepare(
        [
            make_record("a", intent_id="i2", mentioned=True, prompt_text="p" * 120),
            make_record("b", intent_id="i2", mentioned=False, prompt_text=None),
            make_record("c", intent_id=None, mentioned=False, prompt_text=""),
        ]
    )

    assert prepared["prompt_key"].tolist() == ["p" * 100, "", ""]
    assert prepared["prompt_group"].tolist() == ["p" * 100, "Postgres hosting", "Unknown"]
    assert prepared["model_label"].tolist()[0] == "gpt-4o"
    assert prepared["mentioned"].dtype == bool
