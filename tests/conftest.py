from __future__ import annotations

from typing import Any

import pytest

from factories import make_record


@pytest.fixture
def hierarchy_records() -> list[dict[str, Any]]:
    return [
        make_record("r1", intent_id="i1", mentioned=True, prompt_text="best db"),
        make_record("r2", intent_id="i2", mentioned=False, prompt_text="pg hosting"),
        make_record("r3", intent_id="i2", mentioned=True, prompt_text="pg hosting"),
        make_record("r4", intent_id="i3", mentioned=False, prompt_text="react kits"),
        make_record("r5", intent_id="i4", mentioned=False, prompt_text="general"),
        make_record("r6", intent_id="i5", mentioned=True, prompt_text="orphan"),
        make_record("r7", intent_id="i6", mentioned=False, prompt_text="pg backups"),
        make_record("r8", intent_id=None, mentioned=False, prompt_text="no intent"),
    ]
