from __future__ import annotations

import json
import logging

from nutra.config import Settings
from nutra.logging_config import JsonFormatter


def test_json_formatter_emits_one_object_per_record() -> None:
    record = logging.LogRecord(
        name="nutra.search",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Search matched %d companies",
        args=(3,),
        exc_info=None,
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "nutra.search"
    assert payload["message"] == "Search matched 3 companies"
    assert "exc_info" not in payload


def test_settings_sections_read_prefixed_env(monkeypatch) -> None:
    monkeypatch.setenv("SEARCH_MAX_TAKE", "42")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings()

    assert settings.search.max_take == 42
    assert settings.openai.enabled is True
    assert settings.db.url.startswith("sqlite+aiosqlite")
