from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from teamassess.config import ConfigManager
from teamassess.container import create_container


def test_load_returns_empty_dict_for_empty_file(tmp_path: Path):
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")

    assert ConfigManager(tmp_path).load("empty") == {}


def test_app_config_feeds_container(tmp_path: Path):
    (tmp_path / "assess.yaml").write_text(
        "proctoring:\n  weights:\n    TAB_SWITCH: 50\n  max_score: 40\n"
        "rate_limit:\n  max_requests: 2\n",
        encoding="utf-8",
    )

    settings = ConfigManager(tmp_path).app_config("assess").to_settings()
    container = create_container(settings=settings)

    assert container.proctoring_scorer().score(["TAB_SWITCH", "TAB_SWITCH"]) == 40
    limiter = container.rate_limiter()
    assert [limiter.check("k").allowed for _ in range(3)] == [True, True, False]


def test_app_config_rejects_unknown_types(tmp_path: Path):
    (tmp_path / "bad.yaml").write_text("rate_limit:\n  max_requests: many\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        ConfigManager(tmp_path).app_config("bad")
