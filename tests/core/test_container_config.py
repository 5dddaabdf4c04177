from __future__ import annotations

import pytest
from pydantic import ValidationError

from teamassess.container import create_container
from teamassess.schemas.config import AppConfig, load_config


def test_create_container_with_overrides():
    container = create_container(
        settings={
            "proctoring": {"weights": {"BLUR": 40}, "max_score": 50},
            "rate_limit": {"max_requests": 7, "window_ms": 2_000, "sweep_interval_seconds": 30},
            "credentials": {"memory_cost": 2048, "time_cost": 1, "parallelism": 1},
        }
    )

    scorer = container.proctoring_scorer()
    limiter = container.rate_limiter()
    sweeper = container.rate_limit_sweeper()
    verifier = container.credential_verifier()

    assert scorer._config.weights["BLUR"] == 40
    assert scorer._config.weights["TAB_SWITCH"] == 10
    assert scorer._config.max_score == 50
    assert limiter._config.max_requests == 7
    assert limiter._config.window_ms == 2_000
    assert sweeper._interval == 30
    assert sweeper._limiter is limiter
    assert verifier._config.memory_cost == 2048


def test_default_container_wires_pipeline():
    container = create_container()

    pipeline = container.pipeline()

    assert pipeline._attempt_grader._grader is container.auto_grader()
    assert container.proctoring_scorer()._config.weights["DEVTOOLS_OPEN"] == 20


def test_load_config_validation():
    data = {
        "proctoring": {"weights": {"COPY": 12.5}},
        "rate_limit": {"max_requests": 3},
    }
    app_config = load_config(data)

    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings == {
        "proctoring": {"weights": {"COPY": 12.5}},
        "rate_limit": {"max_requests": 3},
    }


def test_load_config_rejects_non_mapping():
    with pytest.raises(ValidationError):
        load_config(["not", "a", "mapping"])


@pytest.mark.parametrize(
    "proctoring",
    [
        {"max_score": 150},
        {"max_score": -1},
        {"default_weight": -0.5},
        {"weights": {"TAB_SWITCH": -10}},
    ],
)
def test_load_config_rejects_unbounded_proctoring(proctoring):
    with pytest.raises(ValidationError):
        load_config({"proctoring": proctoring})
