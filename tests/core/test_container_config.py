from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from screenrank.config import ConfigManager, load_settings
from screenrank.container import create_container
from screenrank.schemas.config import AppConfig, load_config


def test_create_container_with_overrides():
    container = create_container(
        settings={
            "core": {
                "score_weights": {"skills": 0.7, "experience": 0.2, "education": 0.1},
                "qualifying_threshold": 75,
                "location_bonus_cap": 3,
                "concurrency_limit": 4,
            },
            "evaluators": {
                "skills": {"near_miss_similarity": 90.0},
                "location": {"match_bonus": 2.0},
            },
        }
    )

    skills = container.skills_evaluator()
    location = container.location_evaluator()
    scorer = container.composite_scorer()
    batch = container.batch_evaluator()
    ranker = container.ranker()

    assert skills._config.near_miss_similarity == 90.0
    assert location._config.match_bonus == 2.0
    assert scorer._score_weights["skills"] == 0.7
    assert scorer.location_bonus_cap == 3
    assert batch.concurrency_limit == 4
    assert ranker.qualifying_threshold == 75
    container.engine().shutdown()


def test_default_container_uses_documented_policy():
    container = create_container()

    scorer = container.composite_scorer()
    ranker = container.ranker()

    assert scorer._score_weights == {"skills": 0.6, "experience": 0.25, "education": 0.15}
    assert scorer.location_bonus_cap == 5.0
    assert ranker.qualifying_threshold == 60
    container.engine().shutdown()


def test_load_config_validation():
    data = {
        "core": {"score_weights": {"skills": 0.65}, "qualifying_threshold": 70},
        "evaluators": {"skills": {"near_miss_similarity": 90.0}},
    }
    app_config = load_config(data)
    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings["core"]["score_weights"]["skills"] == 0.65
    assert settings["core"]["qualifying_threshold"] == 70
    assert settings["evaluators"]["skills"]["near_miss_similarity"] == 90.0


def test_load_config_rejects_unknown_sections():
    with pytest.raises(ValidationError):
        load_config({"core": {"weights": {}}})
    with pytest.raises(ValidationError):
        load_config(["not", "a", "mapping"])


def test_settings_files_round_trip_through_yaml(tmp_path: Path):
    (tmp_path / "strict.yaml").write_text(
        "core:\n  qualifying_threshold: 80\n",
        encoding="utf-8",
    )

    manager = ConfigManager(tmp_path)

    assert manager.load("strict") == {"core": {"qualifying_threshold": 80}}
    assert manager.app_config("strict").core.qualifying_threshold == 80
    assert load_settings(tmp_path / "strict.yaml").to_settings() == {
        "core": {"qualifying_threshold": 80.0}
    }
    assert load_settings(None).to_settings() == {}
