"""Dependency injection container for the screening engine."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    BatchEvaluator,
    CompositeScorer,
    EducationEvaluator,
    ExperienceEvaluator,
    LocationEvaluator,
    Ranker,
    SkillsEvaluator,
)
from .core.evaluators.location import LocationConfig
from .core.evaluators.skills import SkillsConfig
from .engine import ScreeningEngine
from .pipeline import ScreeningPipeline


class ScreeningContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    skills_evaluator = providers.Singleton(SkillsEvaluator)
    experience_evaluator = providers.Singleton(ExperienceEvaluator)
    education_evaluator = providers.Singleton(EducationEvaluator)
    location_evaluator = providers.Singleton(LocationEvaluator)

    evaluators = providers.List(
        skills_evaluator,
        experience_evaluator,
        education_evaluator,
        location_evaluator,
    )

    composite_scorer = providers.Singleton(
        CompositeScorer,
        evaluators=evaluators,
        score_weights=config.score_weights,
        location_bonus_cap=config.location_bonus_cap,
    )

    batch_evaluator = providers.Singleton(
        BatchEvaluator,
        scorer=composite_scorer,
        concurrency_limit=config.concurrency_limit,
    )

    ranker = providers.Singleton(
        Ranker,
        qualifying_threshold=config.qualifying_threshold,
    )

    engine = providers.Singleton(
        ScreeningEngine,
        batch_evaluator=batch_evaluator,
        ranker=ranker,
        run_workers=config.run_workers,
    )

    pipeline = providers.Factory(
        ScreeningPipeline,
        engine=engine,
    )


def create_container(*, settings: dict | None = None) -> ScreeningContainer:
    """Instantiate container with optional overrides."""

    container = ScreeningContainer()

    if not settings:
        return container

    core_settings = settings.get("core", {}) if isinstance(settings, dict) else {}
    if core_settings:
        container.config.from_dict(core_settings)

    evaluator_settings = settings.get("evaluators", {}) if isinstance(settings, dict) else {}

    if "skills" in evaluator_settings:
        skills_config = SkillsConfig(**evaluator_settings["skills"])
        container.skills_evaluator.override(
            providers.Singleton(SkillsEvaluator, config=skills_config)
        )

    if "location" in evaluator_settings:
        location_config = LocationConfig(**evaluator_settings["location"])
        container.location_evaluator.override(
            providers.Singleton(LocationEvaluator, config=location_config)
        )

    return container
