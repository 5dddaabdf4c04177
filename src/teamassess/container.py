"""Dependency injection container for the assessment core."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    AccessPolicyEngine,
    AssessmentRandomizer,
    AutoGrader,
    AvailabilityWindow,
    ProctoringScorer,
    ScoreReleasePolicy,
)
from .core.proctoring import DEFAULT_EVENT_WEIGHTS, ProctoringConfig
from .pipeline import AttemptGrader, AttemptGradingPipeline
from .rate_limit import DEFAULT_SWEEP_INTERVAL_SECONDS, RateLimitConfig, RateLimiter, RateLimitSweeper
from .security import CredentialConfig, CredentialVerifier


class AssessmentContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    access_engine = providers.Singleton(AccessPolicyEngine)
    randomizer = providers.Singleton(AssessmentRandomizer)
    auto_grader = providers.Singleton(AutoGrader)
    proctoring_scorer = providers.Singleton(ProctoringScorer)
    availability = providers.Singleton(AvailabilityWindow)
    release_policy = providers.Singleton(ScoreReleasePolicy)
    credential_verifier = providers.Singleton(CredentialVerifier)

    rate_limiter = providers.Singleton(RateLimiter)
    rate_limit_sweeper = providers.Singleton(RateLimitSweeper, limiter=rate_limiter)

    attempt_grader = providers.Singleton(
        AttemptGrader,
        grader=auto_grader,
        scorer=proctoring_scorer,
    )

    pipeline = providers.Factory(
        AttemptGradingPipeline,
        attempt_grader=attempt_grader,
    )


def create_container(*, settings: dict | None = None) -> AssessmentContainer:
    """Instantiate container with optional overrides."""

    container = AssessmentContainer()

    if not settings or not isinstance(settings, dict):
        return container

    rate_limit_settings = dict(settings.get("rate_limit") or {})
    if rate_limit_settings:
        interval = rate_limit_settings.pop("sweep_interval_seconds", DEFAULT_SWEEP_INTERVAL_SECONDS)
        container.rate_limiter.override(
            providers.Singleton(RateLimiter, config=RateLimitConfig(**rate_limit_settings))
        )
        container.rate_limit_sweeper.override(
            providers.Singleton(
                RateLimitSweeper,
                limiter=container.rate_limiter,
                interval_seconds=interval,
            )
        )

    proctoring_settings = settings.get("proctoring") or {}
    if proctoring_settings:
        weights = dict(DEFAULT_EVENT_WEIGHTS)
        weights.update(proctoring_settings.get("weights") or {})
        proctoring_config = ProctoringConfig(
            weights=weights,
            default_weight=proctoring_settings.get("default_weight", 1.0),
            max_score=proctoring_settings.get("max_score", 100),
        )
        container.proctoring_scorer.override(
            providers.Singleton(ProctoringScorer, config=proctoring_config)
        )

    credential_settings = settings.get("credentials") or {}
    if credential_settings:
        credential_config = CredentialConfig(**credential_settings)
        container.credential_verifier.override(
            providers.Singleton(CredentialVerifier, config=credential_config)
        )

    return container
