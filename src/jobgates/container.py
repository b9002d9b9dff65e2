"""Dependency injection container for gate screening."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import ApplicationScreener, GateEvaluator, JobFilter
from .pipeline import (
    AnswersLoader,
    GatePipeline,
    JobCatalogLoader,
    OutputWriter,
    QuestionnaireLoader,
)


class GateContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    gate_evaluator = providers.Singleton(GateEvaluator)

    screener = providers.Singleton(
        ApplicationScreener,
        evaluator=gate_evaluator,
    )

    job_filter = providers.Singleton(
        JobFilter,
        evaluator=gate_evaluator,
    )

    questionnaire_loader = providers.Singleton(QuestionnaireLoader)
    answers_loader = providers.Singleton(AnswersLoader)
    job_loader = providers.Singleton(JobCatalogLoader)
    writer = providers.Singleton(OutputWriter)

    pipeline = providers.Factory(
        GatePipeline,
        screener=screener,
        job_filter=job_filter,
        questionnaire_loader=questionnaire_loader,
        answers_loader=answers_loader,
        job_loader=job_loader,
        writer=writer,
    )


def create_container(*, settings: dict | None = None) -> GateContainer:
    """Instantiate container with optional overrides."""

    container = GateContainer()

    if not settings:
        return container

    container.config.override(settings)

    filtering = settings.get("filtering", {}) if isinstance(settings, dict) else {}
    if "coerce_boolean_strings" in filtering:
        container.job_filter.override(
            providers.Singleton(
                JobFilter,
                evaluator=container.gate_evaluator,
                coerce_boolean_strings=bool(filtering["coerce_boolean_strings"]),
            )
        )

    screening = settings.get("screening", {}) if isinstance(settings, dict) else {}
    if "treat_empty_string_as_missing" in screening:
        container.screener.override(
            providers.Singleton(
                ApplicationScreener,
                evaluator=container.gate_evaluator,
                treat_empty_string_as_missing=bool(
                    screening["treat_empty_string_as_missing"]
                ),
            )
        )

    return container
