"""Objects shared by CLI commands through the click context."""

import click

from statementflow.classifiers import create_classifier
from statementflow.database.base import Database
from statementflow.domain.categorization import CategorizationEngine
from statementflow.settings import Settings


def get_db(ctx: click.Context) -> Database:
    return ctx.obj["db"]


def get_settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def build_engine(ctx: click.Context) -> CategorizationEngine:
    """Build the categorization engine, with the AI tier when configured."""
    settings = get_settings(ctx)
    return CategorizationEngine(
        get_db(ctx),
        classifier=create_classifier(settings),
        batch_size=settings.classifier_batch_size,
        max_workers=settings.classifier_max_workers,
    )
