#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
schemakeeper CLI - generate project schemas and check whether they are current
"""

import sys
from pathlib import Path

import click

from . import __version__
from .core.freshness import FreshnessAdvisor
from .core.schema_assembler import SchemaAssembler
from .storage.schema_store import SchemaPersistenceError
from .utils.config import Config, ConfigError
from .utils.constants import TASK_TYPES
from .utils.helpers import setup_logging


def project_option():
    return click.option(
        "-p",
        "--project",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=".",
        help="Project root directory",
    )


def _assembler(ctx: click.Context, project: Path) -> SchemaAssembler:
    return SchemaAssembler(project, config=ctx.obj["config"])


def _advisor(ctx: click.Context, assembler: SchemaAssembler) -> FreshnessAdvisor:
    config = ctx.obj["config"]
    return FreshnessAdvisor(assembler.store, update_threshold=config.freshness.update_threshold)


@click.group()
@click.version_option(__version__, prog_name="schemakeeper")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Configuration file path")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path, verbose: bool):
    """Generate versioned project schemas and keep them fresh."""
    config = Config(config_path)
    setup_logging(verbose=verbose, log_dir=config.logging.log_dir, level=config.logging.level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@project_option()
@click.option(
    "-f",
    "--framework",
    type=click.Choice(["laravel", "rails", "django", "express"]),
    help="Use this framework instead of auto-detection",
)
@click.option("--force", is_flag=True, help="Regenerate even if recent schemas exist")
@click.pass_context
def generate(ctx: click.Context, project: Path, framework, force: bool):
    """Generate and save schemas for a project."""
    assembler = _assembler(ctx, project)

    if not force:
        cooldown = ctx.obj["config"].freshness.generate_cooldown_minutes
        freshness = _advisor(ctx, assembler).check_freshness(cooldown)
        if freshness["isFresh"]:
            click.echo(f"schemas are fresh (generated {freshness['ageMinutes']} minutes ago), skipping")
            click.echo("use --force to regenerate")
            return

    try:
        result = assembler.generate_and_save(framework)
    except (SchemaPersistenceError, ValueError) as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    click.echo(f"framework: {result['framework']['type']}")
    click.echo(f"schemas:   {', '.join(result['schemas'])}")
    click.echo(f"version:   {result['version']}")
    click.echo(f"location:  {result['location']}")


@cli.command()
@project_option()
@click.pass_context
def info(ctx: click.Context, project: Path):
    """Show current schemas and recent versions."""
    assembler = _assembler(ctx, project)
    result = assembler.store.get_schema_info()

    if not result["success"]:
        click.echo(f"error: {result['error']} at {result['location']}", err=True)
        click.echo("run 'schemakeeper generate' first", err=True)
        sys.exit(1)

    current = result["current"]
    framework = current.get("framework") or {}
    click.echo(f"framework:    {framework.get('type', 'unknown')}")
    click.echo(f"generated at: {current.get('generatedAt')}")
    click.echo(f"schemas:      {', '.join(result['availableSchemas'])}")
    click.echo(f"location:     {result['location']}")
    click.echo(f"\n{len(result['versions'])} recent versions")
    for version in result["versions"]:
        click.echo(f"  {version}")


@cli.command()
@project_option()
@click.option("--max-age", type=float, help="Maximum age in minutes before schemas are stale")
@click.pass_context
def check(ctx: click.Context, project: Path, max_age):
    """Check whether the schemas are fresh; exits 1 when stale."""
    if max_age is None:
        max_age = ctx.obj["config"].freshness.max_age_minutes

    assembler = _assembler(ctx, project)
    freshness = _advisor(ctx, assembler).check_freshness(max_age)

    click.echo(freshness["reason"])
    if freshness["lastGenerated"]:
        click.echo(f"last generated: {freshness['lastGenerated']} ({freshness['ageMinutes']} minutes ago)")

    if not freshness["isFresh"]:
        sys.exit(1)


@cli.command()
@project_option()
@click.option("-t", "--task-type", type=click.Choice(TASK_TYPES), help="Type of the completed task")
@click.option("--file", "files", multiple=True, help="Changed file (repeatable)")
@click.pass_context
def advise(ctx: click.Context, project: Path, task_type, files):
    """Recommend whether schemas should be regenerated after a task."""
    assembler = _assembler(ctx, project)
    recommendation = _advisor(ctx, assembler).should_auto_update(task_type, list(files))

    click.echo(f"update needed: {'yes' if recommendation.required else 'no'}")
    click.echo(f"confidence:    {recommendation.confidence}")
    if recommendation.affectedSchemas:
        click.echo(f"affected:      {', '.join(recommendation.affectedSchemas)}")
    click.echo(f"reason:        {recommendation.reason}")


@cli.command("config")
@click.option("--save", is_flag=True, help="Write the effective configuration to the config file")
@click.pass_context
def show_config(ctx: click.Context, save: bool):
    """Show the effective configuration, defaults included."""
    config = ctx.obj["config"]
    click.echo(f"# {config.config_path}")
    click.echo(config.dump(), nl=False)

    if save:
        try:
            config.save()
        except ConfigError as e:
            click.echo(f"error: {e}", err=True)
            sys.exit(1)
        click.echo(f"saved to {config.config_path}")


def main() -> int:
    """Entry point for the CLI."""
    try:
        cli()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
