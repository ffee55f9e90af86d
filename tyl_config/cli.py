#!/usr/bin/env python3
"""
Command line interface for TYL configuration.

Builds the configuration from a YAML file and the process environment and
validates it, shows where each value came from, writes a YAML template or
prints the resolved values as environment exports.
"""

import shlex
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from .config.errors import (
    ConfigException, DeserializationError, EnvParseError, ExitCode, ValidationError
)
from .config.manager import ConfigManager
from .config.plugin import SectionConfig, available_sections
from .utils.helpers import mask_secret
from .utils.logger import get_logger, setup_logging

DEFAULT_CONFIG_PATH = "config.yaml"

console = Console()


def exit_code_for(error: Exception) -> int:
    """Map a configuration error to the CLI exit code."""
    if isinstance(error, ValidationError):
        return ExitCode.VALIDATION_FAILED
    if isinstance(error, EnvParseError):
        return ExitCode.ENV_PARSE_ERROR
    if isinstance(error, DeserializationError):
        return ExitCode.DESERIALIZATION_ERROR
    if isinstance(error, (ConfigException, OSError)):
        return ExitCode.CONFIGURATION_ERROR
    return ExitCode.UNKNOWN_ERROR


def build_manager(config_path: Optional[str], section_names: List[str]) -> ConfigManager:
    """
    Build the configuration for the selected sections.

    Args:
        config_path: YAML file; when None, ``config.yaml`` is used if present
        section_names: Names of the sections to register (all when empty)

    Sections with required fields and no defaults are skipped unless
    selected by name, in which case they cannot be loaded.

    Returns:
        The built configuration manager

    Raises:
        ConfigException: If a selected section cannot be built from defaults
    """
    logger = get_logger(__name__)
    builder = ConfigManager.builder()
    for section_cls in available_sections():
        if section_names and section_cls.name not in section_names:
            continue
        if not section_cls.defaultable():
            if section_names:
                raise ConfigException("section has required fields and no defaults", section_cls.name)
            logger.debug(f"Skipping section '{section_cls.name}': required fields have no defaults")
            continue
        builder.with_section(section_cls.defaults())

    if config_path is None:
        builder.with_yaml_file(DEFAULT_CONFIG_PATH, required=False)
    else:
        builder.with_yaml_file(config_path, required=True)

    return builder.build()


def _load_or_exit(ctx: click.Context) -> ConfigManager:
    logger = get_logger(__name__)
    try:
        return build_manager(ctx.obj['config_path'], ctx.obj['sections'])
    except (ConfigException, OSError) as e:
        logger.debug(f"Configuration build failed: {e}")
        click.echo(f"❌ Configuration failed: {e}", err=True)
        sys.exit(exit_code_for(e))


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--config', '-c', 'config_path', default=None,
              help=f'YAML configuration file (default: {DEFAULT_CONFIG_PATH} if present)')
@click.option('--section', '-s', 'sections', multiple=True,
              help='Section to load (repeatable, default: all known sections)')
@click.pass_context
def cli(ctx, verbose, config_path, sections):
    """TYL configuration tool."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['sections'] = list(sections)

    known = {section_cls.name for section_cls in available_sections()}
    unknown = [name for name in sections if name not in known]
    if unknown:
        raise click.BadParameter(
            f"unknown section(s): {', '.join(unknown)}; known: {', '.join(sorted(known))}",
            param_hint="--section"
        )

    setup_logging("DEBUG" if verbose else "WARNING")


@cli.command()
@click.pass_context
def validate(ctx):
    """Build and validate the configuration."""
    manager = _load_or_exit(ctx)
    for name in manager.section_names():
        click.echo(f"   ✅ Section '{name}' valid")
    click.echo(f"\n✅ All {len(manager)} sections validated successfully")
    sys.exit(ExitCode.SUCCESS)


@cli.command()
@click.option('--show-secrets', is_flag=True, help='Display secret values in clear text')
@click.pass_context
def show(ctx, show_secrets):
    """Show resolved values and the source of each value."""
    manager = _load_or_exit(ctx)

    for section in manager:
        table = Table(title=f"{section.name} ({section.env_prefix}_*)")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_column("Source", style="magenta")

        secrets = section.secret_fields() if isinstance(section, SectionConfig) else []
        sources = section.field_sources
        for field_name, value in section.to_yaml_value().items():
            shown = mask_secret(value) if field_name in secrets and not show_secrets else str(value)
            source = sources.get(field_name)
            table.add_row(field_name, shown, source.value if source else "-")

        console.print(table)


@cli.command()
@click.option('--output', '-o', default='tyl-config-template.yaml', help='Template output path')
@click.option('--registered-only', is_flag=True,
              help='Only include the selected sections, not every known section')
@click.pass_context
def generate(ctx, output, registered_only):
    """Write a YAML template with the resolved configuration."""
    manager = _load_or_exit(ctx)
    try:
        manager.generate_config_template(output, include_unregistered=not registered_only)
    except OSError as e:
        click.echo(f"❌ Template generation failed: {e}", err=True)
        sys.exit(exit_code_for(e))

    click.echo(f"✅ Generated configuration template at: {output}")


@cli.command()
@click.option('--include-secrets', is_flag=True, help='Also export secret fields')
@click.pass_context
def env(ctx, include_secrets):
    """Print the resolved configuration as shell export lines."""
    manager = _load_or_exit(ctx)

    for section in manager:
        if not isinstance(section, SectionConfig):
            continue
        secret_keys = {section.env_keys()[name][0] for name in section.secret_fields()}
        for key, value in section.to_env().items():
            if key in secret_keys and not include_secrets:
                continue
            click.echo(f"export {key}={shlex.quote(value)}")


if __name__ == '__main__':
    cli()
