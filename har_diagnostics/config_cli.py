#!/usr/bin/env python3
"""
Configuration CLI for HAR trace diagnostics.

This module provides commands for validating and inspecting the effective
analysis configuration assembled from .env files, environment variables and
the optional JSON config file.
"""

import json
import sys

import click

from .config_manager import ConfigManager, ConfigurationError


@click.group(name='config')
def config_cli():
    """Configuration management for HAR diagnostics."""
    pass


@config_cli.command()
@click.option('--env-file', '-e', help='Path to .env file to validate')
@click.option('--config-file', '-c', help='Path to JSON config file to validate')
def validate(env_file, config_file):
    """Validate configuration and show status."""
    config_manager = ConfigManager(env_file=env_file, config_file=config_file)
    errors = config_manager.validate_required_config()
    if errors:
        click.echo("❌ Configuration validation failed:", err=True)
        for error in errors:
            click.echo(f"  {error}", err=True)
        sys.exit(1)
    click.echo("✅ Configuration validation passed!")


@config_cli.command()
@click.option('--env-file', '-e', help='Path to .env file to check')
@click.option('--config-file', '-c', help='Path to JSON config file to check')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
def show(env_file, config_file, output_format):
    """Show current configuration values and where they came from."""
    config_manager = ConfigManager(env_file=env_file, config_file=config_file)
    try:
        config = config_manager.get_analysis_config()
    except ConfigurationError as e:
        click.echo(f"❌ Error showing configuration: {e}", err=True)
        sys.exit(1)

    sources = config_manager.get_configuration_sources_info()
    if output_format == 'json':
        click.echo(json.dumps(config, indent=2))
        return

    click.echo("=== Analysis Configuration ===")
    for key, value in config.items():
        if isinstance(value, tuple):
            value = ', '.join(value)
        click.echo(f"  {key}={value}  ({sources.get(key, 'default')})")


if __name__ == '__main__':
    config_cli()
