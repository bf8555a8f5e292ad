#!/usr/bin/env python3
"""
HAR Diagnostics - Main Entry Point

This module provides the command-line interface for analyzing a captured HAR
trace and printing or saving the resulting page-load diagnosis.

The main program handles:
- Command-line argument parsing
- Configuration loading and overrides
- Logging setup
- Mapping load failures to a non-zero exit code

Exit code 0 means the analysis ran, whether or not performance issues were
found; 1 means the trace or the configuration could not be loaded.
"""

import click
import logging
import sys
from typing import Optional

from .analyzer import TraceAnalyzer
from .config_cli import config_cli
from .config_manager import AnalysisConfig, ConfigManager, ConfigurationError
from .trace_loader import InvalidTraceFormat, MalformedEntry


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: bool = False, log_file: Optional[str] = None,
                  level: str = 'INFO') -> None:
    """
    Setup logging configuration for the analyzer.

    Console output goes to stderr so stdout stays clean for the report.

    Args:
        verbose: Enable verbose (DEBUG) logging, overriding ``level``
        log_file: Optional log file path
        level: Log level name used when not verbose
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    # Drop handlers from a previous invocation in the same process
    for handler in root_logger.handlers[:]:
        if getattr(handler, '_har_diagnostics', False):
            root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler._har_diagnostics = True
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler._har_diagnostics = True
        root_logger.addHandler(file_handler)


def print_next_steps() -> None:
    """Print the follow-up checklist shown after a report."""
    click.echo("\n🎯 NEXT STEPS:")
    click.echo("   1. Convert heavy images to a modern format (WebP/AVIF)")
    click.echo("   2. Enable gzip/brotli compression on the web server")
    click.echo("   3. Serve static assets through a CDN with caching headers")
    click.echo("   4. Add resource preloading for the critical path")
    click.echo("   5. Capture a new HAR and re-run this analyzer to measure improvements")


@click.group()
@click.version_option(package_name='har-diagnostics')
def cli():
    """HAR Diagnostics - page-load performance analysis for HAR traces."""
    pass


@cli.command()
@click.argument('trace_file', type=click.Path(dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Write the JSON report to this file')
@click.option('--json', 'as_json', is_flag=True,
              help='Print the JSON report instead of the text rendering')
@click.option('--top', type=int, default=None,
              help='Number of gaps/bottlenecks to display (default: 5)')
@click.option('--skip-malformed', is_flag=True,
              help='Skip malformed entries instead of failing (they are listed in the report)')
@click.option('--target-load-time', type=float, default=None,
              help='Target total load time in milliseconds')
@click.option('--workers', type=int, default=None,
              help='Worker threads used to classify large traces')
@click.option('--config-file', '-c', type=click.Path(dir_okay=False),
              help='JSON config file with an "analysis" section')
@click.option('--env-file', '-e', type=click.Path(dir_okay=False),
              help='Path to .env file to load')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True,
              help='Only log warnings and errors')
@click.option('--log-file',
              help='Log file path')
def analyze(trace_file: str, output: Optional[str], as_json: bool, top: Optional[int],
            skip_malformed: bool, target_load_time: Optional[float], workers: Optional[int],
            config_file: Optional[str], env_file: Optional[str], verbose: bool, quiet: bool,
            log_file: Optional[str]):
    """Analyze a HAR trace file and report page-load performance."""
    try:
        config_manager = ConfigManager(env_file=env_file, config_file=config_file)
        config = AnalysisConfig.from_config_manager(config_manager, overrides={
            'target_load_time_ms': target_load_time,
            'top_n': top,
            'max_workers': workers,
        })
    except ConfigurationError as e:
        click.echo(f"❌ Configuration Error: {e}", err=True)
        sys.exit(1)

    setup_logging(verbose=verbose, log_file=log_file, level='WARNING' if quiet else config.log_level)
    logger = logging.getLogger(__name__)

    analyzer = TraceAnalyzer(config=config, strict=not skip_malformed)
    try:
        report = analyzer.analyze_file(trace_file)
    except MalformedEntry as e:
        click.echo(f"❌ HAR analysis failed: {e}", err=True)
        click.echo("💡 Re-run with --skip-malformed to skip invalid entries", err=True)
        logger.error(f"Malformed entry {e.index} (field '{e.field}') in {trace_file}")
        sys.exit(1)
    except InvalidTraceFormat as e:
        click.echo(f"❌ HAR analysis failed: {e}", err=True)
        logger.error(f"Invalid trace format in {trace_file}: {e}")
        sys.exit(1)

    if output:
        try:
            path = analyzer.assembler.save_report(report, output)
        except OSError as e:
            click.echo(f"❌ Could not write report to {output}: {e}", err=True)
            sys.exit(1)
        if not as_json:
            click.echo(f"📄 Detailed report saved to: {path}")

    if as_json:
        click.echo(analyzer.assembler.report_to_json(report))
    else:
        click.echo(analyzer.render(report))
        print_next_steps()


cli.add_command(config_cli)


def main():
    cli()


if __name__ == "__main__":
    main()
