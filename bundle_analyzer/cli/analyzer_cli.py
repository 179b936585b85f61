#!/usr/bin/env python3
"""
Bundle Analyzer CLI

Serves the analyzer next to a running dev build, or renders a one-off
report from an existing stats directory.
"""

import asyncio
import click
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional
import uvicorn
import yaml

from ..analysis.coalescer import ComputationCoalescer
from ..analysis.livereload import inject_livereload
from ..api.main import create_app
from ..config.config_loader import load_analyzer_config
from ..core.models import IgnoreRules


async def _render_report(stats_dir: Path, ignore_rules: IgnoreRules) -> str:
    coalescer = ComputationCoalescer(stats_dir, ignore_rules)
    return await coalescer.compute_artifact()


@click.group()
@click.option('--config', 'config_path', default=None, help='Path to bundle_analyzer.yaml')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level (overrides the config file)')
@click.pass_context
def cli(ctx, config_path, log_level):
    """Bundle size analyzer for concat based dev builds"""
    config = load_analyzer_config(config_path)
    level = log_level or config.server.log_level

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['log_level'] = level


@cli.command()
@click.option('--host', default=None, help='Host to bind to')
@click.option('--port', type=int, default=None, help='Port to bind to')
@click.option('--project-root', default=None, help='Project whose entry file is touched to rebuild')
@click.option('--build-command', default=None, help='Dev build command to supervise')
@click.option('--concat-version', default=None, help='Version of the concat plugin used by the build')
@click.option('--settle-delay', type=float, default=None, help='Seconds to wait after a successful build')
@click.pass_context
def serve(ctx, host, port, project_root, build_command, concat_version, settle_delay):
    """Serve the analyze endpoints"""
    config = ctx.obj['config']

    analyzer = config.analyzer
    if project_root:
        analyzer = replace(analyzer, project_root=project_root)
    if concat_version:
        analyzer = replace(analyzer, concat_version=concat_version)
    if settle_delay is not None:
        analyzer = replace(analyzer, settle_delay=settle_delay)

    build = config.build
    if build_command:
        build = replace(build, command=build_command)

    config = replace(config, analyzer=analyzer, build=build)
    app = create_app(config)

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=ctx.obj['log_level'].lower()
    )


@cli.command()
@click.argument('stats_dir', type=click.Path(exists=True, file_okay=False))
@click.option('--output', '-o', default=None, help='Write the HTML report here instead of stdout')
@click.option('--ignore', multiple=True, help='Extra filename pattern to leave out')
@click.option('--include-tests', is_flag=True, help='Keep test bundles in the report')
@click.option('--livereload', is_flag=True, help='Inject the live reload script')
@click.pass_context
def report(ctx, stats_dir, output, ignore, include_tests, livereload):
    """Render a report from an existing stats directory"""
    config = ctx.obj['config']

    patterns = list(ignore)
    if config.analyzer.ignore:
        configured = config.analyzer.ignore
        patterns.extend([configured] if isinstance(configured, str) else configured)

    rules = IgnoreRules.from_options(
        patterns,
        ignore_test_files=not include_tests and config.analyzer.ignore_test_files
    )

    try:
        html = asyncio.run(_render_report(Path(stats_dir), rules))
    except Exception as e:
        click.echo(f"Failed to compute report: {e}", err=True)
        sys.exit(1)

    if livereload:
        html = inject_livereload(html, config.analyzer.livereload_url)

    if output:
        Path(output).write_text(html, encoding='utf-8')
        click.echo(f"Report written to {output}")
    else:
        click.echo(html)


@cli.command('show-config')
@click.pass_context
def show_config(ctx):
    """Print the effective configuration"""
    click.echo(yaml.safe_dump(ctx.obj['config'].to_dict(), sort_keys=False))


def main(argv: Optional[list] = None):
    cli(args=argv, obj={})


if __name__ == '__main__':
    main()
