"""Longtail Scout CLI entry point.

Provides the command-line interface using Click and Rich for long-tail
generation, keyword metrics, trend collection and stored results.
"""

import logging

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from longtail_scout import __version__
from longtail_scout.config import Config
from longtail_scout.errors import ConfigurationError, UpstreamError, ValidationError
from longtail_scout.formatters import (
    OUTPUT_FORMATS, OutputFormatter, format_search_volume, keyword_quality,
    recommendation_message,
)

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

format_option = click.option(
    '--format', 'output_format',
    type=click.Choice(OUTPUT_FORMATS),
    default='table',
    help='Output format.',
)


def _searchad():
    from longtail_scout.collectors.searchad import SearchAdCollector
    try:
        return SearchAdCollector()
    except ConfigurationError as e:
        raise click.ClickException(str(e))


def _trends():
    from longtail_scout.collectors.trends import TrendsCollector
    try:
        return TrendsCollector()
    except ConfigurationError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name='longtail-scout')
def main():
    """Longtail Scout - keyword research and long-tail expansion."""
    Config.setup_logging()


@main.command()
@click.argument('seed')
@click.option('--volume', is_flag=True,
              help='Look up search volume and score for the top 10 candidates.')
@click.option('--save', is_flag=True, help='Store the candidates in the database.')
@format_option
def longtail(seed, volume, save, output_format):
    """Generate long-tail keywords for SEED.

    Uses live autocomplete suggestions when available and falls back to
    pattern-based candidates otherwise.

    Examples:
        longtail-scout longtail "블로그"
        longtail-scout longtail "seo" --volume --save
    """
    from longtail_scout.collectors.autocomplete import AutocompleteCollector
    from longtail_scout.keyword_engine import LongtailGenerator

    metrics_source = _searchad() if volume else None
    generator = LongtailGenerator(AutocompleteCollector(), metrics_source=metrics_source)

    try:
        result = generator.generate_longtails(seed, include_volume=volume)
    except ValidationError as e:
        raise click.ClickException(str(e))

    OutputFormatter(output_format).format_longtails(result)

    if save:
        from longtail_scout.db import init_db, LongtailRepository
        init_db()
        repo = LongtailRepository()
        try:
            inserted = repo.save_result(result)
        finally:
            repo.close()
        if output_format == 'table':
            console.print(f'[dim]Saved {inserted} new long-tail keywords to '
                          f'{Config.get_db_path()}[/dim]')


@main.command()
@click.argument('keyword')
def keyword(keyword):
    """Show search volume, competition and score for KEYWORD."""
    from longtail_scout.scoring import score_metrics

    collector = _searchad()
    try:
        metrics = collector.fetch_keyword_metrics(keyword)
    except UpstreamError as e:
        raise click.ClickException(f'SearchAd request failed: {e}')

    if metrics is None:
        console.print(f'[yellow]No keyword data found for "{keyword}".[/yellow]')
        return

    score = score_metrics(metrics)
    tier = metrics.competition_tier.value if metrics.competition_tier else 'unknown'

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column('Label', style='bold')
    table.add_column('Value', style='green')
    table.add_row('Search volume', format_search_volume(metrics.total_volume))
    table.add_row('  PC', f'{metrics.volume_pc:,}')
    table.add_row('  Mobile', f'{metrics.volume_mobile:,}')
    table.add_row('Competition', tier)
    table.add_row('Average CPC', f'{metrics.avg_cpc:,.0f}')
    table.add_row('Score', str(score))
    table.add_row('Quality', keyword_quality(metrics.total_volume, tier))

    console.print(Panel(table, title=f'[bold cyan]{metrics.keyword}[/bold cyan]',
                        border_style='cyan'))
    console.print(recommendation_message(score))


@main.command()
@click.argument('keyword')
@click.option('--limit', type=click.IntRange(1, 50), default=10,
              help='Maximum related keywords to show.')
@format_option
def related(keyword, limit, output_format):
    """Show keywords related to KEYWORD with their scores."""
    from longtail_scout.keyword_engine import build_keyword

    collector = _searchad()
    try:
        results = collector.fetch_related_keywords(keyword, limit=limit)
    except UpstreamError as e:
        raise click.ClickException(f'SearchAd request failed: {e}')

    OutputFormatter(output_format).format_keywords(
        [build_keyword(m) for m in results], title=f'Related to "{keyword}"',
    )


@main.command()
@click.option('--type', 'trend_type', type=click.Choice(['daily', 'realtime']),
              default='daily', help='Trending window.')
@click.option('--save', is_flag=True, help='Store the trends in the database.')
@format_option
def trends(trend_type, save, output_format):
    """Collect trending searches and score them."""
    from longtail_scout.trend_normalizer import normalize_trends

    collector = _trends()
    try:
        if trend_type == 'realtime':
            snapshot = collector.fetch_realtime_trends()
        else:
            snapshot = collector.fetch_daily_trends()
    except UpstreamError as e:
        raise click.ClickException(f'Trends request failed: {e}')

    keywords = normalize_trends(snapshot.trends)
    OutputFormatter(output_format).format_keywords(
        keywords, title=f'Trending searches ({trend_type}, {snapshot.date})',
    )

    if save:
        _save_keywords(keywords, quiet=output_format != 'table')


@main.command()
@click.argument('keywords', nargs=-1, required=True)
@click.option('--save', is_flag=True, help='Store the keywords in the database.')
@format_option
def collect(keywords, save, output_format):
    """Collect metrics and scores for one or more KEYWORDS."""
    from longtail_scout.keyword_engine import collect_keywords
    from longtail_scout.progress import create_collection_progress

    collector = _searchad()

    with create_collection_progress(console=err_console) as progress:
        task = progress.add_task('Collecting', total=len(keywords), status='')

        def on_progress(completed, total, keyword):
            progress.update(task, completed=completed, status=keyword)

        try:
            results = collect_keywords(keywords, collector, progress_callback=on_progress)
        except KeyboardInterrupt:
            console.print('\n[yellow]Collection interrupted.[/yellow]')
            return

    OutputFormatter(output_format).format_keywords(results, title='Collected keywords')

    if save:
        _save_keywords(results, quiet=output_format != 'table')


@main.command()
@click.option('--limit', default=20, help='Maximum keywords to display.')
@click.option('--platform', type=click.Choice(['searchad', 'trends']), default=None,
              help='Only show keywords from this platform.')
@format_option
def top(limit, platform, output_format):
    """Show the highest-scoring stored keywords."""
    from longtail_scout.db import init_db, KeywordRepository

    init_db()
    repo = KeywordRepository()
    try:
        rows = repo.get_top_keywords(limit=limit, platform=platform)
    finally:
        repo.close()

    if not rows and output_format == 'table':
        console.print('[yellow]No keywords stored yet. Run "collect" or "trends --save".[/yellow]')
        return

    OutputFormatter(output_format).format_keywords(rows, title='Top keywords')


def _save_keywords(keywords, quiet=False):
    from longtail_scout.db import init_db, KeywordRepository

    init_db()
    repo = KeywordRepository()
    try:
        new_count = repo.upsert_keywords(keywords)
    finally:
        repo.close()

    if not quiet:
        console.print(
            f'[dim]Saved {len(keywords)} keywords ({new_count} new) to '
            f'{Config.get_db_path()}[/dim]'
        )


# -- Config command group --------------------------------------------------


@main.group()
def config():
    """View and manage configuration."""
    pass


@config.command('show')
def config_show():
    """Show current configuration."""
    table = Table(title='Longtail Scout Configuration')
    table.add_column('Setting', style='bold cyan')
    table.add_column('Value')

    for key, value in Config.as_dict().items():
        table.add_row(key, str(value))

    console.print(table)


@config.command('init')
def config_init():
    """Initialize the database."""
    from longtail_scout.db import init_db

    console.print('[bold]Initializing Longtail Scout...[/bold]')
    init_db()
    console.print(f'[green]Database created at {Config.get_db_path()}[/green]')

    from pathlib import Path
    env_file = Path(__file__).parent.parent / '.env'
    if not env_file.exists():
        console.print(
            '[yellow]No .env file found. Copy .env.example to .env '
            'and configure your settings.[/yellow]'
        )
    else:
        console.print('[green].env file found[/green]')

    console.print('[bold green]Initialization complete![/bold green]')
