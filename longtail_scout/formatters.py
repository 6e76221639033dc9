"""Output formatters for Longtail Scout.

Renders keywords and long-tail results as rich tables or JSON, and
provides the small display helpers shared by CLI commands: volume
formatting, quality labels and recommendation messages.
"""

import json
import logging

from rich.console import Console
from rich.table import Table

from longtail_scout.models import ResultOrigin

logger = logging.getLogger(__name__)
console = Console()

OUTPUT_FORMATS = ('table', 'json')

# (minimum score, message), checked in order
RECOMMENDATIONS = [
    (80, 'Write about this now.'),
    (60, 'Good opportunity. Focus on content quality.'),
    (40, 'Review carefully. Consider long-tail variants.'),
]
DEFAULT_RECOMMENDATION = 'Look for a different keyword.'


def format_search_volume(volume):
    """Format a volume compactly: 1.2M, 3.4K or the plain number."""
    if volume is None:
        return '-'
    if volume >= 1_000_000:
        return f'{volume / 1_000_000:.1f}M'
    if volume >= 1_000:
        return f'{volume / 1_000:.1f}K'
    return str(volume)


def keyword_quality(search_volume, competition):
    """Classify a keyword as excellent, good, average or poor.

    Args:
        search_volume: Combined monthly volume.
        competition: Competition tier value ('low', 'medium', 'high').
    """
    competition = getattr(competition, 'value', competition)
    if search_volume >= 1000 and competition == 'low':
        return 'excellent'
    if search_volume >= 500 and competition != 'high':
        return 'good'
    if search_volume >= 100:
        return 'average'
    return 'poor'


def recommendation_message(score):
    """Return advice for a keyword score."""
    for threshold, message in RECOMMENDATIONS:
        if score >= threshold:
            return message
    return DEFAULT_RECOMMENDATION


def _score_markup(score):
    if score is None:
        return '-'
    text = str(score)
    if score >= 80:
        return f'[bold green]{text}[/bold green]'
    if score >= 60:
        return f'[green]{text}[/green]'
    if score >= 40:
        return f'[yellow]{text}[/yellow]'
    return f'[dim]{text}[/dim]'


class OutputFormatter:
    """Formats data as a rich table or JSON."""

    def __init__(self, output_format='table'):
        """Initialize the formatter.

        Args:
            output_format: Output mode - 'table' or 'json'.
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f'Unknown format "{output_format}". '
                f'Must be one of: {", ".join(OUTPUT_FORMATS)}'
            )
        self.format = output_format

    def format_keywords(self, keywords, title='Keywords'):
        """Format Keyword records or keyword rows.

        Args:
            keywords: Keyword records, dicts or sqlite3.Row objects with
                keyword, search_volume, competition_level, cpc, score
                and platform fields.
            title: Title for the table output.

        Returns:
            JSON string, or None when a table was printed.
        """
        rows = [_keyword_row(kw) for kw in keywords]
        if self.format == 'json':
            return _print_json(rows)
        self._keywords_table(rows, title)
        return None

    def format_longtails(self, result):
        """Format a CollectionResult.

        Returns:
            JSON string, or None when a table was printed.
        """
        if self.format == 'json':
            return _print_json(result.to_dict())

        source = (
            '[green]live API[/green]' if result.origin is ResultOrigin.LIVE_API
            else '[yellow]fallback patterns[/yellow]'
        )
        table = Table(
            title=f'Long-tail keywords for "{result.seed_keyword}" ({source})',
            show_lines=False,
        )
        table.add_column('#', style='dim', width=4, justify='right')
        table.add_column('Keyword', style='bold', min_width=20, no_wrap=False)
        table.add_column('Type', justify='center', width=13)
        table.add_column('Volume', justify='right', width=9)
        table.add_column('Competition', justify='center', width=12)
        table.add_column('Score', justify='right', width=7)

        for i, candidate in enumerate(result.candidates, 1):
            tier = candidate.competition_tier
            table.add_row(
                str(i),
                candidate.text,
                candidate.origin.value,
                format_search_volume(candidate.search_volume),
                tier.value if tier else '-',
                _score_markup(candidate.score),
            )

        console.print(table)
        return None

    def _keywords_table(self, rows, title):
        """Render keyword rows as a rich table."""
        table = Table(title=title, show_lines=False)
        table.add_column('#', style='dim', width=4, justify='right')
        table.add_column('Keyword', style='bold', min_width=20, no_wrap=False)
        table.add_column('Volume', justify='right', width=9)
        table.add_column('Competition', justify='center', width=12)
        table.add_column('CPC', justify='right', width=8)
        table.add_column('Score', justify='right', width=7)
        table.add_column('Quality', justify='center', width=10)
        table.add_column('Platform', justify='center', width=10)

        for i, row in enumerate(rows, 1):
            table.add_row(
                str(i),
                row['keyword'] or '',
                format_search_volume(row['search_volume']),
                row['competition_level'] or '-',
                f'{row["cpc"]:,.0f}' if row['cpc'] else '-',
                _score_markup(row['score']),
                keyword_quality(row['search_volume'] or 0, row['competition_level']),
                row['platform'] or '-',
            )

        console.print(table)


def _keyword_row(kw):
    """Normalize a Keyword record, dict or sqlite3.Row into a plain dict."""
    if hasattr(kw, 'to_dict'):
        return kw.to_dict()
    return {
        'keyword': _get(kw, 'keyword'),
        'search_volume': _get(kw, 'search_volume') or 0,
        'competition_level': _get(kw, 'competition_level'),
        'cpc': _get(kw, 'cpc') or 0,
        'score': _get(kw, 'score') or 0,
        'platform': _get(kw, 'platform'),
    }


def _print_json(data):
    output = json.dumps(data, indent=2, ensure_ascii=False)
    print(output)
    return output


def _get(obj, key):
    """Safely get a value from a dict-like object (dict or sqlite3.Row).

    Returns:
        The value, or None if not found.
    """
    try:
        return obj[key]
    except (KeyError, IndexError, TypeError):
        return getattr(obj, key, None)
