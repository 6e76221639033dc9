"""Rich progress bar helpers for Longtail Scout commands."""

from rich.progress import (
    Progress,
    SpinnerColumn,
    BarColumn,
    TextColumn,
    TimeElapsedColumn,
)


def create_collection_progress(console=None):
    """Create a rich progress bar for keyword-by-keyword collection.

    Shows a spinner, description, bar, fraction completed, elapsed time
    and a status field naming the keyword being processed. Collection is
    paced by fixed delays, so elapsed time is more useful than an ETA.

    Returns:
        Rich Progress instance.
    """
    return Progress(
        SpinnerColumn(spinner_name='dots'),
        TextColumn('[bold cyan]{task.description}'),
        BarColumn(),
        TextColumn('({task.completed}/{task.total})'),
        TimeElapsedColumn(),
        TextColumn('{task.fields[status]}', style='dim'),
        console=console,
    )
