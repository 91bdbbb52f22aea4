"""Top content ranking."""

from collections.abc import Iterable, Sequence

from ..ingestion.cleaner import clean_metric_map
from ..models.snapshot import ContentItem
from .aggregator import first_present
from .models import TopPost

TOP_POSTS_LIMIT = 5


def rank_top_posts(
    items: Iterable[ContentItem],
    limit: int = TOP_POSTS_LIMIT,
    channels: Sequence[str] | None = None,
) -> list[TopPost]:
    """Most viewed content items, newest first among equals.

    Items are scored by ``views``, falling back to ``impressions``; items
    with neither score 0.

    Args:
        items: Content published in the window
        limit: Maximum posts returned
        channels: Optional provider filter (e.g. only YOUTUBE)

    Returns:
        TopPost list sorted by score descending.
    """
    scored: list[tuple[float, ContentItem, dict[str, float | None]]] = []
    for item in items:
        if channels and item.channel not in channels:
            continue
        metrics = clean_metric_map(item.metrics)
        score = first_present(metrics, ("views", "impressions")) or 0.0
        scored.append((score, item, metrics))

    scored.sort(key=lambda entry: entry[1].published_at, reverse=True)
    scored.sort(key=lambda entry: entry[0], reverse=True)

    return [
        TopPost(
            id=item.id,
            channel=item.channel,
            content_type=item.content_type,
            title=item.title,
            url=item.url,
            published_at=item.published_at,
            views=metrics.get("views"),
            engagement=first_present(metrics, ("engagement", "engagements")),
        )
        for _, item, metrics in scored[:limit]
    ]
