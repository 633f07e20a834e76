"""Celery application for background opening graph rebuilds."""

from celery import Celery
from celery.signals import after_setup_logger

from opening_graph.config import configure_logging, get_redis_url
from opening_graph.lookup import OpeningLookup

REDIS_URL = get_redis_url()

# Loaded on the first rebuild, then shared by every task in this worker
lookup = OpeningLookup()

app = Celery("opening_graph", broker=REDIS_URL, backend=REDIS_URL)
app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)


@after_setup_logger.connect
def _setup_logging(**kwargs):
    configure_logging()


@app.task(bind=True, max_retries=3)
def rebuild_graph_task(self, owner: str, pgn_paths: list[str]):
    """Celery task: rebuild an owner's graph from PGN files and store it."""
    import asyncio
    from pathlib import Path

    from opening_graph.db import ensure_schema, get_connection
    from opening_graph.import_games import build_graph
    from opening_graph.storage import save_opening_graph

    graph = asyncio.run(build_graph(owner, [Path(p) for p in pgn_paths], lookup))
    try:
        with get_connection() as conn:
            ensure_schema(conn)
            save_opening_graph(conn, graph)
    except Exception as exc:
        raise self.retry(exc=exc, countdown=5)
    stats = graph.overall_stats()
    return stats.white.total_games + stats.black.total_games
