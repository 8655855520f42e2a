"""Batch jobs run from schedulers and CLI scripts."""

from __future__ import annotations

import logging
from time import perf_counter

from poligraph.affairs.types import ReconciliationResult
from poligraph.db.session import SessionLocal
from poligraph.services.affairs import reconcile_affairs

logger = logging.getLogger(__name__)


def run_affair_reconciliation_job(*, auto_merge: bool = True, dry_run: bool = False) -> ReconciliationResult:
    """Run affair reconciliation in its own DB session."""

    total_started = perf_counter()
    db = SessionLocal()
    try:
        result = reconcile_affairs(db, auto_merge=auto_merge, dry_run=dry_run)
        logger.info(
            "affairs.reconcile_job_timing auto_merge=%s dry_run=%s merged=%d errors=%d total_ms=%.2f",
            auto_merge,
            dry_run,
            result.merged,
            result.errors,
            (perf_counter() - total_started) * 1000.0,
        )
        return result
    except Exception:
        logger.exception(
            "affairs.reconcile_job_failed auto_merge=%s elapsed_ms=%.2f",
            auto_merge,
            (perf_counter() - total_started) * 1000.0,
        )
        raise
    finally:
        db.close()
