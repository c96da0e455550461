"""
Periodic tier sweep.

Every run recomputes each active client's tier from scratch and writes the
snapshot only when it changed. Runs never overlap: a sweep that finds
another one in flight returns immediately with skipped=True instead of
waiting. One client's failure is recorded in the summary and never stops
the others.
"""

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

import redis
from redis.exceptions import LockError

from agency.core.logging import capture_error
from agency.logging import get_logger
from agency.services.store import ClientRecord, RecordStore
from agency.services.tier_resolver import resolve_tier, snapshot_changed

logger = get_logger("agency.tier_sweep")


class SweepGuard:
    """Single-flight flag around the sweep entry point"""

    def acquire(self) -> bool:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError


class LocalSweepGuard(SweepGuard):
    """In-process guard (one API or worker process)"""

    def __init__(self):
        self._lock = threading.Lock()

    def acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()


class RedisSweepGuard(SweepGuard):
    """
    Cross-process guard for Celery workers, backed by a redis-py Lock.

    The ttl bounds how long a crashed worker can block later sweeps. The
    lock holds a per-acquire token, so a sweep that outlived its ttl cannot
    release a lock another worker has taken since.
    """

    def __init__(self, client: redis.Redis, key: str, ttl_seconds: int):
        self.client = client
        self.key = key
        self.ttl_seconds = ttl_seconds
        self.lock = client.lock(key, timeout=ttl_seconds, blocking=False)

    def acquire(self) -> bool:
        return self.lock.acquire()

    def release(self) -> None:
        try:
            self.lock.release()
        except LockError as e:
            logger.warning("Sweep lock expired before release", key=self.key, ttl=self.ttl_seconds, error=str(e))


@dataclass(frozen=True)
class ItemResult:
    """Outcome for one client: ok + updated, ok + unchanged, or an error"""
    client_id: int
    ok: bool
    updated: bool = False
    error: Optional[str] = None


@dataclass
class SweepSummary:
    skipped: bool = False
    results: List[ItemResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def updated(self) -> int:
        return sum(1 for r in self.results if r.ok and r.updated)

    @property
    def unchanged(self) -> int:
        return sum(1 for r in self.results if r.ok and not r.updated)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def errors(self) -> List[str]:
        return [f"client {r.client_id}: {r.error}" for r in self.results if not r.ok]

    def as_dict(self) -> dict:
        return {
            "skipped": self.skipped,
            "total": self.total,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "errors": self.errors,
        }


class TierSweeper:
    """
    Recompute and persist every active client's tier snapshot.

    Args:
        store: record store to read clients from and write snapshots to
        guard: single-flight guard; share one instance between callers
        clock: returns the evaluation time (defaults to now, UTC)
    """

    def __init__(
        self,
        store: RecordStore,
        guard: Optional[SweepGuard] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.guard = guard or LocalSweepGuard()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def sweep(self) -> SweepSummary:
        if not self.guard.acquire():
            logger.warning("Tier sweep already in progress, skipping this run")
            return SweepSummary(skipped=True)

        started = time.monotonic()
        try:
            summary = SweepSummary(results=self._run())
        finally:
            self.guard.release()
        summary.duration = round(time.monotonic() - started, 3)

        if summary.failed:
            logger.warning(
                "Tier sweep finished with failures",
                total=summary.total, updated=summary.updated, failed=summary.failed,
            )
        else:
            logger.great(
                "Tier sweep finished",
                total=summary.total, updated=summary.updated, duration=summary.duration,
            )
        return summary

    def _run(self) -> List[ItemResult]:
        try:
            clients = self.store.list_clients(active_only=True)
        except Exception as e:
            logger.error("Tier sweep could not list clients", error=str(e))
            capture_error(e, tags={"job": "tier_sweep"})
            return []

        now = self.clock()
        return [self._sweep_client(client, now) for client in clients]

    def _sweep_client(self, client: ClientRecord, now: datetime) -> ItemResult:
        try:
            result = resolve_tier(client.created_at, client.tiered_payments, client.final_services, now=now)
            if not snapshot_changed(result, client.current_services, client.current_rate, client.current_tier_index):
                return ItemResult(client_id=client.id, ok=True, updated=False)

            self.store.update_client_snapshot(client.id, result.services, result.total_amount, result.tier_index)
            logger.info(
                "Client tier snapshot updated",
                client_id=client.id,
                tier_index=result.tier_index,
                rate=result.total_amount,
            )
            return ItemResult(client_id=client.id, ok=True, updated=True)
        except Exception as e:
            logger.error("Tier sweep failed for client", client_id=client.id, error=str(e))
            capture_error(e, context={"client": {"id": client.id}}, tags={"job": "tier_sweep"})
            return ItemResult(client_id=client.id, ok=False, error=str(e))
