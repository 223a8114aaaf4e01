from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .builder import build_total, eligible, estimate_power_draw, evaluate, is_build_complete, report
from .data import Catalog
from .schemas import (
    BUILD_CATEGORIES,
    PERIPHERAL_CATEGORIES,
    BuildSnapshot,
    PeripheralSelection,
    Selection,
)
from .variant_store import VariantSelectionStore

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    selection: Selection = field(default_factory=Selection)
    peripherals: PeripheralSelection = field(default_factory=PeripheralSelection)
    variants: VariantSelectionStore = field(default_factory=VariantSelectionStore)
    revision: int = 0


class BuildService:
    """买家装机会话：持有配置、外设和变体选择，每次变更后重新查询引擎"""

    def __init__(
        self,
        catalog: Catalog,
        session_ttl_seconds: int | None = 7 * 24 * 3600,
        session_cleanup_interval_seconds: int = 3600,
    ):
        self.catalog = catalog
        self.sessions: Dict[str, SessionState] = {}
        self._sessions_lock = threading.Lock()
        self._cleanup_lock = threading.Lock()
        self._session_locks: Dict[str, threading.Lock] = {}
        self._session_last_seen: Dict[str, float] = {}
        self._last_cleanup_monotonic = 0.0
        self.session_ttl_seconds = max(0, int(session_ttl_seconds or 0))
        self.session_cleanup_interval_seconds = max(1, int(session_cleanup_interval_seconds))

    def select(self, session_id: str, category: str, component_id: str | None) -> BuildSnapshot:
        if category not in BUILD_CATEGORIES:
            raise ValueError(f"unknown build category: {category}")
        if component_id and self.catalog.resolve(category, component_id) is None:
            raise KeyError(f"{category} component not found: {component_id}")
        with self._get_session_lock(session_id):
            session = self._touch(session_id)
            # 变体选择不随配置变化而丢弃
            session.selection = session.selection.with_choice(category, component_id)
            session.revision += 1
            return self._snapshot(session_id, session)

    def set_peripherals(
        self, session_id: str, category: str, component_ids: List[str]
    ) -> BuildSnapshot:
        if category not in PERIPHERAL_CATEGORIES:
            raise ValueError(f"unknown peripheral category: {category}")
        missing = [i for i in component_ids if self.catalog.resolve(category, i) is None]
        if missing:
            raise KeyError(f"{category} component not found: {', '.join(missing)}")
        with self._get_session_lock(session_id):
            session = self._touch(session_id)
            session.peripherals = session.peripherals.model_copy(
                update={category: list(component_ids)}
            )
            session.revision += 1
            return self._snapshot(session_id, session)

    def set_variant(
        self, session_id: str, component_id: str, option: str, value: str
    ) -> BuildSnapshot:
        with self._get_session_lock(session_id):
            session = self._touch(session_id)
            session.variants.set_option(component_id, option, value)
            session.revision += 1
            return self._snapshot(session_id, session)

    def snapshot(self, session_id: str) -> BuildSnapshot:
        with self._get_session_lock(session_id):
            return self._snapshot(session_id, self._touch(session_id))

    def eligible(self, session_id: str, category: str) -> List[Any]:
        with self._get_session_lock(session_id):
            session = self._touch(session_id)
            return eligible(self.catalog, category, session.selection)

    def _snapshot(self, session_id: str, session: SessionState) -> BuildSnapshot:
        issues = evaluate(session.selection, self.catalog.resolve)
        return BuildSnapshot(
            session_id=session_id,
            selection=session.selection,
            peripherals=session.peripherals,
            variants=session.variants.as_dict(),
            total=build_total(session.selection, session.peripherals, self.catalog, session.variants),
            estimated_power=estimate_power_draw(session.selection, self.catalog),
            complete=is_build_complete(session.selection),
            issues=report(issues),
            revision=session.revision,
        )

    def _touch(self, session_id: str) -> SessionState:
        with self._sessions_lock:
            self._session_last_seen[session_id] = time.monotonic()
            session = self.sessions.get(session_id)
            if session is None:
                session = SessionState()
                self.sessions[session_id] = session
        self._cleanup_expired_sessions()
        return session

    def _get_session_lock(self, session_id: str) -> threading.Lock:
        with self._sessions_lock:
            lock = self._session_locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._session_locks[session_id] = lock
            return lock

    def _cleanup_expired_sessions(self, force: bool = False) -> None:
        if self.session_ttl_seconds <= 0:
            return
        now = time.monotonic()
        if not force and now - self._last_cleanup_monotonic < self.session_cleanup_interval_seconds:
            return
        with self._cleanup_lock:
            now = time.monotonic()
            if not force and now - self._last_cleanup_monotonic < self.session_cleanup_interval_seconds:
                return
            self._last_cleanup_monotonic = now
            cutoff = now - self.session_ttl_seconds
            with self._sessions_lock:
                expired = [sid for sid, seen in self._session_last_seen.items() if seen < cutoff]
                for sid in expired:
                    self.sessions.pop(sid, None)
                    self._session_last_seen.pop(sid, None)
                    lock = self._session_locks.get(sid)
                    if lock is not None and not lock.locked():
                        self._session_locks.pop(sid, None)
        if expired:
            logger.info("Expired %d build sessions", len(expired))
