"""
Type definitions for the objects a sweep works with.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple


class OwnerKind(str, Enum):
    """Owner reference kinds the sweep distinguishes"""
    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    STATEFUL_SET = "StatefulSet"
    OTHER = "Other"

    @classmethod
    def parse(cls, kind: Optional[str]) -> "OwnerKind":
        for member in cls:
            if member is not cls.OTHER and member.value == kind:
                return member
        return cls.OTHER


class ControllerKind(str, Enum):
    """Workload controllers that can be rolled by a pod template change"""
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    STATEFUL_SET = "StatefulSet"


@dataclass(frozen=True)
class OwnerRef:
    kind: OwnerKind
    name: str
    # original kind string, kept for OTHER
    raw_kind: str = ""

    @property
    def display_kind(self) -> str:
        return self.raw_kind or self.kind.value


@dataclass
class NamespaceInfo:
    name: str
    annotations: Dict[str, str] = field(default_factory=dict)


@dataclass
class PodInfo:
    name: str
    namespace: str
    creation_timestamp: Optional[datetime] = None
    annotations: Dict[str, str] = field(default_factory=dict)
    owner_references: List[OwnerRef] = field(default_factory=list)


@dataclass(frozen=True)
class ControllerRef:
    """A restart target, identified by kind and (namespace, name)"""
    kind: ControllerKind
    namespace: str
    name: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.namespace, self.name)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"


@dataclass(frozen=True)
class EffectiveTTL:
    duration: timedelta
    source: str  # "pod" or "namespace"
    raw: str


class DedupMode(str, Enum):
    SWEEP = "sweep"
    SINGLE = "single"


class RestartMemo:
    """Restart targets already handled in the current sweep.

    In SWEEP mode every restarted target is kept until the sweep ends. In
    SINGLE mode only the most recent one is kept, so a target is suppressed
    only when it comes right after itself.

    Targets are keyed on (namespace, name, kind) so a Deployment and a
    DaemonSet sharing a name in one namespace are tracked separately. Callers
    that pass no kind get plain (namespace, name) matching.
    """

    def __init__(self, mode: DedupMode = DedupMode.SWEEP):
        self.mode = DedupMode(mode)
        self._seen: Set[Tuple[str, str, Optional[str]]] = set()
        self._last: Optional[Tuple[str, str, Optional[str]]] = None

    @staticmethod
    def _key(namespace, resource_name, kind):
        if isinstance(kind, Enum):
            kind = kind.value
        return (namespace, resource_name, kind)

    def should_skip(self, namespace: str, resource_name: str, kind=None) -> bool:
        key = self._key(namespace, resource_name, kind)
        if self.mode is DedupMode.SINGLE:
            return self._last == key
        return key in self._seen

    def record(self, namespace: str, resource_name: str, kind=None) -> None:
        key = self._key(namespace, resource_name, kind)
        self._last = key
        if self.mode is DedupMode.SWEEP:
            self._seen.add(key)

    @property
    def last(self) -> Optional[Tuple[str, str]]:
        if self._last is None:
            return None
        return self._last[:2]

    def __len__(self) -> int:
        if self.mode is DedupMode.SINGLE:
            return 0 if self._last is None else 1
        return len(self._seen)


@dataclass
class SweepResult:
    """Outcome of one sweep"""
    started_at: datetime
    finished_at: Optional[datetime] = None
    namespaces_processed: int = 0
    namespaces_failed: List[str] = field(default_factory=list)
    pods_checked: int = 0
    restarted: List[ControllerRef] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)
    errors: Counter = field(default_factory=Counter)
    dry_run: bool = False

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
