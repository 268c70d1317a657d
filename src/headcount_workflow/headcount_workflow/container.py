from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .database.memory_store import InMemoryRecordStore
from .database.record_store import MySQLRecordStore, RecordStore
from .governance.authorization import ApprovalAuthority
from .governance.repository import GovernanceRepository
from .governance.service import GovernanceService
from .headcount.history import HistoryRecorder
from .headcount.repository import HeadcountRequestRepository, SignatureRepository
from .headcount.service import HeadcountRequestService
from .lookups.catalog import LookupCatalog
from .lookups.resolver import LookupResolver
from .notifications.dispatcher import NotificationDispatcher, build_dispatcher
from .positions.repository import PositionRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    store: RecordStore

    users_repo: UserRepository
    positions_repo: PositionRepository
    governance_repo: GovernanceRepository
    requests_repo: HeadcountRequestRepository
    signatures_repo: SignatureRepository
    history_recorder: HistoryRecorder

    lookup_catalog: LookupCatalog
    lookup_resolver: LookupResolver
    approval_authority: ApprovalAuthority
    notifier: NotificationDispatcher

    governance_service: GovernanceService
    headcount_service: HeadcountRequestService


def build_store(*, backend: str, db_config: Optional[dict]) -> RecordStore:
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "mysql":
        return MySQLRecordStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config or {})))
    raise ValueError(f"Unknown RECORD_STORE backend: {backend!r}")


def build_container(
    *,
    db_config: Optional[dict] = None,
    record_store: str = "mysql",
    store: Optional[RecordStore] = None,
    notifier: Optional[NotificationDispatcher] = None,
    notification_webhook_url: Optional[str] = None,
    notification_timeout: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS,
) -> Container:
    store = store if store is not None else build_store(backend=record_store, db_config=db_config)
    notifier = notifier or build_dispatcher(notification_webhook_url, timeout=notification_timeout)

    users_repo = UserRepository(store)
    positions_repo = PositionRepository(store)
    governance_repo = GovernanceRepository(store)
    requests_repo = HeadcountRequestRepository(store)
    signatures_repo = SignatureRepository(store)
    history_recorder = HistoryRecorder(store)

    lookup_catalog = LookupCatalog.load(store)
    lookup_resolver = LookupResolver(positions_repo, governance_repo)
    approval_authority = ApprovalAuthority(governance_repo)

    governance_service = GovernanceService(governance_repo, lookup_catalog, approval_authority)
    headcount_service = HeadcountRequestService(
        store,
        requests_repo,
        signatures_repo,
        history_recorder,
        positions_repo,
        governance_repo,
        users_repo,
        lookup_resolver,
        approval_authority,
        notifier,
    )

    return Container(
        store=store,
        users_repo=users_repo,
        positions_repo=positions_repo,
        governance_repo=governance_repo,
        requests_repo=requests_repo,
        signatures_repo=signatures_repo,
        history_recorder=history_recorder,
        lookup_catalog=lookup_catalog,
        lookup_resolver=lookup_resolver,
        approval_authority=approval_authority,
        notifier=notifier,
        governance_service=governance_service,
        headcount_service=headcount_service,
    )
