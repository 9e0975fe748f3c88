"""settlex: debounced, cancelable async coordination for validated settings."""

from importlib.metadata import version as _version

__version__ = _version("settlex")

from settlex._batch import get_pending_count, transaction
from settlex.config import DEFAULT_DEBOUNCE_SECONDS, KernelConfig
from settlex.errors import SettlexError, StoreUnavailableError, SupersededError, error_message
from settlex.observable import Observable
from settlex.debounce import Debouncer
from settlex.slot import CancelToken, TaskSlot
from settlex.lifecycle import Lifecycle, mounted
from settlex.operation import AsyncOperation, AsyncOperationState
from settlex.mutation import MutationRecord, optimistic_mutate
from settlex.validation import (
    Status,
    ValidationChannel,
    ValidationGroup,
    ValidationResult,
    Verdict,
    path_validation,
)
from settlex.documents import ConfigValidation, DocumentValidator
from settlex.rules import Rule, RuleInfo, RuleSet
from settlex.store import SettingsStore
# textual NOT auto-imported — opt-in only

__all__ = [
    "Observable",
    "transaction",
    "get_pending_count",
    "KernelConfig",
    "DEFAULT_DEBOUNCE_SECONDS",
    "SettlexError",
    "SupersededError",
    "StoreUnavailableError",
    "error_message",
    "Debouncer",
    "TaskSlot",
    "CancelToken",
    "Lifecycle",
    "mounted",
    "AsyncOperation",
    "AsyncOperationState",
    "MutationRecord",
    "optimistic_mutate",
    "Status",
    "ValidationChannel",
    "ValidationGroup",
    "ValidationResult",
    "Verdict",
    "path_validation",
    "ConfigValidation",
    "DocumentValidator",
    "Rule",
    "RuleInfo",
    "RuleSet",
    "SettingsStore",
]
