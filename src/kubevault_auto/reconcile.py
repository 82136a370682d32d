"""Reconciliation driver.

Walks the workload inventory, composes a policy and binds a role for every
workload, and records one outcome per workload. A failing workload never
stops the batch.
"""

import threading
from collections.abc import Callable, Generator, Iterable
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack, contextmanager
from typing import Protocol

from icecream import ic

from kubevault_auto import console
from kubevault_auto.exceptions import BindError, ComposeError, RenderError
from kubevault_auto.models import (
    OutcomeState,
    Settings,
    Workload,
    WorkloadDescriptor,
    WorkloadOutcome,
)
from kubevault_auto.policy import PolicyComposer
from kubevault_auto.role import RoleBinder
from kubevault_auto.templating import POLICY_NAME_TEMPLATE, ROLE_PATH_TEMPLATE
from kubevault_auto.vault import MemoryStore, PolicyStore, RoleStore, VaultClient


class Inventory(Protocol):
    def current_context(self) -> str: ...

    def list_workloads(self) -> Iterable[Workload]: ...


class _KeyedLocks:
    """Hands out one lock per key so writes to the same Vault object never overlap."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    @contextmanager
    def hold(self, *keys: str) -> Generator[None, None, None]:
        # Sorted acquisition keeps two workers from deadlocking on a shared pair.
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                with self._guard:
                    lock = self._locks.setdefault(key, threading.Lock())
                stack.enter_context(lock)
            yield


def _write_keys(descriptor: WorkloadDescriptor) -> tuple[str, ...]:
    keys = []
    for prefix, template in (("policy", POLICY_NAME_TEMPLATE), ("role", ROLE_PATH_TEMPLATE)):
        try:
            keys.append(f"{prefix}:{template.render(descriptor)}")
        except RenderError:
            keys.append(f"{prefix}:{descriptor.identity}")
    return tuple(keys)


def build_descriptors(inventory: Inventory) -> list[WorkloadDescriptor]:
    """Turn the inventory into descriptors for the current context.

    Errors raised by the inventory propagate unchanged, since no workload
    can be processed without them.
    """
    context = inventory.current_context()
    return [WorkloadDescriptor.from_workload(workload, context) for workload in inventory.list_workloads()]


def report(outcomes: Iterable[WorkloadOutcome]) -> dict[str, WorkloadOutcome]:
    """Map each workload identity to its outcome."""
    return {outcome.descriptor.identity: outcome for outcome in outcomes}


def find_collisions(descriptors: Iterable[WorkloadDescriptor]) -> dict[str, list[WorkloadDescriptor]]:
    """Group descriptors whose policy names render to the same string.

    Returns:
        Policy name -> descriptors, only for names shared by more than one workload.

    """
    by_name: dict[str, list[WorkloadDescriptor]] = {}
    for descriptor in descriptors:
        try:
            name = POLICY_NAME_TEMPLATE.render(descriptor)
        except RenderError:
            continue
        by_name.setdefault(name, []).append(descriptor)
    return {name: group for name, group in by_name.items() if len(group) > 1}


class ReconciliationDriver:
    """Provisions Vault policies and roles for every discovered workload.

    Attributes:
        settings: The run configuration.
        composer: Writes policies.
        binder: Writes roles.

    """

    def __init__(
        self,
        settings: Settings,
        *,
        policy_store: PolicyStore | None = None,
        role_store: RoleStore | None = None,
    ) -> None:
        """Wire composer and binder to their stores.

        Args:
            settings: The run configuration.
            policy_store: Where policies go. Defaults to a store built from settings.
            role_store: Where roles go. Defaults to a store built from settings.

        """
        self.settings: Settings = settings
        if policy_store is None or role_store is None:
            default_store: MemoryStore | VaultClient = (
                MemoryStore() if settings.dry_run else VaultClient.from_settings(settings)
            )
            policy_store = policy_store or default_store
            role_store = role_store or default_store
        self.composer: PolicyComposer = PolicyComposer(policy_store)
        self.binder: RoleBinder = RoleBinder(role_store, ttl=settings.ttl)
        self._locks = _KeyedLocks()

    def process(self, descriptor: WorkloadDescriptor) -> WorkloadOutcome:
        """Compose then bind a single workload.

        Every error raised while handling the workload, including ones from
        third-party stores, ends up in the outcome instead of being raised.
        """
        outcome = WorkloadOutcome(descriptor=descriptor)

        with self._locks.hold(*_write_keys(descriptor)):
            outcome.state = OutcomeState.COMPOSING
            try:
                policy = self.composer.compose(descriptor)
            except ComposeError as e:
                outcome.state = OutcomeState.COMPOSE_FAILED
                outcome.reason = str(e)
                ic(outcome)
                return outcome
            except Exception as e:
                outcome.state = OutcomeState.COMPOSE_FAILED
                outcome.reason = f"unexpected policy store error: {e!r}"
                ic(outcome)
                return outcome
            outcome.state = OutcomeState.COMPOSED
            outcome.policy_name = policy.name

            outcome.state = OutcomeState.BINDING
            try:
                role = self.binder.bind(policy.name, descriptor)
            except BindError as e:
                outcome.state = OutcomeState.BIND_FAILED
                outcome.reason = str(e)
                ic(outcome)
                return outcome
            except Exception as e:
                outcome.state = OutcomeState.BIND_FAILED
                outcome.reason = f"unexpected role store error: {e!r}"
                ic(outcome)
                return outcome
            outcome.state = OutcomeState.BOUND
            outcome.role_path = role.path

        ic(outcome)
        return outcome

    def run(
        self,
        inventory: Inventory,
        *,
        on_outcome: Callable[[WorkloadOutcome], None] | None = None,
    ) -> list[WorkloadOutcome]:
        """Reconcile every workload in the inventory.

        Args:
            inventory: Source of the context and workloads.
            on_outcome: Called once per finished workload, e.g. to advance a progress bar.

        Returns:
            One outcome per workload, in inventory order.

        Raises:
            DiscoveryError: If the inventory cannot be listed.

        """
        descriptors = build_descriptors(inventory)
        return self.reconcile(descriptors, on_outcome=on_outcome)

    def reconcile(
        self,
        descriptors: list[WorkloadDescriptor],
        *,
        on_outcome: Callable[[WorkloadOutcome], None] | None = None,
    ) -> list[WorkloadOutcome]:
        """Reconcile an already discovered list of workloads."""
        for name, group in find_collisions(descriptors).items():
            console.warning(
                f"Policy {console.highlight(name)} is shared by "
                f"{', '.join(d.identity for d in group)}; the last write wins"
            )

        def _process(descriptor: WorkloadDescriptor) -> WorkloadOutcome:
            outcome = self.process(descriptor)
            if on_outcome is not None:
                on_outcome(outcome)
            return outcome

        if self.settings.workers <= 1:
            return [_process(descriptor) for descriptor in descriptors]

        with ThreadPoolExecutor(max_workers=self.settings.workers) as executor:
            return list(executor.map(_process, descriptors))

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"ReconciliationDriver(workers={self.settings.workers}, dry_run={self.settings.dry_run})"
