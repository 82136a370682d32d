"""Data models for kubevault-auto.

This module provides the typed structures that flow through a reconciliation
pass: the workload descriptor, the rendered Vault artifacts, and the outcome
recorded for every workload.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple

DEFAULT_SERVICE_ACCOUNT = "default"
DEFAULT_POLICY = "default"
DEFAULT_ROLE_TTL = "15m"
DEFAULT_TIMEOUT = 30


class Workload(NamedTuple):
    """A deployment as reported by the inventory source.

    Attributes:
        name: The deployment name.
        namespace: The namespace the deployment lives in.
        service_account_name: The pod template's service account, possibly empty.

    """

    name: str
    namespace: str
    service_account_name: str | None = None


@dataclass(frozen=True, slots=True)
class WorkloadDescriptor:
    """Identifies one workload to provision in Vault.

    Attributes:
        name: The workload name, unique within namespace and context.
        context: The cluster context the Kubernetes-auth backend serves.
        namespace: The Kubernetes namespace.
        account_name: The service account the workload's pods run under.

    """

    name: str
    context: str
    namespace: str
    account_name: str = DEFAULT_SERVICE_ACCOUNT

    def __post_init__(self) -> None:
        if not self.account_name:
            object.__setattr__(self, "account_name", DEFAULT_SERVICE_ACCOUNT)

    @classmethod
    def from_workload(cls, workload: Workload, context: str) -> "WorkloadDescriptor":
        """Build a descriptor, falling back to the default service account."""
        return cls(
            name=workload.name,
            context=context,
            namespace=workload.namespace,
            account_name=workload.service_account_name or "",
        )

    @property
    def identity(self) -> str:
        """Key used for the final report."""
        return f"{self.context}/{self.namespace}/{self.name}"


@dataclass(frozen=True, slots=True)
class PolicyArtifact:
    """A rendered Vault policy.

    Attributes:
        name: The policy name.
        rule: The HCL policy document.

    """

    name: str
    rule: str


@dataclass(frozen=True, slots=True)
class RoleArtifact:
    """A rendered Kubernetes-auth role.

    Attributes:
        path: The Vault API path the role is written to.
        bound_service_account_names: Service account allowed to log in.
        bound_service_account_namespaces: Namespace of that service account.
        policies: Policies attached to issued tokens, baseline first.
        ttl: Token time to live.

    """

    path: str
    bound_service_account_names: str
    bound_service_account_namespaces: str
    policies: tuple[str, ...]
    ttl: str = DEFAULT_ROLE_TTL

    def payload(self) -> dict[str, Any]:
        """Return the request body Vault expects for the role."""
        return {
            "bound_service_account_names": self.bound_service_account_names,
            "bound_service_account_namespaces": self.bound_service_account_namespaces,
            "policies": list(self.policies),
            "ttl": self.ttl,
        }


class OutcomeState(str, Enum):
    """Lifecycle of a single workload within a reconciliation pass.

    Inherits from str so states render directly in reports.
    """

    PENDING = "pending"
    COMPOSING = "composing"
    COMPOSE_FAILED = "compose_failed"
    COMPOSED = "composed"
    BINDING = "binding"
    BIND_FAILED = "bind_failed"
    BOUND = "bound"


@dataclass(slots=True)
class WorkloadOutcome:
    """What happened to one workload during a pass."""

    descriptor: WorkloadDescriptor
    state: OutcomeState = OutcomeState.PENDING
    policy_name: str = ""
    role_path: str = ""
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.state is OutcomeState.BOUND

    def as_dict(self) -> dict[str, str]:
        """Return a plain mapping suitable for YAML reports."""
        result = {"state": self.state.value}
        if self.policy_name:
            result["policy"] = self.policy_name
        if self.role_path:
            result["role_path"] = self.role_path
        if self.reason:
            result["reason"] = self.reason
        return result


@dataclass(frozen=True, slots=True)
class Settings:
    """Explicit configuration for a reconciliation run.

    Attributes:
        vault_address: Vault server URL.
        vault_token: Token used for Vault writes; None lets hvac resolve it.
        kube_context: Context to use; None means the kubeconfig's current one.
        kubeconfig: Path to the kubeconfig file; None uses the client default.
        namespaces: Restrict discovery to these namespaces; empty means all.
        ttl: TTL written into every role.
        workers: Number of workloads processed concurrently.
        timeout: Per-request Vault timeout in seconds.
        dry_run: Render artifacts without writing them to Vault.

    """

    vault_address: str | None = None
    vault_token: str | None = None
    kube_context: str | None = None
    kubeconfig: str | None = None
    namespaces: tuple[str, ...] = field(default_factory=tuple)
    ttl: str = DEFAULT_ROLE_TTL
    workers: int = 1
    timeout: int = DEFAULT_TIMEOUT
    dry_run: bool = False
