"""kubevault-auto: Vault access for every Kubernetes workload.

This package derives Vault policies and Kubernetes-auth roles from the
deployments running in a cluster, so each workload's service account can
read and write its own secrets path.

Example usage:
    from kubevault_auto import Cluster, ReconciliationDriver, Settings

    settings = Settings(vault_address="https://vault.example.com:8200")
    driver = ReconciliationDriver(settings)
    outcomes = driver.run(Cluster())
"""

__version__ = "0.1.0"

from kubevault_auto.cli import cli
from kubevault_auto.cluster import Cluster
from kubevault_auto.exceptions import (
    BindError,
    ComposeError,
    DiscoveryError,
    KubeVaultError,
    RenderError,
    TemplateDefinitionError,
    ValidationError,
    VaultConnectionError,
    VaultWriteError,
)
from kubevault_auto.models import (
    OutcomeState,
    PolicyArtifact,
    RoleArtifact,
    Settings,
    Workload,
    WorkloadDescriptor,
    WorkloadOutcome,
)
from kubevault_auto.policy import PolicyComposer
from kubevault_auto.reconcile import ReconciliationDriver
from kubevault_auto.role import RoleBinder
from kubevault_auto.templating import NameTemplate, render
from kubevault_auto.vault import MemoryStore, VaultClient

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Classes
    "Cluster",
    "MemoryStore",
    "NameTemplate",
    "PolicyComposer",
    "ReconciliationDriver",
    "RoleBinder",
    "VaultClient",
    "render",
    # Models
    "OutcomeState",
    "PolicyArtifact",
    "RoleArtifact",
    "Settings",
    "Workload",
    "WorkloadDescriptor",
    "WorkloadOutcome",
    # Exceptions
    "KubeVaultError",
    "BindError",
    "ComposeError",
    "DiscoveryError",
    "RenderError",
    "TemplateDefinitionError",
    "ValidationError",
    "VaultConnectionError",
    "VaultWriteError",
]
