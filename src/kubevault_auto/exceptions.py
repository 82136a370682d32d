"""Custom exceptions for kubevault-auto.

This module defines the exception hierarchy used throughout the application.
Per-workload errors are recovered by the reconciliation driver and turned
into outcomes, while discovery and connection errors abort the whole run.
"""


class KubeVaultError(Exception):
    """Base exception for all kubevault-auto errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all kubevault-auto errors with a single
    except clause if desired.
    """

    pass


class RenderError(KubeVaultError):
    """Raised when a name template cannot be rendered for a workload.

    This can occur when:
    - A referenced field is empty
    - A field value contains characters that would corrupt a Vault path
      or policy document (template delimiters, quotes, slashes, globs)
    - The rendered result is empty
    """

    pass


class TemplateDefinitionError(RenderError):
    """Raised when a template itself is invalid.

    Templates are compiled once at import time, so this error surfaces
    at startup rather than per workload.
    """

    pass


class ComposeError(KubeVaultError):
    """Raised when a policy cannot be rendered or written to Vault."""

    pass


class BindError(KubeVaultError):
    """Raised when a Kubernetes-auth role cannot be rendered or written to Vault."""

    pass


class ValidationError(BindError):
    """Raised when a role is about to be bound to a missing or default policy."""

    pass


class DiscoveryError(KubeVaultError):
    """Raised when workloads or the active context cannot be discovered.

    This can occur when:
    - The kubeconfig is invalid or missing
    - The cluster is unreachable
    - The API server rejects the deployment listing
    """

    pass


class VaultWriteError(KubeVaultError):
    """Raised when Vault rejects or fails a single write."""

    pass


class VaultConnectionError(KubeVaultError):
    """Raised when Vault is unreachable or the token does not authenticate."""

    pass
