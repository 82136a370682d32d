"""Vault storage backends.

This module provides the stores that policies and roles are written to:
VaultClient talks to a real Vault server through hvac, MemoryStore keeps
everything in process for dry runs.
"""

from typing import Any, Protocol

import hvac
from hvac.exceptions import VaultError
from icecream import ic
from requests.exceptions import RequestException

from kubevault_auto import console
from kubevault_auto.exceptions import VaultConnectionError, VaultWriteError
from kubevault_auto.models import DEFAULT_TIMEOUT, Settings


class PolicyStore(Protocol):
    def put_policy(self, name: str, rule: str) -> None: ...


class RoleStore(Protocol):
    def write_role(self, path: str, payload: dict[str, Any]) -> None: ...


class VaultClient:
    """Writes policies and Kubernetes-auth roles to a Vault server.

    Both writes are unconditional upserts: Vault replaces whatever was
    stored under the same policy name or role path.

    Attributes:
        address: The Vault server URL.
        client: The underlying hvac client.

    """

    def __init__(self, address: str | None, token: str | None = None, *, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Create the hvac client.

        Args:
            address: Vault server URL. None lets hvac fall back to its defaults.
            token: Vault token. None or empty lets hvac read its token helper.
            timeout: Per-request timeout in seconds.

        """
        self.address: str | None = address
        self.client: hvac.Client = hvac.Client(url=address, token=token or None, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "VaultClient":
        return cls(settings.vault_address, settings.vault_token, timeout=settings.timeout)

    def check(self) -> None:
        """Verify the server is reachable and the token authenticates.

        Raises:
            VaultConnectionError: If Vault cannot be reached or rejects the token.

        """
        with console.spinner("Checking Vault authentication..."):
            try:
                authenticated = self.client.is_authenticated()
            except (RequestException, VaultError) as e:
                raise VaultConnectionError(f"Failed to connect to Vault at {self.address}: {e}") from e

        if not authenticated:
            raise VaultConnectionError(f"Vault token is not valid for {self.address}")
        console.action(f"Writing to Vault at {console.highlight(str(self.address))}")

    def put_policy(self, name: str, rule: str) -> None:
        """Create or replace an ACL policy.

        Raises:
            VaultWriteError: If Vault rejects the policy or is unreachable.

        """
        ic(name, rule)
        try:
            self.client.sys.create_or_update_policy(name=name, policy=rule)
        except (RequestException, VaultError) as e:
            raise VaultWriteError(f"Failed to write policy {name}: {e}") from e

    def write_role(self, path: str, payload: dict[str, Any]) -> None:
        """Create or replace a Kubernetes-auth role.

        Raises:
            VaultWriteError: If Vault rejects the role or is unreachable.

        """
        ic(path, payload)
        try:
            self.client.write_data(path, data=payload)
        except (RequestException, VaultError) as e:
            raise VaultWriteError(f"Failed to write role {path}: {e}") from e

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"VaultClient(address={self.address!r})"


class MemoryStore:
    """Keeps policies and roles in memory instead of writing to Vault.

    Attributes:
        policies: Policy documents by name.
        roles: Role payloads by path.
        writes: Number of writes received, including overwrites.

    """

    def __init__(self) -> None:
        self.policies: dict[str, str] = {}
        self.roles: dict[str, dict[str, Any]] = {}
        self.writes: int = 0

    def put_policy(self, name: str, rule: str) -> None:
        self.policies[name] = rule
        self.writes += 1

    def write_role(self, path: str, payload: dict[str, Any]) -> None:
        self.roles[path] = dict(payload)
        self.writes += 1

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"MemoryStore(policies={len(self.policies)}, roles={len(self.roles)})"
