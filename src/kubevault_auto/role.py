"""Kubernetes-auth role binding.

Binds a workload's service account to the baseline policy plus the policy
composed for it, and upserts the role into the role store.
"""

from kubevault_auto.exceptions import BindError, RenderError, ValidationError, VaultWriteError
from kubevault_auto.models import DEFAULT_POLICY, DEFAULT_ROLE_TTL, RoleArtifact, WorkloadDescriptor
from kubevault_auto.templating import ROLE_PATH_TEMPLATE, NameTemplate, check_value
from kubevault_auto.vault import RoleStore


class RoleBinder:
    """Renders and writes per-workload roles.

    Attributes:
        store: Where roles are written.
        ttl: Token TTL set on every role.

    """

    def __init__(
        self,
        store: RoleStore,
        *,
        ttl: str = DEFAULT_ROLE_TTL,
        path_template: NameTemplate = ROLE_PATH_TEMPLATE,
    ) -> None:
        self.store: RoleStore = store
        self.ttl: str = ttl
        self._path_template = path_template

    @staticmethod
    def validate(policy_name: str) -> None:
        """Refuse roles that would only carry the baseline policy.

        Raises:
            ValidationError: If the policy name is empty or the default policy.

        """
        if not policy_name or policy_name == DEFAULT_POLICY:
            raise ValidationError("policy must be defined and non-default")

    def build(self, policy_name: str, descriptor: WorkloadDescriptor) -> RoleArtifact:
        """Render the role without writing it.

        Raises:
            ValidationError: If the policy name is empty or default.
            BindError: If the role path fails to render or the service account
                name is unsafe.

        """
        self.validate(policy_name)
        try:
            path = self._path_template.render(descriptor)
            account_name = check_value("account_name", descriptor.account_name)
        except RenderError as e:
            raise BindError(f"template rendering failed: {e}") from e

        return RoleArtifact(
            path=path,
            bound_service_account_names=account_name,
            bound_service_account_namespaces=descriptor.namespace,
            policies=(DEFAULT_POLICY, policy_name),
            ttl=self.ttl,
        )

    def bind(self, policy_name: str, descriptor: WorkloadDescriptor) -> RoleArtifact:
        """Render the role and upsert it into the store.

        Args:
            policy_name: The policy composed for the workload.
            descriptor: The workload whose service account is bound.

        Returns:
            The written role.

        Raises:
            ValidationError: If the policy name is empty or default.
            BindError: If rendering or the write fails.

        """
        artifact = self.build(policy_name, descriptor)
        try:
            self.store.write_role(artifact.path, artifact.payload())
        except VaultWriteError as e:
            raise BindError(str(e)) from e
        return artifact
