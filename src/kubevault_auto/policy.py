"""Policy composition.

Turns a workload descriptor into a Vault ACL policy granting full access to
the workload's own secrets path, and upserts it into the policy store.
"""

from kubevault_auto.exceptions import ComposeError, RenderError, VaultWriteError
from kubevault_auto.models import PolicyArtifact, WorkloadDescriptor
from kubevault_auto.templating import POLICY_NAME_TEMPLATE, POLICY_RULE_TEMPLATE, NameTemplate
from kubevault_auto.vault import PolicyStore


class PolicyComposer:
    """Renders and writes per-workload policies.

    Attributes:
        store: Where policies are written.

    """

    def __init__(
        self,
        store: PolicyStore,
        *,
        name_template: NameTemplate = POLICY_NAME_TEMPLATE,
        rule_template: NameTemplate = POLICY_RULE_TEMPLATE,
    ) -> None:
        self.store: PolicyStore = store
        self._name_template = name_template
        self._rule_template = rule_template

    def build(self, descriptor: WorkloadDescriptor) -> PolicyArtifact:
        """Render the policy without writing it.

        Raises:
            ComposeError: If either template fails to render.

        """
        try:
            name = self._name_template.render(descriptor)
            rule = self._rule_template.render(descriptor)
        except RenderError as e:
            raise ComposeError(f"template rendering failed: {e}") from e

        if not name or not rule:
            raise ComposeError("template rendering failed")

        return PolicyArtifact(name=name, rule=rule)

    def compose(self, descriptor: WorkloadDescriptor) -> PolicyArtifact:
        """Render the policy and upsert it into the store.

        An existing policy with the same name is replaced as is.

        Args:
            descriptor: The workload to compose a policy for.

        Returns:
            The written policy.

        Raises:
            ComposeError: If rendering or the write fails.

        """
        artifact = self.build(descriptor)
        try:
            self.store.put_policy(artifact.name, artifact.rule)
        except VaultWriteError as e:
            raise ComposeError(str(e)) from e
        return artifact
