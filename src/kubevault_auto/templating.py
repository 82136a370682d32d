"""Name templating for Vault artifacts.

Templates use a narrow ``{field}`` grammar over the four workload descriptor
fields. ``{{`` and ``}}`` produce literal braces. Nothing else is evaluated:
no attribute access, indexing, conversions or format specs.
"""

import re
from string import Formatter

from icecream import ic

from kubevault_auto.exceptions import RenderError, TemplateDefinitionError
from kubevault_auto.models import WorkloadDescriptor

TEMPLATE_FIELDS = frozenset({"context", "namespace", "name", "account_name"})

# Kubernetes object names and kubeconfig context names fit in this set.
# Anything else (braces, quotes, slashes, globs, whitespace) could rewrite
# the path pattern inside a policy document.
_SAFE_VALUE = re.compile(r"[A-Za-z0-9._:@-]+")


def check_value(field_name: str, value: str) -> str:
    """Return a descriptor value if it is safe to embed in a Vault path or policy.

    Raises:
        RenderError: If the value is empty or contains disallowed characters.

    """
    if not isinstance(value, str) or not value:
        raise RenderError(f"Field {field_name!r} is empty")
    if not _SAFE_VALUE.fullmatch(value):
        raise RenderError(f"Field {field_name!r} contains disallowed characters: {value!r}")
    return value


class NameTemplate:
    """A compiled name template.

    Attributes:
        text: The original template text.

    """

    def __init__(self, text: str) -> None:
        """Compile the template.

        Args:
            text: Template text with ``{field}`` references.

        Raises:
            TemplateDefinitionError: If the syntax is malformed or references
                anything other than a descriptor field.

        """
        self.text: str = text
        self._parts: list[tuple[str, str | None]] = self._compile(text)

    @staticmethod
    def _compile(text: str) -> list[tuple[str, str | None]]:
        try:
            parsed = list(Formatter().parse(text))
        except ValueError as e:
            raise TemplateDefinitionError(f"Malformed template {text!r}: {e}") from e

        parts: list[tuple[str, str | None]] = []
        for literal, field_name, format_spec, conversion in parsed:
            if field_name is not None:
                if field_name not in TEMPLATE_FIELDS:
                    raise TemplateDefinitionError(
                        f"Unknown field {field_name!r} in template {text!r}. "
                        f"Allowed fields: {', '.join(sorted(TEMPLATE_FIELDS))}"
                    )
                if format_spec or conversion:
                    raise TemplateDefinitionError(
                        f"Format specs and conversions are not supported in template {text!r}"
                    )
            parts.append((literal, field_name))
        return parts

    def render(self, descriptor: WorkloadDescriptor) -> str:
        """Substitute descriptor fields into the template.

        Args:
            descriptor: The workload to render for.

        Returns:
            The rendered string, never empty.

        Raises:
            RenderError: If a referenced value is empty or unsafe, or the
                result is empty.

        """
        chunks: list[str] = []
        for literal, field_name in self._parts:
            chunks.append(literal)
            if field_name is None:
                continue
            chunks.append(check_value(field_name, getattr(descriptor, field_name)))

        rendered = "".join(chunks)
        if not rendered:
            raise RenderError(f"Template {self.text!r} rendered an empty string")
        ic(rendered)
        return rendered

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"NameTemplate({self.text!r})"


def render(template_text: str, descriptor: WorkloadDescriptor) -> str:
    """Compile and render a template in one step.

    Args:
        template_text: Template text with ``{field}`` references.
        descriptor: The workload to render for.

    Returns:
        The rendered string.

    """
    return NameTemplate(template_text).render(descriptor)


POLICY_NAME_TEMPLATE = NameTemplate("{context}-{namespace}-{name}")
POLICY_RULE_TEMPLATE = NameTemplate(
    'path "secret/data/{context}/{namespace}/{name}/*" {{\n'
    '  capabilities = ["create", "read", "update", "delete", "list"]\n'
    "}}\n"
)
ROLE_PATH_TEMPLATE = NameTemplate("auth/kubernetes/role/{context}{namespace}-{name}-role")
