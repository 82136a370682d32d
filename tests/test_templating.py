"""Tests for templating.py module."""

import pytest

from kubevault_auto.exceptions import RenderError, TemplateDefinitionError
from kubevault_auto.models import WorkloadDescriptor
from kubevault_auto.templating import (
    POLICY_NAME_TEMPLATE,
    POLICY_RULE_TEMPLATE,
    ROLE_PATH_TEMPLATE,
    NameTemplate,
    render,
)


class TestBuiltinTemplates:
    """Tests for the templates used to name Vault artifacts."""

    def test_policy_name(self, descriptor):
        """Test policy name joins context, namespace and name with dashes."""
        assert POLICY_NAME_TEMPLATE.render(descriptor) == "prod-billing-api"

    def test_policy_rule(self, descriptor):
        """Test policy rule grants CRUD and list on the workload path."""
        rule = POLICY_RULE_TEMPLATE.render(descriptor)

        assert 'path "secret/data/prod/billing/api/*" {' in rule
        assert 'capabilities = ["create", "read", "update", "delete", "list"]' in rule
        assert rule.rstrip().endswith("}")

    def test_role_path_has_no_separator_after_context(self, descriptor):
        """Test role path concatenates context and namespace directly."""
        assert ROLE_PATH_TEMPLATE.render(descriptor) == "auth/kubernetes/role/prodbilling-api-role"

    def test_render_is_deterministic(self, descriptor):
        """Test repeated renders produce the same output."""
        copy = WorkloadDescriptor(name="api", context="prod", namespace="billing", account_name="api-sa")
        results = {POLICY_RULE_TEMPLATE.render(descriptor) for _ in range(5)}
        results.add(POLICY_RULE_TEMPLATE.render(copy))

        assert len(results) == 1


class TestTemplateDefinition:
    """Tests for template compilation."""

    def test_escaped_braces_are_literal(self, descriptor):
        """Test doubled braces render as single braces."""
        assert render("{{{name}}}", descriptor) == "{api}"

    @pytest.mark.parametrize(
        "text",
        [
            "{cluster}-{name}",
            "{0}",
            "{}",
            "{name.upper}",
            "{name[0]}",
            "{name!r}",
            "{name:>10}",
        ],
    )
    def test_rejects_unsupported_references(self, text):
        """Test anything other than a plain descriptor field is refused."""
        with pytest.raises(TemplateDefinitionError):
            NameTemplate(text)

    @pytest.mark.parametrize("text", ["{name", "name}", "{name}}"])
    def test_rejects_malformed_syntax(self, text):
        """Test unbalanced braces are refused."""
        with pytest.raises(TemplateDefinitionError) as exc_info:
            NameTemplate(text)

        assert "Malformed template" in str(exc_info.value)

    def test_definition_error_is_render_error(self):
        """Test definition errors can be caught as render errors."""
        assert issubclass(TemplateDefinitionError, RenderError)


class TestRenderValidation:
    """Tests for rejecting values that would corrupt rendered output."""

    @pytest.mark.parametrize(
        "name",
        [
            "api/*",
            'api" {',
            "api}",
            "{api",
            "api\ncapabilities",
            "api name",
            "*",
        ],
    )
    def test_rejects_unsafe_values(self, name):
        """Test injection-prone characters raise RenderError."""
        descriptor = WorkloadDescriptor(name=name, context="prod", namespace="billing")

        with pytest.raises(RenderError) as exc_info:
            POLICY_RULE_TEMPLATE.render(descriptor)

        assert "disallowed characters" in str(exc_info.value)

    def test_rejects_empty_value(self):
        """Test empty referenced fields raise RenderError."""
        descriptor = WorkloadDescriptor(name="api", context="", namespace="billing")

        with pytest.raises(RenderError) as exc_info:
            POLICY_NAME_TEMPLATE.render(descriptor)

        assert "'context' is empty" in str(exc_info.value)

    def test_unreferenced_fields_are_not_checked(self):
        """Test only fields used by the template are validated."""
        descriptor = WorkloadDescriptor(name="api", context="prod", namespace="billing", account_name="bad/sa")

        assert POLICY_NAME_TEMPLATE.render(descriptor) == "prod-billing-api"

    def test_rejects_empty_result(self, descriptor):
        """Test a template rendering nothing raises RenderError."""
        with pytest.raises(RenderError):
            render("", descriptor)

    def test_allows_context_punctuation(self):
        """Test typical kubeconfig context names render."""
        descriptor = WorkloadDescriptor(name="api", context="admin@kind-dev:1", namespace="billing")

        assert POLICY_NAME_TEMPLATE.render(descriptor) == "admin@kind-dev:1-billing-api"
