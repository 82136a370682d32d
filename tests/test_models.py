"""Tests for models.py module."""

import dataclasses

import pytest

from kubevault_auto.models import (
    DEFAULT_SERVICE_ACCOUNT,
    OutcomeState,
    RoleArtifact,
    Workload,
    WorkloadDescriptor,
    WorkloadOutcome,
)


class TestWorkloadDescriptor:
    """Tests for descriptor construction."""

    @pytest.mark.parametrize("account", [None, ""])
    def test_from_workload_defaults_account(self, account):
        """Test a missing service account falls back to the default."""
        descriptor = WorkloadDescriptor.from_workload(Workload("api", "billing", account), "prod")

        assert descriptor.account_name == DEFAULT_SERVICE_ACCOUNT

    def test_from_workload_keeps_account(self):
        """Test an explicit service account is kept."""
        descriptor = WorkloadDescriptor.from_workload(Workload("api", "billing", "api-sa"), "prod")

        assert descriptor == WorkloadDescriptor(name="api", context="prod", namespace="billing", account_name="api-sa")

    def test_empty_account_defaults(self):
        """Test direct construction with an empty account uses the default."""
        descriptor = WorkloadDescriptor(name="api", context="prod", namespace="billing", account_name="")

        assert descriptor.account_name == DEFAULT_SERVICE_ACCOUNT

    def test_identity(self, descriptor):
        """Test the report key."""
        assert descriptor.identity == "prod/billing/api"

    def test_immutable(self, descriptor):
        """Test descriptors cannot be changed."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.name = "other"


class TestRoleArtifact:
    """Tests for the role payload."""

    def test_payload_keys(self):
        """Test the payload carries exactly the Vault role fields."""
        artifact = RoleArtifact(
            path="auth/kubernetes/role/prodbilling-api-role",
            bound_service_account_names="api-sa",
            bound_service_account_namespaces="billing",
            policies=("default", "prod-billing-api"),
        )

        assert artifact.payload() == {
            "bound_service_account_names": "api-sa",
            "bound_service_account_namespaces": "billing",
            "policies": ["default", "prod-billing-api"],
            "ttl": "15m",
        }


class TestWorkloadOutcome:
    """Tests for outcomes."""

    def test_ok_only_when_bound(self, descriptor):
        """Test ok is reserved for bound workloads."""
        assert WorkloadOutcome(descriptor, state=OutcomeState.BOUND).ok
        assert not WorkloadOutcome(descriptor, state=OutcomeState.BIND_FAILED).ok
        assert not WorkloadOutcome(descriptor).ok

    def test_as_dict(self, descriptor):
        """Test only populated fields are reported."""
        outcome = WorkloadOutcome(descriptor, state=OutcomeState.COMPOSE_FAILED, reason="boom")

        assert outcome.as_dict() == {"state": "compose_failed", "reason": "boom"}
