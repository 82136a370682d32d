"""Shared test fixtures for kubevault-auto tests."""

from unittest.mock import MagicMock, patch

import pytest

from kubevault_auto.models import Workload, WorkloadDescriptor
from kubevault_auto.vault import MemoryStore


class FakeInventory:
    """Inventory source returning fixed workloads."""

    def __init__(self, context, workloads):
        self.context = context
        self.workloads = workloads

    def current_context(self):
        return self.context

    def list_workloads(self):
        return list(self.workloads)


def make_deployment(name, namespace, service_account=None):
    deployment = MagicMock()
    deployment.metadata.name = name
    deployment.metadata.namespace = namespace
    deployment.spec.template.spec.service_account_name = service_account
    return deployment


@pytest.fixture
def descriptor():
    """Reference workload descriptor."""
    return WorkloadDescriptor(name="api", context="prod", namespace="billing", account_name="api-sa")


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def inventory():
    """Inventory with three workloads in the prod context."""
    return FakeInventory(
        "prod",
        [
            Workload(name="api", namespace="billing", service_account_name="api-sa"),
            Workload(name="worker", namespace="billing", service_account_name=None),
            Workload(name="web", namespace="frontend", service_account_name=""),
        ],
    )


@pytest.fixture
def mock_kube_contexts():
    """Mock kubernetes config contexts."""
    with patch("kubernetes.config.list_kube_config_contexts") as mock:
        mock.return_value = ([{"name": "test-context"}, {"name": "other-context"}], {"name": "test-context"})
        yield mock


@pytest.fixture
def mock_kube_config():
    """Mock kubernetes config loading."""
    with patch("kubernetes.config.load_kube_config") as mock:
        yield mock


@pytest.fixture
def mock_apps_v1_api():
    """Mock AppsV1Api for deployment listing."""
    with patch("kubernetes.client.AppsV1Api") as mock:
        api_instance = MagicMock()
        mock.return_value = api_instance
        api_instance.list_deployment_for_all_namespaces.return_value.items = [
            make_deployment("api", "billing", "api-sa"),
            make_deployment("worker", "billing"),
        ]
        yield api_instance


@pytest.fixture
def cluster_mocks(mock_kube_contexts, mock_kube_config, mock_apps_v1_api):
    """Combined fixture for creating a Cluster instance without cluster access."""
    return {
        "contexts": mock_kube_contexts,
        "config": mock_kube_config,
        "apps_api": mock_apps_v1_api,
    }


@pytest.fixture
def mock_hvac_client():
    """Mock hvac.Client so no Vault server is needed."""
    with patch("hvac.Client") as mock:
        client_instance = MagicMock()
        mock.return_value = client_instance
        client_instance.is_authenticated.return_value = True
        yield client_instance
