"""Kubernetes cluster interaction utilities.

This module provides the Cluster class, the inventory source for a
reconciliation pass: it resolves the working context and lists the
deployments whose service accounts need Vault access.
"""

from typing import Any

import click
import questionary
from icecream import ic
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import MaxRetryError

from kubevault_auto import console
from kubevault_auto.exceptions import DiscoveryError
from kubevault_auto.models import Workload
from kubevault_auto.styles import POINTER, PROMPT_STYLE, QMARK


class Cluster:
    """Lists workloads from a Kubernetes cluster.

    Attributes:
        context: The active Kubernetes context name.
        kubeconfig: Path to the kubeconfig file, or None for the default.
        namespaces: Namespaces to restrict discovery to; empty means all.

    """

    def __init__(
        self,
        *,
        select_context: bool = False,
        context: str | None = None,
        kubeconfig: str | None = None,
        namespaces: tuple[str, ...] = (),
    ) -> None:
        """Initialize Cluster and load the kubeconfig.

        Args:
            select_context: If True, prompt user to select a context.
                           Must be passed as a keyword argument.
            context: Use this context instead of the kubeconfig's current one.
            kubeconfig: Path to the kubeconfig file.
            namespaces: Namespaces to list deployments from.

        Raises:
            DiscoveryError: If the kubeconfig is invalid or has no usable context.

        """
        self.kubeconfig: str | None = kubeconfig
        self.namespaces: tuple[str, ...] = tuple(dict.fromkeys(namespaces))
        self.context: str = self._set_context(select_context=select_context, context=context)
        try:
            config.load_kube_config(config_file=self.kubeconfig, context=self.context)
        except ConfigException as e:
            raise DiscoveryError(f"Failed to load context {self.context}: {e}") from e

    def _set_context(self, *, select_context: bool, context: str | None) -> str:
        """Set the Kubernetes context to use.

        Returns:
            The selected, requested or current context name.

        Raises:
            DiscoveryError: If kubeconfig is invalid, missing or has no current context.
            click.Abort: If user cancels context selection.

        """
        try:
            contexts, current_context = config.list_kube_config_contexts(config_file=self.kubeconfig)
        except ConfigException as e:
            raise DiscoveryError(f"Invalid or missing kubeconfig: {e}") from e

        context_names: list[str] = [ctx["name"] for ctx in contexts]
        if context is not None:
            if context not in context_names:
                raise DiscoveryError(f"Context {context} not found in kubeconfig")
        elif select_context:
            context = questionary.select(
                "Select context to provision",
                choices=context_names,
                style=PROMPT_STYLE,
                pointer=POINTER,
                qmark=QMARK,
            ).ask()
            if context is None:
                console.warning("Context selection cancelled.")
                raise click.Abort()
        else:
            context = str(current_context["name"]) if current_context else ""

        if not context:
            raise DiscoveryError("No current context set in kubeconfig")

        console.action(f"Working with {console.highlight(context)} cluster")
        return context

    def current_context(self) -> str:
        """Return the context workloads are discovered in."""
        return self.context

    def list_workloads(self) -> list[Workload]:
        """List deployments and their service accounts.

        Returns:
            One Workload per deployment, in API order.

        Raises:
            DiscoveryError: If the cluster is unreachable or rejects the request.

        """
        apps_v1_api = client.AppsV1Api()

        with console.spinner("Listing deployments..."):
            try:
                if self.namespaces:
                    deployments: list[Any] = []
                    for namespace in self.namespaces:
                        deployments.extend(apps_v1_api.list_namespaced_deployment(namespace).items)
                else:
                    deployments = apps_v1_api.list_deployment_for_all_namespaces().items
            except MaxRetryError as e:
                raise DiscoveryError(f"Failed to connect to the Kubernetes cluster: {e.reason}") from e
            except ApiException as e:
                raise DiscoveryError(f"Failed to list deployments: {e.status} {e.reason}") from e

        workloads = [
            Workload(
                name=deployment.metadata.name,
                namespace=deployment.metadata.namespace,
                service_account_name=deployment.spec.template.spec.service_account_name,
            )
            for deployment in deployments
        ]
        ic(workloads)

        console.info(f"Found {console.highlight(str(len(workloads)))} deployments")
        return workloads

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"Cluster(context={self.context!r}, namespaces={self.namespaces!r})"
