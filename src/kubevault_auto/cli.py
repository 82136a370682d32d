#!/usr/bin/env python
"""Command-line interface for kubevault-auto.

This module provides the main CLI entry point, turning command-line options
into Settings, running a reconciliation pass and rendering its report.
"""

import sys

import click
import yaml
from icecream import ic

from kubevault_auto import __version__, console
from kubevault_auto.cluster import Cluster
from kubevault_auto.exceptions import DiscoveryError, VaultConnectionError
from kubevault_auto.models import DEFAULT_ROLE_TTL, DEFAULT_TIMEOUT, Settings, WorkloadOutcome
from kubevault_auto.reconcile import ReconciliationDriver, build_descriptors, report
from kubevault_auto.vault import MemoryStore, VaultClient


def write_report(outcomes: list[WorkloadOutcome], path: str) -> None:
    """Dump the outcome mapping to a YAML file.

    Args:
        outcomes: Outcomes returned by a reconciliation pass.
        path: Destination file.

    """
    document = {identity: outcome.as_dict() for identity, outcome in report(outcomes).items()}
    with open(path, "w") as stream:
        yaml.safe_dump(document, stream, sort_keys=False)
    console.step(f"Report written to {console.highlight(path)}")


def reconcile(settings: Settings, *, select_context: bool) -> list[WorkloadOutcome]:
    """Discover workloads and provision Vault for each of them.

    Args:
        settings: The run configuration.
        select_context: Prompt for the Kubernetes context.

    Returns:
        One outcome per discovered workload.

    Raises:
        DiscoveryError: If workloads cannot be listed.
        VaultConnectionError: If Vault is unreachable or the token is invalid.

    """
    cluster = Cluster(
        select_context=select_context,
        context=settings.kube_context,
        kubeconfig=settings.kubeconfig,
        namespaces=settings.namespaces,
    )
    descriptors = build_descriptors(cluster)

    if settings.dry_run:
        console.info("Dry run: nothing will be written to Vault")
        store: MemoryStore | VaultClient = MemoryStore()
    else:
        store = VaultClient.from_settings(settings)
        store.check()

    driver = ReconciliationDriver(settings, policy_store=store, role_store=store)
    ic(driver)

    with console.create_task_progress() as progress:
        task = progress.add_task("Provisioning workloads", total=len(descriptors))
        outcomes = driver.reconcile(descriptors, on_outcome=lambda _: progress.advance(task))

    if settings.dry_run:
        ic(store)
    return outcomes


@click.command(help="Provision Vault policies and Kubernetes-auth roles for cluster workloads")
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--select", required=False, is_flag=True, default=False, help="prompt for context select")
@click.option("--context", "kube_context", required=False, help="kubeconfig context to use")
@click.option("--kubeconfig", required=False, envvar="KUBECONFIG", help="path to the kubeconfig file")
@click.option("--namespace", "-n", "namespaces", multiple=True, help="only provision this namespace")
@click.option("--vault-addr", required=False, envvar="VAULT_ADDR", help="Vault server address")
@click.option("--vault-token", required=False, envvar="VAULT_TOKEN", help="Vault token")
@click.option("--ttl", default=DEFAULT_ROLE_TTL, show_default=True, help="TTL of issued tokens")
@click.option("--workers", default=1, show_default=True, type=click.IntRange(min=1), help="parallel workloads")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True, type=int, help="Vault request timeout")
@click.option("--dry-run", required=False, is_flag=True, help="render artifacts without writing to Vault")
@click.option("--report", "report_file", required=False, help="write the outcome report to a YAML file")
def cli(
    debug: bool,
    select: bool,
    kube_context: str | None,
    kubeconfig: str | None,
    namespaces: tuple[str, ...],
    vault_addr: str | None,
    vault_token: str | None,
    ttl: str,
    workers: int,
    timeout: int,
    dry_run: bool,
    report_file: str | None,
    version: bool,
) -> None:
    """Process CLI arguments and run a reconciliation pass.

    Exits with status 1 when discovery or Vault authentication fails, or
    when any workload could not be provisioned.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        return

    if not dry_run and not vault_addr:
        raise click.UsageError("Vault address is required (--vault-addr or VAULT_ADDR)")

    settings = Settings(
        vault_address=vault_addr,
        vault_token=vault_token,
        kube_context=kube_context,
        kubeconfig=kubeconfig,
        namespaces=namespaces,
        ttl=ttl,
        workers=workers,
        timeout=timeout,
        dry_run=dry_run,
    )
    ic(settings.vault_address, settings.kube_context, settings.namespaces)

    try:
        outcomes = reconcile(settings, select_context=select)
    except DiscoveryError as e:
        console.error(f"Workload discovery failed: {e}")
        sys.exit(1)
    except VaultConnectionError as e:
        console.error(f"Vault connection failed: {e}")
        sys.exit(1)

    console.newline()
    console.report_table(outcomes)

    failed = [outcome for outcome in outcomes if not outcome.ok]
    console.summary_panel(
        "Reconciliation Summary",
        {
            "Workloads": str(len(outcomes)),
            "Bound": str(len(outcomes) - len(failed)),
            "Failed": str(len(failed)),
        },
    )

    if report_file:
        write_report(outcomes, report_file)

    if failed:
        console.error(f"{len(failed)} workload(s) could not be provisioned")
        sys.exit(1)
    console.success("All workloads provisioned")


if __name__ == "__main__":
    cli()
