# /*
# Copyright 2026 The ARK Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Orchestration functions that compose the provisioning steps into workflows."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from rich.panel import Panel

from quickstart_manager import console
from quickstart_manager.cluster import ensure_cluster
from quickstart_manager.components import (
    PortForward,
    ensure_controller,
    ensure_dashboard_port_forward,
    ensure_service,
)
from quickstart_manager.config import RunConfig
from quickstart_manager.constants import (
    API_INSTALL_TARGET,
    API_SERVICE,
    DASHBOARD_INSTALL_TARGET,
    DASHBOARD_SERVICE,
    VERSION_FILE,
)
from quickstart_manager.errors import QuickstartError
from quickstart_manager.model import ensure_default_model, ensure_sample_agent, model_exists, reconfigure_default_model
from quickstart_manager.prompts import Prompter
from quickstart_manager.report import ServiceStatus, report_completion
from quickstart_manager.tooling import ToolProvisioner, ensure_docker_daemon
from quickstart_manager.utils import print_error, print_info, print_warn
from quickstart_manager.validation import check_webhook, validate_end_to_end


@dataclass
class QuickstartContext:
    """State carried through one quickstart run.

    Attributes:
        project_root: ARK repository root.
        config: Run configuration, read-only after load.
        prompter: Prompter shared by every step.
        provisioner: Tool provisioner owning the manual instruction log.
        services: Auxiliary service outcome read by the completion report.
        port_forward: Dashboard port forward started by this run, if any.
        completed: Set once the last step has run.
    """

    project_root: Path
    config: RunConfig
    prompter: Prompter
    provisioner: ToolProvisioner
    services: ServiceStatus = field(default_factory=ServiceStatus)
    port_forward: PortForward | None = None
    completed: bool = False
    _reported: bool = False

    def report(self) -> None:
        """Print the completion report; later calls do nothing."""
        if self._reported:
            return
        self._reported = True
        instructions = list(self.provisioner.manual_instructions)
        self.provisioner.manual_instructions.clear()
        report_completion(instructions, self.services, self.completed)


@contextmanager
def quickstart_session(
    project_root: Path,
    config: RunConfig,
    prompter: Prompter | None = None,
    provisioner: ToolProvisioner | None = None,
) -> Iterator[QuickstartContext]:
    """Open a run context whose completion report is printed on every exit path.

    Fatal errors are printed once, before the report, and then re-raised.

    Args:
        project_root: ARK repository root.
        config: Loaded run configuration.
        prompter: Prompter to use, or None for one reading the terminal.
        provisioner: Tool provisioner to use, or None for the tools.yaml registry.

    Yields:
        The run context.
    """
    prompter = prompter or Prompter(console, use_defaults=config.use_defaults)
    ctx = QuickstartContext(
        project_root=project_root,
        config=config,
        prompter=prompter,
        provisioner=provisioner or ToolProvisioner(prompter),
    )
    try:
        yield ctx
    except QuickstartError as err:
        print_error(err.message, err.details)
        raise
    except KeyboardInterrupt:
        print_warn("Interrupted")
        raise
    finally:
        ctx.report()


def check_project_root(project_root: Path) -> str:
    """Verify the quickstart runs from the ARK repository root.

    Returns:
        The ARK version read from version.txt.

    Raises:
        QuickstartError: If version.txt is missing.
    """
    version_file = project_root / VERSION_FILE
    if not version_file.is_file():
        raise QuickstartError(
            "quickstart must run from project root directory",
            f"{VERSION_FILE} not found in {project_root}",
        )
    return version_file.read_text().strip()


# ============================================================================
# Workflows
# ============================================================================

def run_tool_check(ctx: QuickstartContext, names: list[str] | None = None) -> None:
    """Ensure the named tools, or every registered tool and a running Docker daemon.

    Raises:
        QuickstartError: If a name is not in the registry or a required tool fails.
    """
    if not names:
        ctx.provisioner.ensure_all()
        ensure_docker_daemon()
        return
    unknown = [name for name in names if name not in ctx.provisioner.registry]
    if unknown:
        raise QuickstartError(
            f"Unknown tool: {', '.join(unknown)}",
            f"Known tools: {', '.join(ctx.provisioner.registry)}",
        )
    for name in names:
        ctx.provisioner.ensure_tool_named(name)


def run_model_configuration(ctx: QuickstartContext, reconfigure: bool = False) -> bool:
    """Configure (or reconfigure) the default model, then reconcile the sample agent."""
    if reconfigure:
        configured = reconfigure_default_model(ctx.prompter, ctx.config)
    else:
        configured = ensure_default_model(ctx.prompter, ctx.config)
    if configured:
        ensure_sample_agent(ctx.prompter, ctx.project_root)
    return configured


def run_auxiliary_services(ctx: QuickstartContext) -> None:
    """Install the dashboard and API on request and forward the dashboard."""
    console.print(Panel.fit("Checking optional services", style="bold blue"))
    ctx.services.dashboard_installed = ensure_service(
        ctx.prompter, DASHBOARD_SERVICE, "ARK dashboard", DASHBOARD_INSTALL_TARGET, ctx.project_root,
    )
    ctx.services.api_installed = ensure_service(
        ctx.prompter, API_SERVICE, "ARK API", API_INSTALL_TARGET, ctx.project_root,
    )
    if ctx.services.dashboard_installed:
        ctx.port_forward = ensure_dashboard_port_forward(ctx.prompter)


def run_quickstart(ctx: QuickstartContext) -> None:
    """Run every provisioning step in order.

    Args:
        ctx: Run context from :func:`quickstart_session`.

    Raises:
        QuickstartError: If a required step fails.
    """
    version = check_project_root(ctx.project_root)
    print_info(f"ARK v{version}")

    run_tool_check(ctx)
    ensure_cluster(ctx.prompter, ctx.provisioner)
    ensure_controller(ctx.prompter, ctx.config, ctx.project_root)
    check_webhook()

    ensure_default_model(ctx.prompter, ctx.config)
    if model_exists():
        ensure_sample_agent(ctx.prompter, ctx.project_root)
        validate_end_to_end(ctx.project_root)
    else:
        print_warn("No default model found - skipping sample-agent creation")

    run_auxiliary_services(ctx)
    ctx.completed = True
