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

"""Local Kubernetes cluster detection and creation."""

from __future__ import annotations

from rich.panel import Panel

from quickstart_manager import console
from quickstart_manager.config import ClusterBackend, backend_specs
from quickstart_manager.errors import QuickstartError
from quickstart_manager.prompts import Prompter
from quickstart_manager.tooling import ToolProvisioner
from quickstart_manager.utils import print_info, print_ok, print_warn, run_kubectl, run_streamed


def cluster_reachable() -> tuple[bool, str]:
    """Probe the current kube context.

    Returns:
        Tuple of (reachable, cluster-info text).
    """
    ok, stdout, _ = run_kubectl(["cluster-info"])
    return ok, stdout.strip()


def create_cluster(backend: ClusterBackend, provisioner: ToolProvisioner) -> None:
    """Create a local cluster with the chosen backend.

    Args:
        backend: Cluster backend to create the cluster with.
        provisioner: Tool provisioner used to ensure the backend CLI.

    Raises:
        QuickstartError: If the backend CLI is missing or cluster creation fails.
    """
    spec = backend_specs()[backend]
    provisioner.ensure_tool(spec.tool)
    print_ok(f"{backend.value} is installed")

    console.print(Panel.fit(f"Creating {backend.value} cluster", style="bold blue"))
    if not run_streamed(spec.create_command):
        raise QuickstartError(
            f"Failed to create {backend.value} cluster",
            f"Create it manually with: {spec.create_command}",
        )
    print_ok(f"{backend.value} cluster created")


def ensure_cluster(prompter: Prompter, provisioner: ToolProvisioner) -> None:
    """Make sure a Kubernetes cluster is reachable, creating one if needed.

    Args:
        prompter: Prompter used to choose the cluster backend.
        provisioner: Tool provisioner used to ensure the backend CLI.

    Raises:
        QuickstartError: If cluster creation fails.
    """
    reachable, info = cluster_reachable()
    if reachable:
        print_info("Kubernetes cluster accessible", info)
        return

    print_warn("No Kubernetes cluster is accessible")
    options = [backend.value for backend in ClusterBackend]
    backend = ClusterBackend(prompter.choice("Choose a tool to create a cluster", options, "default"))
    create_cluster(backend, provisioner)
    print_info("Cluster resources (CRDs) will be installed automatically during deployment")
