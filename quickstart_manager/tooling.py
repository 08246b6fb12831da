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

"""Tool detection, installation, and deferred manual instructions."""

from __future__ import annotations

import docker
from docker.errors import DockerException
from rich.panel import Panel

from quickstart_manager import console, logger
from quickstart_manager.config import ToolSpec, tool_specs
from quickstart_manager.errors import QuickstartError
from quickstart_manager.prompts import Prompter
from quickstart_manager.utils import print_info, print_ok, print_warn, run_quiet, which


class ToolProvisioner:
    """Ensures external tools are installed, prompting before each install.

    Manual follow-up instructions from successful installs are collected in
    ``manual_instructions`` in the order they were recorded; the completion
    report drains them once at exit.

    Args:
        prompter: Prompter used to ask before installing.
        registry: Tools to check, keyed by name. Defaults to tools.yaml.
    """

    def __init__(self, prompter: Prompter, registry: list[ToolSpec] | None = None) -> None:
        self.prompter = prompter
        self.registry = {spec.name: spec for spec in (registry if registry is not None else tool_specs())}
        self.manual_instructions: list[str] = []

    def ensure_all(self) -> None:
        """Ensure every registered tool, in registry order."""
        console.print(Panel.fit("Checking development tools", style="bold blue"))
        for spec in self.registry.values():
            self.ensure_tool(spec)

    def ensure_tool_named(self, name: str) -> bool:
        """Ensure a registered tool by name.

        Raises:
            KeyError: If *name* is not in the registry.
        """
        return self.ensure_tool(self.registry[name])

    def ensure_tool(self, spec: ToolSpec) -> bool:
        """Detect a tool and install it if missing.

        Args:
            spec: Tool to ensure.

        Returns:
            True if the tool is installed when this returns, False if an
            optional tool was skipped or failed to install.

        Raises:
            QuickstartError: If a required tool is declined or fails to install.
        """
        path = which(spec.name)
        if path:
            print_info(f"{spec.name} already installed at {path}")
            return True

        print_warn(f"{spec.name} not found")
        if not self.prompter.yes_no(f"Install {spec.name}?"):
            if spec.required:
                raise QuickstartError(f"{spec.name} is required for development", f"Install with: {spec.install_command}")
            print_warn(f"Skipping optional dependency {spec.name}. Continuing...")
            return False

        print_info(f"Installing {spec.name}...")
        if not run_quiet(spec.install_command):
            if spec.required:
                raise QuickstartError(f"Failed to install {spec.name}", f"Install manually with: {spec.install_command}")
            print_warn(f"Failed to install {spec.name}", f"Install manually with: {spec.install_command}")
            print_warn(f"{spec.name} is optional. Continuing...")
            return False

        # Installers that only drop a binary somewhere off PATH still succeed here;
        # the manual instruction tells the user how to finish the job.
        print_ok(f"{spec.name} installed successfully at {which(spec.name) or '(not yet on PATH)'}")
        if spec.instructions:
            self.manual_instructions.append(spec.instructions)
        return True


def ensure_docker_daemon() -> None:
    """Check the Docker daemon answers a ping.

    Raises:
        QuickstartError: If the daemon is not running or not reachable.
    """
    try:
        client = docker.from_env()
        try:
            client.ping()
        finally:
            client.close()
    except DockerException as err:
        logger.debug("Docker ping failed: %s", err)
        raise QuickstartError("Docker daemon is not running", "Start Docker Desktop or the Docker daemon") from err
    print_info("Docker daemon running")
