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

"""ARK controller deployment, auxiliary services, and dashboard port forwarding."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path

import sh
from rich.panel import Panel

from quickstart_manager import console, logger
from quickstart_manager.config import RunConfig
from quickstart_manager.constants import (
    CONTROLLER_DEPLOY_TIMEOUT,
    CONTROLLER_LABEL,
    CONTROLLER_NAME,
    CONTROLLER_READY_PROBE_TIMEOUT,
    CONTROLLER_SOURCE_DIR,
    CONTROLLER_VERSION_LABEL,
    DEFAULT_CONTROLLER_IMAGE,
    DEFAULT_CONTROLLER_TAG,
    MAKE_JOBS,
    NS_ARK_SYSTEM,
    NS_DEFAULT,
    PORT_FORWARD_GRACE_SECONDS,
    PORT_FORWARD_LOCAL_PORT,
    PORT_FORWARD_PATTERN,
    PORT_FORWARD_SERVICE,
)
from quickstart_manager.errors import QuickstartError
from quickstart_manager.prompts import Prompter
from quickstart_manager.utils import (
    print_error,
    print_info,
    print_ok,
    print_warn,
    run_kubectl,
    run_streamed,
)

CRD_OWNERSHIP_HINT = """If you see CRD ownership errors, this means you have an old ARK installation.
Please recreate your local cluster to start fresh.

For minikube: minikube delete && minikube start
For kind: kind delete cluster && kind create cluster"""


def _timeout_seconds(timeout: str) -> int:
    """Convert a kubectl duration like ``300s`` into a subprocess timeout with headroom."""
    return int(timeout.rstrip("s")) + 30


def deployment_exists(name: str, namespace: str) -> bool:
    ok, _, _ = run_kubectl(["get", "deployment", name, "-n", namespace])
    return ok


def wait_deployment_available(name: str, namespace: str, timeout: str) -> bool:
    """Block until a deployment reports the Available condition.

    Args:
        name: Deployment name.
        namespace: Deployment namespace.
        timeout: kubectl duration string (e.g. ``5s``).

    Returns:
        True if the deployment became available within *timeout*.
    """
    ok, _, stderr = run_kubectl(
        ["wait", "--for=condition=available", f"--timeout={timeout}", f"deployment/{name}", "-n", namespace],
        timeout=_timeout_seconds(timeout),
    )
    if not ok:
        logger.debug("Deployment %s/%s not available: %s", namespace, name, stderr.strip())
    return ok


def controller_version() -> str:
    """Read the running controller version from its pod labels."""
    label_path = CONTROLLER_VERSION_LABEL.replace(".", r"\.")
    ok, stdout, _ = run_kubectl([
        "get", "pods", "-n", NS_ARK_SYSTEM, "-l", CONTROLLER_LABEL,
        "-o", f"jsonpath={{.items[0].metadata.labels.{label_path}}}",
    ])
    return stdout.strip() if ok and stdout.strip() else "unknown"


# ============================================================================
# ARK controller
# ============================================================================

def deploy_controller(config: RunConfig, project_root: Path) -> bool:
    """Run ``make deploy`` for the controller with the configured image.

    Args:
        config: Run configuration with optional image and tag overrides.
        project_root: ARK repository root.

    Returns:
        True if the deployment procedure succeeded.
    """
    env = {
        "IMAGE": config.controller_image or DEFAULT_CONTROLLER_IMAGE,
        "IMAGE_TAG": config.controller_tag or DEFAULT_CONTROLLER_TAG,
    }
    print_info(f"Deploying ARK controller ({env['IMAGE']}:{env['IMAGE_TAG']})...")
    return run_streamed("make deploy", cwd=project_root / CONTROLLER_SOURCE_DIR, env=env)


def ensure_controller(prompter: Prompter, config: RunConfig, project_root: Path) -> bool:
    """Make sure the ARK controller is deployed, deploying it on request.

    Args:
        prompter: Prompter used to confirm deployment.
        config: Run configuration with optional image and tag overrides.
        project_root: ARK repository root.

    Returns:
        True if the controller is deployed and available.

    Raises:
        QuickstartError: If a fresh deployment does not become available in time.
    """
    console.print(Panel.fit("Checking ARK controller", style="bold blue"))
    if deployment_exists(CONTROLLER_NAME, NS_ARK_SYSTEM):
        if wait_deployment_available(CONTROLLER_NAME, NS_ARK_SYSTEM, CONTROLLER_READY_PROBE_TIMEOUT):
            print_info(f"ARK controller running version {controller_version()}")
            return True
        print_warn("ARK controller deployed but not ready")
        return False

    print_warn("ARK controller not deployed")
    if not prompter.yes_no("Deploy ARK controller (this can take some time)?"):
        print_warn("Skipping ARK controller deployment")
        return False

    if not deploy_controller(config, project_root):
        print_error("Deployment failed", CRD_OWNERSHIP_HINT)
        return False

    # Webhook validation only works once the controller is available.
    if not wait_deployment_available(CONTROLLER_NAME, NS_ARK_SYSTEM, CONTROLLER_DEPLOY_TIMEOUT):
        raise QuickstartError(
            "ARK controller did not become available",
            f"Check the controller logs: kubectl logs -n {NS_ARK_SYSTEM} deployment/{CONTROLLER_NAME}",
        )
    print_ok("ARK controller deployed")
    return True


# ============================================================================
# Auxiliary services
# ============================================================================

def ensure_service(prompter: Prompter, name: str, display_name: str, target: str, project_root: Path) -> bool:
    """Make sure an optional platform service is installed.

    Args:
        prompter: Prompter used to confirm installation.
        name: Deployment name in the default namespace.
        display_name: Human readable service name.
        target: Make target that installs the service.
        project_root: ARK repository root.

    Returns:
        True if the service is installed when this returns.
    """
    if deployment_exists(name, NS_DEFAULT):
        print_ok(f"{display_name} installed")
        return True

    print_warn(f"{display_name} not installed")
    if not prompter.yes_no(f"Install {display_name}?"):
        print_warn(f"Skipping {display_name} installation")
        return False

    print_info(f"Installing {display_name}...")
    install_command = f"make {MAKE_JOBS} {target}"
    if run_streamed(install_command, cwd=project_root):
        print_ok(f"{display_name} installed")
        return True
    print_error(f"Failed to install {display_name}", f"install manually with: {install_command}")
    return False


# ============================================================================
# Dashboard port forward
# ============================================================================

@dataclass
class PortForward:
    """Handle on a background ``kubectl port-forward`` process.

    The orchestrator never stops the process; it is left running after exit.
    """

    pid: int
    local_port: int
    process: sh.RunningCommand

    def is_alive(self) -> bool:
        alive, _ = self.process.process.is_alive()
        return alive


def port_forward_running() -> bool:
    try:
        sh.pgrep("-f", PORT_FORWARD_PATTERN)
        return True
    except sh.ErrorReturnCode:
        return False


def start_port_forward() -> PortForward:
    """Start the dashboard port forward detached from this process group."""
    process = sh.kubectl(
        "port-forward", "-n", NS_ARK_SYSTEM, PORT_FORWARD_SERVICE, f"{PORT_FORWARD_LOCAL_PORT}:80",
        _bg=True,
        _bg_exc=False,
        _new_session=True,
        _out=os.devnull,
        _err=os.devnull,
    )
    return PortForward(pid=process.pid, local_port=PORT_FORWARD_LOCAL_PORT, process=process)


def ensure_dashboard_port_forward(prompter: Prompter) -> PortForward | None:
    """Forward the dashboard to localhost if no forward is already running.

    Args:
        prompter: Prompter used to confirm starting the forward.

    Returns:
        The started forward, or None if one was already running, the user
        declined, or the process exited during the grace period.
    """
    if port_forward_running():
        print_ok(f"Dashboard port forward already running on localhost:{PORT_FORWARD_LOCAL_PORT}")
        return None
    if not prompter.yes_no(f"Forward dashboard to localhost:{PORT_FORWARD_LOCAL_PORT}?"):
        return None

    print_info(f"Starting port forward to localhost:{PORT_FORWARD_LOCAL_PORT}...")
    forward = start_port_forward()
    time.sleep(PORT_FORWARD_GRACE_SECONDS)
    if forward.is_alive():
        print_ok(f"Dashboard port forward started on localhost:{PORT_FORWARD_LOCAL_PORT}")
        return forward
    print_warn(
        f"Failed to start port forward - port {PORT_FORWARD_LOCAL_PORT} may be in use",
        f"try manually: kubectl port-forward -n {NS_ARK_SYSTEM} {PORT_FORWARD_SERVICE} <port>:80",
    )
    return None
