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

"""Webhook readiness and end-to-end validation with failure classification."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import sh
from rich.panel import Panel
from tenacity import RetryError, retry, stop_after_attempt, wait_fixed

from quickstart_manager import console, logger
from quickstart_manager.constants import (
    AUTH_FAILURE_MARKERS,
    CONTROLLER_LABEL,
    CONTROLLER_NAME,
    CONTROLLER_RESTART_TIMEOUT,
    ENV_FILE,
    ENV_FILE_TEMPLATE,
    ENV_PREFIX,
    NS_ARK_SYSTEM,
    RECONFIGURE_CLI_COMMAND,
    RECONFIGURE_MAKE_TARGET,
    REL_QUERY_SCRIPT,
    SAMPLE_AGENT_NAME,
    SAMPLE_QUERY,
    TIMEOUT_MARKERS,
    WEBHOOK_READY_MAX_RETRIES,
    WEBHOOK_READY_POLL_INTERVAL_SECONDS,
)
from quickstart_manager.errors import QuickstartError
from quickstart_manager.utils import print_info, print_ok, print_warn, run_kubectl


class QueryOutcome(str, Enum):
    """Result of the end-to-end sample query."""

    SUCCESS = "success"
    AUTH_FAILURE = "auth_failure"
    TIMEOUT = "timeout"
    UNKNOWN_FAILURE = "unknown_failure"


def classify_query_failure(output: str) -> QueryOutcome:
    """Classify the diagnostic text of a failed query.

    Authentication markers win over timeout markers; anything else is unknown.

    Args:
        output: Combined stdout and stderr of the failed query.

    Returns:
        AUTH_FAILURE, TIMEOUT, or UNKNOWN_FAILURE.
    """
    text = output.lower()
    if any(marker in text for marker in AUTH_FAILURE_MARKERS):
        return QueryOutcome.AUTH_FAILURE
    if any(marker in text for marker in TIMEOUT_MARKERS):
        return QueryOutcome.TIMEOUT
    return QueryOutcome.UNKNOWN_FAILURE


# ============================================================================
# Webhook
# ============================================================================

def webhook_responding() -> bool:
    """Read the sample agent, which goes through the controller webhook.

    A NotFound reply still means the API server answered, so it counts as
    responding; the sample agent is only created by a later step.
    """
    ok, _, stderr = run_kubectl(["get", "agent", SAMPLE_AGENT_NAME])
    if not ok and "(notfound)" in stderr.lower():
        logger.debug("Sample agent not created yet; webhook answered")
        return True
    return ok


@retry(
    stop=stop_after_attempt(WEBHOOK_READY_MAX_RETRIES),
    wait=wait_fixed(WEBHOOK_READY_POLL_INTERVAL_SECONDS),
    reraise=True,
)
def _wait_webhook_responding() -> None:
    """Poll the webhook probe until it succeeds.

    Raises:
        RuntimeError: If the webhook is still not responding.
    """
    if not webhook_responding():
        raise RuntimeError("ARK webhook not responding")


def restart_controller() -> bool:
    """Delete the controller pods and wait for their replacements.

    Returns:
        True if a replacement pod became ready within the timeout.
    """
    ok, _, stderr = run_kubectl(["delete", "pod", "-l", CONTROLLER_LABEL, "-n", NS_ARK_SYSTEM])
    if not ok:
        logger.debug("Deleting controller pods failed: %s", stderr.strip())
    ok, _, stderr = run_kubectl(
        [
            "wait", "--for=condition=ready", "pod", "-l", CONTROLLER_LABEL,
            "-n", NS_ARK_SYSTEM, f"--timeout={CONTROLLER_RESTART_TIMEOUT}",
        ],
        timeout=int(CONTROLLER_RESTART_TIMEOUT.rstrip("s")) + 30,
    )
    if not ok:
        logger.debug("Controller pods not ready: %s", stderr.strip())
    return ok


def check_webhook() -> None:
    """Exercise the webhook; restart a stale controller if it does not answer.

    Every failure here is a warning; validation continues best effort.
    """
    console.print(Panel.fit("Testing webhook connectivity", style="bold blue"))
    if webhook_responding():
        print_ok("Webhook responding")
        return

    print_warn("Webhook may not be ready, restarting controller...")
    if not restart_controller():
        print_warn(f"ARK controller did not become ready within {CONTROLLER_RESTART_TIMEOUT}")
        return
    try:
        _wait_webhook_responding()
        print_ok("Webhook responding after controller restart")
    except (RuntimeError, RetryError):
        print_warn("Webhook still not responding after controller restart, continuing")


# ============================================================================
# Sample query
# ============================================================================

def run_sample_query(project_root: Path) -> tuple[bool, str]:
    """Send one query to the sample agent through the query script.

    Returns:
        Tuple of (success, combined output).
    """
    script = project_root / REL_QUERY_SCRIPT
    try:
        result = sh.bash(
            str(script), f"agent/{SAMPLE_AGENT_NAME}", SAMPLE_QUERY,
            _err_to_out=True,
            _cwd=str(project_root),
        )
        return True, str(result)
    except sh.ErrorReturnCode as err:
        return False, err.stdout.decode(errors="replace")


def auth_remediation(project_root: Path) -> str:
    """Build the fix-it text for an authentication failure."""
    lines = ["This usually means your API key or credentials are invalid."]
    if (project_root / ENV_FILE).exists():
        lines.append(f"To fix this, edit your existing {ENV_FILE} file.")
    else:
        lines.append(f"To fix this, create a new {ENV_FILE} file using {ENV_FILE_TEMPLATE} file as a template")
        lines.append(f"    cp {ENV_FILE_TEMPLATE} {ENV_FILE}")
    lines += [
        "Update these values:",
        f"  {ENV_PREFIX}API_KEY=your_actual_api_key",
        f"  {ENV_PREFIX}BASE_URL=your_actual_base_url",
        "",
        f"  Run {RECONFIGURE_MAKE_TARGET} (or {RECONFIGURE_CLI_COMMAND}) to reconfigure the default model.",
        "  Then run the quickstart again.",
        "",
        "  Exiting due to authentication failure.",
    ]
    return "\n".join(lines)


def validate_end_to_end(project_root: Path) -> QueryOutcome:
    """Run the sample query and turn a failure into a targeted message.

    Args:
        project_root: ARK repository root holding the query script.

    Returns:
        The query outcome; TIMEOUT and UNKNOWN_FAILURE are reported as warnings.

    Raises:
        QuickstartError: On an authentication or authorization failure.
    """
    print_info("Testing system with sample query...")
    ok, output = run_sample_query(project_root)
    if ok:
        print_ok("Test query succeeded")
        return QueryOutcome.SUCCESS

    print_warn("Test query failed - system may not be fully ready")
    outcome = classify_query_failure(output)
    logger.debug("Sample query classified as %s: %s", outcome.value, output.strip())
    if outcome is QueryOutcome.AUTH_FAILURE:
        raise QuickstartError("Authentication/authorization failed", auth_remediation(project_root))
    if outcome is QueryOutcome.TIMEOUT:
        print_warn(
            "Query timed out - the system may be slow to respond",
            f'Try running a query manually: fark agent {SAMPLE_AGENT_NAME} "{SAMPLE_QUERY}"',
        )
    else:
        print_warn(
            "Check controller logs for more details",
            f"  kubectl logs -n {NS_ARK_SYSTEM} deployment/{CONTROLLER_NAME}",
        )
    return outcome
