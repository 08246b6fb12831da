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

"""Completion report: deferred manual instructions and next-step hints."""

from __future__ import annotations

from dataclasses import dataclass

from quickstart_manager.constants import (
    API_DOCS_URLS,
    DASHBOARD_URL,
    DOCS_URL,
    SAMPLE_AGENT_NAME,
    SAMPLE_QUERY,
)
from quickstart_manager.utils import print_ok, print_warn


@dataclass
class ServiceStatus:
    """Which optional services ended up installed during the run."""

    dashboard_installed: bool = False
    api_installed: bool = False


def print_manual_instructions(instructions: list[str]) -> None:
    """Print the instructions the user still has to carry out, in recorded order."""
    if not instructions:
        return
    print_warn("Please manually carry out the instructions below:", "\n".join(instructions))


def completion_hints(services: ServiceStatus) -> str:
    """Build the "Try:" block shown when the quickstart finishes."""
    lines = ["Try:"]
    if services.dashboard_installed:
        lines.append(f"  dashboard:     {DASHBOARD_URL}")
    if services.api_installed:
        lines.append(f"  api:           {API_DOCS_URLS[0]} or {API_DOCS_URLS[1]}")
    lines += [
        f"  docs:          {DOCS_URL}",
        "  show agents:   kubectl get agents",
        f'  run a query:   fark agent {SAMPLE_AGENT_NAME} "{SAMPLE_QUERY}"',
        "  new project:   ark generate project my-agents",
        "  ark help:      ark --help",
        "                 fark completion zsh > ~/.fark-completion && "
        "echo 'source ~/.fark-completion' >> ~/.zshrc # install auto-complete",
        "  check cluster: k9s",
    ]
    return "\n".join(lines)


def report_completion(instructions: list[str], services: ServiceStatus, completed: bool) -> None:
    """Print the end-of-run report.

    Args:
        instructions: Manual instructions collected during the run.
        services: Auxiliary service installation outcome.
        completed: Whether every step ran; the summary is only shown then.
    """
    if completed:
        print_ok("Quickstart complete!", completion_hints(services))
    print_manual_instructions(instructions)
