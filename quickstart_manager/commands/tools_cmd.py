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

"""Tool subcommands (check)."""

from __future__ import annotations

import typer

from quickstart_manager.commands import run_in_session
from quickstart_manager.orchestrator import run_tool_check

app = typer.Typer(help="Check and install development tools.")


@app.command()
def check(
    ctx: typer.Context,
    names: list[str] | None = typer.Argument(None, help="Tools to check (default: every registered tool)"),
) -> None:
    """Check required and optional tools, installing missing ones on request."""
    run_in_session(ctx.obj, lambda session: run_tool_check(session, names))
