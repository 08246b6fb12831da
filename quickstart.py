#!/usr/bin/env python3
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

"""
quickstart.py - ARK local environment bootstrap.

Running without a subcommand brings the workstation from an unknown state to
a working ARK deployment: tools, local cluster, controller, default model,
end-to-end validation, then the optional dashboard and API.

Subcommands:
    tools check [NAME]   Check and install development tools only
    model configure      Create the default model if missing
    model reconfigure    Replace the existing default model

Environment Variables:
    Every prompt can be answered ahead of time via ARK_QUICKSTART_* variables,
    either exported or written to .ark.env in the project root:
    - ARK_QUICKSTART_USE_DEFAULTS (any value: never prompt)
    - ARK_QUICKSTART_MODEL_TYPE (azure | openai)
    - ARK_QUICKSTART_MODEL_VERSION, ARK_QUICKSTART_BASE_URL
    - ARK_QUICKSTART_API_VERSION, ARK_QUICKSTART_API_KEY
    - ARK_QUICKSTART_CONTROLLER_IMAGE, ARK_QUICKSTART_CONTROLLER_TAG

Examples:
    # Interactive quickstart from the ARK repository root
    ./quickstart.py

    # Unattended run
    ARK_QUICKSTART_USE_DEFAULTS=1 ./quickstart.py

    # Fix a bad API key
    ./quickstart.py model reconfigure
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from quickstart_manager.commands import CliOptions, model_cmd, run_in_session, tools_cmd
from quickstart_manager.orchestrator import run_quickstart

app = typer.Typer(
    help="ARK local environment bootstrap.",
    invoke_without_command=True,
)


@app.callback()
def _main_callback(
    ctx: typer.Context,
    project_root: Path = typer.Option(
        Path("."), "--project-root", help="ARK repository root (must contain version.txt)"),
    env_file: Path | None = typer.Option(
        None, "--env-file", help="Env file with ARK_QUICKSTART_* overrides (default: <project-root>/.ark.env)"),
    use_defaults: bool = typer.Option(
        False, "--use-defaults", help="Answer every prompt with its default"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every external command"),
) -> None:
    """Initialize logging and run the full quickstart when no subcommand is given."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.obj = CliOptions(project_root=project_root, env_file=env_file, use_defaults=use_defaults)
    if ctx.invoked_subcommand is None:
        run_in_session(ctx.obj, run_quickstart)


app.add_typer(tools_cmd.app, name="tools")
app.add_typer(model_cmd.app, name="model")


if __name__ == "__main__":
    app()
