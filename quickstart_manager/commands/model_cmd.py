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

"""Default model subcommands (configure, reconfigure)."""

from __future__ import annotations

import typer

from quickstart_manager.commands import run_in_session
from quickstart_manager.orchestrator import run_model_configuration

app = typer.Typer(help="Configure the default model.")


@app.command()
def configure(ctx: typer.Context) -> None:
    """Create the default model if it does not exist yet."""
    run_in_session(ctx.obj, run_model_configuration)


@app.command()
def reconfigure(ctx: typer.Context) -> None:
    """Replace the existing default model with newly entered settings."""
    run_in_session(ctx.obj, lambda session: run_model_configuration(session, reconfigure=True))
