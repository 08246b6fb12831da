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

"""Typer sub-applications and the shared session runner."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import typer

from quickstart_manager.config import display_config, load_run_config
from quickstart_manager.constants import ENV_FILE
from quickstart_manager.errors import QuickstartError
from quickstart_manager.orchestrator import QuickstartContext, quickstart_session
from quickstart_manager.utils import print_error


@dataclass(frozen=True)
class CliOptions:
    """Global options collected by the root callback."""

    project_root: Path
    env_file: Path | None
    use_defaults: bool


def run_in_session(options: CliOptions, step: Callable[[QuickstartContext], object]) -> None:
    """Load config, run *step* inside a quickstart session, and map failures to exit codes.

    Raises:
        typer.Exit: With code 1 on a fatal error, 130 on interrupt.
    """
    project_root = options.project_root.resolve()
    try:
        config = load_run_config(project_root, options.env_file, options.use_defaults)
    except QuickstartError as err:
        # Nothing has run yet, so there is no report to print.
        print_error(err.message, err.details)
        raise typer.Exit(code=1)
    display_config(config, options.env_file or project_root / ENV_FILE)
    try:
        with quickstart_session(project_root, config) as ctx:
            step(ctx)
    except QuickstartError:
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        raise typer.Exit(code=130)
