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

"""Configuration classes, tool specs, and config loading/display."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quickstart_manager import console
from quickstart_manager.constants import ENV_FILE, ENV_PREFIX, TOOL_REGISTRY
from quickstart_manager.errors import QuickstartError


# ============================================================================
# Enumerations
# ============================================================================

class ClusterBackend(str, Enum):
    """Local cluster backends offered when no cluster is reachable."""

    KIND = "kind"
    MINIKUBE = "minikube"


class ModelType(str, Enum):
    """Default model provider types."""

    AZURE = "azure"
    OPENAI = "openai"

    @property
    def requires_api_version(self) -> bool:
        return self is ModelType.AZURE


# ============================================================================
# Run configuration
# ============================================================================

class RunConfig(BaseSettings):
    """Quickstart overrides, auto-loaded from ARK_QUICKSTART_* env vars and .ark.env.

    Any field left as None is resolved interactively (or from its default in
    defaults mode). Instances are frozen once loaded.

    Attributes:
        use_defaults: Resolve every prompt to its default without reading input.
        model_type: Default model provider type override.
        model_version: Default model version override.
        base_url: Default model base URL override.
        api_version: Azure API version override.
        api_key: Provider API key override.
        controller_image: Controller image name used by ``make deploy``.
        controller_tag: Controller image tag used by ``make deploy``.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=ENV_FILE,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    use_defaults: bool = False
    model_type: ModelType | None = None
    model_version: str | None = None
    base_url: str | None = None
    api_version: str | None = None
    api_key: SecretStr | None = None
    controller_image: str | None = Field(default=None, pattern=r"^[\w./:@-]+$")
    controller_tag: str | None = Field(default=None, pattern=r"^[\w.-]+$")

    @field_validator("use_defaults", mode="before")
    @classmethod
    def _any_value_enables(cls, value: object) -> object:
        # Any non-empty value other than an explicit negative turns defaults mode on.
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false", "no", "off")
        return value

    @field_validator("model_type", mode="before")
    @classmethod
    def _normalize_model_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


def load_run_config(project_root: Path, env_file: Path | None = None, use_defaults: bool = False) -> RunConfig:
    """Build the RunConfig once for the whole run.

    Resolution priority: CLI flag > process environment > env file > defaults.

    Args:
        project_root: Directory holding the optional .ark.env file.
        env_file: Explicit env file path, or None for ``<project_root>/.ark.env``.
        use_defaults: CLI override forcing defaults mode on.

    Returns:
        The loaded, frozen RunConfig.

    Raises:
        QuickstartError: If an explicit env file is missing or a value is invalid.
    """
    if env_file is not None and not env_file.is_file():
        raise QuickstartError(f"Env file {env_file} not found", "Pass an existing file to --env-file")
    path = env_file or project_root / ENV_FILE
    try:
        config = RunConfig(_env_file=path if path.exists() else None)
    except ValidationError as err:
        raise QuickstartError(
            f"Invalid {ENV_PREFIX}* configuration",
            "\n".join(
                f"{ENV_PREFIX}{'_'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
                for error in err.errors()
            ),
        ) from err
    if use_defaults and not config.use_defaults:
        config = config.model_copy(update={"use_defaults": True})
    return config


def display_config(config: RunConfig, env_file: Path) -> None:
    """Print the overrides that were picked up, hiding the API key.

    Args:
        config: Loaded run configuration.
        env_file: Env file the configuration was read from.
    """
    rows: list[str] = []
    if config.use_defaults:
        rows.append(f"{ENV_PREFIX}USE_DEFAULTS: {config.use_defaults}")
    if config.model_type:
        rows.append(f"{ENV_PREFIX}MODEL_TYPE: {config.model_type.value}")
    if config.model_version:
        rows.append(f"{ENV_PREFIX}MODEL_VERSION: {config.model_version}")
    if config.base_url:
        rows.append(f"{ENV_PREFIX}BASE_URL: {config.base_url}")
    if config.api_version:
        rows.append(f"{ENV_PREFIX}API_VERSION: {config.api_version}")
    if config.api_key:
        rows.append(f"{ENV_PREFIX}API_KEY: (hidden)")
    if config.controller_image:
        rows.append(f"{ENV_PREFIX}CONTROLLER_IMAGE: {config.controller_image} (enables image caching)")
    if config.controller_tag:
        rows.append(f"{ENV_PREFIX}CONTROLLER_TAG: {config.controller_tag}")
    if not rows:
        return

    console.print(f"[blue]ℹ️  Using the following configuration from {env_file.name} and the environment[/blue]")
    for row in rows:
        console.print(f"        {row}", markup=False)


# ============================================================================
# Tool specs
# ============================================================================

@dataclass(frozen=True)
class ToolSpec:
    """An external command-line tool the quickstart depends on.

    Attributes:
        name: Executable name, also the registry key.
        install_command: Shell command that installs the tool.
        instructions: Manual follow-up to show after a successful install, or None.
        required: Whether failing to install the tool ends the run.
    """

    name: str
    install_command: str
    instructions: str | None = None
    required: bool = True


@dataclass(frozen=True)
class BackendSpec:
    """A local cluster backend and the command that creates its cluster."""

    backend: ClusterBackend
    tool: ToolSpec
    create_command: str


def tool_specs() -> list[ToolSpec]:
    """Build the ordered tool list from the static registry."""
    return [
        ToolSpec(
            name=entry["name"],
            install_command=entry["install"],
            instructions=entry.get("instructions"),
            required=entry.get("required", True),
        )
        for entry in TOOL_REGISTRY["tools"]
    ]


def backend_specs() -> dict[ClusterBackend, BackendSpec]:
    """Build the cluster backend table from the static registry."""
    specs: dict[ClusterBackend, BackendSpec] = {}
    for entry in TOOL_REGISTRY["cluster_backends"]:
        backend = ClusterBackend(entry["name"])
        specs[backend] = BackendSpec(
            backend=backend,
            tool=ToolSpec(name=entry["name"], install_command=entry["install"]),
            create_command=entry["create"],
        )
    return specs
