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

"""Default model configuration and sample agent reconciliation."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import sh
from rich.panel import Panel

from quickstart_manager import console, logger
from quickstart_manager.config import ModelType, RunConfig
from quickstart_manager.constants import (
    DEFAULT_AZURE_API_VERSION,
    DEFAULT_MODEL_NAME,
    DEFAULT_MODEL_VERSION,
    REL_SAMPLE_TOOL_YAML,
    SAMPLE_AGENT_NAME,
    SAMPLE_TOOL_NAME,
    TEMPLATE_AZURE_MODEL,
    TEMPLATE_OPENAI_MODEL,
    TEMPLATE_SAMPLE_AGENT,
    TEMPLATE_SECRET,
    TEMPLATES_DIR,
)
from quickstart_manager.errors import QuickstartError
from quickstart_manager.prompts import Prompter
from quickstart_manager.utils import (
    encode_api_key,
    normalize_base_url,
    print_error,
    print_info,
    print_ok,
    print_warn,
    run_kubectl,
)


@dataclass(frozen=True)
class ModelSettings:
    """Resolved values substituted into the model templates.

    Attributes:
        model_type: Provider type.
        model_version: Provider model name.
        base_url: Provider base URL without trailing slashes.
        api_version: Azure API version, or None for providers without one.
        api_key: Base64-encoded API key.
    """

    model_type: ModelType
    model_version: str
    base_url: str
    api_version: str | None
    api_key: str

    @property
    def model_template(self) -> str:
        return TEMPLATE_AZURE_MODEL if self.model_type.requires_api_version else TEMPLATE_OPENAI_MODEL


def render_template(name: str, values: dict[str, str]) -> str:
    """Fill a packaged template with envsubst.

    Args:
        name: Template file name under the templates directory.
        values: Variables exported to envsubst.

    Returns:
        The rendered document.
    """
    template = (TEMPLATES_DIR / name).read_text()
    return str(sh.envsubst(_in=template, _env={**os.environ, **values}))


def model_exists() -> bool:
    ok, _, _ = run_kubectl(["get", "model", DEFAULT_MODEL_NAME])
    return ok


def resolve_model_settings(prompter: Prompter, config: RunConfig) -> ModelSettings | None:
    """Resolve every model field from overrides or prompts.

    The API version is only asked for when the model type needs one.

    Args:
        prompter: Prompter used for fields without an override.
        config: Run configuration with optional overrides.

    Returns:
        The resolved settings, or None if the API key or base URL is empty.
    """
    if config.model_type:
        model_type = config.model_type
    else:
        model_type = ModelType(prompter.choice("Model type", [t.value for t in ModelType], "default"))
    model_version = config.model_version or prompter.freeform("Enter your model version", DEFAULT_MODEL_VERSION)
    base_url = normalize_base_url(config.base_url or prompter.freeform("Enter your base URL"))

    api_version = None
    if model_type.requires_api_version:
        api_version = config.api_version or prompter.freeform("Enter your Azure API version", DEFAULT_AZURE_API_VERSION)

    if config.api_key:
        api_key = config.api_key.get_secret_value()
    else:
        api_key = prompter.secret("Enter your API key")

    if not api_key or not base_url:
        logger.debug("Model settings incomplete: api_key=%s base_url=%s", bool(api_key), bool(base_url))
        return None
    return ModelSettings(
        model_type=model_type,
        model_version=model_version,
        base_url=base_url,
        api_version=api_version,
        api_key=encode_api_key(api_key),
    )


def render_model_documents(settings: ModelSettings) -> list[str]:
    """Render the credential and model documents for *settings*.

    Returns:
        The secret document followed by the model document.
    """
    model_values = {
        "BASE_URL": settings.base_url,
        "MODEL_TYPE": settings.model_type.value,
        "MODEL_VERSION": settings.model_version,
    }
    if settings.api_version is not None:
        model_values["API_VERSION"] = settings.api_version
    return [
        render_template(TEMPLATE_SECRET, {"API_KEY": settings.api_key}),
        render_template(settings.model_template, model_values),
    ]


def apply_documents(documents: list[str]) -> tuple[bool, str]:
    """Submit documents in a single ``kubectl apply``."""
    manifest = "\n---\n".join(doc.strip() for doc in documents) + "\n"
    ok, stdout, stderr = run_kubectl(["apply", "-f", "-"], stdin=manifest)
    return ok, (stdout if ok else stderr).strip()


def ensure_default_model(prompter: Prompter, config: RunConfig) -> bool:
    """Make sure a default model exists, creating it on request.

    Either both the credential and the model are applied, or neither is.

    Args:
        prompter: Prompter used for consent and missing fields.
        config: Run configuration with optional overrides.

    Returns:
        True if a default model exists when this returns.
    """
    console.print(Panel.fit("Checking default model", style="bold blue"))
    if model_exists():
        print_info("Default model is already configured")
        return True

    print_warn("No default model configured")
    if not prompter.yes_no("Create default model?"):
        print_warn("Skipping default model setup")
        return False

    settings = resolve_model_settings(prompter, config)
    if settings is None:
        print_warn("Skipping default model setup", "An API key and a base URL are both required")
        return False

    try:
        documents = render_model_documents(settings)
    except (sh.ErrorReturnCode, OSError) as err:
        print_error("Failed to render default model templates", str(err))
        return False

    ok, output = apply_documents(documents)
    if not ok:
        print_error("Failed to apply default model", output)
        return False
    print_ok("Default model configured", output)
    return True


def reconfigure_default_model(prompter: Prompter, config: RunConfig) -> bool:
    """Delete the existing default model after confirmation and configure it again.

    Raises:
        QuickstartError: If the existing model cannot be deleted.
    """
    if model_exists():
        if not prompter.yes_no(f"Delete the existing '{DEFAULT_MODEL_NAME}' model and configure it again?", "n"):
            print_warn("Keeping the existing default model")
            return True
        ok, _, stderr = run_kubectl(["delete", "model", DEFAULT_MODEL_NAME])
        if not ok:
            raise QuickstartError("Failed to delete the default model", stderr.strip())
        print_info("Deleted the existing default model")
    return ensure_default_model(prompter, config)


# ============================================================================
# Sample agent
# ============================================================================

def _apply_sample_tool(project_root: Path) -> None:
    # Agents with an empty tools list trip up some providers, so the sample
    # agent always carries one tool. A missing sample is not an error.
    tool_file = project_root / REL_SAMPLE_TOOL_YAML
    ok, _, stderr = run_kubectl(["apply", "-f", str(tool_file)])
    if not ok:
        logger.debug("Could not apply sample tool %s: %s", tool_file, stderr.strip())


def ensure_sample_agent(prompter: Prompter, project_root: Path) -> bool:
    """Point the sample agent at the default model, creating it on request.

    Args:
        prompter: Prompter used to confirm creation.
        project_root: ARK repository root holding the sample tool manifest.

    Returns:
        True if the sample agent exists and is configured when this returns.
    """
    ok, _, _ = run_kubectl(["get", "agent", SAMPLE_AGENT_NAME])
    if ok:
        _apply_sample_tool(project_root)
        patch = {
            "spec": {
                "modelRef": {"name": DEFAULT_MODEL_NAME},
                "tools": [{"type": "custom", "name": SAMPLE_TOOL_NAME}],
            }
        }
        ok, _, stderr = run_kubectl(["patch", "agent", SAMPLE_AGENT_NAME, "--type=merge", "-p", json.dumps(patch)])
        if not ok:
            print_warn("Failed to re-configure sample agent", stderr.strip())
            return False
        print_ok("Sample agent re-configured")
        return True

    print_warn("No sample agent found")
    if not prompter.yes_no("Create sample agent?"):
        print_warn("Skipping sample agent setup")
        return False

    _apply_sample_tool(project_root)
    agent = (TEMPLATES_DIR / TEMPLATE_SAMPLE_AGENT).read_text()
    ok, _, stderr = run_kubectl(["apply", "-f", "-"], stdin=agent)
    if not ok:
        print_warn("Failed to create sample agent", stderr.strip())
        return False
    print_ok("Sample agent created")
    return True
