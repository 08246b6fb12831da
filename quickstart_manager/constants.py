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

"""Constants, tool registry loading, and resource names."""

from __future__ import annotations

from pathlib import Path

import yaml

# -- Resolved paths --
PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"


def load_tool_registry() -> dict:
    """Load the static tool registry from tools.yaml.

    Returns:
        Parsed YAML content with tools and cluster_backends lists.
    """
    registry_file = PACKAGE_DIR / "tools.yaml"
    with open(registry_file) as f:
        return yaml.safe_load(f)


TOOL_REGISTRY = load_tool_registry()

# -- Project files --
VERSION_FILE = "version.txt"
ENV_FILE = ".ark.env"
ENV_FILE_TEMPLATE = ".ark.env.local"
ENV_PREFIX = "ARK_QUICKSTART_"
CONTROLLER_SOURCE_DIR = "ark"
REL_QUERY_SCRIPT = "scripts/query.sh"
REL_SAMPLE_TOOL_YAML = "samples/tools/get-coordinates.yaml"

# -- Namespaces --
NS_ARK_SYSTEM = "ark-system"
NS_DEFAULT = "default"

# -- Controller --
CONTROLLER_NAME = "ark-controller"
CONTROLLER_LABEL = f"app.kubernetes.io/name={CONTROLLER_NAME}"
CONTROLLER_VERSION_LABEL = "app.kubernetes.io/version"
DEFAULT_CONTROLLER_IMAGE = CONTROLLER_NAME
DEFAULT_CONTROLLER_TAG = "latest"

CONTROLLER_READY_PROBE_TIMEOUT = "5s"
CONTROLLER_DEPLOY_TIMEOUT = "300s"
CONTROLLER_RESTART_TIMEOUT = "60s"

WEBHOOK_READY_MAX_RETRIES = 6
WEBHOOK_READY_POLL_INTERVAL_SECONDS = 5

# -- Model --
DEFAULT_MODEL_NAME = "default"
DEFAULT_MODEL_VERSION = "gpt-4.1-mini"
DEFAULT_AZURE_API_VERSION = "2024-12-01-preview"
TEMPLATE_SECRET = "secret.yaml"
TEMPLATE_OPENAI_MODEL = "openai.model.yaml"
TEMPLATE_AZURE_MODEL = "azure.model.yaml"
TEMPLATE_SAMPLE_AGENT = "sample-agent.yaml"

# -- Sample agent --
SAMPLE_AGENT_NAME = "sample-agent"
SAMPLE_TOOL_NAME = "get-coordinates"
SAMPLE_QUERY = "what is 2+2?"

AUTH_FAILURE_MARKERS = ("401", "403", "forbidden", "authentication", "unauthorized")
TIMEOUT_MARKERS = ("timeout", "timed out")

# -- Auxiliary services --
DASHBOARD_SERVICE = "ark-dashboard"
API_SERVICE = "ark-api"
DASHBOARD_INSTALL_TARGET = "ark-dashboard-install"
API_INSTALL_TARGET = "ark-api-install"
MAKE_JOBS = "-j2"

PORT_FORWARD_LOCAL_PORT = 8080
PORT_FORWARD_SERVICE = "service/localhost-gateway-nginx"
PORT_FORWARD_PATTERN = f"kubectl.*port-forward.*{PORT_FORWARD_LOCAL_PORT}:80"
PORT_FORWARD_GRACE_SECONDS = 2

# -- Completion hints --
DASHBOARD_URL = "http://dashboard.127.0.0.1.nip.io:8080/"
API_DOCS_URLS = (
    "http://dashboard.127.0.0.1.nip.io:8080/api/docs/",
    "http://ark-api.127.0.0.1.nip.io:8080/docs/",
)
DOCS_URL = "https://mckinsey.github.io/agents-at-scale-ark/"
RECONFIGURE_MAKE_TARGET = "make quickstart-reconfigure-default-model"
RECONFIGURE_CLI_COMMAND = "ark-quickstart model reconfigure"
