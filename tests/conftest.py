"""Shared test fixtures for quickstart_manager tests.

Prompts are driven by in-memory answer streams and every external command is
patched at the module that calls it, so no test touches a real cluster.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from quickstart_manager.config import RunConfig
from quickstart_manager.prompts import Prompter

NOT_FOUND = "Error from server (NotFound): resource not found"
ENV_KEYS = (
    "USE_DEFAULTS",
    "MODEL_TYPE",
    "MODEL_VERSION",
    "BASE_URL",
    "API_VERSION",
    "API_KEY",
    "CONTROLLER_IMAGE",
    "CONTROLLER_TAG",
)


@pytest.fixture(autouse=True)
def clean_quickstart_env(monkeypatch):
    """Keep ARK_QUICKSTART_* variables from the developer's shell out of tests."""
    for key in ENV_KEYS:
        monkeypatch.delenv(f"ARK_QUICKSTART_{key}", raising=False)


@pytest.fixture
def make_prompter() -> Callable[..., Prompter]:
    """Build a Prompter that answers from the given lines, in order."""

    def _make(*answers: str, use_defaults: bool = False) -> Prompter:
        stream = io.StringIO("".join(f"{answer}\n" for answer in answers))
        return Prompter(Console(file=io.StringIO()), use_defaults=use_defaults, stream=stream)

    return _make


@pytest.fixture
def run_config() -> Callable[..., RunConfig]:
    """Build a RunConfig from keyword overrides, ignoring any .ark.env file."""

    def _make(**overrides) -> RunConfig:
        return RunConfig(_env_file=None, **overrides)

    return _make


class FakeKubectl:
    """Records kubectl calls and answers them from a table of verbs."""

    def __init__(self, failing: set[tuple[str, ...]] | None = None, stderr: str = NOT_FOUND) -> None:
        self.calls: list[list[str]] = []
        self.stdin: list[str | None] = []
        self.failing = failing or set()
        self.stderr = stderr

    def __call__(self, args: list[str], timeout: int = 30, stdin: str | None = None) -> tuple[bool, str, str]:
        self.calls.append(list(args))
        self.stdin.append(stdin)
        for prefix in self.failing:
            if tuple(args[: len(prefix)]) == prefix:
                return False, "", self.stderr
        return True, "", ""

    def verbs(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_kubectl(monkeypatch) -> Callable[..., FakeKubectl]:
    """Patch run_kubectl in every step module with one shared FakeKubectl."""

    def _install(failing: set[tuple[str, ...]] | None = None, stderr: str = NOT_FOUND) -> FakeKubectl:
        fake = FakeKubectl(failing, stderr)
        for module in ("cluster", "components", "model", "validation"):
            monkeypatch.setattr(f"quickstart_manager.{module}.run_kubectl", fake)
        return fake

    return _install


@pytest.fixture
def mock_provisioner() -> MagicMock:
    provisioner = MagicMock()
    provisioner.manual_instructions = []
    return provisioner
