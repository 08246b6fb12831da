"""Unit tests for default model configuration and the sample agent."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from quickstart_manager.config import ModelType
from quickstart_manager.errors import QuickstartError
from quickstart_manager.model import (
    ModelSettings,
    apply_documents,
    ensure_default_model,
    ensure_sample_agent,
    reconfigure_default_model,
    render_model_documents,
    render_template,
    resolve_model_settings,
)

PROJECT = Path("/work/ark")
MODEL_GET = ("get", "model", "default")


def fake_render(name: str, values: dict[str, str]) -> str:
    return f"# {name}\n" + "\n".join(f"{key}: {value}" for key, value in sorted(values.items()))


class TestResolveModelSettings:
    """Tests for resolve_model_settings."""

    def test_overrides_skip_every_prompt(self, make_prompter, run_config):
        config = run_config(
            model_type="OpenAI",
            model_version="gpt-4o",
            base_url="https://api.openai.com/v1/",
            api_key="sk-test",
        )
        # An empty stream raises on any read, so a prompt here would fail the test.
        prompter = make_prompter()
        settings = resolve_model_settings(prompter, config)

        assert settings == ModelSettings(
            model_type=ModelType.OPENAI,
            model_version="gpt-4o",
            base_url="https://api.openai.com/v1",
            api_version=None,
            api_key=base64.b64encode(b"sk-test").decode(),
        )

    def test_azure_prompts_for_every_field(self, make_prompter, run_config):
        prompter = make_prompter("azure", "", "https://example.openai.azure.com//", "", "secret-key")
        settings = resolve_model_settings(prompter, run_config())

        assert settings.model_type is ModelType.AZURE
        assert settings.model_version == "gpt-4.1-mini"
        assert settings.base_url == "https://example.openai.azure.com"
        assert settings.api_version == "2024-12-01-preview"
        assert base64.b64decode(settings.api_key) == b"secret-key"

    def test_openai_never_asks_for_api_version(self, make_prompter, run_config):
        prompter = make_prompter("openai", "gpt-4o", "https://api.openai.com/v1", "sk-test")
        settings = resolve_model_settings(prompter, run_config())

        assert settings.api_version is None
        assert prompter._stream.read() == ""

    def test_missing_api_key(self, make_prompter, run_config):
        prompter = make_prompter(use_defaults=True)
        assert resolve_model_settings(prompter, run_config(base_url="https://x")) is None

    def test_missing_base_url(self, make_prompter, run_config):
        prompter = make_prompter(use_defaults=True)
        assert resolve_model_settings(prompter, run_config(api_key="sk-test")) is None


class TestRenderDocuments:
    """Tests for template rendering and submission."""

    def test_render_template_uses_envsubst(self):
        with patch("quickstart_manager.model.sh") as mock_sh:
            mock_sh.envsubst.return_value = "rendered"
            assert render_template("secret.yaml", {"API_KEY": "abc"}) == "rendered"

        kwargs = mock_sh.envsubst.call_args.kwargs
        assert "${API_KEY}" in kwargs["_in"]
        assert kwargs["_env"]["API_KEY"] == "abc"

    def test_openai_documents(self):
        settings = ModelSettings(ModelType.OPENAI, "gpt-4o", "https://api", None, "a2V5")
        with patch("quickstart_manager.model.render_template", side_effect=fake_render) as mock_render:
            secret, model = render_model_documents(settings)

        assert [call.args[0] for call in mock_render.call_args_list] == ["secret.yaml", "openai.model.yaml"]
        assert "API_KEY: a2V5" in secret
        assert "API_VERSION" not in model

    def test_azure_documents_carry_api_version(self):
        settings = ModelSettings(ModelType.AZURE, "gpt-4o", "https://api", "2024-12-01-preview", "a2V5")
        with patch("quickstart_manager.model.render_template", side_effect=fake_render):
            _, model = render_model_documents(settings)

        assert model.startswith("# azure.model.yaml")
        assert "API_VERSION: 2024-12-01-preview" in model

    def test_documents_applied_in_one_call(self, fake_kubectl):
        kubectl = fake_kubectl()
        ok, _ = apply_documents(["kind: Secret\n", "kind: Model\n"])

        assert ok is True
        assert kubectl.calls == [["apply", "-f", "-"]]
        assert kubectl.stdin == ["kind: Secret\n---\nkind: Model\n"]


class TestEnsureDefaultModel:
    """Tests for ensure_default_model."""

    def test_existing_model(self, make_prompter, run_config, fake_kubectl, capsys):
        kubectl = fake_kubectl()
        assert ensure_default_model(make_prompter(), run_config()) is True
        assert kubectl.verbs() == ["get"]
        assert "already configured" in capsys.readouterr().err

    def test_creates_model_from_overrides(self, make_prompter, run_config, fake_kubectl):
        kubectl = fake_kubectl(failing={MODEL_GET})
        config = run_config(model_type="openai", base_url="https://api/", api_key="sk-test")
        with patch("quickstart_manager.model.render_template", side_effect=fake_render):
            assert ensure_default_model(make_prompter("y", ""), config) is True

        assert kubectl.verbs() == ["get", "apply"]
        manifest = kubectl.stdin[-1]
        assert "# secret.yaml" in manifest
        assert "# openai.model.yaml" in manifest
        assert "BASE_URL: https://api\n" in manifest

    def test_declined(self, make_prompter, run_config, fake_kubectl, capsys):
        kubectl = fake_kubectl(failing={MODEL_GET})
        assert ensure_default_model(make_prompter("n"), run_config()) is False
        assert "apply" not in kubectl.verbs()
        assert "Skipping default model setup" in capsys.readouterr().err

    def test_missing_api_key_applies_nothing(self, make_prompter, run_config, fake_kubectl, capsys):
        kubectl = fake_kubectl(failing={MODEL_GET})
        config = run_config(model_type="azure", base_url="https://example")
        with patch("quickstart_manager.model.render_template") as mock_render:
            assert ensure_default_model(make_prompter(use_defaults=True), config) is False

        mock_render.assert_not_called()
        assert "apply" not in kubectl.verbs()
        assert "Skipping default model setup" in capsys.readouterr().err

    def test_apply_failure(self, make_prompter, run_config, fake_kubectl, capsys):
        fake_kubectl(failing={MODEL_GET, ("apply",)})
        config = run_config(model_type="openai", base_url="https://api", api_key="sk-test")
        with patch("quickstart_manager.model.render_template", side_effect=fake_render):
            assert ensure_default_model(make_prompter(use_defaults=True), config) is False
        assert "Failed to apply default model" in capsys.readouterr().err


class TestReconfigureDefaultModel:
    """Tests for reconfigure_default_model."""

    def test_declined_keeps_model(self, make_prompter, run_config, fake_kubectl):
        kubectl = fake_kubectl()
        assert reconfigure_default_model(make_prompter(""), run_config()) is True
        assert "delete" not in kubectl.verbs()

    def test_defaults_mode_keeps_model(self, make_prompter, run_config, fake_kubectl):
        kubectl = fake_kubectl()
        assert reconfigure_default_model(make_prompter(use_defaults=True), run_config()) is True
        assert "delete" not in kubectl.verbs()

    def test_delete_failure_is_fatal(self, make_prompter, run_config, fake_kubectl):
        fake_kubectl(failing={("delete",)})
        with pytest.raises(QuickstartError, match="Failed to delete"):
            reconfigure_default_model(make_prompter("y"), run_config())

    def test_missing_model_goes_straight_to_creation(self, make_prompter, run_config, fake_kubectl):
        kubectl = fake_kubectl(failing={MODEL_GET})
        assert reconfigure_default_model(make_prompter("n"), run_config()) is False
        assert "delete" not in kubectl.verbs()


class TestEnsureSampleAgent:
    """Tests for ensure_sample_agent."""

    def test_existing_agent_is_patched(self, make_prompter, fake_kubectl):
        kubectl = fake_kubectl()
        assert ensure_sample_agent(make_prompter(), PROJECT) is True

        apply_call, patch_call = kubectl.calls[1], kubectl.calls[2]
        assert apply_call[:2] == ["apply", "-f"]
        assert patch_call[:4] == ["patch", "agent", "sample-agent", "--type=merge"]
        body = json.loads(patch_call[-1])
        assert body["spec"]["modelRef"] == {"name": "default"}
        assert body["spec"]["tools"] == [{"type": "custom", "name": "get-coordinates"}]

    def test_missing_agent_created_on_consent(self, make_prompter, fake_kubectl):
        kubectl = fake_kubectl(failing={("get", "agent")})
        assert ensure_sample_agent(make_prompter("y"), PROJECT) is True

        assert kubectl.verbs() == ["get", "apply", "apply"]
        assert "kind: Agent" in kubectl.stdin[-1]

    def test_missing_agent_declined(self, make_prompter, fake_kubectl):
        kubectl = fake_kubectl(failing={("get", "agent")})
        assert ensure_sample_agent(make_prompter("n"), PROJECT) is False
        assert kubectl.verbs() == ["get"]

    def test_missing_sample_tool_is_not_an_error(self, make_prompter, fake_kubectl):
        fake_kubectl(failing={("apply", "-f", str(PROJECT / "samples/tools/get-coordinates.yaml"))})
        assert ensure_sample_agent(make_prompter(), PROJECT) is True
