"""Unit tests for cluster detection and creation."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from quickstart_manager.cluster import ensure_cluster
from quickstart_manager.errors import QuickstartError


def test_reachable_cluster_is_left_alone(make_prompter, mock_provisioner, fake_kubectl, capsys):
    kubectl = fake_kubectl()
    with patch("quickstart_manager.cluster.run_streamed") as mock_run:
        ensure_cluster(make_prompter(), mock_provisioner)

    assert kubectl.calls == [["cluster-info"]]
    mock_run.assert_not_called()
    mock_provisioner.ensure_tool.assert_not_called()
    assert "Kubernetes cluster accessible" in capsys.readouterr().err


def test_creates_kind_cluster_by_default(make_prompter, mock_provisioner, fake_kubectl):
    fake_kubectl(failing={("cluster-info",)})
    with patch("quickstart_manager.cluster.run_streamed", return_value=True) as mock_run:
        ensure_cluster(make_prompter(""), mock_provisioner)

    assert mock_provisioner.ensure_tool.call_args.args[0].name == "kind"
    mock_run.assert_called_once_with("kind create cluster")


def test_creates_minikube_cluster_by_index(make_prompter, mock_provisioner, fake_kubectl):
    fake_kubectl(failing={("cluster-info",)})
    with patch("quickstart_manager.cluster.run_streamed", return_value=True) as mock_run:
        ensure_cluster(make_prompter("1"), mock_provisioner)

    assert mock_provisioner.ensure_tool.call_args.args[0].name == "minikube"
    mock_run.assert_called_once_with("minikube start")


def test_backend_tool_is_required(make_prompter, mock_provisioner, fake_kubectl):
    fake_kubectl(failing={("cluster-info",)})
    with patch("quickstart_manager.cluster.run_streamed", return_value=True):
        ensure_cluster(make_prompter(use_defaults=True), mock_provisioner)

    assert mock_provisioner.ensure_tool.call_args.args[0].required is True


def test_creation_failure_is_fatal(make_prompter, mock_provisioner, fake_kubectl):
    fake_kubectl(failing={("cluster-info",)})
    with patch("quickstart_manager.cluster.run_streamed", return_value=False) as mock_run:
        with pytest.raises(QuickstartError, match="Failed to create kind cluster"):
            ensure_cluster(make_prompter(use_defaults=True), mock_provisioner)

    mock_run.assert_called_once()
