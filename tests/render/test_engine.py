"""
Tests for the helm template engine
"""

# Standard
from unittest import mock
import subprocess

# Third Party
import pytest
import yaml

# Local
from metallb_operator.exceptions import RenderError
from metallb_operator.render.engine import HelmTemplateEngine
from metallb_operator.test_helpers.helpers import SAMPLE_MANIFEST, TEST_NAMESPACE


def completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


def test_template_command_and_values():
    seen = {}

    def fake_run(args, **kwargs):
        seen["args"] = args
        seen["kwargs"] = kwargs
        with open(args[args.index("--values") + 1], encoding="utf-8") as handle:
            seen["values"] = yaml.safe_load(handle)
        return completed(stdout=SAMPLE_MANIFEST.encode("utf-8"))

    engine = HelmTemplateEngine(helm_bin="/usr/bin/helm", extra_args=["--debug"], timeout=5)
    with mock.patch("subprocess.run", side_effect=fake_run):
        out = engine.template("/charts/metallb", "metallb", TEST_NAMESPACE, {"a": 1})

    assert out == SAMPLE_MANIFEST
    args = seen["args"]
    assert args[:4] == ["/usr/bin/helm", "template", "metallb", "/charts/metallb"]
    assert args[4:6] == ["--namespace", TEST_NAMESPACE]
    assert args[-1] == "--debug"
    assert seen["values"] == {"a": 1}
    assert seen["kwargs"]["timeout"] == 5


def test_template_failure_reports_output():
    engine = HelmTemplateEngine()
    result = completed(returncode=1, stdout=b"partial", stderr=b"Error: chart not found")
    with mock.patch("subprocess.run", return_value=result):
        with pytest.raises(RenderError) as exc:
            engine.template("/nope", "metallb", TEST_NAMESPACE, {})
    message = str(exc.value)
    assert "return code 1" in message
    assert "partial" in message
    assert "chart not found" in message


@pytest.mark.parametrize(
    "error",
    [FileNotFoundError("helm"), subprocess.TimeoutExpired(["helm"], 5)],
)
def test_template_launch_failure(error):
    engine = HelmTemplateEngine()
    with mock.patch("subprocess.run", side_effect=error):
        with pytest.raises(RenderError, match="failed"):
            engine.template("/charts/metallb", "metallb", TEST_NAMESPACE, {})
