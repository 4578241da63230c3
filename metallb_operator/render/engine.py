"""
Template engines turn a chart and a values tree into a multi-document
manifest stream
"""

# Standard
from typing import List, Optional
import abc
import os
import shlex
import subprocess
import tempfile

# Third Party
import yaml

# First Party
import alog

# Local
from ..exceptions import RenderError

log = alog.use_channel("ENGIN")


class TemplateEngineBase(abc.ABC):
    """Base class for anything that can execute the chart"""

    @abc.abstractmethod
    def template(
        self,
        chart_path: str,
        release_name: str,
        namespace: str,
        values: dict,
    ) -> str:
        """Execute the chart with the given values

        Args:
            chart_path:  str
                Location of the chart
            release_name:  str
                Name of the release the chart is rendered as
            namespace:  str
                Namespace of the release
            values:  dict
                Fully merged values tree

        Returns:
            manifest:  str
                The rendered multi-document YAML stream
        """


class HelmTemplateEngine(TemplateEngineBase):
    """Render with `helm template` in a subprocess. Nothing is installed in
    the cluster.
    """

    def __init__(
        self,
        helm_bin: str = "helm",
        extra_args: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ):
        self.helm_bin = helm_bin
        self.extra_args = list(extra_args or [])
        self.timeout = timeout

    def template(self, chart_path, release_name, namespace, values):
        with tempfile.TemporaryDirectory() as tmp_dir:
            values_path = os.path.join(tmp_dir, f"{release_name}-values.yaml")
            with open(values_path, "w", encoding="utf-8") as values_file:
                yaml.safe_dump(values, values_file, sort_keys=False)

            args = [
                self.helm_bin,
                "template",
                release_name,
                chart_path,
                "--namespace",
                namespace,
                "--values",
                values_path,
            ] + self.extra_args
            command = " ".join(shlex.quote(arg) for arg in args)
            log.debug("Running command: %s", command)
            try:
                proc = subprocess.run(
                    args,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    check=False,
                    timeout=self.timeout,
                )
            except (OSError, subprocess.TimeoutExpired) as err:
                raise RenderError(f"Command '{command}' failed: {err}") from err

        if proc.returncode:
            errors = [f"Command '{command}' failed with return code {proc.returncode}"]
            if proc.stdout:
                errors.append(proc.stdout.decode("utf-8"))
            if proc.stderr:
                errors.append(proc.stderr.decode("utf-8"))
            log.debug("\n".join(errors))
            raise RenderError("\n".join(errors))
        return proc.stdout.decode("utf-8")
