"""Fleet-bootstrap build action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import dataclasses
import logging
import os
import pathlib
from typing import cast

from fleet_bootstrap.builder import build_objects
from fleet_bootstrap.config import Config, read_config
from fleet_bootstrap.connection import extract_connection
from fleet_bootstrap.kubeconfig import FileKubeConfigLoader
from fleet_bootstrap.manifest import BaseResource

from .format import FORMATTERS

_LOGGER = logging.getLogger(__name__)

DEFAULT_KUBECONFIG = "~/.kube/config"
OVERRIDE_FIELDS = ("namespace", "repo", "branch", "secret", "dirs")


def _default_kubeconfig() -> pathlib.Path:
    """Return the first path in $KUBECONFIG, or the default kubeconfig."""
    paths = [p for p in os.environ.get("KUBECONFIG", "").split(os.pathsep) if p]
    return pathlib.Path(paths[0] if paths else DEFAULT_KUBECONFIG).expanduser()


class BuildAction:
    """Fleet-bootstrap build action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "build",
                help="Build the objects that bootstrap the local cluster",
                description="""Print the Namespace, kubeconfig Secret, Cluster,
                    ClusterGroup and optional GitRepo that register the local
                    cluster with Fleet.""",
            ),
        )
        args.add_argument(
            "--kubeconfig",
            type=pathlib.Path,
            default=_default_kubeconfig(),
            help="Path to the kubeconfig of the local cluster",
        )
        args.add_argument(
            "--config",
            type=pathlib.Path,
            default=None,
            help="Path to the controller ConfigMap or a bare config document",
        )
        args.add_argument(
            "--namespace",
            type=str,
            default=None,
            help="Bootstrap namespace, or '-' to disable bootstrapping",
        )
        args.add_argument("--repo", type=str, default=None, help="Git repository URL")
        args.add_argument("--branch", type=str, default=None, help="Git branch")
        args.add_argument(
            "--secret",
            type=str,
            default=None,
            help="Name of the secret with the git client credentials",
        )
        args.add_argument(
            "--dirs",
            type=str,
            default=None,
            help="Comma separated list of bundle directories",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=sorted(FORMATTERS),
            default="yaml",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        kubeconfig: pathlib.Path,
        config: pathlib.Path | None,
        output: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        snapshot = await read_config(config) if config else Config()
        overrides = {
            key: value
            for key in OVERRIDE_FIELDS
            if (value := kwargs.get(key)) is not None
        }
        bootstrap = dataclasses.replace(snapshot.bootstrap, **overrides)
        if not bootstrap.enabled:
            _LOGGER.info("Bootstrap is disabled, nothing to build")
            objects: list[BaseResource] = []
        else:
            loader = FileKubeConfigLoader(kubeconfig)
            connection = await extract_connection(await loader.raw_config())
            objects = build_objects(bootstrap, connection)
        FORMATTERS[output]().print([obj.to_doc() for obj in objects])
