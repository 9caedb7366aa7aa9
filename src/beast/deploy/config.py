"""
Settings from the CI environment.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .errors import ConfigError

DEFAULT_REGION = "ap-south-1"
DEFAULT_DEPLOY_DIR = "beast-k8s"
DEFAULT_COLLECTOR_ADDRESS = "172.31.120.217:11800"
DEFAULT_JAVA_BASE_IMAGE = "jar-docker-images:skywalking-java-agent"
DEFAULT_PYTHON_BASE_IMAGE = "python:3.11"


@dataclass(frozen=True)
class Settings:
    """Everything a run needs besides the command line.

    Attributes:
        workspace: Repository checkout root; module paths are relative to it
        build_number: CI build identifier used to tag images
        account_id: AWS account owning the ECR registry
        region: AWS region of the ECR registry
        deploy_dir: Directory holding the Dockerfile, templates and rendered manifests
        collector_address: Tracing collector the Java agent reports to
        java_base_image: ECR image (name:tag) Java services are built on
        python_base_image: Public image Python services are built on
    """

    workspace: Path
    build_number: str
    account_id: str
    region: str = DEFAULT_REGION
    deploy_dir: Path = Path(DEFAULT_DEPLOY_DIR)
    collector_address: str = DEFAULT_COLLECTOR_ADDRESS
    java_base_image: str = DEFAULT_JAVA_BASE_IMAGE
    python_base_image: str = DEFAULT_PYTHON_BASE_IMAGE

    @property
    def dockerfile(self) -> Path:
        return self.deploy_dir / "Dockerfile"

    @property
    def templates_dir(self) -> Path:
        return self.deploy_dir / "common" / "deployment"

    @property
    def rendered_dir(self) -> Path:
        return self.deploy_dir / "rendered"

    def module_dir(self, module_name: str) -> Path:
        """Resolve a module name against the workspace ('/' is the root)."""
        relative = module_name.strip("/")
        return self.workspace / relative if relative else self.workspace

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigError: If BUILD_NUMBER or BEAST_AWS_ACCOUNT_ID is unset
        """
        if environ is None:
            environ = os.environ

        missing = [
            name for name in ("BUILD_NUMBER", "BEAST_AWS_ACCOUNT_ID") if not environ.get(name)
        ]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        workspace = Path(environ.get("WORKSPACE") or Path.cwd())
        deploy_dir = Path(environ.get("BEAST_DEPLOY_DIR") or DEFAULT_DEPLOY_DIR)
        if not deploy_dir.is_absolute():
            deploy_dir = workspace / deploy_dir

        return cls(
            workspace=workspace,
            build_number=environ["BUILD_NUMBER"],
            account_id=environ["BEAST_AWS_ACCOUNT_ID"],
            region=environ.get("BEAST_AWS_REGION") or DEFAULT_REGION,
            deploy_dir=deploy_dir,
            collector_address=environ.get("BEAST_COLLECTOR_ADDRESS") or DEFAULT_COLLECTOR_ADDRESS,
            java_base_image=environ.get("BEAST_JAVA_BASE_IMAGE") or DEFAULT_JAVA_BASE_IMAGE,
            python_base_image=environ.get("BEAST_PYTHON_BASE_IMAGE") or DEFAULT_PYTHON_BASE_IMAGE,
        )
