"""
Image build and publish to ECR.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path

from invoke import Context

from beast.doit import Runner, run

from .env import Environment
from .log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Image:
    """A built image and where it was pushed."""

    repository: str
    local_tag: str
    remote_ref: str

    @property
    def tag(self) -> str:
        return self.remote_ref.rsplit(":", 1)[1]


def image_for(service_name: str, build_number: str, environment: Environment) -> Image:
    repository = service_name
    return Image(
        repository=repository,
        local_tag=f"{service_name}:{build_number}",
        remote_ref=f"{environment.registry_host}/{repository}:{service_name}-{build_number}",
    )


def login(runner: Runner, environment: Environment) -> None:
    """Log docker in to the ECR registry."""
    q = shlex.quote
    runner(
        [
            run(
                "Logging in to ECR",
                f"aws ecr get-login-password --region {q(environment.region)} "
                f"| docker login --username AWS --password-stdin {q(environment.registry_host)}",
            )
        ]
    )


def repository_exists(c: Context, repository: str, environment: Environment) -> bool:
    q = shlex.quote
    result = c.run(
        f"aws ecr describe-repositories --region {q(environment.region)} "
        f"--repository-names {q(repository)}",
        hide=True,
        warn=True,
    )
    return result is not None and result.ok


def ensure_repository(c: Context, runner: Runner, repository: str, environment: Environment) -> None:
    """Create the ECR repository if it doesn't exist."""
    if repository_exists(c, repository, environment):
        log.info(f"ECR repository '{repository}' exists")
        return
    q = shlex.quote
    runner(
        [
            run(
                f"Creating ECR repository '{repository}'",
                f"aws ecr create-repository --region {q(environment.region)} "
                f"--repository-name {q(repository)}",
            )
        ]
    )


def build_image(runner: Runner, image: Image, dockerfile: Path, context_dir: Path) -> None:
    """Build, tag, push and clean up the local image."""
    q = shlex.quote
    local, remote = q(image.local_tag), q(image.remote_ref)
    runner(
        [
            run(f"Building {image.local_tag}", f"docker build -t {local} -f {q(str(dockerfile))} {q(str(context_dir))}")
            .then(f"Tagging {image.remote_ref}", f"docker tag {local} {remote}")
            .then(f"Pushing {image.remote_ref}", f"docker push {remote}")
            .then("Removing local images", f"docker rmi {remote} && docker rmi {local}")
        ]
    )


def publish(
    c: Context,
    runner: Runner,
    service_name: str,
    build_number: str,
    environment: Environment,
    dockerfile: Path,
    context_dir: Path,
) -> Image:
    """Log in, make sure the repository exists, then build and push.

    Raises:
        StepError: If any docker or aws command fails
    """
    image = image_for(service_name, build_number, environment)
    login(runner, environment)
    ensure_repository(c, runner, image.repository, environment)
    build_image(runner, image, dockerfile, context_dir)
    log.info(f"Published {image.remote_ref}")
    return image
