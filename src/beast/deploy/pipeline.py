"""
Deployment pipeline.

Stages run strictly in order; the first failure ends the run. Each stage gets
what it needs as arguments, and the results are collected on a
:class:`Deployment`.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

from invoke import Context

from beast.doit import Runner, StepError, doit

from . import dockerfile, env, fields, kube, lang, manifest, registry
from .args import Invocation
from .config import Settings
from .errors import DeployError, ExternalToolError
from .log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Deployment:
    """Everything a run resolved and produced."""

    invocation: Invocation
    module_dir: Path
    language: lang.Language
    server_config: Path
    environment: env.Environment
    resolved: fields.ResolvedConfig
    dockerfile: Path
    image: registry.Image
    template: Path
    manifest: Path


@contextmanager
def stage(name: str) -> Generator[None, None, None]:
    """Label errors raised inside with the stage name."""
    log.debug(f"stage: {name}")
    try:
        yield
    except DeployError as e:
        e.stage = name
        raise
    except StepError as e:
        error = ExternalToolError(str(e), e.exit_code)
        error.stage = name
        raise error from e


def run(
    invocation: Invocation,
    settings: Settings,
    c: Context | None = None,
    runner: Runner = doit,
) -> Deployment:
    """Run a full deployment.

    Args:
        invocation: Parsed command line
        settings: CI environment settings
        c: Invoke context for quiet queries (default: a fresh one)
        runner: Executes external steps (default: beast.doit.doit)

    Returns:
        The completed Deployment

    Raises:
        DeployError: From the first failing stage, with ``stage`` set
    """
    if c is None:
        c = Context()

    service, namespace = invocation.service_name, invocation.namespace
    module_dir = settings.module_dir(invocation.module_name)

    with stage("detect-language"):
        language = lang.detect_language(module_dir)

    with stage("locate-config"):
        server_config = lang.server_config_path(language, module_dir)

    with stage("init-environment"):
        environment = env.resolve(namespace, settings)

    with stage("resolve-fields"):
        resolved = fields.resolve_fields(server_config, namespace)

    with stage("build-image"):
        docker_file = dockerfile.write_dockerfile(language, module_dir, environment, settings)

    with stage("publish-image"):
        image = registry.publish(
            c,
            runner,
            service_name=service,
            build_number=settings.build_number,
            environment=environment,
            dockerfile=docker_file,
            context_dir=dockerfile.build_context(language, module_dir),
        )

    with stage("select-manifest"):
        template = settings.templates_dir / manifest.select_manifest(service, namespace)
        log.info(f"Deployment file: {template.name}")

    with stage("deploy"):
        values = manifest.placeholder_values(service, image, environment, resolved)
        rendered = manifest.render_manifest(template, settings.rendered_dir / template.name, values)
        kube.apply_manifest(runner, rendered, environment.cluster_context)

    log.info(f"Deployed {service} to {namespace}")
    return Deployment(
        invocation=invocation,
        module_dir=module_dir,
        language=language,
        server_config=server_config,
        environment=environment,
        resolved=resolved,
        dockerfile=docker_file,
        image=image,
        template=template,
        manifest=rendered,
    )
