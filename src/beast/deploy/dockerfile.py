"""
Dockerfile generation.
"""

import json
from pathlib import Path

from .config import Settings
from .env import Environment
from .errors import ArtifactError
from .lang import Language
from .log import get_logger

log = get_logger(__name__)

JAVA_ARTIFACT_GLOB = "*SNAPSHOT.jar"
JAVA_PORT = 5000
PYTHON_LISTEN_HOST = "0.0.0.0"
PYTHON_ENTRYPOINT = "main.py"


def java_libs_dir(module_dir: Path) -> Path:
    """Gradle output directory, also the docker build context for Java."""
    return module_dir / "build" / "libs"


def build_context(language: Language, module_dir: Path) -> Path:
    if language is Language.JAVA:
        return java_libs_dir(module_dir)
    return module_dir


def find_java_artifact(libs_dir: Path) -> Path:
    """Find the single snapshot jar in the build output.

    Raises:
        ArtifactError: If there is not exactly one match
    """
    matches = sorted(libs_dir.glob(JAVA_ARTIFACT_GLOB)) if libs_dir.is_dir() else []
    if not matches:
        raise ArtifactError(f"No {JAVA_ARTIFACT_GLOB} found in {libs_dir}")
    if len(matches) > 1:
        names = ", ".join(m.name for m in matches)
        raise ArtifactError(f"Expected one {JAVA_ARTIFACT_GLOB} in {libs_dir}, found {len(matches)}: {names}")
    return matches[0]


def _cmd(*args: str) -> str:
    return f"CMD {json.dumps(list(args))}"


def render_java(artifact: str, environment: Environment, settings: Settings) -> str:
    agent_options = ",".join(
        [
            f"agent.namespace={environment.namespace}",
            f"collector.backend_service={settings.collector_address}",
            "plugin.jdbc.trace_sql_parameters=true",
            "profile.active=true",
        ]
    )
    lines = [
        f"FROM {environment.registry_host}/{settings.java_base_image}",
        f"COPY {artifact} app.jar",
        f"EXPOSE {JAVA_PORT}",
        _cmd("java", f"-javaagent:skywalking/skywalking-agent.jar={agent_options}", "-jar", "app.jar"),
    ]
    return "\n".join(lines) + "\n"


def render_python(settings: Settings) -> str:
    lines = [
        f"FROM {settings.python_base_image}",
        "WORKDIR /app",
        f"ENV HOST={PYTHON_LISTEN_HOST}",
        "COPY requirements.txt requirements.txt",
        "RUN pip3 install -r requirements.txt",
        "COPY . .",
        _cmd("python3", PYTHON_ENTRYPOINT),
    ]
    return "\n".join(lines) + "\n"


def render_dockerfile(
    language: Language,
    module_dir: Path,
    environment: Environment,
    settings: Settings,
) -> str:
    """Render the Dockerfile text for a module.

    Raises:
        ArtifactError: For Java, if the build output has no single snapshot jar
    """
    if language is Language.JAVA:
        artifact = find_java_artifact(java_libs_dir(module_dir))
        return render_java(artifact.name, environment, settings)
    if language is Language.PYTHON:
        return render_python(settings)
    raise ValueError(f"unrecognized language to create dockerfile: {language}")


def write_dockerfile(
    language: Language,
    module_dir: Path,
    environment: Environment,
    settings: Settings,
) -> Path:
    """Render and write the Dockerfile, replacing any previous one."""
    log.info(f"creating {language.value.capitalize()} Dockerfile")
    content = render_dockerfile(language, module_dir, environment, settings)
    path = settings.dockerfile
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
