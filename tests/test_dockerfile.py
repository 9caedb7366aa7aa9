import pytest

from beast.deploy import env
from beast.deploy.dockerfile import build_context, find_java_artifact, render_dockerfile, write_dockerfile
from beast.deploy.errors import ArtifactError
from beast.deploy.lang import Language


@pytest.fixture
def staging(settings):
    return env.resolve("staging", settings)


def test_python_dockerfile(python_module, staging, settings):
    content = render_dockerfile(Language.PYTHON, python_module, staging, settings)
    assert content.splitlines() == [
        "FROM python:3.11",
        "WORKDIR /app",
        "ENV HOST=0.0.0.0",
        "COPY requirements.txt requirements.txt",
        "RUN pip3 install -r requirements.txt",
        "COPY . .",
        'CMD ["python3", "main.py"]',
    ]


def test_java_dockerfile(java_module, staging, settings):
    lines = render_dockerfile(Language.JAVA, java_module, staging, settings).splitlines()
    assert lines[0] == (
        "FROM 111122223333.dkr.ecr.ap-south-1.amazonaws.com/jar-docker-images:skywalking-java-agent"
    )
    assert lines[1] == "COPY orders-1.0-SNAPSHOT.jar app.jar"
    assert lines[2] == "EXPOSE 5000"
    assert lines[3] == (
        'CMD ["java", "-javaagent:skywalking/skywalking-agent.jar='
        "agent.namespace=staging,collector.backend_service=172.31.120.217:11800,"
        'plugin.jdbc.trace_sql_parameters=true,profile.active=true", "-jar", "app.jar"]'
    )


def test_java_agent_reports_the_target_namespace(java_module, settings):
    prod = env.resolve("prod-worker", settings)
    content = render_dockerfile(Language.JAVA, java_module, prod, settings)
    assert "agent.namespace=prod-worker," in content


def test_no_snapshot_jar(java_module):
    libs = java_module / "build" / "libs"
    (libs / "orders-1.0-SNAPSHOT.jar").unlink()
    (libs / "orders-1.0.jar").write_bytes(b"PK")
    with pytest.raises(ArtifactError, match="No \\*SNAPSHOT.jar"):
        find_java_artifact(libs)


def test_missing_libs_dir(tmp_path):
    with pytest.raises(ArtifactError):
        find_java_artifact(tmp_path / "build" / "libs")


def test_several_snapshot_jars(java_module):
    libs = java_module / "build" / "libs"
    (libs / "orders-plain-1.0-SNAPSHOT.jar").write_bytes(b"PK")
    with pytest.raises(ArtifactError, match="found 2"):
        find_java_artifact(libs)


def test_write_overwrites_previous_dockerfile(python_module, staging, settings):
    settings.dockerfile.parent.mkdir(parents=True)
    settings.dockerfile.write_text("FROM scratch\n")
    path = write_dockerfile(Language.PYTHON, python_module, staging, settings)
    assert path == settings.dockerfile
    assert path.read_text().startswith("FROM python:3.11\n")


def test_build_context(tmp_path):
    assert build_context(Language.JAVA, tmp_path) == tmp_path / "build" / "libs"
    assert build_context(Language.PYTHON, tmp_path) == tmp_path
