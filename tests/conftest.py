from pathlib import Path
from typing import Sequence

import pytest

from beast.deploy.config import Settings
from beast.doit import Step, StepError, StepResult, StepStatus, flatten_chain

SERVER_CONFIG = """\
server:
  port: 5000
dcos:
  env:
    staging:
      deploymentSpec:
        cpu: 500m
        mem: 1024Mi
        cpuLimit: 1000m
        memLimit: 2048Mi
        instances: 2
      hpaSpec:
        maxReplicas: 4
        minReplicas: 2
    prod:
      deploymentSpec:
        cpu: 1000m
        mem: 2048Mi
        instances: 3
      hpaSpec:
        maxReplicas: 10
        minReplicas: 3
"""

TEMPLATE = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: application-name-deployment
  namespace: namespace-name
spec:
  replicas: instancesPlaceholder
  template:
    spec:
      containers:
        - name: application-name
          image: aws-account-id.dkr.ecr.ap-south-1.amazonaws.com/application-name:aws-ecr-image-tag
          ports:
            - containerPort: portPlaceholder
          resources:
            requests:
              cpu: cpuPlaceholder
              memory: memPlaceholder
            limits:
              cpu: cpuLimitPlaceholder
              memory: memLimitPlaceholder
---
apiVersion: autoscaling/v2
kind: HorizontalPodAutoscaler
metadata:
  name: application-name-hpa
spec:
  minReplicas: minReplicasPlaceholder
  maxReplicas: maxReplicasPlaceholder
"""

TEMPLATE_NAMES = [
    "prod-api.yaml",
    "prod-replica-api.yaml",
    "prod-worker-api.yaml",
    "staging-api.yaml",
    "eks-deployment.yaml",
]


class FakeRunner:
    """Records step commands instead of running them."""

    def __init__(self, fail_on: str | None = None, exit_code: int = 1):
        self.fail_on = fail_on
        self.exit_code = exit_code
        self.commands: list[str] = []

    def __call__(self, steps: Sequence[Step]) -> list[StepResult]:
        results = []
        for root in steps:
            for step in flatten_chain(root):
                self.commands.append(step.command)
                if self.fail_on and self.fail_on in step.command:
                    raise StepError(step.name, self.exit_code, "simulated failure")
                results.append(StepResult(step.name, step.command, StepStatus.SUCCESS, 0, "", 0.0))
        return results

    def ran(self, fragment: str) -> bool:
        return any(fragment in command for command in self.commands)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        workspace=tmp_path,
        build_number="42",
        account_id="111122223333",
        deploy_dir=tmp_path / "beast-k8s",
    )


@pytest.fixture
def templates(settings: Settings) -> Path:
    settings.templates_dir.mkdir(parents=True)
    for name in TEMPLATE_NAMES:
        (settings.templates_dir / name).write_text(TEMPLATE)
    return settings.templates_dir


@pytest.fixture
def python_module(tmp_path: Path) -> Path:
    (tmp_path / "requirements.txt").write_text("fastapi\n")
    (tmp_path / "main.py").write_text("print('hello')\n")
    (tmp_path / "server-config.yml").write_text(SERVER_CONFIG)
    return tmp_path


@pytest.fixture
def java_module(tmp_path: Path) -> Path:
    module = tmp_path / "orders"
    resources = module / "src" / "main" / "resources"
    resources.mkdir(parents=True)
    (module / "build.gradle").write_text("plugins { id 'java' }\n")
    (resources / "server-config.yml").write_text(SERVER_CONFIG)
    libs = module / "build" / "libs"
    libs.mkdir(parents=True)
    (libs / "orders-1.0-SNAPSHOT.jar").write_bytes(b"PK")
    return module
