"""
Deployment sizing from the module's server-config.yml.

Expected layout:

    server:
      port: 5000
    dcos:
      env:
        staging:
          deploymentSpec:
            cpu: 500m
            mem: 1024Mi
            cpuLimit: 1000m     # optional, default 2000m
            memLimit: 2048Mi    # optional, default 4096Mi
            instances: 2
          hpaSpec:
            maxReplicas: 4
            minReplicas: 2
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .errors import MissingFieldError, ServerConfigError
from .log import get_logger

log = get_logger(__name__)

DEFAULT_CPU_LIMIT = "2000m"
DEFAULT_MEM_LIMIT = "4096Mi"


@dataclass(frozen=True)
class ResolvedConfig:
    """Sizing values, kept as the strings that go into the manifest."""

    port: str
    cpu: str
    mem: str
    cpu_limit: str
    mem_limit: str
    instances: str
    max_replicas: str
    min_replicas: str


# YAML null spellings; BaseLoader leaves them as plain strings.
NULLS = {"", "~", "null", "Null", "NULL"}


def load_document(path: Path) -> dict[str, Any]:
    """Load a YAML document; anything but a mapping counts as empty.

    Scalars are kept as the exact source text (no int, float or bool
    resolution), the way a YAML query tool prints them.

    Raises:
        ServerConfigError: If the file is missing, not UTF-8 or not valid YAML
    """
    try:
        data = yaml.load(path.read_text(encoding="utf-8"), Loader=yaml.BaseLoader)
    except FileNotFoundError:
        raise ServerConfigError(f"server config not found: {path}") from None
    except OSError as e:
        raise ServerConfigError(f"cannot read server config {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ServerConfigError(f"server config is not valid UTF-8: {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ServerConfigError(f"server config is not valid YAML: {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def query(document: dict[str, Any], path: str) -> str | None:
    """Look up a dotted path.

    Absent keys, null, empty strings and non-scalar nodes are None.
    """
    node: Any = document
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    if not isinstance(node, str) or node in NULLS:
        return None
    return node


def _required(document: dict[str, Any], path: str, field: str, label: str) -> str:
    value = query(document, path)
    if value is None:
        raise MissingFieldError(field)
    log.info(f"{label}: {value}")
    return value


def _with_default(document: dict[str, Any], path: str, field: str, label: str, default: str) -> str:
    value = query(document, path)
    if value is None:
        log.warning(f"{field} not found in server-config.yml. Using default value")
        value = default
    log.info(f"{label}: {value}")
    return value


def resolve_fields(config_path: Path, namespace: str) -> ResolvedConfig:
    """Resolve port, sizing and autoscaling bounds for a namespace.

    Raises:
        ServerConfigError: If the document cannot be read
        MissingFieldError: If a required field is absent
    """
    doc = load_document(config_path)
    spec = f"dcos.env.{namespace}.deploymentSpec"
    hpa = f"dcos.env.{namespace}.hpaSpec"

    return ResolvedConfig(
        port=_required(doc, "server.port", "server.port", "port"),
        cpu=_required(doc, f"{spec}.cpu", "cpu", "CPU"),
        mem=_required(doc, f"{spec}.mem", "mem", "mem"),
        cpu_limit=_with_default(doc, f"{spec}.cpuLimit", "cpu limit", "CPU Limit", DEFAULT_CPU_LIMIT),
        mem_limit=_with_default(doc, f"{spec}.memLimit", "mem limit", "mem Limit", DEFAULT_MEM_LIMIT),
        instances=_required(doc, f"{spec}.instances", "instances", "instances"),
        max_replicas=_required(doc, f"{hpa}.maxReplicas", "maxReplicas", "maxReplicas"),
        min_replicas=_required(doc, f"{hpa}.minReplicas", "minReplicas", "minReplicas"),
    )
