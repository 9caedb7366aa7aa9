"""
Deployment manifest selection and rendering.

Templates are plain YAML with literal placeholder tokens. Rendering never
touches the template; output goes to a separate file.
"""

import re
from pathlib import Path
from typing import Mapping

from .env import Environment
from .errors import ManifestError
from .fields import ResolvedConfig
from .log import get_logger
from .registry import Image

log = get_logger(__name__)

GENERIC_MANIFEST = "eks-deployment.yaml"

API_SERVICE = "api"
API_MANIFESTS: dict[str, str] = {
    "prod": "prod-api.yaml",
    "prod-replica": "prod-replica-api.yaml",
    "prod-worker": "prod-worker-api.yaml",
    "staging": "staging-api.yaml",
}


def select_manifest(service_name: str, namespace: str) -> str:
    """Pick the template file name for a service and namespace."""
    if service_name == API_SERVICE:
        try:
            return API_MANIFESTS[namespace]
        except KeyError:
            raise ManifestError(f"No api manifest for namespace '{namespace}'") from None
    return GENERIC_MANIFEST


def placeholder_values(
    service_name: str,
    image: Image,
    environment: Environment,
    fields: ResolvedConfig,
) -> dict[str, str]:
    """Map each template token to its value."""
    return {
        "application-name": service_name,
        "aws-ecr-image-tag": image.tag,
        "namespace-name": environment.namespace,
        "aws-account-id": environment.account_id,
        "cpuPlaceholder": fields.cpu,
        "cpuLimitPlaceholder": fields.cpu_limit,
        "memPlaceholder": fields.mem,
        "memLimitPlaceholder": fields.mem_limit,
        "instancesPlaceholder": fields.instances,
        "maxReplicasPlaceholder": fields.max_replicas,
        "minReplicasPlaceholder": fields.min_replicas,
        "portPlaceholder": fields.port,
    }


def substitute(text: str, values: Mapping[str, str]) -> str:
    """Replace every token in one pass. Replacement text is never rescanned."""
    if not values:
        return text
    tokens = sorted(values, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(t) for t in tokens))
    return pattern.sub(lambda m: values[m.group(0)], text)


def render_manifest(template: Path, output: Path, values: Mapping[str, str]) -> Path:
    """Render a template to output, leaving the template untouched.

    Raises:
        ManifestError: If the template doesn't exist or can't be read as UTF-8
    """
    if not template.is_file():
        raise ManifestError(f"Deployment template not found: {template}")

    try:
        content = template.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read deployment template {template}: {e}") from e

    unused = [token for token in values if token not in content]
    if unused:
        log.warning(f"Placeholders not present in {template.name}: {', '.join(unused)}")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(substitute(content, values), encoding="utf-8")
    log.info(f"Rendered {template.name} to {output}")
    return output
