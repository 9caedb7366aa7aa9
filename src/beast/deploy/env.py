"""Environment validation and resolution."""

from dataclasses import dataclass

from .config import Settings
from .errors import NamespaceError
from .log import get_logger

log = get_logger(__name__)

# namespace -> kubectl context
CLUSTER_CONTEXTS: dict[str, str] = {
    "prod": "prod",
    "prod-replica": "prod",
    "prod-worker": "prod",
    "staging": "staging",
}


@dataclass(frozen=True)
class Environment:
    """Where a deployment goes."""

    namespace: str
    cluster_context: str
    account_id: str
    region: str

    @property
    def registry_host(self) -> str:
        return f"{self.account_id}.dkr.ecr.{self.region}.amazonaws.com"


def resolve(namespace: str, settings: Settings) -> Environment:
    """Validate the namespace and resolve its cluster context and registry.

    Raises:
        NamespaceError: If namespace is not a known environment
    """
    context = CLUSTER_CONTEXTS.get(namespace)
    if context is None:
        raise NamespaceError(
            "Invalid namespace. Must be one of 'prod', 'prod-replica', 'prod-worker' or 'staging'."
        )
    log.info(f"Kubernetes Context: {context}")
    log.info(f"AWS Account Id: {settings.account_id}")
    return Environment(
        namespace=namespace,
        cluster_context=context,
        account_id=settings.account_id,
        region=settings.region,
    )
