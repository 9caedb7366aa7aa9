"""Command line parsing."""

from dataclasses import dataclass
from typing import Sequence

from .errors import UsageError
from .log import get_logger

log = get_logger(__name__)

USAGE = (
    "Three fields are required. Usage: beast-deploy "
    "--k8s-service-name=<name> --namespace=<name> --module-name=<name>"
)

_OPTIONS = {
    "--k8s-service-name": "service_name",
    "--namespace": "namespace",
    "--module-name": "module_name",
}


@dataclass(frozen=True)
class Invocation:
    """What to deploy, and where."""

    service_name: str
    namespace: str
    module_name: str


def parse_args(argv: Sequence[str]) -> Invocation:
    """Parse ``--option=value`` arguments.

    Only the three known options are accepted, always in ``--name=value`` form.
    A repeated option keeps its last value.

    Raises:
        UsageError: On an unknown token or a missing/empty option
    """
    values = dict.fromkeys(_OPTIONS.values(), "")
    for arg in argv:
        option, sep, value = arg.partition("=")
        if not sep or option not in _OPTIONS:
            raise UsageError(f"Invalid option: {arg}")
        values[_OPTIONS[option]] = value

    if not all(values.values()):
        raise UsageError(USAGE)

    invocation = Invocation(**values)
    log.info(f"Kubernetes Service Name: {invocation.service_name}")
    log.info(f"Namespace: {invocation.namespace}")
    log.info(f"Module Name: {invocation.module_name}")
    return invocation
