"""
Kubernetes helpers using kubectl.
"""

import shlex
from pathlib import Path

from beast.doit import Runner, run


def apply_manifest(runner: Runner, manifest: Path, context: str) -> None:
    """Apply a manifest against a kubectl context.

    Raises:
        StepError: If kubectl fails
    """
    runner(
        [
            run(
                f"Applying {manifest.name} to '{context}'",
                f"kubectl --context={shlex.quote(context)} apply -f {shlex.quote(str(manifest))}",
            )
        ]
    )
