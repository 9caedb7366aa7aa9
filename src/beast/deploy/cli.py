"""
beast-deploy command line entry point.

Usage:
    beast-deploy --k8s-service-name=<name> --namespace=<name> --module-name=<name>

Environment:
    BUILD_NUMBER            CI build identifier (required)
    BEAST_AWS_ACCOUNT_ID    ECR registry account (required)
    WORKSPACE               Repository root (default: current directory)
"""

import sys
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from . import pipeline
from .args import parse_args
from .config import Settings
from .errors import DeployError, UsageError

err_console = Console(stderr=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one deployment and return the process exit status."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        invocation = parse_args(argv)
        settings = Settings.from_env()
        pipeline.run(invocation, settings)
    except UsageError as e:
        err_console.print(e.message, markup=False, highlight=False, soft_wrap=True)
        return e.exit_code
    except DeployError as e:
        where = f"[{e.stage}] " if e.stage else ""
        err_console.print(f"[red]error:[/red] {escape(where + e.message)}", highlight=False, soft_wrap=True)
        return e.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
