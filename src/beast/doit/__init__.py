"""
beast.doit - Run external commands one after another, and show it.

Supports:
- Sequential steps, halting on the first failure
- Chaining with .then()
- Live spinner with a short tail of each step's output
- Full output tail of a failed step

Example:
    from beast.doit import doit, run

    doit([
        run("Building image", "docker build -t api:42 ."),
        run("Pushing image", "docker push registry/api:api-42"),
    ])

    # Same thing with .then()
    doit([run("Building image", "docker build ...").then("Pushing image", "docker push ...")])
"""

__version__ = "0.3.0"

import os
import subprocess
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text


class StepStatus(Enum):
    PENDING = auto()
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()


@dataclass
class StepResult:
    """Result of a finished step."""

    name: str
    command: str
    status: StepStatus
    exit_code: int
    output: str
    duration_seconds: float

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS


@dataclass
class RunConfig:
    """Configuration for the step runner."""

    output_lines: int = 3
    error_lines: int = 20
    raise_on_failure: bool = True


class StepError(Exception):
    """Raised when a step exits non-zero."""

    def __init__(self, step_name: str, exit_code: int, output: str):
        self.step_name = step_name
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Step '{step_name}' failed with exit code {exit_code}")


class Step:
    """A named shell command, optionally followed by more steps."""

    def __init__(
        self,
        name: str,
        command: str,
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
    ):
        self.name = name
        self.command = command
        self.env = env or {}
        self.cwd = cwd
        self.next: Step | None = None
        self._root: Step = self

    def then(
        self,
        name: str,
        command: str,
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
    ) -> "Step":
        """Chain another step to run after this one succeeds."""
        self.next = Step(name, command, env, cwd)
        self.next._root = self._root
        return self.next


@dataclass
class _RunningStep:
    """Runtime state for an executing step."""

    name: str
    command: str
    env: dict[str, str]
    cwd: Path | None

    status: StepStatus = StepStatus.PENDING
    output_lines: list[str] = field(default_factory=list)
    all_output: list[str] = field(default_factory=list)
    exit_code: int = -1
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time if self.end_time else 0.0


class _Renderer:
    """Renders the steps run so far."""

    SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
    OUTPUT_PREFIX = "    "

    def __init__(self, steps: list[_RunningStep], config: RunConfig):
        self.steps = steps
        self.config = config
        self.console = Console()
        self._frame = 0

    def render(self) -> Group:
        self._frame = (self._frame + 1) % len(self.SPINNER_FRAMES)
        lines: list[Text] = []
        for step in self.steps:
            lines.extend(self._render_step(step))
        return Group(*lines)

    def _render_step(self, step: _RunningStep) -> list[Text]:
        lines: list[Text] = []
        status_line = Text()

        if step.status == StepStatus.RUNNING:
            status_line.append(f"{self.SPINNER_FRAMES[self._frame]} ", style="blue bold")
            status_line.append(step.name, style="blue")
        elif step.status == StepStatus.SUCCESS:
            status_line.append("✓ ", style="green bold")
            status_line.append(step.name, style="green")
            status_line.append(f" ({step.duration:.1f}s)", style="dim")
        elif step.status == StepStatus.FAILED:
            status_line.append("✗ ", style="red bold")
            status_line.append(step.name, style="red")
            status_line.append(f" ({step.duration:.1f}s, exit {step.exit_code})", style="dim")
        else:
            status_line.append("○ ", style="dim")
            status_line.append(step.name, style="dim")
        lines.append(status_line)

        if step.status == StepStatus.RUNNING:
            tail, style = step.output_lines[-self.config.output_lines :], "dim"
        elif step.status == StepStatus.FAILED:
            tail, style = step.all_output[-self.config.error_lines :], "red dim"
        else:
            tail, style = [], "dim"

        for line in tail:
            output_line = Text()
            output_line.append(self.OUTPUT_PREFIX, style="dim")
            output_line.append(line, style=style)
            lines.append(output_line)

        return lines


def _execute(step: _RunningStep, config: RunConfig, refresh: Callable[[], None]) -> None:
    """Run a shell command, streaming its combined output into the step."""
    env = {**os.environ, **step.env}
    cwd = str(step.cwd) if step.cwd else None

    step.status = StepStatus.RUNNING
    step.start_time = time.time()
    refresh()

    process = subprocess.Popen(
        step.command,
        shell=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        env=env,
        cwd=cwd,
        text=True,
        bufsize=1,
    )

    if process.stdout:
        for line in process.stdout:
            line = line.rstrip("\n")
            step.all_output.append(line)
            step.output_lines.append(line)
            if len(step.output_lines) > config.output_lines:
                step.output_lines.pop(0)
            refresh()

    process.wait()
    step.exit_code = process.returncode
    step.end_time = time.time()
    step.status = StepStatus.SUCCESS if step.exit_code == 0 else StepStatus.FAILED
    refresh()


def flatten_chain(step: Step) -> list[Step]:
    """Flatten a .then() chain into a list."""
    current: Step | None = step._root
    chain: list[Step] = []
    while current:
        chain.append(current)
        current = current.next
    return chain


def _result(step: _RunningStep) -> StepResult:
    return StepResult(
        name=step.name,
        command=step.command,
        status=step.status,
        exit_code=step.exit_code,
        output="\n".join(step.all_output),
        duration_seconds=step.duration,
    )


Runner = Callable[[Sequence[Step]], list[StepResult]]
"""Anything that executes steps like :func:`doit` does."""


def run(
    name: str,
    command: str,
    env: dict[str, str] | None = None,
    cwd: Path | None = None,
) -> Step:
    """
    Create a step.

    Usage:
        run("name", "command")
        run("name", "command", env={"FOO": "bar"})

        # Chain with .then()
        run("build", "docker build ...").then("push", "docker push ...")
    """
    return Step(name, command, env, cwd)


def doit(
    steps: Sequence[Step],
    config: RunConfig | None = None,
) -> list[StepResult]:
    """
    Execute steps in order, stopping at the first failure.

    Raises:
        StepError: If a step fails and config.raise_on_failure is set
    """
    if config is None:
        config = RunConfig()

    queue = [
        _RunningStep(name=s.name, command=s.command, env=s.env, cwd=s.cwd)
        for chain in (flatten_chain(step) for step in steps)
        for s in chain
    ]
    if not queue:
        return []

    started: list[_RunningStep] = []
    renderer = _Renderer(started, config)

    with Live(renderer.render(), refresh_per_second=10, console=renderer.console) as live:

        def refresh() -> None:
            live.update(renderer.render())

        for step in queue:
            started.append(step)
            _execute(step, config, refresh)
            if step.status == StepStatus.FAILED:
                break

    results = [_result(step) for step in started]
    last = results[-1]
    if not last.ok and config.raise_on_failure:
        raise StepError(last.name, last.exit_code, last.output)
    return results
