from invoke import task


@task
def test(c):
    """Run the test suite."""
    c.run("uv run --extra dev pytest", pty=True)


@task
def typecheck(c):
    """Run mypy on the package."""
    c.run("uv run --extra dev mypy src")


@task
def lint(c):
    """Run ruff on sources and tests."""
    c.run("uv run --extra dev ruff check src tests")


@task
def fmt(c):
    """Format sources and tests with ruff."""
    c.run("uv run --extra dev ruff format src tests")


@task(pre=[typecheck, lint, test])
def check(c):
    """Run all checks (typecheck + lint + test)."""
    pass
