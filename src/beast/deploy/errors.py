"""
Deployment errors.

Every error is terminal for the run. The pipeline stamps ``stage`` on the
error so the CLI can say where the run stopped.
"""


class DeployError(Exception):
    """Base exception for deployment failures."""

    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.stage: str | None = None


class UsageError(DeployError):
    """Malformed or missing command line arguments."""

    pass


class ConfigError(DeployError):
    """Required environment configuration is missing."""

    pass


class LanguageDetectionError(DeployError):
    """Module language could not be determined."""

    pass


class NamespaceError(DeployError):
    """Namespace is not one of the known environments."""

    pass


class ServerConfigError(DeployError):
    """The module's server config document could not be read."""

    pass


class MissingFieldError(DeployError):
    """A required field is absent from the server config document."""

    def __init__(self, field: str):
        super().__init__(f"{field} not found in server-config.yml")
        self.field = field


class ArtifactError(DeployError):
    """The build output does not hold exactly one deployable artifact."""

    pass


class ManifestError(DeployError):
    """Deployment template is missing."""

    pass


class ExternalToolError(DeployError):
    """An external tool (docker, aws, kubectl) exited non-zero."""

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code if exit_code > 0 else 1
