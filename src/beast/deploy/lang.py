"""Module language detection and server config location."""

from enum import Enum
from pathlib import Path

from .errors import LanguageDetectionError
from .log import get_logger

log = get_logger(__name__)


class Language(str, Enum):
    JAVA = "java"
    PYTHON = "python"


# Checked in order, first match wins.
MARKERS: list[tuple[str, Language]] = [
    ("build.gradle", Language.JAVA),
    ("requirements.txt", Language.PYTHON),
]

SERVER_CONFIG = "server-config.yml"


def detect_language(module_dir: Path) -> Language:
    """Detect the module language from marker files.

    Raises:
        LanguageDetectionError: If no marker file exists
    """
    for marker, language in MARKERS:
        if (module_dir / marker).is_file():
            log.info(f"{language.value.capitalize()} lang detected")
            return language
    raise LanguageDetectionError("failed to determine code language")


def server_config_path(language: Language, module_dir: Path) -> Path:
    """Where the module keeps its server config. Not checked for existence."""
    if language is Language.JAVA:
        path = module_dir / "src" / "main" / "resources" / SERVER_CONFIG
    else:
        path = module_dir / SERVER_CONFIG
    log.info(f"Server config file for {language.value}: {path}")
    return path
