"""Bundle browser projects and their libraries into deployable scripts."""

__version__ = "0.3.0"

from .bundle import BuildQueue, BuildResult, Bundler, MountResolver, ResourceWrapper
from .config import ProjectConfig, load_config
from .errors import ConfigParseError, CopyFailure, JahError, LibraryNotFoundError, MountNotFound
from .project import Project

__all__ = [
    "__version__",
    "BuildQueue",
    "BuildResult",
    "Bundler",
    "ConfigParseError",
    "CopyFailure",
    "JahError",
    "LibraryNotFoundError",
    "MountNotFound",
    "MountResolver",
    "Project",
    "ProjectConfig",
    "ResourceWrapper",
    "load_config",
]
