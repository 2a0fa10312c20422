"""Bundle assembly: library lookup, build queue, mounts, wrapping and output."""

from .builder import BuildResult, Bundler
from .locator import LibraryLocator
from .mounts import MountMatch, MountResolver, SourceFile, walk_tree
from .queue import RUNTIME_NAME, BuildQueue, BuildQueueEntry
from .wrapper import RemoteLoader, ResourceKind, ResourceWrapper, WrappedResource

__all__ = [
    "BuildQueue",
    "BuildQueueEntry",
    "BuildResult",
    "Bundler",
    "LibraryLocator",
    "MountMatch",
    "MountResolver",
    "RUNTIME_NAME",
    "RemoteLoader",
    "ResourceKind",
    "ResourceWrapper",
    "SourceFile",
    "WrappedResource",
    "walk_tree",
]
