"""
Branch mirroring.

``RepositoryMirrorer`` lists the branches of a remote and hands each selected
branch to ``BranchMaterializer``, which builds one standalone checkout folder.
"""

from .manifest import MirrorManifest, RepositoryEntry
from .materializer import BranchMaterializer, BranchResult, BranchState
from .mirrorer import MirrorReport, RepositoryMirrorer, mirror
from .status import describe_mirror

__all__ = [
    "BranchMaterializer",
    "BranchResult",
    "BranchState",
    "MirrorManifest",
    "MirrorReport",
    "RepositoryEntry",
    "RepositoryMirrorer",
    "describe_mirror",
    "mirror",
]
