"""Repository access for keyhound.

This package reads git repositories: GitRepository wraps the git command
line, and RepositoryTraverser turns branch snapshots and commit history
into ContentUnits for the extraction stage.
"""

from keyhound.scanners.git import (
    BranchRef,
    CommitInfo,
    DiffChunk,
    GitRepository,
    TreeFile,
    parse_diff_chunks,
)
from keyhound.scanners.traverser import RepositoryTraverser

__all__ = [
    "BranchRef",
    "CommitInfo",
    "DiffChunk",
    "GitRepository",
    "RepositoryTraverser",
    "TreeFile",
    "parse_diff_chunks",
]
