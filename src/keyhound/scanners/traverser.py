"""Repository traversal for keyhound.

The traverser turns a repository into a stream of ContentUnits, observing
every place a credential could hide exactly once per observation mode:

- Tip-snapshot mode: every file of a branch tip, full content.
- History-diff mode: every commit diffed against its first parent, one unit
  per run of added lines. Root commits have nothing to diff against and
  contribute nothing; deleted lines are never emitted.

Per-commit diffs are memoized for the lifetime of the traverser, so history
shared by several branches is read from git only once.
"""

import logging
from collections.abc import AsyncIterator

from keyhound.core.exceptions import GitCommandError, TraversalError
from keyhound.core.models import ContentUnit, Provenance, SourceType
from keyhound.scanners.git import BranchRef, CommitInfo, DiffChunk, GitRepository

logger = logging.getLogger(__name__)


class RepositoryTraverser:
    """Walks branch snapshots and commit history of a repository.

    Attributes:
        repository: The git repository to read from. It is never modified.
    """

    def __init__(self, repository: GitRepository):
        self.repository = repository
        self._chunk_cache: dict[str, list[DiffChunk]] = {}
        self.commits_diffed = 0

    async def snapshot_units(self, branch: BranchRef) -> AsyncIterator[ContentUnit]:
        """Yield the full content of every file at a branch tip.

        Args:
            branch: The branch whose tip commit is read.

        Yields:
            One ContentUnit per file in the tip tree.

        Raises:
            TraversalError: If the tip commit or its tree cannot be read.
        """
        try:
            tip = await self.repository.commit_info(branch.commit)
            files = await self.repository.tree_files(tip.hash)
        except GitCommandError as e:
            raise TraversalError(
                f"Cannot read tip snapshot of branch {branch.name}: {e.message}",
                branch=branch.name,
                commit=branch.commit,
                context=dict(e.context),
            ) from e

        logger.info(f"Snapshot of {branch.name} at {tip.hash[:8]}: {len(files)} files")
        for tree_file in files:
            yield ContentUnit(
                content=tree_file.content,
                provenance=Provenance(
                    file_path=tree_file.path,
                    commit_hash=tip.hash,
                    branch=branch.name,
                    author=tip.author,
                    message=tip.message,
                ),
                source=SourceType.SNAPSHOT,
            )

    async def load_history(self, rev: str = "HEAD", branch: str | None = None) -> list[CommitInfo]:
        """List the commits reachable from ``rev``, oldest first.

        Raises:
            TraversalError: If the history cannot be listed.
        """
        try:
            commits = await self.repository.history(rev)
        except GitCommandError as e:
            raise TraversalError(
                f"Cannot list history of {rev}: {e.message}",
                branch=branch,
                context=dict(e.context),
            ) from e
        logger.info(f"History of {rev}: {len(commits)} commits")
        return commits

    async def _chunks_for(self, commit: CommitInfo, branch: str) -> list[DiffChunk]:
        if commit.hash in self._chunk_cache:
            return self._chunk_cache[commit.hash]

        parent = commit.first_parent
        if parent is None:
            chunks: list[DiffChunk] = []
        else:
            try:
                chunks = await self.repository.diff_chunks(parent, commit.hash)
            except GitCommandError as e:
                raise TraversalError(
                    f"Cannot diff commit {commit.hash[:8]} against {parent[:8]}: {e.message}",
                    branch=branch,
                    commit=commit.hash,
                    context=dict(e.context),
                ) from e
            self.commits_diffed += 1

        self._chunk_cache[commit.hash] = chunks
        return chunks

    async def history_units(
        self, branch: str, history: list[CommitInfo]
    ) -> AsyncIterator[ContentUnit]:
        """Replay history oldest first, yielding added-line chunks.

        Args:
            branch: Branch name recorded in the provenance of every unit.
            history: Commits ordered oldest first.

        Yields:
            One ContentUnit per diff chunk, attributed to the diffed commit.

        Raises:
            TraversalError: If a commit cannot be diffed.
        """
        for commit in history:
            if commit.is_root:
                continue
            if commit.is_merge:
                logger.debug(f"Merge {commit.hash[:8]}: diffing against first parent only")

            for chunk in await self._chunks_for(commit, branch):
                yield ContentUnit(
                    content=chunk.content,
                    provenance=Provenance(
                        file_path=chunk.path,
                        commit_hash=commit.hash,
                        branch=branch,
                        author=commit.author,
                        message=commit.message,
                    ),
                    source=SourceType.HISTORY,
                )
