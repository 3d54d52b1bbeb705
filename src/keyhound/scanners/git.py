"""Git object-graph access for keyhound.

This module provides the GitRepository class, a read-only view of a local
git repository built on the ``git`` command line. It exposes exactly what
the traverser needs:

- Branch references and the commits they point at
- The full file tree of a commit, with blob contents
- Commit history, oldest first, with parents
- Added-line chunks of the diff between two commits
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from keyhound.core.exceptions import GitCommandError, ScanError

logger = logging.getLogger(__name__)

# Separators in git pretty output; neither can appear in a commit message.
# Arguments cannot carry NUL, so formats spell them with git's %x escapes.
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x00"
_COMMIT_FORMAT = "%x00".join(["%H", "%P", "%an", "%ae", "%B"])
_RECORD_FORMAT = "%x1e" + _COMMIT_FORMAT

_HUNK_PATTERN = re.compile(r"^@@ -\d+(?:,\d+)? \+\d+(?:,\d+)? @@")


@dataclass(frozen=True)
class BranchRef:
    """A local branch and the commit at its tip."""

    name: str
    commit: str


@dataclass
class CommitInfo:
    """Information about a single commit.

    Attributes:
        hash: The full commit hash.
        parents: Parent hashes, first parent first.
        author_name: The author name.
        author_email: The author email.
        message: The full commit message without trailing newlines.
    """

    hash: str
    parents: list[str] = field(default_factory=list)
    author_name: str = ""
    author_email: str = ""
    message: str = ""

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"

    @property
    def first_parent(self) -> str | None:
        return self.parents[0] if self.parents else None

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class TreeFile:
    """A file in a commit tree together with its content."""

    path: str
    content: bytes


@dataclass(frozen=True)
class DiffChunk:
    """A run of consecutive added lines in one file of a diff."""

    path: str
    content: bytes


def _unquote_path(path: str) -> str:
    # git C-quotes paths containing unusual characters
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        unescaped = path[1:-1].encode("utf-8").decode("unicode_escape")
        return unescaped.encode("latin-1").decode("utf-8", errors="replace")
    return path


def parse_diff_chunks(diff_output: bytes) -> list[DiffChunk]:
    """Split ``git diff -U0`` output into runs of added lines.

    Args:
        diff_output: Raw diff output.

    Returns:
        DiffChunk per maximal run of ``+`` lines, in diff order. Removed
        lines and binary changes yield nothing.
    """
    chunks: list[DiffChunk] = []
    current_file: str | None = None
    in_hunk = False
    run: list[bytes] = []

    def flush() -> None:
        if current_file is not None and run:
            chunks.append(DiffChunk(path=current_file, content=b"\n".join(run) + b"\n"))
        run.clear()

    for raw_line in diff_output.split(b"\n"):
        if raw_line.startswith(b"diff --git "):
            flush()
            current_file = None
            in_hunk = False
            continue

        if not in_hunk:
            if raw_line.startswith(b"+++ "):
                header = raw_line[4:]
                # git ends the header with a TAB when the path holds a space
                if header.endswith(b"\t"):
                    header = header[:-1]
                target = header.decode("utf-8", errors="replace")
                if target == "/dev/null":
                    current_file = None
                else:
                    target = _unquote_path(target)
                    current_file = target[2:] if target.startswith("b/") else target
                continue
            if _HUNK_PATTERN.match(raw_line.decode("utf-8", errors="replace")):
                in_hunk = True
            continue

        if raw_line.startswith(b"@@"):
            flush()
            continue
        if raw_line.startswith(b"+"):
            run.append(raw_line[1:])
        else:
            # removed lines, "\ No newline at end of file" and trailing blanks
            flush()

    flush()
    return chunks


class GitRepository:
    """Read-only access to a local git repository through the git CLI.

    Attributes:
        path: Path to the repository (working tree or bare repository).
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def _run_git_command(
        self,
        args: list[str],
        input_data: bytes | None = None,
        check: bool = True,
    ) -> tuple[int, bytes, str]:
        """Run a git command asynchronously.

        Args:
            args: Git command arguments (without 'git' prefix).
            input_data: Bytes to feed to the command's stdin.
            check: Whether to raise on non-zero exit code.

        Returns:
            Tuple of (return_code, stdout bytes, stderr text).

        Raises:
            GitCommandError: If check=True and the command fails.
            ScanError: If git is not installed.
        """
        cmd = ["git", "-c", "core.quotepath=off", *args]
        logger.debug(f"Running git command: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if input_data is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.path,
            )
        except FileNotFoundError:
            raise ScanError(
                "Git is not installed or not in PATH",
                context={"command": " ".join(cmd)},
            )

        stdout, stderr = await process.communicate(input=input_data)
        stderr_str = stderr.decode("utf-8", errors="replace")

        if check and process.returncode != 0:
            raise GitCommandError(
                f"Git command failed: git {' '.join(args)}",
                git_args=args,
                returncode=process.returncode,
                stderr=stderr_str,
            )

        return process.returncode or 0, stdout, stderr_str

    async def validate(self) -> None:
        """Check that the path is a git repository.

        Raises:
            ScanError: If the path does not exist or is not a repository.
        """
        if not self.path.exists():
            raise ScanError(f"Path does not exist: {self.path}", path=str(self.path))
        if not self.path.is_dir():
            raise ScanError(f"Not a directory: {self.path}", path=str(self.path))

        returncode, _, stderr = await self._run_git_command(
            ["rev-parse", "--git-dir"], check=False
        )
        if returncode != 0:
            raise ScanError(
                f"Not a git repository: {self.path}",
                path=str(self.path),
                context={"stderr": stderr.strip()},
            )

    async def list_branches(self) -> list[BranchRef]:
        """List local branches in ref order."""
        _, stdout, _ = await self._run_git_command(
            ["for-each-ref", "--format=%(objectname) %(refname:short)", "refs/heads/"]
        )
        branches = []
        for line in stdout.decode("utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            commit, _, name = line.partition(" ")
            branches.append(BranchRef(name=name, commit=commit))
        return branches

    def _parse_commit_record(self, record: str) -> CommitInfo:
        fields = record.split(_FIELD_SEP)
        if len(fields) < 5:
            raise GitCommandError("Malformed commit record", stderr=record[:200])
        commit_hash, parents, name, email = fields[:4]
        message = _FIELD_SEP.join(fields[4:])
        return CommitInfo(
            hash=commit_hash.strip(),
            parents=parents.split(),
            author_name=name,
            author_email=email,
            message=message.rstrip("\n"),
        )

    async def commit_info(self, rev: str) -> CommitInfo:
        """Resolve a revision to its commit metadata."""
        _, stdout, _ = await self._run_git_command(
            ["show", "-s", f"--format={_COMMIT_FORMAT}", f"{rev}^{{commit}}", "--"]
        )
        return self._parse_commit_record(stdout.decode("utf-8", errors="replace"))

    async def history(self, rev: str = "HEAD") -> list[CommitInfo]:
        """Get every commit reachable from ``rev``, oldest first."""
        _, stdout, _ = await self._run_git_command(
            ["log", "--reverse", f"--format={_RECORD_FORMAT}", rev, "--"]
        )
        records = stdout.decode("utf-8", errors="replace").split(_RECORD_SEP)
        return [self._parse_commit_record(r) for r in records if r.strip()]

    async def tree_files(self, commit: str) -> list[TreeFile]:
        """List the blobs of a commit tree together with their content."""
        _, stdout, _ = await self._run_git_command(["ls-tree", "-r", "-z", "--full-tree", commit])

        entries: list[tuple[str, str]] = []
        for entry in stdout.split(b"\0"):
            if not entry:
                continue
            meta, _, path = entry.partition(b"\t")
            parts = meta.split()
            if len(parts) != 3 or parts[1] != b"blob":
                # submodule links and other non-blob entries
                continue
            entries.append((parts[2].decode("ascii"), path.decode("utf-8", errors="replace")))

        if not entries:
            return []

        batch_input = "".join(f"{sha}\n" for sha, _ in entries).encode("ascii")
        _, output, _ = await self._run_git_command(["cat-file", "--batch"], input_data=batch_input)

        files: list[TreeFile] = []
        offset = 0
        for sha, path in entries:
            header_end = output.index(b"\n", offset)
            header = output[offset:header_end].split()
            if len(header) != 3 or header[0].decode("ascii") != sha:
                raise GitCommandError(
                    f"Unexpected cat-file output for {path}",
                    stderr=output[offset:header_end].decode("utf-8", errors="replace"),
                )
            size = int(header[2])
            start = header_end + 1
            files.append(TreeFile(path=path, content=output[start : start + size]))
            offset = start + size + 1

        return files

    async def diff_chunks(self, parent: str, commit: str) -> list[DiffChunk]:
        """Get the added-line chunks of ``commit`` relative to ``parent``."""
        _, stdout, _ = await self._run_git_command(
            [
                "diff",
                "-U0",
                "--no-renames",
                "--no-color",
                "--no-ext-diff",
                "--no-textconv",
                parent,
                commit,
                "--",
            ]
        )
        return parse_diff_chunks(stdout)
