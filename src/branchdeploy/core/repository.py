"""
Repository inspection module for the branchdeploy application.

This module reads the current branch, the GitHub identifier of the origin
remote and the top-level directories changed by the branch head commit.
"""

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Tuple, Union
from urllib.parse import urlparse

from git import NULL_TREE, Commit, Repo
from git.diff import Diff, DiffIndex
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from branchdeploy.core.constants import GITHUB_HOST, REMOTE_NAME
from branchdeploy.core.errors import ConfigurationError, RepositoryError
from branchdeploy.core.models import RepositoryInfo

logger = logging.getLogger(__name__)

# Segment used for files that sit directly in the project root
ROOT_DIRECTORY = "."

# user@host:owner/name.git
_SCP_LIKE_URL = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


def parse_github_url(url: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a git remote URL into its host and "owner/name" identifier.

    Args:
        url (str): Remote URL, either URL-style (https, ssh, git) or scp-like

    Returns:
        Tuple[Optional[str], Optional[str]]: Host and repository identifier,
        None for the parts that cannot be found
    """
    url = url.strip()
    if "://" in url:
        parsed = urlparse(url)
        host, path = parsed.hostname, parsed.path
    else:
        match = _SCP_LIKE_URL.match(url)
        if not match:
            return None, None
        host, path = match.group("host").lower(), match.group("path")

    parts = [part for part in path.split("/") if part]
    if len(parts) < 2:
        return host, None

    owner, name = parts[0], parts[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return host, f"{owner}/{name}"


def first_path_segment(file_path: str) -> str:
    """Return the top-level directory of a repository-relative path."""
    parts = PurePosixPath(file_path).parts
    if len(parts) < 2:
        return ROOT_DIRECTORY
    return parts[0]


def dedupe_sorted(items: Iterable[str]) -> List[str]:
    """
    Sort items and collapse adjacent duplicates.

    Args:
        items (Iterable[str]): Candidate values, possibly repeated

    Returns:
        List[str]: Unique values in ascending order
    """
    result: List[str] = []
    for item in sorted(items):
        if not result or result[-1] != item:
            result.append(item)
    return result


def new_file_path(diff: Diff, initial_commit: bool = False) -> Optional[str]:
    """
    Path of the file after the change, None when the change removed it.

    An initial commit only adds files, so either side of its patches names
    the new file.
    """
    if initial_commit:
        return diff.b_path or diff.a_path or None
    if diff.deleted_file:
        return None
    return diff.b_path or None


def collect_affected_directories(diffs: Iterable[Diff], initial_commit: bool = False) -> List[str]:
    """
    Collect the top-level directories touched by a set of patches.

    A patch that cannot be read is logged and skipped; the others still count.

    Args:
        diffs (Iterable[Diff]): Patches of one or more diffs
        initial_commit (bool): Whether the patches come from a diff against the empty tree

    Returns:
        List[str]: Unique affected directories in ascending order
    """
    candidates = []
    for diff in diffs:
        try:
            path = new_file_path(diff, initial_commit)
        except Exception as e:
            logger.warning(f"Skipping unreadable patch: {e}")
            continue
        if path is None:
            continue
        candidates.append(first_path_segment(path))
    return dedupe_sorted(candidates)


def commit_diffs(commit: Commit) -> List[DiffIndex]:
    """
    Diff a commit against each of its parents.

    The initial commit is diffed against the empty tree.
    """
    if not commit.parents:
        return [commit.diff(NULL_TREE)]
    return [parent.diff(commit) for parent in commit.parents]


def get_affected_directories(repo: Repo, branch_name: str) -> List[str]:
    """
    List the top-level directories changed by the head commit of a branch.

    Args:
        repo (Repo): Open repository
        branch_name (str): Branch whose head commit is inspected

    Returns:
        List[str]: Unique affected directories in ascending order, empty when
        the commit or its diff cannot be retrieved
    """
    try:
        commit = repo.commit(f"refs/heads/{branch_name}")
        diffs = commit_diffs(commit)
    except Exception as e:
        logger.error(f"Could not compute the diff of {branch_name}: {e}")
        return []
    patches = (diff for index in diffs for diff in index)
    return collect_affected_directories(patches, initial_commit=not commit.parents)


def open_repository(path: Union[str, Path]) -> Repo:
    try:
        return Repo(path)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryError(f"No git repository found at {path}") from e


def get_branch_name(repo: Repo) -> str:
    try:
        return repo.active_branch.name
    except TypeError as e:
        # GitPython raises TypeError on a detached HEAD
        raise RepositoryError("HEAD is detached; check out a branch before deploying") from e


def get_repo_identifier(repo: Repo) -> str:
    """
    Read the GitHub "owner/name" identifier of the origin remote.

    Raises:
        RepositoryError: If there is no origin remote
        ConfigurationError: If origin is not a github.com URL
    """
    try:
        origin = repo.remote(REMOTE_NAME)
    except ValueError as e:
        raise RepositoryError(f'The repository has no "{REMOTE_NAME}" remote') from e

    origin_url = origin.url
    host, identifier = parse_github_url(origin_url)
    if host != GITHUB_HOST or identifier is None:
        raise ConfigurationError(
            f'Expected git remote "{REMOTE_NAME}" to be a {GITHUB_HOST} URL, but it was: {origin_url}'
        )
    return identifier


def inspect_repository(path: Union[str, Path]) -> RepositoryInfo:
    """
    Gather branch, remote and changed directories from the repository at path.

    Args:
        path (Union[str, Path]): Project root, which must be a git working tree

    Returns:
        RepositoryInfo: Facts needed to plan the deployment
    """
    project_root = Path(path).resolve()
    repo = open_repository(project_root)

    branch_name = get_branch_name(repo)
    repo_identifier = get_repo_identifier(repo)
    directories = get_affected_directories(repo, branch_name)

    logger.debug(f"Branch {branch_name} of {repo_identifier} changed: {directories}")
    return RepositoryInfo(
        project_root=project_root,
        branch_name=branch_name,
        repo_identifier=repo_identifier,
        affected_directories=directories,
    )
