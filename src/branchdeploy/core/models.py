"""
Data classes shared by the branchdeploy components.

All values are built once per run and never persisted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List


@dataclass(frozen=True)
class Credentials:
    access_key: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class RepositoryInfo:
    """Facts gathered from the local git repository."""

    project_root: Path
    branch_name: str
    repo_identifier: str  # GitHub "owner/name"
    affected_directories: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DeploymentTarget:
    """Where and how a run deploys, resolved from the branch name and environment."""

    is_production: bool
    bucket_name: str
    key_prefix: str
    credentials: Credentials
    region: str


@dataclass
class UploadSpec:
    """Upload configuration for a single affected directory."""

    local_dir: Path
    bucket: str
    key_prefix: str
    file_params: Callable[[Path], Dict[str, str]]
