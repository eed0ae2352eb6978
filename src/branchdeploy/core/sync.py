"""
Sync orchestration module for the branchdeploy application.

This module turns the affected directories into upload configurations and
uploads them one directory at a time, stopping at the first failure.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from rich.text import Text

from branchdeploy.core.constants import ACL, CACHE_TTL, EXTENSIONLESS_CONTENT_TYPE
from branchdeploy.core.errors import UploadError
from branchdeploy.core.models import DeploymentTarget, RepositoryInfo, UploadSpec
from branchdeploy.core.repository import dedupe_sorted
from branchdeploy.utils import s3_utils

logger = logging.getLogger(__name__)

Uploader = Callable[[UploadSpec], List[str]]


def file_params(local_file: Path) -> Dict[str, str]:
    """
    Per-file putObject parameters.

    Extensionless files are served as text/html so they resolve like
    directory index pages. Every file gets a short max-age.

    Args:
        local_file (Path): File about to be uploaded

    Returns:
        Dict[str, str]: Parameters passed to boto3 as ExtraArgs
    """
    params = {
        "ACL": ACL,
        "CacheControl": f"max-age={CACHE_TTL}",
    }
    if Path(local_file).suffix == "":
        params["ContentType"] = EXTENSIONLESS_CONTENT_TYPE
    return params


def directory_prefix(local_dir: Path, target: DeploymentTarget, project_root: Path) -> str:
    """
    Key prefix of one directory.

    The project root keeps the bare target prefix; any other directory gets
    its base name appended.
    """
    if local_dir.name == project_root.name:
        return target.key_prefix
    return f"{target.key_prefix}{local_dir.name}"


def build_upload_spec(directory: str, target: DeploymentTarget, project_root: Path) -> UploadSpec:
    """
    Build the upload configuration of an affected directory.

    Args:
        directory (str): Affected directory, relative to the project root
        target (DeploymentTarget): Resolved deployment target
        project_root (Path): Root of the repository

    Returns:
        UploadSpec: Upload configuration of the directory
    """
    project_root = Path(project_root).resolve()
    local_dir = (project_root / directory).resolve()
    return UploadSpec(
        local_dir=local_dir,
        bucket=target.bucket_name,
        key_prefix=directory_prefix(local_dir, target, project_root),
        file_params=file_params,
    )


def sync_directories(
    directories: Iterable[str],
    target: DeploymentTarget,
    project_root: Path,
    upload: Uploader = s3_utils.upload_directory,
) -> List[List[str]]:
    """
    Upload each affected directory in turn.

    Directories are deduplicated and sorted first. Each upload finishes
    before the next starts, and the first failure aborts the run.

    Args:
        directories (Iterable[str]): Affected directories
        target (DeploymentTarget): Resolved deployment target
        project_root (Path): Root of the repository
        upload (callable): Directory uploader, defaults to s3_utils.upload_directory

    Returns:
        List[List[str]]: Uploaded objects of each directory, in upload order

    Raises:
        UploadError: If any directory fails to upload
    """
    results = []
    for directory in dedupe_sorted(directories):
        spec = build_upload_spec(directory, target, project_root)
        logger.info(f"Uploading {spec.local_dir} to {spec.bucket}/{spec.key_prefix}")
        try:
            uploaded = upload(spec)
        except Exception as e:
            raise UploadError(spec.local_dir, e) from e
        logger.info(f"Deployed {len(uploaded)} files from {spec.local_dir.name}")
        results.append(uploaded)
    return results


def public_url(target: DeploymentTarget) -> str:
    """
    URL the deployed content is served from.

    This is the S3 website endpoint, the only S3 URL format that resolves
    index.html automatically.
    """
    return f"http://{target.bucket_name}.s3-website-{target.region}.amazonaws.com/{target.key_prefix}"


def describe_plan(repo_info: RepositoryInfo, target: DeploymentTarget) -> Text:
    """
    Summarize what a run is about to sync.

    Args:
        repo_info (RepositoryInfo): Facts gathered from the repository
        target (DeploymentTarget): Resolved deployment target

    Returns:
        Text: Summary for display before confirmation
    """
    directories = dedupe_sorted(repo_info.affected_directories)
    listing = ("\n" + " " * 17).join(directories) if directories else "(none)"
    return Text.assemble(
        ("To sync:\n", "bold cyan"),
        ("  Environment:   ", "bold"),
        ("production" if target.is_production else "development", "yellow"),
        ("\n  Branch:        ", "bold"),
        (repo_info.branch_name, "yellow"),
        ("\n  S3 Bucket:     ", "bold"),
        (target.bucket_name, "yellow"),
        ("\n  Remote prefix: ", "bold"),
        (target.key_prefix, "yellow"),
        ("\n  Directories:   ", "bold"),
        (listing, "yellow"),
    )
