"""
S3 utilities module for the branchdeploy application.

This module provides functions for uploading files and directories to S3
storage with per-file metadata.
"""

import concurrent.futures
import logging
import mimetypes
import os
import posixpath
from pathlib import Path
from typing import Callable, Dict, List, Optional

from branchdeploy.core.S3Singleton import S3Singleton
from branchdeploy.core.constants import EXCLUDED_DIRECTORIES, MAX_POOL_CONNECTIONS
from branchdeploy.core.models import UploadSpec
from branchdeploy.utils.progress_tracker import ProgressTracker

logger = logging.getLogger(__name__)


def list_directory_files(local_dir: Path) -> List[Path]:
    """
    List every file below a directory, skipping version-control metadata.

    Args:
        local_dir (Path): Directory to walk

    Returns:
        List[Path]: Files in a stable order
    """
    all_files = []
    for root, dirs, files in os.walk(local_dir):
        dirs[:] = sorted(d for d in dirs if d not in EXCLUDED_DIRECTORIES)
        for file in sorted(files):
            all_files.append(Path(root) / file)
    return all_files


def object_key(prefix: str, rel_path: Path) -> str:
    """Join a key prefix and a relative file path with forward slashes."""
    return posixpath.join(prefix, rel_path.as_posix())


def object_params(local_file: Path, file_params: Callable[[Path], Dict[str, str]]) -> Dict[str, str]:
    """
    Build the putObject parameters of one file.

    The per-file rule wins; a content type is guessed from the file name
    only when the rule does not set one.
    """
    params = dict(file_params(local_file))
    if "ContentType" not in params:
        guessed, _ = mimetypes.guess_type(local_file.name)
        if guessed:
            params["ContentType"] = guessed
    return params


def upload_file(local_path: Path, bucket: str, key: str,
                extra_args: Optional[Dict[str, str]] = None,
                callback: Callable[[int], None] = None) -> str:
    """
    Upload a file to S3.

    Args:
        local_path (Path): Path to the local file
        bucket (str): Destination bucket
        key (str): Destination object key
        extra_args (Dict[str, str], optional): putObject parameters
        callback (callable, optional): Function to call with progress updates

    Returns:
        str: The uploaded object in bucket/key format
    """
    S3Singleton().upload_file(local_path, bucket, key, extra_args=extra_args, callback=callback)
    return f"{bucket}/{key}"


def upload_directory(spec: UploadSpec, max_workers: int = MAX_POOL_CONNECTIONS) -> List[str]:
    """
    Upload a directory to S3.

    Files are sent through a thread pool. The first failing file stops the
    upload: pending files are cancelled and the error is raised.

    Args:
        spec (UploadSpec): Directory, bucket, prefix and per-file rule
        max_workers (int): Number of files transferred at once

    Returns:
        List[str]: List of uploaded files (bucket/key format)

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    local_dir = Path(spec.local_dir)
    if not local_dir.is_dir():
        raise FileNotFoundError(f"Directory '{local_dir}' does not exist or is not a directory")

    files_to_upload = list_directory_files(local_dir)
    uploaded_files = []

    with ProgressTracker(local_dir.name, files_to_upload, lambda f: f.stat().st_size) as tracker:

        def upload_file_task(local_file_path: Path) -> str:
            s3_key = object_key(spec.key_prefix, local_file_path.relative_to(local_dir))
            logger.debug(f"Uploading {local_file_path} to {spec.bucket}/{s3_key}")
            try:
                result = upload_file(
                    local_file_path,
                    spec.bucket,
                    s3_key,
                    extra_args=object_params(local_file_path, spec.file_params),
                    callback=tracker.add_bytes,
                )
            except Exception:
                tracker.complete_file(success=False)
                raise
            tracker.complete_file()
            return result

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
        try:
            futures = [executor.submit(upload_file_task, path) for path in files_to_upload]
            for future in concurrent.futures.as_completed(futures):
                uploaded_files.append(future.result())
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    return sorted(uploaded_files)
