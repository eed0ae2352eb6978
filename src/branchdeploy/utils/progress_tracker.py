"""
Progress tracking module for the branchdeploy application.

This module provides a class for tracking the upload of a directory's files,
which may complete concurrently.
"""

from threading import Lock
from typing import Any, Callable, List

import humanize

from branchdeploy.utils.utils import create_progress


class ProgressTracker:
    """
    Track files and bytes uploaded out of a known total.

    Updates may come from several transfer threads at once; counters are
    guarded by a lock. Use as a context manager to show and hide the display.
    """

    def __init__(self, description: str, files: List[Any], get_file_size: Callable[[Any], int]):
        """
        Initialize the progress tracker.

        Args:
            description: Label shown in front of the progress bar
            files: List of files to process
            get_file_size: Function to get the size of a file
        """
        self.description = description
        self.total_files = len(files)
        self.total_size = sum(get_file_size(file) for file in files)
        self.total_size_human = humanize.naturalsize(self.total_size, binary=True)

        self.transferred_size = 0
        self.files_completed_count = 0
        self.failed_count = 0
        self.lock = Lock()

        self.progress = create_progress()
        self.task = None

    def __enter__(self) -> 'ProgressTracker':
        self.start()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.stop()

    def start(self) -> None:
        self.task = self.progress.add_task(
            self._describe(0),
            total=max(self.total_files, 1),
            size=f"0 B/{self.total_size_human}",
        )
        self.progress.start()

    def stop(self) -> None:
        self.progress.stop()

    def add_bytes(self, bytes_transferred: int) -> None:
        """
        Record bytes sent for the file in flight.

        Matches the signature boto3 expects for its Callback argument.
        """
        with self.lock:
            self.transferred_size += bytes_transferred
            transferred = self.transferred_size
        self.progress.update(self.task, size=self._size(transferred))

    def complete_file(self, success: bool = True) -> None:
        """
        Mark a file as completed.

        Args:
            success: Whether the file was uploaded successfully
        """
        with self.lock:
            self.files_completed_count += 1
            if not success:
                self.failed_count += 1
            completed = self.files_completed_count
        self.progress.update(self.task, completed=completed, description=self._describe(completed))

    def _describe(self, completed: int) -> str:
        return f"[bold blue]{self.description} ({completed}/{self.total_files} files)"

    def _size(self, transferred: int) -> str:
        return f"{humanize.naturalsize(transferred, binary=True)}/{self.total_size_human}"
