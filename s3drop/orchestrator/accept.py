"""Client-side acceptance policy and file collection."""
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from ..models import Rejection, RejectionCode, SelectedFile, UploadConfig


class AcceptFilter:
    """Splits a selection into accepted files and rejections."""

    def __init__(self, config: UploadConfig):
        self._config = config

    def messages(self) -> dict:
        """Notification text per rejection code."""
        return {
            RejectionCode.TOO_MANY_FILES: f"Too many files selected, max is {self._config.max_files}",
            RejectionCode.FILE_TOO_LARGE: f"File size exceeds {self._config.max_file_size_label} limit",
            RejectionCode.FILE_INVALID_TYPE: (
                f"File type not accepted, expected {', '.join(self._config.accept)}"
            ),
        }

    def filter(self, files: Sequence[SelectedFile]) -> Tuple[List[SelectedFile], List[Rejection]]:
        """
        Apply batch, size and MIME checks.

        An oversized batch rejects every file in it. Otherwise each file is
        judged on its own and the valid ones are accepted.
        """
        messages = self.messages()

        if len(files) > self._config.max_files:
            code = RejectionCode.TOO_MANY_FILES
            return [], [Rejection(f.name, code, messages[code]) for f in files]

        accepted: List[SelectedFile] = []
        rejections: List[Rejection] = []
        for f in files:
            if f.size > self._config.max_file_size:
                code = RejectionCode.FILE_TOO_LARGE
            elif not self._config.accepts_type(f.content_type):
                code = RejectionCode.FILE_INVALID_TYPE
            else:
                accepted.append(f)
                continue
            rejections.append(Rejection(f.name, code, messages[code]))
        return accepted, rejections


class FileCollector:
    """Collects files from CLI paths."""

    @staticmethod
    def collect_files(paths: Iterable[Path], recursive: bool = False) -> List[SelectedFile]:
        """
        Expand files and folders into selected files.

        Args:
            paths: Files or folders
            recursive: Descend into sub-folders

        Returns:
            Selected files in path order
        """
        found: List[Path] = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                pattern = path.rglob("*") if recursive else path.iterdir()
                found.extend(sorted(item for item in pattern if item.is_file()))
            elif path.is_file():
                found.append(path)
            else:
                raise FileNotFoundError(f"No such file or folder: {path}")
        return [SelectedFile.from_path(p) for p in found]
