"""JSON file storage for the map collection."""

import json
from pathlib import Path
from typing import Any

from loguru import logger


class JsonFileStorage:
    """Persist the workspace document to a single JSON file.

    - Do not rewrite the file if contents are the same.
    - Create the parent directory on first write.
    - In dry-run mode, only log what would be written.
    """

    def __init__(self, path: str | Path, *, dry_run: bool = False) -> None:
        self.path = Path(path).expanduser().resolve()
        self.dry_run = dry_run
        self.num_writes = 0
        self.num_same = 0
        logger.debug("Storage ready, path {!r}, dry_run {!r}", str(self.path), dry_run)

    def load(self) -> dict[str, Any] | None:
        """Read the workspace document.

        Returns:
            Parsed contents if the file is found, None if it is not found.
            Raises on all other errors.
        """
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        data = json.loads(contents)
        # If we read None, it'll be ambiguous vs "file not found". We do not expect this
        # to happen, so raise.
        if data is None:
            msg = f"Workspace file {str(self.path)!r} contains a null document"
            raise ValueError(msg)
        if not isinstance(data, dict):
            msg = f"Workspace file {str(self.path)!r} must contain a JSON object"
            raise ValueError(msg)
        return data

    def save(self, data: dict[str, Any]) -> None:
        contents = json.dumps(data, sort_keys=True, indent=4, ensure_ascii=False) + "\n"

        action = "create"
        try:
            if self.path.read_text(encoding="utf-8") == contents:
                self.num_same += 1
                return
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, str(self.path))
            return

        logger.debug("Writing ({}) {!r}", action, str(self.path))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(contents, encoding="utf-8")
        self.num_writes += 1
