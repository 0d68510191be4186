"""Local fallback storage for the client task cache."""
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging

logger = logging.getLogger(__name__)

STORAGE_KEY = "taskboard_tasks"


class LocalTaskStorage:
    """
    JSON file holding one serialized task array under a well-known key.

    The array is fully overwritten on every save. Read or write failures are
    logged and never interrupt the caller: the store is only a fallback.
    """

    def __init__(self, path: Union[str, Path], key: str = STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        document = json.loads(self.path.read_text(encoding="utf-8"))
        return document if isinstance(document, dict) else {}

    def load(self) -> List[Dict[str, Any]]:
        """Return the stored tasks, or an empty list when nothing usable is stored."""
        try:
            tasks = self._read_document().get(self.key, [])
        except (OSError, ValueError) as e:
            logger.error(f"Error loading tasks from {self.path}: {str(e)}")
            return []
        return tasks if isinstance(tasks, list) else []

    def save(self, tasks: List[Dict[str, Any]]) -> None:
        try:
            try:
                document = self._read_document()
            except ValueError:
                document = {}
            document[self.key] = list(tasks)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error saving tasks to {self.path}: {str(e)}")
