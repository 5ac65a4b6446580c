"""
Schedule persistence: a YAML document on disk and an in-memory variant.

Both stores hold exactly one schedule document. Reading creates the default
schedule when none exists yet; writing always replaces the whole document
(last writer wins).
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import yaml

from ..config import SchedulePayload
from ..domain.exceptions import ScheduleStoreError, ScheduleValidationError
from ..domain.models import ScheduleConfig

logger = logging.getLogger(__name__)


class YamlScheduleStore:
    """
    Stores the schedule document as YAML in a single file.

    Writes go to a temporary file in the same directory which is then moved
    over the target, so readers see either the old or the new document.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Location of the schedule YAML file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> ScheduleConfig:
        """
        Return the stored schedule, creating the default one if missing.

        Raises:
            ScheduleStoreError: If the file cannot be read or is invalid
        """
        if not self.path.exists():
            logger.info("No schedule found at %s; creating the default schedule", self.path)
            config = ScheduleConfig.default()
            self.replace(config)
            return config

        try:
            with open(self.path, "r", encoding="utf-8") as file_handle:
                data = yaml.safe_load(file_handle)
        except OSError as exc:
            raise ScheduleStoreError(f"Could not read schedule file {self.path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ScheduleStoreError(f"Invalid YAML in {self.path}: {exc}") from exc

        try:
            return SchedulePayload.parse_payload(data).to_domain()
        except ScheduleValidationError as exc:
            raise ScheduleStoreError(f"Stored schedule in {self.path} is invalid: {exc}") from exc

    def replace(self, config: ScheduleConfig) -> None:
        """
        Replace the stored document with ``config``.

        Raises:
            ScheduleStoreError: If the file cannot be written
        """
        document = SchedulePayload.from_domain(config).to_document()
        tmp_path: Optional[str] = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as file_handle:
                tmp_path = file_handle.name
                yaml.safe_dump(document, file_handle, sort_keys=False, allow_unicode=True)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise ScheduleStoreError(f"Could not save schedule to {self.path}: {exc}") from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug("Saved schedule to %s", self.path)


class InMemoryScheduleStore:
    """
    Keeps the schedule document in memory.

    Useful for tests and for embedding the scheduler without a file.
    """

    def __init__(self, config: Optional[ScheduleConfig] = None):
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> ScheduleConfig:
        """Return the stored schedule, creating the default one if missing."""
        if self._config is None:
            self._config = ScheduleConfig.default()
        return self._config

    def replace(self, config: ScheduleConfig) -> None:
        """Replace the stored schedule."""
        self._config = config
