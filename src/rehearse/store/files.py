"""
JSON file storage for scenarios.

Each scenario is one pretty-printed JSON file named after the scenario,
inside a single scenario directory:

    tests/
        Test_20261019_101500.json
        jump_over_crate.json

Design Principles:
    - One file per scenario: scenarios load and fail independently
    - Faithful encoding: the file is the Scenario model, nothing more
    - Batch loads never abort: a bad file is reported and skipped
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from rehearse.errors import (
    LoadError,
    ScenarioCorruptError,
    ScenarioDirectoryMissingError,
    ScenarioNotFoundError,
    StorageWriteError,
)
from rehearse.schema import Scenario

logger = logging.getLogger(__name__)

SCENARIO_SUFFIX = ".json"

_UNSAFE_CHARS = re.compile(r"[^\w.-]")


def scenario_filename(name: str) -> str:
    """File name for a scenario; characters unsafe in paths become '_'."""
    return _UNSAFE_CHARS.sub("_", name) + SCENARIO_SUFFIX


@dataclass
class LoadReport:
    """
    Result of loading every scenario in a directory.

    Attributes:
        directory: The directory that was scanned
        scenarios: Successfully loaded scenarios, in file-name order
        errors: One LoadError per file (or directory) that failed
    """

    directory: Path
    scenarios: list[Scenario] = field(default_factory=list)
    errors: list[LoadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ScenarioStore:
    """
    Scenario storage backed by a directory of JSON files.

    Usage:
        store = ScenarioStore("tests")
        store.save(scenario)
        scenario = store.load("jump_over_crate")
        report = store.load_all()

    Attributes:
        directory: Directory scenarios are written to and read from
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / scenario_filename(name)

    def save(self, scenario: Scenario) -> Path:
        """
        Write a scenario, replacing any scenario with the same name.

        Distinct names can map to one file (`a/b` and `a_b`); replacing a
        file that holds a differently named scenario is logged as a warning.

        Returns:
            Path of the written file

        Raises:
            StorageWriteError: If the directory or file cannot be written
        """
        path = self.path_for(scenario.name)
        previous = self._stored_name(path)
        if previous is not None and previous != scenario.name:
            logger.warning(
                "Scenario %s replaces scenario %s in %s",
                scenario.name,
                previous,
                path,
            )

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(scenario.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageWriteError(
                file_path=str(path),
                underlying_error=str(e),
            ) from e

        logger.info("Saved scenario %s to %s", scenario.name, path)
        return path

    def _stored_name(self, path: Path) -> str | None:
        """Name of the scenario already stored at path, if it is readable."""
        if not path.is_file():
            return None
        try:
            return self.load_file(path).name
        except ScenarioCorruptError:
            return None

    def load(self, name: str) -> Scenario:
        """
        Load a scenario by name.

        Raises:
            ScenarioNotFoundError: If no file exists for the name
            ScenarioCorruptError: If the file cannot be read or decoded
        """
        path = self.path_for(name)
        if not path.is_file():
            raise ScenarioNotFoundError(scenario_name=name, file_path=str(path))
        return self.load_file(path)

    def load_file(self, path: str | Path) -> Scenario:
        """
        Load a scenario from a specific file.

        Raises:
            ScenarioCorruptError: If the file cannot be read or decoded
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ScenarioCorruptError(file_path=str(path), underlying_error=str(e)) from e

        try:
            return Scenario.model_validate_json(content)
        except ValidationError as e:
            raise ScenarioCorruptError(
                file_path=str(path),
                underlying_error=f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}",
            ) from e

    def load_all(self, directory: str | Path | None = None) -> LoadReport:
        """
        Load every scenario file in a directory.

        Never raises: a missing directory or a bad file is recorded in the
        report and logged, and loading continues with the remaining files.

        Args:
            directory: Directory to scan (defaults to the store directory)
        """
        directory = Path(directory) if directory is not None else self.directory
        report = LoadReport(directory=directory)

        if not directory.is_dir():
            error = ScenarioDirectoryMissingError(file_path=str(directory))
            logger.error("%s", error.message)
            report.errors.append(error)
            return report

        files = sorted(directory.glob(f"*{SCENARIO_SUFFIX}"))
        logger.info("Found %d scenario file(s) in %s", len(files), directory)

        for path in files:
            try:
                scenario = self.load_file(path)
            except ScenarioCorruptError as e:
                logger.error("Error loading scenario file %s: %s", path, e.underlying_error)
                report.errors.append(e)
                continue
            logger.info("Loaded scenario %s from %s", scenario.name, path.name)
            report.scenarios.append(scenario)

        return report

