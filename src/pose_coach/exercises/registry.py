"""
Exercise Definition Store.

Loads exercise definitions from YAML data files and serves them read-only by
exercise id. A data file is a mapping ``exercise_id -> definition``::

    bodyweight_squat:
      name: Bodyweight Squat
      idealAngles:
        - {joint: left_knee, min: 70, max: 180, perfect: 90}
      repTrigger: {joint: left_knee, direction: below, threshold: 100}
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..config import EXERCISES_PATH
from ..exceptions import InvalidExerciseDefinition, UnknownExercise
from ..utils.io_utils import list_yaml_files, load_config
from .schema import ExerciseDefinition

logger = logging.getLogger(__name__)


def parse_definitions(raw: Mapping, source: str = "<memory>") -> List[ExerciseDefinition]:
    """Validate a raw ``exercise_id -> definition`` mapping.

    Args:
        raw: Parsed YAML/JSON mapping.
        source: Label used in error messages (usually the file path).

    Returns:
        Definitions in document order.

    Raises:
        InvalidExerciseDefinition: If any entry fails schema validation.
    """
    definitions: List[ExerciseDefinition] = []
    for exercise_id, body in raw.items():
        if not isinstance(body, Mapping):
            raise InvalidExerciseDefinition(
                f"{source}: definition for '{exercise_id}' must be a mapping."
            )
        try:
            definitions.append(
                ExerciseDefinition.model_validate({**body, "id": str(exercise_id)})
            )
        except ValidationError as exc:
            raise InvalidExerciseDefinition(
                f"{source}: invalid definition for '{exercise_id}':\n{exc}"
            ) from exc
    return definitions


def load_definitions_file(path: Union[str, Path]) -> List[ExerciseDefinition]:
    """Load and validate every definition in one YAML file."""
    try:
        raw = load_config(path)
    except ValueError as exc:
        raise InvalidExerciseDefinition(str(exc)) from exc
    return parse_definitions(raw, source=str(path))


class ExerciseRegistry:
    """Read-only lookup of :class:`ExerciseDefinition` by exercise id."""

    def __init__(self, definitions: Iterable[ExerciseDefinition] = ()):
        self._definitions: dict[str, ExerciseDefinition] = {}
        for definition in definitions:
            self._add(definition)
        self._view = MappingProxyType(self._definitions)

    def _add(self, definition: ExerciseDefinition) -> None:
        if definition.id in self._definitions:
            raise InvalidExerciseDefinition(
                f"Duplicate exercise id '{definition.id}'."
            )
        self._definitions[definition.id] = definition

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ExerciseRegistry":
        """Build a registry from a YAML file or a directory of YAML files."""
        definitions: List[ExerciseDefinition] = []
        for file in list_yaml_files(path):
            loaded = load_definitions_file(file)
            logger.info("Loaded %d exercise definitions from %s", len(loaded), file)
            definitions.extend(loaded)
        return cls(definitions)

    def get(self, exercise_id: str) -> ExerciseDefinition:
        """Return the definition for ``exercise_id``.

        Raises:
            UnknownExercise: If no definition is registered for the id.
        """
        try:
            return self._definitions[exercise_id]
        except KeyError:
            raise UnknownExercise(exercise_id) from None

    @property
    def definitions(self) -> Mapping[str, ExerciseDefinition]:
        return self._view

    def ids(self) -> List[str]:
        return list(self._definitions)

    def __contains__(self, exercise_id: object) -> bool:
        return exercise_id in self._definitions

    def __iter__(self) -> Iterator[ExerciseDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


# ---------------------------------------------------------------------------
# Lazily-loaded registry for the configured data path
# ---------------------------------------------------------------------------
_DEFAULT_REGISTRY: Optional[ExerciseRegistry] = None


def get_default_registry() -> ExerciseRegistry:
    """Lazy-load the registry from ``EXERCISES_PATH`` once per process."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = ExerciseRegistry.from_path(EXERCISES_PATH)
    return _DEFAULT_REGISTRY
