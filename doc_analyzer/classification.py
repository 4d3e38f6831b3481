"""
Entity Classification
Answers "does this method return a new instance of its receiver's class?"
for the new-instance naming rule. The checker itself never guesses: without
a classification every answer is None and the rule stays silent.
"""

import logging
from typing import Dict, Mapping, Optional

import yaml

from structural_parsing.types import DocumentedEntity

logger = logging.getLogger(__name__)


class ClassificationError(Exception):
    """Raised when a classification file cannot be used."""
    pass


def no_classification(entity: DocumentedEntity) -> Optional[bool]:
    return None


class StaticClassification:
    """
    Lookup backed by a fixed mapping of qualified method names to booleans:

        Array#map: true
        Array#map!: false
        Array.new: true

    `Owner#name` entries match instance methods and `Owner.name` (or
    `Owner::name`) entries match singleton methods.
    """

    def __init__(self, mapping: Mapping[str, bool]):
        self.mapping: Dict[str, bool] = {}
        for name, value in mapping.items():
            if not isinstance(value, bool):
                raise ClassificationError(f"Classification of '{name}' must be true or false, got {value!r}")
            self.mapping[str(name).replace('::', '.')] = value

    @classmethod
    def from_yaml(cls, path: str) -> 'StaticClassification':
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ClassificationError(f"Cannot read classification file {path}: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ClassificationError(f"Classification file {path} must hold a mapping")
        logger.info(f"Loaded {len(data)} method classifications from {path}")
        return cls(data)

    def __call__(self, entity: DocumentedEntity) -> Optional[bool]:
        return self.mapping.get(entity.qualified_name.replace('::', '.'))

    def __len__(self) -> int:
        return len(self.mapping)
