"""Boundary loader: raw snapshot/content records to validated models."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..exceptions import InputValidationError
from ..models.snapshot import ContentItem, MetricSnapshot

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SnapshotLoader:
    """Validate records handed over by the persistence layer.

    In the default lenient mode malformed records are skipped and logged,
    so a single bad row never takes a dashboard down. Strict mode collects
    every error before raising, like a validation pass at import time.

    Usage:
        loader = SnapshotLoader()
        snapshots = loader.load(records)
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def load(self, records: Iterable[MetricSnapshot | Mapping[str, Any]]) -> list[MetricSnapshot]:
        """Validate snapshot records.

        Raises:
            InputValidationError: In strict mode, if any record fails validation.
        """
        return self._validate_all(records, MetricSnapshot)

    def load_content(self, records: Iterable[ContentItem | Mapping[str, Any]]) -> list[ContentItem]:
        """Validate content item records."""
        return self._validate_all(records, ContentItem)

    def _validate_all(
        self, records: Iterable[ModelT | Mapping[str, Any]], model: type[ModelT]
    ) -> list[ModelT]:
        valid: list[ModelT] = []
        errors: list[dict[str, Any]] = []
        total = 0

        for i, record in enumerate(records):
            total += 1
            if isinstance(record, model):
                valid.append(record)
                continue
            try:
                valid.append(model.model_validate(record))
            except ValidationError as e:
                errors.append({"row": i, "errors": e.errors()})

        if errors:
            if self.strict:
                raise InputValidationError(errors, total)
            logger.warning(
                f"Skipped {len(errors)} of {total} malformed {model.__name__} records"
            )

        return valid
