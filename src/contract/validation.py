"""Validation of symbol tables and generated artifacts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import orjson
from pydantic import ValidationError

from artifacts.models.artifacts.symbols import EdgeField
from artifacts.table_io import load_table
from contract.artifacts import (
    ARTIFACT_SCHEMA_VERSION,
    ARTIFACT_SPECS,
)
from contract.models import (
    GraphSummary,
    SymbolArtifact,
    ValidationMessage,
    ValidationResult,
)

if TYPE_CHECKING:
    from pathlib import Path

    from graph.table import SymbolTable

logger = logging.getLogger(__name__)


class _SchemaModel(Protocol):
    schema_version: int

    @classmethod
    def model_validate(cls, obj: Any) -> _SchemaModel: ...


def validate_table(table: SymbolTable, *, artifact: str = "table") -> ValidationResult:
    """Check the structural invariants of a table without modifying it.

    Every violation is reported: records missing a name or type, records
    with no edges, edges naming absent keys, duplicated edges and edges
    whose inverse is missing on the target.
    """
    result = ValidationResult()

    def error(key: str, message: str) -> None:
        result.errors.append(ValidationMessage(artifact=artifact, message=message, key=key))

    for key, record in table.items():
        if not record.name:
            error(key, f"Symbol {key!r} has no name.")
        if record.kind is None:
            error(key, f"Symbol {key!r} has no type.")
        if not record.has_edges():
            error(key, f"Symbol {key!r} is spurious: all edge fields are empty.")

        for edge_field in EdgeField:
            targets = record.edges(edge_field)
            if len(set(targets)) != len(targets):
                error(key, f"Symbol {key!r} lists duplicates in {edge_field.value}.")

            for target_key in targets:
                target = table.get(target_key)
                if target is None:
                    error(
                        key,
                        f"Symbol {key!r} {edge_field.value} {target_key!r}, "
                        "which does not exist.",
                    )
                    continue
                reverse = edge_field.reverse
                if key not in target.edges(reverse):
                    error(
                        key,
                        f"Symbol {key!r} {edge_field.value} {target_key!r}, but "
                        f"{target_key!r} does not list it in {reverse.value}.",
                    )

    if result.ok:
        logger.info("Validated %d symbols", len(table))
    else:
        logger.info(
            "Table validation found %d error(s) over %d symbols",
            len(result.errors),
            len(table),
        )
    return result


def validate_artifacts(
    artifacts_dir: Path, *, strict_schema_version: bool = False
) -> ValidationResult:
    result = ValidationResult()

    if not artifacts_dir.exists():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts directory does not exist.",
            )
        )
        return result

    if not artifacts_dir.is_dir():
        result.errors.append(
            ValidationMessage(
                artifact="artifacts_dir",
                path=artifacts_dir,
                message="Artifacts path is not a directory.",
            )
        )
        return result

    for artifact_name, spec in ARTIFACT_SPECS.items():
        path = artifacts_dir / spec.filename
        if not path.exists():
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message="Required artifact file is missing.",
                )
            )
            continue

        if spec.format == "table":
            _validate_table_file(artifact_name, path, result)
        elif spec.format == "jsonl":
            _validate_jsonl(
                artifact_name,
                path,
                SymbolArtifact,
                result,
                strict_schema_version=strict_schema_version,
            )
        elif spec.format == "json":
            _validate_json(
                artifact_name,
                path,
                GraphSummary,
                result,
                strict_schema_version=strict_schema_version,
            )
        else:
            result.errors.append(
                ValidationMessage(
                    artifact=artifact_name,
                    path=path,
                    message=f"Unsupported artifact format: {spec.format}.",
                )
            )

    return result


def _validate_table_file(artifact_name: str, path: Path, result: ValidationResult) -> None:
    read = load_table(path)
    result.errors.extend(read.errors)
    if read.table is None:
        return

    checked = validate_table(read.table, artifact=artifact_name)
    for message in checked.errors:
        result.errors.append(
            ValidationMessage(
                artifact=message.artifact,
                message=message.message,
                path=path,
                key=message.key,
            )
        )


def _validate_jsonl(
    artifact_name: str,
    path: Path,
    model: type[_SchemaModel],
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    try:
        handle = path.open("rb")
    except OSError as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Failed to read file: {exc}.",
            )
        )
        return

    missing_schema_emitted = False
    mismatch_schema_emitted = False
    with handle:
        for line_number, raw_line in enumerate(handle, 1):
            line = raw_line.strip()
            if not line:
                continue
            try:
                data = orjson.loads(line)
            except orjson.JSONDecodeError as exc:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Invalid JSON: {exc}.",
                    )
                )
                continue

            schema_present = isinstance(data, dict) and "schema_version" in data
            try:
                record = model.model_validate(data)
            except ValidationError as exc:
                result.errors.append(
                    ValidationMessage(
                        artifact=artifact_name,
                        path=path,
                        line=line_number,
                        message=f"Schema validation failed: {exc}.",
                    )
                )
                continue

            if not schema_present:
                if not missing_schema_emitted:
                    _check_schema_version(
                        artifact_name,
                        path,
                        line_number,
                        schema_present,
                        record.schema_version,
                        result,
                        strict_schema_version=strict_schema_version,
                    )
                    missing_schema_emitted = True
                continue

            if (
                record.schema_version != ARTIFACT_SCHEMA_VERSION
                and not mismatch_schema_emitted
            ):
                _check_schema_version(
                    artifact_name,
                    path,
                    line_number,
                    schema_present,
                    record.schema_version,
                    result,
                    strict_schema_version=strict_schema_version,
                )
                mismatch_schema_emitted = True


def _validate_json(
    artifact_name: str,
    path: Path,
    model: type[_SchemaModel],
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    try:
        raw = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Invalid JSON: {exc}.",
            )
        )
        return

    if not isinstance(raw, dict):
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Expected JSON object for {path.name}.",
            )
        )
        return

    schema_present = "schema_version" in raw
    try:
        summary = model.model_validate(raw)
    except ValidationError as exc:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                message=f"Schema validation failed: {exc}.",
            )
        )
        return

    _check_schema_version(
        artifact_name,
        path,
        None,
        schema_present,
        summary.schema_version,
        result,
        strict_schema_version=strict_schema_version,
    )


def _check_schema_version(
    artifact_name: str,
    path: Path,
    line: int | None,
    schema_present: bool,
    schema_version: int,
    result: ValidationResult,
    *,
    strict_schema_version: bool,
) -> None:
    if schema_present and schema_version != ARTIFACT_SCHEMA_VERSION:
        result.errors.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                line=line,
                message=(
                    "Schema version mismatch: "
                    f"expected {ARTIFACT_SCHEMA_VERSION}, got {schema_version}."
                ),
            )
        )
        return

    if not schema_present:
        message = f"Missing schema_version; defaulted to {ARTIFACT_SCHEMA_VERSION}."
        target = result.errors if strict_schema_version else result.warnings
        target.append(
            ValidationMessage(
                artifact=artifact_name,
                path=path,
                line=line,
                message=message,
            )
        )


__all__ = [
    "ValidationMessage",
    "ValidationResult",
    "validate_artifacts",
    "validate_table",
]
