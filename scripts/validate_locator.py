#!/usr/bin/env python3
import json
import sys
from dataclasses import dataclass
from typing import Any, Sequence, Union

from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError, ValidationError
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for
from referencing import Registry
from referencing.exceptions import Unresolvable

SCHEMA_PATH = "locatorSchema.json"

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_USAGE = 2
EXIT_DOCUMENT_ERROR = 3
EXIT_SCHEMA_READ_ERROR = 4
EXIT_SCHEMA_COMPILE_ERROR = 5


@dataclass(frozen=True)
class ValidationReport:
    messages: tuple[str, ...]
    success: bool


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON token {token!r}")


def load_json(path: str) -> Any:
    """Load a UTF-8 file as strict JSON (NaN and Infinity are rejected)."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f, parse_constant=_reject_constant)


def compile_schema(schema: Any) -> Validator:
    """Check a schema against its metaschema and return a validator for it.

    The draft is taken from "$schema"; schemas that do not declare one are
    treated as draft-04. References resolve within the schema only, nothing
    is retrieved over the network.
    """
    if not isinstance(schema, (dict, bool)):
        raise SchemaError(f"{schema!r} is not of type 'object', 'boolean'")
    cls = validator_for(schema, default=Draft4Validator)
    cls.check_schema(schema)
    return cls(schema, registry=Registry())


def format_error(error: Union[ValidationError, SchemaError]) -> str:
    message = " ".join(error.message.splitlines())
    return f"{error.json_path}: {message}"


def validate(document: Any, validator: Validator) -> ValidationReport:
    """Validate a document and collect one message per violation, in validator order."""
    messages = tuple(format_error(e) for e in validator.iter_errors(document))
    if validator.is_valid(document) == bool(messages):
        raise RuntimeError(
            f"validator verdict disagrees with its error list ({len(messages)} errors)"
        )
    return ValidationReport(messages=messages, success=not messages)


def run(args: Sequence[str], schema_path: str = SCHEMA_PATH) -> int:
    if len(args) != 1:
        print("usage: validate_locator.py <file.json>", file=sys.stderr)
        return EXIT_USAGE

    document_path = args[0]
    try:
        document = load_json(document_path)
    except (OSError, ValueError, RecursionError) as exc:
        print(f"error: cannot read document {document_path}: {exc}", file=sys.stderr)
        return EXIT_DOCUMENT_ERROR

    try:
        schema = load_json(schema_path)
    except (OSError, ValueError, RecursionError) as exc:
        print(f"error: cannot read schema {schema_path}: {exc}", file=sys.stderr)
        return EXIT_SCHEMA_READ_ERROR

    try:
        validator = compile_schema(schema)
    except SchemaError as exc:
        print(f"error: invalid schema {schema_path}: {format_error(exc)}", file=sys.stderr)
        return EXIT_SCHEMA_COMPILE_ERROR

    # Unresolvable references only surface once validation walks into them.
    try:
        report = validate(document, validator)
    except (Unresolvable, RuntimeError) as exc:
        reason = " ".join(str(exc).splitlines())
        print(f"error: invalid schema {schema_path}: {reason}", file=sys.stderr)
        return EXIT_SCHEMA_COMPILE_ERROR
    for message in report.messages:
        print(message, file=sys.stderr)
    return EXIT_VALID if report.success else EXIT_INVALID


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
