"""Pydantic schemas for the compression log file.

The log file is a JSON object mapping absolute file paths to one of two
shapes:

    Compressed: a 2-element array [before, after]. Each element is an
        ordered array whose last element is the file size in bytes;
        leading elements are metadata and are preserved as-is.
    Skipped / error: a tagged object, e.g.
        {"status": "skipped", "reason": "already hevc", "codec": "hevc"}
        {"status": "error", "kind": "encode", "message": "ffmpeg exit 1"}

Example:
    {
        "/videos/a.mp4": [["h264", 1700000000, 1048576], ["hevc", 1700000300, 400000]],
        "/videos/b.mkv": {"status": "skipped", "reason": "already hevc", "codec": "hevc"}
    }
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from vidshrink.store.exceptions import CorruptLogError
from vidshrink.store.models import (
    CompressedEntry,
    ErrorEntry,
    ErrorKind,
    FileSnapshot,
    LogEntry,
    SkippedEntry,
)


class SizedRecordSchema(RootModel[list[Any]]):
    """Ordered record whose last element is a size in bytes."""

    @field_validator("root")
    @classmethod
    def _size_is_last(cls, value: list[Any]) -> list[Any]:
        if not value:
            raise ValueError("record must not be empty")
        size = value[-1]
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ValueError(
                "last element must be a non-negative integer size in bytes"
            )
        return value


class CompressedPairSchema(RootModel[tuple[SizedRecordSchema, SizedRecordSchema]]):
    """[before, after] pair for a compressed file."""


class SkippedEntrySchema(BaseModel):
    """Tagged object for a skipped file."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["skipped"]
    reason: str = ""
    codec: str | None = None


class ErrorEntrySchema(BaseModel):
    """Tagged object for a failed file."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["error"]
    kind: ErrorKind = ErrorKind.ENCODE
    message: str = ""


TaggedEntrySchema = Annotated[
    SkippedEntrySchema | ErrorEntrySchema, Field(discriminator="status")
]

_tagged_adapter: TypeAdapter[SkippedEntrySchema | ErrorEntrySchema] = TypeAdapter(
    TaggedEntrySchema
)


def _describe_validation_error(path: str, error: ValidationError) -> str:
    first_error = error.errors()[0] if error.errors() else {}
    location = ".".join(str(loc) for loc in first_error.get("loc", []))
    msg = first_error.get("msg", "validation error")
    where = f" at {location}" if location else ""
    return f"Invalid entry for {path!r}{where}: {msg}"


def parse_entry(path: str, raw: Any) -> LogEntry:
    """Validate one serialized value and convert it to a LogEntry.

    Args:
        path: Key the value was stored under (for error messages).
        raw: Decoded JSON value.

    Returns:
        The corresponding LogEntry variant.

    Raises:
        CorruptLogError: If the value matches neither shape.
    """
    try:
        if isinstance(raw, list):
            pair = CompressedPairSchema.model_validate(raw)
            before, after = pair.root
            return CompressedEntry(
                before=FileSnapshot.from_list(before.root),
                after=FileSnapshot.from_list(after.root),
            )
        if isinstance(raw, dict):
            tagged = _tagged_adapter.validate_python(raw)
            if isinstance(tagged, SkippedEntrySchema):
                return SkippedEntry(reason=tagged.reason, codec=tagged.codec)
            return ErrorEntry(kind=tagged.kind, message=tagged.message)
    except ValidationError as e:
        raise CorruptLogError(_describe_validation_error(path, e)) from e

    raise CorruptLogError(
        f"Invalid entry for {path!r}: expected array or object, "
        f"got {type(raw).__name__}"
    )


def serialize_entry(entry: LogEntry) -> Any:
    """Convert a LogEntry to its JSON-compatible form."""
    if isinstance(entry, CompressedEntry):
        return [entry.before.to_list(), entry.after.to_list()]
    if isinstance(entry, SkippedEntry):
        data: dict[str, Any] = {"status": "skipped", "reason": entry.reason}
        if entry.codec is not None:
            data["codec"] = entry.codec
        return data
    return {"status": "error", "kind": entry.kind.value, "message": entry.message}


def parse_log_document(raw: str, *, source: str = "compression log") -> dict[str, LogEntry]:
    """Parse the full log file content.

    Args:
        raw: File content.
        source: Description of the file for error messages.

    Returns:
        Mapping from path to LogEntry, in file order.

    Raises:
        CorruptLogError: If the content is not valid JSON, the top level is
            not an object, or any entry is malformed.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptLogError(
            f"{source}: invalid JSON at line {e.lineno} column {e.colno}: {e.msg}"
        ) from e

    if not isinstance(data, dict):
        raise CorruptLogError(
            f"{source}: top level must be an object, got {type(data).__name__}"
        )

    return {path: parse_entry(path, value) for path, value in data.items()}


def dump_log_document(entries: dict[str, LogEntry]) -> str:
    """Serialize all entries to the log file format."""
    document = {path: serialize_entry(entry) for path, entry in entries.items()}
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
