"""Decoding of single records in either the JSON or the text grammar."""
from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from .errors import DecodeError, InvalidLine
from .models import Observation


def decode_line(data: bytes) -> Observation:
    """Parse one decompressed record into an :class:`Observation`."""
    stripped = data.strip()
    if not stripped:
        raise InvalidLine("invalid (empty) line")
    if stripped[:1] == b"{":
        return decode_json(stripped)
    return decode_text(stripped)


def decode_json(data: bytes) -> Observation:
    try:
        return Observation.model_validate_json(data)
    except ValidationError as exc:
        raise DecodeError(f"bad json record: {exc.error_count()} error(s)", _fragment(data)) from exc


def decode_text(data: bytes) -> Observation:
    """Parse ``name{k="v",...} value``.

    The text form has no room for declaration metadata, so the result is
    always a value record.
    """
    try:
        line = data.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise DecodeError("bad format: line is not valid utf-8", _fragment(data)) from exc

    split_at = line.rfind(" ")
    if split_at < 1:
        raise DecodeError("bad format: couldn't find space", line)
    identifier, raw_value = line[:split_at].strip(), line[split_at + 1 :].strip()

    try:
        value = float(raw_value)
    except ValueError as exc:
        raise DecodeError("bad value", raw_value) from exc

    brace = identifier.find("{")
    if brace < 0:
        raise DecodeError("bad format: couldn't find opening brace", identifier)
    if not identifier.endswith("}"):
        raise DecodeError("bad format: couldn't find terminating brace", identifier)

    name, label_section = identifier[:brace], identifier[brace + 1 : -1]
    if not name:
        raise DecodeError("bad format: missing metric name", identifier)
    if " " in label_section:
        raise DecodeError("bad format: labels section may not contain spaces", label_section)

    return Observation(name=name, labels=_parse_labels(label_section), value=value)


def _parse_labels(section: str) -> dict[str, str]:
    labels: dict[str, str] = {}
    for pair in section.split(","):
        key, sep, quoted = pair.partition("=")
        if not sep:
            continue
        if not key:
            raise DecodeError("bad format: empty label name", pair)
        if len(quoted) < 2 or quoted[0] != '"' or quoted[-1] != '"':
            raise DecodeError("bad format: label value must be wrapped in quotes", pair)
        labels[key] = quoted[1:-1]
    return labels


def _fragment(data: bytes, limit: int = 120) -> str:
    text = data.decode("utf-8", errors="replace")
    return text if len(text) <= limit else text[:limit] + "..."


def load_declarations(path: Path) -> list[Observation]:
    """Read newline-delimited records from ``path``.

    Blank lines and lines starting with ``#`` are skipped.
    """
    observations = []
    for raw in path.read_bytes().splitlines():
        stripped = raw.strip()
        if not stripped or stripped.startswith(b"#"):
            continue
        observations.append(decode_line(stripped))
    return observations
