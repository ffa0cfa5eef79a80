# Copyright (c) 2025 Trae AI. All rights reserved.

import codecs
import os
import re
from pathlib import Path
from typing import List, Sequence

from .config import CONTROL_FILE_NAME
from .models import ControlFileRecord

FOLDER_PREFIX = "folder: "
MAIDATA_PREFIX = "maidata: "
TRACK_PREFIX = "track: "

PREFIXES = (FOLDER_PREFIX, MAIDATA_PREFIX, TRACK_PREFIX)


class ControlFileFormatError(ValueError):
    """
    Raised when a control file does not carry the three prefixed lines.
    """

    def __init__(self, message: str, expected: Sequence[str] = (), actual: Sequence[str] = ()):
        super().__init__(message)
        self.expected = list(expected)
        self.actual = list(actual)


def parse_control_lines(lines: Sequence[str]) -> ControlFileRecord:
    """
    Parses the first three lines of a control file.

    Lines must start with 'folder: ', 'maidata: ' and 'track: ' (after trimming),
    in that order. Anything after the third line is ignored.
    """
    if len(lines) < 3:
        raise ControlFileFormatError(f"expected 3 lines, got {len(lines)}")

    head = [line.strip() for line in lines[:3]]

    if not all(line.startswith(prefix) for line, prefix in zip(head, PREFIXES)):
        raise ControlFileFormatError(
            "missing required prefixes",
            expected=[f"{prefix}xxx" for prefix in PREFIXES],
            actual=head,
        )

    folder_path, maidata_filename, track_filename = (
        line[len(prefix):].strip() for line, prefix in zip(head, PREFIXES)
    )
    return ControlFileRecord(
        folder_path=folder_path,
        maidata_filename=maidata_filename,
        track_filename=track_filename,
    )


# UTF-32 LE must be checked before UTF-16 LE, its BOM starts with the same two bytes
_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def decode_control_bytes(data: bytes) -> str:
    """
    Decodes by byte-order mark, falling back to UTF-8 with replacement
    characters when there is none.
    """
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom):].decode(encoding, errors="replace")
    return data.decode("utf-8", errors="replace")


def split_control_lines(text: str) -> List[str]:
    # Only CR, LF and CRLF end a line; form feeds and the like stay in the value
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def read_control_lines(path: Path) -> List[str]:
    return split_control_lines(decode_control_bytes(path.read_bytes()))


def read_control_file(path: Path) -> ControlFileRecord:
    return parse_control_lines(read_control_lines(path))


def format_control_file(record: ControlFileRecord) -> str:
    return (
        f"{FOLDER_PREFIX}{record.folder_path}\n"
        f"{MAIDATA_PREFIX}{record.maidata_filename}\n"
        f"{TRACK_PREFIX}{record.track_filename}\n"
    )


def write_control_file(directory: Path, record: ControlFileRecord, name: str = CONTROL_FILE_NAME) -> Path:
    """
    Writes the control file next to a temp file and swaps it in with os.replace,
    so a watcher never reads a half-written file.
    """
    target = Path(directory) / name
    tmp = target.with_name(target.name + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(format_control_file(record))
        os.replace(tmp, target)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    return target
