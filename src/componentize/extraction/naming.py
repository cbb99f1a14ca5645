"""Pick the name and path of the generated component module."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable

from componentize.core.config import ExtractSettings
from .errors import ModuleNameExhaustedError
from .models import NewModuleDescriptor

__all__ = ["module_descriptor", "to_camel_case", "to_pascal_case"]

_STRIPPED = re.compile(r"[/\s]")


def to_camel_case(text: str) -> str:
    """Lower the first character, drop slashes and whitespace.

    Example:
        >>> to_camel_case("Component")
        'component'
    """

    if not text:
        return text
    return _STRIPPED.sub("", text[0].lower() + text[1:])


def to_pascal_case(text: str) -> str:
    """Upper the first character, drop slashes and whitespace."""

    if not text:
        return text
    return _STRIPPED.sub("", text[0].upper() + text[1:])


def module_descriptor(
    document_path: Path,
    settings: ExtractSettings,
    exists: Callable[[Path], bool],
) -> NewModuleDescriptor:
    """First free ``<stem><index><ext>`` next to ``document_path``.

    Indices start at 1 and are tried at most ``max_filename_attempts`` times.

    Raises:
        ModuleNameExhaustedError: If every tried name already exists.
    """

    seed = settings.component_name
    stem = to_pascal_case(seed) if settings.uses_pascal_case else to_camel_case(seed)
    directory = document_path.parent
    extension = document_path.suffix

    for index in range(1, settings.max_filename_attempts + 1):
        file_name = f"{stem}{index}{extension}"
        candidate = directory / file_name
        if exists(candidate):
            continue
        return NewModuleDescriptor(
            component_name=f"{to_pascal_case(seed)}{index}",
            file_name=file_name,
            path=candidate,
            index=index,
        )

    raise ModuleNameExhaustedError(
        f"No free module name for {stem!r} in {directory} after "
        f"{settings.max_filename_attempts} attempts"
    )
