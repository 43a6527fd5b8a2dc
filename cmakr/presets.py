"""Loading and lookup of configure presets from ``CMakePresets.json``."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Sequence
import json

from .errors import ConfigError

PRESETS_FILE_NAME = "CMakePresets.json"


@dataclass(frozen=True, slots=True)
class CMakePreset:
    """One entry of the ``configurePresets`` array."""

    name: str
    hidden: bool = False

    @classmethod
    def from_mapping(cls, data: Any, *, index: int) -> "CMakePreset":
        if not isinstance(data, Mapping):
            raise TypeError(f"configurePresets[{index}] must be an object")
        name = data.get("name")
        if not isinstance(name, str):
            raise TypeError(f"configurePresets[{index}].name must be a string")
        hidden = data.get("hidden", False)
        if not isinstance(hidden, bool):
            raise TypeError(f"configurePresets[{index}].hidden must be a boolean")
        return cls(name=name, hidden=hidden)


class CMakePresets:
    """Ordered, read-only collection of configure presets.

    Names are not required to be unique; :meth:`get_preset` returns the first
    visible entry with a matching name.
    """

    def __init__(self, presets: Sequence[CMakePreset], *, path: Path | None = None) -> None:
        self._presets: tuple[CMakePreset, ...] = tuple(presets)
        self.path = path

    @staticmethod
    def presets_file(path: str | Path) -> Path:
        """Return the presets file for ``path``, which is either a directory or the file itself."""

        candidate = Path(path)
        if candidate.name == PRESETS_FILE_NAME:
            return candidate
        return candidate / PRESETS_FILE_NAME

    @classmethod
    def load(cls, path: str | Path) -> "CMakePresets":
        file_path = cls.presets_file(path)
        try:
            raw = file_path.read_bytes()
        except OSError as exc:
            raise ConfigError(file_path, exc.strerror or str(exc)) from exc
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(file_path, f"not valid UTF-8 ({exc})") from exc
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ConfigError(file_path, f"invalid JSON ({exc})") from exc
        except RecursionError as exc:
            raise ConfigError(file_path, "JSON nested too deeply") from exc
        try:
            presets = cls._parse(data)
        except TypeError as exc:
            raise ConfigError(file_path, str(exc)) from exc
        return cls(presets, path=file_path)

    @staticmethod
    def _parse(data: Any) -> List[CMakePreset]:
        if not isinstance(data, Mapping):
            raise TypeError("root must be an object")
        if "configurePresets" not in data:
            raise TypeError("missing field 'configurePresets'")
        raw_presets = data["configurePresets"]
        if not isinstance(raw_presets, list):
            raise TypeError("configurePresets must be an array")
        return [CMakePreset.from_mapping(item, index=index) for index, item in enumerate(raw_presets)]

    def visible(self) -> Iterator[CMakePreset]:
        """Presets eligible for direct selection, in file order."""

        return (preset for preset in self._presets if not preset.hidden)

    def get_preset(self, name: str) -> CMakePreset | None:
        return next((preset for preset in self.visible() if preset.name == name), None)

    def available(self) -> List[str]:
        """Names of the visible presets, in file order."""

        names: List[str] = []
        for preset in self.visible():
            if preset.name not in names:
                names.append(preset.name)
        return names


__all__ = ["CMakePreset", "CMakePresets", "PRESETS_FILE_NAME"]
