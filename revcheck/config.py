"""Configuration and translator metadata loading (revcheck.yml, translation.xml)."""

from __future__ import annotations

import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import VcsAccess

CONFIG_FILENAME = "revcheck.yml"
TRANSLATION_XML = "translation.xml"

DEFAULT_SUFFIXES = (".xml", ".ent")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TranslatorEntry:
    """A translator as listed in the static metadata."""

    nick: str
    name: str = ""
    email: str = ""
    vcs: VcsAccess = VcsAccess.UNKNOWN


@dataclass
class RevcheckConfig:
    """Settings and translator metadata for one translation."""

    root: Path
    language: Optional[str] = None
    source_language: str = "en"
    intro: str = ""
    translators: List[TranslatorEntry] = field(default_factory=list)
    owners: Dict[str, str] = field(default_factory=dict)
    include_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_SUFFIXES))
    exclude_paths: List[str] = field(default_factory=list)
    workers: int = 1

    def owner_for(self, path: str) -> str:
        """Return the nick owning ``path`` by longest matching directory prefix.

        Prefixes match whole path components; an empty prefix owns everything.
        """
        best = ""
        best_length = -1
        for prefix, nick in self.owners.items():
            normalized = prefix.strip("/")
            if normalized and path != normalized and not path.startswith(f"{normalized}/"):
                continue
            if len(normalized) > best_length:
                best, best_length = nick, len(normalized)
        return best


def load_config(config_path: Path) -> RevcheckConfig:
    """Load configuration from ``revcheck.yml`` or the legacy ``translation.xml``.

    ``config_path`` may be the file itself or the translated tree root. A
    directory holding neither file yields defaults.
    """
    config_path = config_path.expanduser()
    if config_path.is_dir():
        root = config_path.resolve()
        yaml_file = root / CONFIG_FILENAME
        xml_file = root / TRANSLATION_XML
        if yaml_file.exists():
            return _load_yaml(yaml_file)
        if xml_file.exists():
            return load_translation_xml(xml_file)
        return RevcheckConfig(root=root)

    config_file = config_path.resolve()
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")
    if config_file.suffix == ".xml":
        return load_translation_xml(config_file)
    return _load_yaml(config_file)


def _load_yaml(path: Path) -> RevcheckConfig:
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) if text.strip() else {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")

    config = RevcheckConfig(root=path.parent)
    config.language = _as_str(data.get("language"))
    config.source_language = _as_str(data.get("source_language")) or "en"
    config.intro = (_as_str(data.get("intro")) or "").strip()

    raw_translators = data.get("translators")
    if raw_translators is not None and not isinstance(raw_translators, list):
        raise ConfigError("translators must be a list")
    for entry in raw_translators or []:
        entry_data = _as_dict(entry)
        nick = _as_str(entry_data.get("nick"))
        if not nick:
            raise ConfigError("every translator needs a nick")
        config.translators.append(
            TranslatorEntry(
                nick=nick,
                name=_as_str(entry_data.get("name")) or "",
                email=_as_str(entry_data.get("email")) or "",
                vcs=_as_vcs(entry_data.get("vcs")),
            )
        )

    owners = _as_dict(data.get("owners"))
    config.owners = {str(prefix): str(nick) for prefix, nick in owners.items() if nick}

    suffixes = _as_str_list(data.get("include_suffixes"))
    if suffixes:
        config.include_suffixes = [suffix if suffix.startswith(".") else f".{suffix}" for suffix in suffixes]
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    workers = _as_int(data.get("workers"))
    if workers is not None:
        if workers < 1:
            raise ConfigError("workers must be at least 1")
        config.workers = workers
    return config


def load_translation_xml(path: Path) -> RevcheckConfig:
    """Read translator metadata from a documentation ``translation.xml`` file."""
    try:
        tree = ElementTree.parse(path)
    except ElementTree.ParseError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    document = tree.getroot()
    config = RevcheckConfig(root=path.parent)

    intro = document.find("intro")
    if intro is not None:
        config.intro = " ".join("".join(intro.itertext()).split())

    for person in document.iter("person"):
        nick = (person.get("nick") or "").strip()
        if not nick:
            continue
        config.translators.append(
            TranslatorEntry(
                nick=nick,
                name=(person.get("name") or "").strip(),
                email=(person.get("email") or "").strip(),
                vcs=_as_vcs(person.get("vcs")),
            )
        )
    return config


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_vcs(value: Any) -> VcsAccess:
    # YAML reads bare yes/no as booleans.
    if isinstance(value, bool):
        return VcsAccess.YES if value else VcsAccess.NO
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"yes", "true", "1"}:
            return VcsAccess.YES
        if lowered in {"no", "false", "0"}:
            return VcsAccess.NO
    return VcsAccess.UNKNOWN


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "RevcheckConfig",
    "TranslatorEntry",
    "load_config",
    "load_translation_xml",
]
