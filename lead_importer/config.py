"""Configuration helpers for the lead import engine."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .models import FieldKind
from .normalize import DEFAULT_MOJIBAKE_TABLE, order_mojibake_table

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

DEFAULT_FIELD_ALIASES: Mapping[FieldKind, Tuple[str, ...]] = {
    FieldKind.NAME: (
        "nome",
        "name",
        "cliente",
        "razão social",
        "razao social",
        "razaosocial",
        "empresa",
        "contato",
        "responsável",
        "responsavel",
    ),
    FieldKind.EMAIL: ("email", "e-mail", "correio", "correio eletrônico", "mail"),
    FieldKind.PHONE: (
        "telefone",
        "phone",
        "celular",
        "tel",
        "contato",
        "whatsapp",
        "telefone 1",
        "tel1",
        "fone",
        "mobile",
        "numero",
    ),
    FieldKind.ADDRESS: ("endereço", "endereco", "address", "logradouro", "local"),
    FieldKind.CITY: ("cidade", "city", "município", "municipio"),
    FieldKind.STATE: ("estado", "state", "uf", "província", "provincia"),
    FieldKind.WEBSITE: ("site", "website", "web", "página", "pagina", "url", "link"),
    FieldKind.TYPE: ("tipo", "type", "category", "categoria", "segmento", "ramo"),
}

DEFAULT_PHONE_SUFFIX_PATTERNS: Tuple[str, ...] = (
    r"tel\s*[0-9]",
    r"phone\s*[0-9]",
    r"fone\s*[0-9]",
    r"celular\s*[0-9]",
    r"cel\s*[0-9]",
)


@dataclass(frozen=True)
class ImporterConfig:
    """Lookup tables and thresholds used by a single import."""

    field_aliases: Mapping[FieldKind, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_FIELD_ALIASES)
    )
    phone_suffix_patterns: Tuple[str, ...] = DEFAULT_PHONE_SUFFIX_PATTERNS
    mojibake_table: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MOJIBAKE_TABLE))
    country_code: str = "55"
    min_phone_digits: int = 10
    city_state_separators: str = ":-/|,"
    deduplicate: bool = True
    spreadsheet_lead_type: Optional[str] = "excel-import"

    def __post_init__(self) -> None:
        # Substitutions run in table order, longest corrupted sequence first.
        object.__setattr__(self, "mojibake_table", order_mojibake_table(self.mojibake_table))

    def aliases_for(self, kind: FieldKind) -> Tuple[str, ...]:
        return tuple(self.field_aliases.get(kind, (kind.value,)))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ImporterConfig":
        """Overlay configuration file data onto the defaults.

        ``aliases`` replaces the alias list of each kind it names, ``mojibake``
        extends the substitution table and the remaining keys override scalar
        settings.
        """

        config = cls()
        if not data:
            return config

        unknown = set(data) - _MAPPING_KEYS
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        aliases = dict(config.field_aliases)
        for kind_name, values in (data.get("aliases") or {}).items():
            aliases[_parse_field_kind(kind_name)] = _as_string_tuple(values, f"aliases.{kind_name}")

        mojibake = dict(config.mojibake_table)
        for corrupted, fixed in (data.get("mojibake") or {}).items():
            if not corrupted:
                raise ConfigurationError("Mojibake entries require a non-empty corrupted sequence")
            mojibake[str(corrupted)] = str(fixed)

        patterns = config.phone_suffix_patterns
        if "phone_suffix_patterns" in data:
            patterns = _as_string_tuple(data["phone_suffix_patterns"], "phone_suffix_patterns")
            for pattern in patterns:
                try:
                    re.compile(pattern)
                except re.error as exc:
                    raise ConfigurationError(f"Invalid phone suffix pattern '{pattern}': {exc}") from exc

        overrides: Dict[str, Any] = {}
        for key in ("country_code", "city_state_separators", "spreadsheet_lead_type"):
            if key in data:
                overrides[key] = None if data[key] is None else str(data[key])
        if "min_phone_digits" in data:
            try:
                overrides["min_phone_digits"] = int(data["min_phone_digits"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError("'min_phone_digits' must be an integer") from exc
        if "deduplicate" in data:
            overrides["deduplicate"] = bool(data["deduplicate"])

        if not overrides.get("country_code", config.country_code):
            raise ConfigurationError("'country_code' must not be empty")

        return replace(
            config,
            field_aliases=aliases,
            mojibake_table=mojibake,
            phone_suffix_patterns=patterns,
            **overrides,
        )


_MAPPING_KEYS = {
    "aliases",
    "mojibake",
    "phone_suffix_patterns",
    "country_code",
    "min_phone_digits",
    "city_state_separators",
    "deduplicate",
    "spreadsheet_lead_type",
}


def _parse_field_kind(name: str) -> FieldKind:
    try:
        return FieldKind(str(name).strip().lower())
    except ValueError as exc:
        valid = ", ".join(kind.value for kind in FieldKind)
        raise ConfigurationError(f"Unknown field kind '{name}'. Expected one of: {valid}") from exc


def _as_string_tuple(values: Any, label: str) -> Tuple[str, ...]:
    if isinstance(values, str):
        return (values,)
    try:
        return tuple(str(value) for value in values)
    except TypeError as exc:
        raise ConfigurationError(f"'{label}' must be a string or a list of strings") from exc


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid YAML: {exc}") from exc

    if data is None:
        LOGGER.debug("Configuration file %s is empty; using defaults", file_path)
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def load_importer_config(path: Optional[str | Path]) -> ImporterConfig:
    if path is None:
        return ImporterConfig()
    return ImporterConfig.from_mapping(load_configuration(path))


__all__ = [
    "ConfigurationError",
    "DEFAULT_FIELD_ALIASES",
    "DEFAULT_PHONE_SUFFIX_PATTERNS",
    "ImporterConfig",
    "load_configuration",
    "load_importer_config",
]
