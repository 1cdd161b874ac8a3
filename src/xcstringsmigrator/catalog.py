import json
from dataclasses import dataclass, field
from typing import Any

CATALOG_VERSION = "1.0"
TRANSLATED = "translated"


class CatalogFormatError(ValueError):
    pass


@dataclass
class StringUnit:
    value: str
    state: str = TRANSLATED

    def to_dict(self) -> dict[str, Any]:
        return {"state": self.state, "value": self.value}


@dataclass
class PluralVariation:
    string_unit: StringUnit

    def to_dict(self) -> dict[str, Any]:
        return {"stringUnit": self.string_unit.to_dict()}


@dataclass
class Variations:
    plural: dict[str, PluralVariation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "plural": {rule: variation.to_dict() for rule, variation in self.plural.items()}
        }


Localization = StringUnit | Variations


@dataclass
class CatalogEntry:
    localizations: dict[str, Localization] = field(default_factory=dict)


@dataclass
class Catalog:
    source_language: str
    strings: dict[str, CatalogEntry] = field(default_factory=dict)
    version: str = CATALOG_VERSION


def _localization_to_dict(localization: Localization) -> dict[str, Any]:
    if isinstance(localization, StringUnit):
        return {"stringUnit": localization.to_dict()}
    if isinstance(localization, Variations):
        return {"variations": localization.to_dict()}
    raise TypeError(f"Unsupported localization: {localization!r}")


def to_dict(catalog: Catalog) -> dict[str, Any]:
    return {
        "sourceLanguage": catalog.source_language,
        "strings": {
            key: {
                "localizations": {
                    language: _localization_to_dict(localization)
                    for language, localization in entry.localizations.items()
                }
            }
            for key, entry in catalog.strings.items()
        },
        "version": catalog.version,
    }


def dumps(catalog: Catalog) -> str:
    """Serializes a catalog the way Xcode writes .xcstrings files.

    Keys are sorted at every level, slashes and non-ASCII text are left as-is.
    """
    return json.dumps(
        to_dict(catalog),
        ensure_ascii=False,
        indent=2,
        separators=(",", " : "),
        sort_keys=True,
    )


def _expect(value: Any, kind: type, where: str) -> Any:
    if not isinstance(value, kind):
        raise CatalogFormatError(f"{where}: expected {kind.__name__}")
    return value


def _string_unit_from_dict(data: Any, where: str) -> StringUnit:
    data = _expect(data, dict, where)
    return StringUnit(
        value=_expect(data.get("value"), str, f"{where}.value"),
        state=_expect(data.get("state"), str, f"{where}.state"),
    )


def _localization_from_dict(data: Any, where: str) -> Localization:
    data = _expect(data, dict, where)
    if data.get("stringUnit") is not None:
        return _string_unit_from_dict(data["stringUnit"], f"{where}.stringUnit")
    if data.get("variations") is not None:
        variations = _expect(data["variations"], dict, f"{where}.variations")
        plural = _expect(variations.get("plural"), dict, f"{where}.variations.plural")
        return Variations(
            {
                rule: PluralVariation(
                    _string_unit_from_dict(
                        _expect(variation, dict, f"{where}.{rule}").get("stringUnit"),
                        f"{where}.{rule}.stringUnit",
                    )
                )
                for rule, variation in plural.items()
            }
        )
    raise CatalogFormatError(f"{where}: neither stringUnit nor variations")


def from_dict(data: Any) -> Catalog:
    """Builds a catalog from decoded JSON, raising CatalogFormatError on schema errors."""
    data = _expect(data, dict, "catalog")
    strings = _expect(data.get("strings"), dict, "strings")

    catalog = Catalog(
        source_language=_expect(data.get("sourceLanguage"), str, "sourceLanguage"),
        version=_expect(data.get("version"), str, "version"),
    )
    for key, entry in strings.items():
        entry = _expect(entry, dict, f"strings.{key}")
        localizations = _expect(
            entry.get("localizations", {}), dict, f"strings.{key}.localizations"
        )
        catalog.strings[key] = CatalogEntry(
            {
                language: _localization_from_dict(
                    localization, f"strings.{key}.localizations.{language}"
                )
                for language, localization in localizations.items()
            }
        )
    return catalog


def loads(data: str | bytes) -> Catalog:
    try:
        document = json.loads(data)
    except ValueError as ex:
        raise CatalogFormatError(f"Invalid JSON: {ex}") from ex
    return from_dict(document)
