import logging
import pathlib
import plistlib

from xcstringsmigrator import catalog as xcstrings
from xcstringsmigrator import parser
from xcstringsmigrator.catalog import Catalog, CatalogFormatError, StringUnit, Variations
from xcstringsmigrator.classes import Entry, LocalizationTable, Plural, Singular
from xcstringsmigrator.errors import CatalogCorruptError, CatalogNotFoundError, ExportFailedError
from xcstringsmigrator.migrator import CATALOG_SUFFIX, LANGUAGE_DIRECTORY_SUFFIX

logger = logging.getLogger(__name__)

# Catalogs do not remember which legacy table a key came from.
TABLE_NAME = "Localizable"
FORMAT_VARIABLE = "format"
FORMAT_VALUE_TYPE = "li"


def extract_catalog(path: str) -> Catalog:
    catalog_path = pathlib.Path(path)
    if catalog_path.suffix != CATALOG_SUFFIX or not catalog_path.is_file():
        raise CatalogNotFoundError()

    try:
        return xcstrings.loads(catalog_path.read_bytes())
    except (OSError, CatalogFormatError) as ex:
        logger.error(f"Could not read {catalog_path}: {ex}")
        raise CatalogCorruptError() from ex


def _append(buckets: dict[str, LocalizationTable], language: str, entry: Entry) -> None:
    table = buckets.get(language)
    if table is None:
        table = buckets[language] = LocalizationTable(TABLE_NAME, language)
    table.entries.append(entry)


def split_catalog(catalog: Catalog) -> tuple[list[LocalizationTable], list[LocalizationTable]]:
    """Splits a catalog into per-language singular tables and plural tables."""
    singulars: dict[str, LocalizationTable] = {}
    plurals: dict[str, LocalizationTable] = {}

    for key, catalog_entry in catalog.strings.items():
        for language, localization in catalog_entry.localizations.items():
            if isinstance(localization, StringUnit):
                _append(singulars, language, Entry(key, Singular(localization.value)))
            elif isinstance(localization, Variations):
                plural = Plural.from_rules(
                    {
                        rule: variation.string_unit.value
                        for rule, variation in localization.plural.items()
                    }
                )
                if not plural.variants:
                    logger.debug(f'Skipping "{key}" ({language}): no supported plural rules')
                    continue
                _append(plurals, language, Entry(key, plural))
            else:
                raise TypeError(f"Unsupported localization: {localization!r}")

    return list(singulars.values()), list(plurals.values())


def render_strings(table: LocalizationTable) -> str:
    lines = []
    for entry in sorted(table.entries, key=lambda entry: entry.key):
        if not isinstance(entry.value, Singular):
            continue
        lines.append(
            f"{parser.quote_string(entry.key)} = {parser.quote_string(entry.value.text)};"
        )
    return "\n".join(lines)


def render_stringsdict(table: LocalizationTable) -> bytes:
    plist = {}
    for entry in table.entries:
        if not isinstance(entry.value, Plural):
            continue
        variable = {
            parser.SPEC_TYPE_KEY: parser.PLURAL_RULE_TYPE,
            parser.VALUE_TYPE_KEY: FORMAT_VALUE_TYPE,
        }
        variable.update(entry.value.rules())
        plist[entry.key] = {
            parser.FORMAT_KEY: f"%#@{FORMAT_VARIABLE}@",
            FORMAT_VARIABLE: variable,
        }
    return plistlib.dumps(plist, fmt=plistlib.FMT_XML, sort_keys=True)


def _output_path(output_dir: str, table: LocalizationTable, suffix: str) -> pathlib.Path:
    return (
        pathlib.Path(output_dir)
        / f"{table.language}{LANGUAGE_DIRECTORY_SUFFIX}"
        / f"{table.table_name}{suffix}"
    )


def _write_bytes(path: pathlib.Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def export_strings_file(table: LocalizationTable, output_dir: str) -> pathlib.Path:
    output_path = _output_path(output_dir, table, ".strings")
    try:
        _write_bytes(output_path, render_strings(table).encode("utf-8"))
    except OSError as ex:
        logger.error(f"Could not write {output_path}: {ex}")
        raise ExportFailedError("strings") from ex
    logger.info(f"Exported {output_path}")
    return output_path


def export_stringsdict_file(table: LocalizationTable, output_dir: str) -> pathlib.Path:
    output_path = _output_path(output_dir, table, ".stringsdict")
    try:
        _write_bytes(output_path, render_stringsdict(table))
    except (OSError, TypeError, OverflowError) as ex:
        logger.error(f"Could not write {output_path}: {ex}")
        raise ExportFailedError("stringsdict") from ex
    logger.info(f"Exported {output_path}")
    return output_path


def run(*, path: str, output_dir: str) -> list[pathlib.Path]:
    catalog = extract_catalog(path)
    singulars, plurals = split_catalog(catalog)
    logger.info(
        f"Split {len(catalog.strings)} keys into {len(singulars)} strings "
        f"and {len(plurals)} stringsdict tables"
    )

    exported = []
    failures = []
    for table in singulars:
        try:
            exported.append(export_strings_file(table, output_dir))
        except ExportFailedError as ex:
            failures.append(ex)
    for table in plurals:
        try:
            exported.append(export_stringsdict_file(table, output_dir))
        except ExportFailedError as ex:
            failures.append(ex)

    if failures:
        raise failures[0]
    return exported
