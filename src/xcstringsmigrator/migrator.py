import logging
import pathlib
from collections.abc import Callable, Iterable

import click

from xcstringsmigrator import catalog as xcstrings
from xcstringsmigrator import parser
from xcstringsmigrator.catalog import (
    Catalog,
    CatalogEntry,
    PluralVariation,
    StringUnit,
    Variations,
)
from xcstringsmigrator.classes import (
    Entry,
    LocalizationTable,
    Plural,
    Singular,
    StringsFile,
)
from xcstringsmigrator.errors import DecodeError, ExportFailedError, NoInputFilesError

logger = logging.getLogger(__name__)

LANGUAGE_DIRECTORY_SUFFIX = ".lproj"
CATALOG_SUFFIX = ".xcstrings"
FILE_TYPES = {".strings": "strings", ".stringsdict": "stringsdict"}


def discover_files(paths: Iterable[str]) -> list[StringsFile]:
    strings_files = []
    for path in map(pathlib.Path, paths):
        if path.suffix != LANGUAGE_DIRECTORY_SUFFIX or not path.is_dir():
            logger.debug(f"Ignoring {path}: not an existing {LANGUAGE_DIRECTORY_SUFFIX} directory")
            continue

        language = path.stem
        for child in sorted(path.iterdir()):
            file_type = FILE_TYPES.get(child.suffix)
            if file_type is None or not child.is_file():
                continue
            logger.debug(f"Found {file_type} file {child} ({language})")
            strings_files.append(StringsFile(language, child, file_type, child.stem))

    if not strings_files:
        raise NoInputFilesError()
    return strings_files


def read_table(strings_file: StringsFile) -> LocalizationTable:
    """Decodes one legacy file. Raises DecodeError or OSError when it is unusable."""
    data = strings_file.path.read_bytes()
    if strings_file.file_type == "stringsdict":
        entries = [
            Entry(key, Plural.from_rules(rules))
            for key, rules in parser.decode_plural(data).items()
        ]
    else:
        entries = [
            Entry(key, Singular(text))
            for key, text in parser.decode_singular(data).items()
        ]
    return LocalizationTable(strings_file.table_name, strings_file.language, entries)


def extract_tables(paths: Iterable[str]) -> list[LocalizationTable]:
    tables = []
    for strings_file in discover_files(paths):
        try:
            tables.append(read_table(strings_file))
        except (DecodeError, OSError) as ex:
            logger.warning(f"Skipping {strings_file.path}: {ex}")
    return tables


def classify_tables(tables: Iterable[LocalizationTable]) -> dict[str, list[LocalizationTable]]:
    buckets: dict[str, list[LocalizationTable]] = {}
    for table in tables:
        buckets.setdefault(table.table_name, []).append(table)
    return buckets


def _to_localization(entry: Entry) -> StringUnit | Variations:
    if isinstance(entry.value, Singular):
        return StringUnit(entry.value.text)
    if isinstance(entry.value, Plural):
        return Variations(
            {
                variant.rule: PluralVariation(StringUnit(variant.text))
                for variant in entry.value.variants
            }
        )
    raise TypeError(f"Unsupported entry value: {entry.value!r}")


def convert_to_catalog(tables: Iterable[LocalizationTable], source_language: str) -> Catalog:
    catalog = Catalog(source_language=source_language)
    for table in tables:
        for entry in table.entries:
            catalog_entry = catalog.strings.setdefault(entry.key, CatalogEntry())
            catalog_entry.localizations[table.language] = _to_localization(entry)
    return catalog


def _write_text(path: pathlib.Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def export_catalog(
    name: str,
    catalog: Catalog,
    output_dir: str,
    *,
    verbose: bool = False,
    echo: Callable[[str], None] = click.echo,
) -> pathlib.Path:
    output_path = pathlib.Path(output_dir) / f"{name}{CATALOG_SUFFIX}"
    try:
        text = xcstrings.dumps(catalog)
        if verbose:
            echo(text)
        _write_text(output_path, text)
    except (OSError, TypeError, ValueError) as ex:
        logger.error(f"Could not write {output_path}: {ex}")
        raise ExportFailedError("xcstrings") from ex
    logger.info(f"Exported {output_path}")
    return output_path


def run(
    *,
    source_language: str,
    paths: Iterable[str],
    output_dir: str,
    verbose: bool = False,
    echo: Callable[[str], None] = click.echo,
) -> list[pathlib.Path]:
    tables = extract_tables(paths)
    logger.info(f"Extracted {len(tables)} tables")

    exported = []
    failures = []
    for name, bucket in classify_tables(tables).items():
        catalog = convert_to_catalog(bucket, source_language)
        try:
            exported.append(
                export_catalog(name, catalog, output_dir, verbose=verbose, echo=echo)
            )
        except ExportFailedError as ex:
            failures.append(ex)

    if failures:
        raise failures[0]
    return exported
