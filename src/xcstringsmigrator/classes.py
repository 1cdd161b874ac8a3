import pathlib
from dataclasses import dataclass, field

PLURAL_RULES = ("zero", "one", "two", "few", "many", "other")


@dataclass
class Singular:
    text: str


@dataclass
class PluralVariant:
    rule: str
    text: str


@dataclass
class Plural:
    variants: list[PluralVariant]

    @classmethod
    def from_rules(cls, rules: dict[str, str]) -> "Plural":
        """Builds a plural value from a rule -> text mapping, ordered by rule name."""
        return cls(
            [
                PluralVariant(rule, text)
                for rule, text in sorted(rules.items())
                if rule in PLURAL_RULES
            ]
        )

    def rules(self) -> dict[str, str]:
        return {variant.rule: variant.text for variant in self.variants}


EntryValue = Singular | Plural


@dataclass
class Entry:
    key: str
    value: EntryValue


@dataclass
class LocalizationTable:
    table_name: str
    language: str
    entries: list[Entry] = field(default_factory=list)


@dataclass
class StringsFile:
    language: str
    path: pathlib.Path
    file_type: str
    table_name: str
