import codecs
import logging
import plistlib
import re
from xml.parsers.expat import ExpatError

from xcstringsmigrator.classes import PLURAL_RULES
from xcstringsmigrator.errors import DecodeError

logger = logging.getLogger(__name__)

FORMAT_KEY = "NSStringLocalizedFormatKey"
SPEC_TYPE_KEY = "NSStringFormatSpecTypeKey"
VALUE_TYPE_KEY = "NSStringFormatValueTypeKey"
PLURAL_RULE_TYPE = "NSStringPluralRuleType"

_VARIABLE_REGEX = re.compile(r"%#@([^@\s]+)@")
_UNQUOTED_REGEX = re.compile(r"[A-Za-z0-9_$+/:.\-]+")
_PLAIN_REGEX = re.compile(r'[^"\\]+')
_UNICODE_ESCAPE_REGEX = re.compile(r"[0-9A-Fa-f]{1,4}")
_OCTAL_ESCAPE_REGEX = re.compile(r"[0-7]{1,3}")

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "'": "'",
    "\\": "\\",
}
_QUOTES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


class _Scanner:
    """Tokenizer for the old-style property list text used by .strings files."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> DecodeError:
        line = self.text.count("\n", 0, self.pos) + 1
        return DecodeError(f"{message} at line {line}")

    def skip(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("Unterminated comment")
                self.pos = end + 2
            else:
                break

    def peek(self) -> str:
        self.skip()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        if self.peek() != char:
            raise self.error(f"Expected '{char}'")
        self.pos += 1

    def read_string(self) -> str:
        if self.peek() == '"':
            return self._read_quoted()
        match = _UNQUOTED_REGEX.match(self.text, self.pos)
        if match is None:
            raise self.error("Expected a string")
        self.pos = match.end()
        return match.group()

    def _read_quoted(self) -> str:
        text = self.text
        self.pos += 1
        chunks = []
        while True:
            if self.pos >= len(text):
                raise self.error("Unterminated string")
            char = text[self.pos]
            if char == '"':
                self.pos += 1
                break
            if char == "\\":
                chunks.append(self._read_escape())
                continue
            match = _PLAIN_REGEX.match(text, self.pos)
            chunks.append(match.group())
            self.pos = match.end()
        # \U escapes may spell out UTF-16 surrogate pairs
        try:
            return "".join(chunks).encode("utf-16-le", "surrogatepass").decode("utf-16-le")
        except UnicodeDecodeError as ex:
            raise self.error("Invalid unicode escape") from ex

    def _read_escape(self) -> str:
        text = self.text
        if self.pos + 1 >= len(text):
            raise self.error("Unterminated string")
        char = text[self.pos + 1]
        if char in _ESCAPES:
            self.pos += 2
            return _ESCAPES[char]
        if char == "U":
            match = _UNICODE_ESCAPE_REGEX.match(text, self.pos + 2)
            if match is None:
                raise self.error("Invalid unicode escape")
            self.pos = match.end()
            return chr(int(match.group(), 16))
        match = _OCTAL_ESCAPE_REGEX.match(text, self.pos + 1)
        if match is not None:
            self.pos = match.end()
            return chr(int(match.group(), 8))
        self.pos += 2
        return char


def _decode_text(data: bytes) -> str:
    try:
        if data.startswith(codecs.BOM_UTF8):
            return data.decode("utf-8-sig")
        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            return data.decode("utf-16")
        if len(data) >= 2 and len(data) % 2 == 0:
            if data[0] == 0 and data[1] != 0:
                return data.decode("utf-16-be")
            if data[1] == 0 and data[0] != 0:
                return data.decode("utf-16-le")
        return data.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise DecodeError(f"Unsupported text encoding: {ex}") from ex


def _is_xml_plist(text: str) -> bool:
    return text.lstrip().startswith(("<?xml", "<!DOCTYPE plist", "<plist"))


def _load_plist(data: bytes):
    try:
        return plistlib.loads(data)
    except (ValueError, ExpatError) as ex:
        raise DecodeError(f"Invalid property list: {ex}") from ex


def _parse_strings_text(text: str) -> dict[str, str]:
    scanner = _Scanner(text)
    braced = scanner.peek() == "{"
    if braced:
        scanner.pos += 1

    values: dict[str, str] = {}
    while True:
        char = scanner.peek()
        if char == "":
            if braced:
                raise scanner.error("Expected '}'")
            break
        if braced and char == "}":
            scanner.pos += 1
            if scanner.peek() != "":
                raise scanner.error("Unexpected content after '}'")
            break
        key = scanner.read_string()
        if scanner.peek() == "=":
            scanner.pos += 1
            value = scanner.read_string()
        else:
            value = key
        scanner.expect(";")
        values[key] = value
    return values


def decode_singular(data: bytes) -> dict[str, str]:
    """Decodes the contents of a .strings file into a key -> text mapping.

    Text files may be UTF-8 or UTF-16. Compiled XML or binary property lists
    are accepted as long as they map strings to strings.
    """
    if data.startswith(b"bplist"):
        root = _load_plist(data)
    else:
        text = _decode_text(data)
        if not _is_xml_plist(text):
            return _parse_strings_text(text)
        root = _load_plist(data)

    if not isinstance(root, dict):
        raise DecodeError("Property list root is not a dictionary")
    for key, value in root.items():
        if not isinstance(value, str):
            raise DecodeError(f'Value for "{key}" is not a string')
    return root


def extract_variable_name(format_key: str) -> str | None:
    """Returns the variable name of a "%#@name@" format key."""
    match = _VARIABLE_REGEX.search(format_key)
    if match is None:
        return None
    return match.group(1)


def _extract_rules(key: str, entry) -> dict[str, str] | None:
    if not isinstance(entry, dict):
        logger.debug(f'Skipping "{key}": entry is not a dictionary')
        return None

    format_key = entry.get(FORMAT_KEY)
    name = extract_variable_name(format_key) if isinstance(format_key, str) else None
    if name is None:
        logger.debug(f'Skipping "{key}": no variable in {FORMAT_KEY}')
        return None

    variable = entry.get(name)
    if not isinstance(variable, dict) or variable.get(SPEC_TYPE_KEY) != PLURAL_RULE_TYPE:
        logger.debug(f'Skipping "{key}": "{name}" is not a plural rule dictionary')
        return None

    rules = {
        rule: variable[rule]
        for rule in PLURAL_RULES
        if isinstance(variable.get(rule), str)
    }
    if not rules:
        logger.debug(f'Skipping "{key}": no plural rules found')
        return None
    return rules


def decode_plural(data: bytes) -> dict[str, dict[str, str]]:
    """Decodes the contents of a .stringsdict file into key -> rule -> text.

    Entries without a usable plural rule dictionary are left out.
    """
    root = _load_plist(data)
    if not isinstance(root, dict):
        raise DecodeError("Property list root is not a dictionary")

    plurals = {}
    for key, entry in root.items():
        rules = _extract_rules(key, entry)
        if rules is not None:
            plurals[key] = rules
    return plurals


def quote_string(value: str) -> str:
    """Quotes a string the way a property list writer does in .strings files."""
    chunks = []
    for char in value:
        if char in _QUOTES:
            chunks.append(_QUOTES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            chunks.append(f"\\U{ord(char):04x}")
        else:
            chunks.append(char)
    return '"' + "".join(chunks) + '"'
