"""
Naming utilities for generated TypeScript.

Handles case conversion, identifier validation and the naming variants
(className, fileName, ...) that every template context carries.
"""

import re
from enum import Enum
from typing import Dict, Optional, Set

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

TYPESCRIPT_RESERVED = {
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "implements", "interface",
    "let", "package", "private", "protected", "public", "static", "yield",
}

TYPESCRIPT_BUILTIN_TYPES = {
    "any", "boolean", "never", "number", "object", "string", "symbol",
    "undefined", "unknown", "bigint",
}


class NamingCase(Enum):
    """Different naming case styles."""
    SNAKE_CASE = "snake"      # user_name
    CAMEL_CASE = "camel"      # userName
    PASCAL_CASE = "pascal"    # UserName
    KEBAB_CASE = "kebab"      # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


def to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    name = re.sub(r"[-\s.]+", "_", str(name))
    # HTTPServer -> HTTP_Server, then userName -> user_Name
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub(r"_+", "_", name.lower())
    return name.strip("_")


def to_camel_case(name: str) -> str:
    parts = to_snake_case(name).split("_")
    if not parts or not parts[0]:
        return ""
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


def to_pascal_case(name: str) -> str:
    return "".join(part.capitalize() for part in to_snake_case(name).split("_") if part)


def to_kebab_case(name: str) -> str:
    return to_snake_case(name).replace("_", "-")


def to_screaming_snake_case(name: str) -> str:
    return to_snake_case(name).upper()


_CONVERTERS = {
    NamingCase.SNAKE_CASE: to_snake_case,
    NamingCase.CAMEL_CASE: to_camel_case,
    NamingCase.PASCAL_CASE: to_pascal_case,
    NamingCase.KEBAB_CASE: to_kebab_case,
    NamingCase.SCREAMING_SNAKE: to_screaming_snake_case,
}


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert name to the given case style."""
    return _CONVERTERS[target_case](name)


def is_valid_identifier(name: str, allow_reserved: bool = False) -> bool:
    """
    Check whether name can be used as a TypeScript declaration name.

    Args:
        name: Candidate identifier
        allow_reserved: Accept reserved words (valid as object keys)

    Returns:
        True if the name is syntactically valid
    """
    if not name or not _IDENTIFIER_RE.match(name):
        return False
    if not allow_reserved and name in TYPESCRIPT_RESERVED:
        return False
    return True


class NameSanitizer:
    """Turns free-form names (``"user profile"``, ``"2fa-token"``) into safe bases."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.PASCAL_CASE,
                      suffix_on_conflict: str = "_") -> str:
        """
        Sanitize a name for safe use in generated code.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for reserved-word conflicts

        Returns:
            Sanitized name
        """
        cleaned = self._clean_basic(name)
        converted = convert_case(cleaned, target_case)
        if not converted:
            converted = "item"
        if converted[0].isdigit():
            converted = f"_{converted}"
        if converted.lower() in self.reserved_words or converted.lower() in self.builtin_types:
            converted = f"{converted}{suffix_on_conflict}"
        return converted

    def _clean_basic(self, name: str) -> str:
        """Replace invalid characters and trim separators."""
        cleaned = re.sub(r"[^a-zA-Z0-9_\-\s]", "_", name)
        cleaned = cleaned.strip("_- ")
        return cleaned or "item"


def create_typescript_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for TypeScript."""
    return NameSanitizer(TYPESCRIPT_RESERVED, TYPESCRIPT_BUILTIN_TYPES)


def naming_variants(name: str, sanitizer: Optional[NameSanitizer] = None) -> Dict[str, str]:
    """
    Derive the naming variants of a domain name.

    ``"user-profile"`` gives className ``UserProfile``, fileName
    ``user-profile``, propertyName ``userProfile`` and constantName
    ``USER_PROFILE``.
    """
    sanitizer = sanitizer or create_typescript_sanitizer()
    base = sanitizer._clean_basic(name)
    class_name = to_pascal_case(base) or "Item"
    if class_name[0].isdigit():
        class_name = f"_{class_name}"
    return {
        "className": class_name,
        "fileName": to_kebab_case(base),
        "propertyName": sanitizer.sanitize_name(base, NamingCase.CAMEL_CASE),
        "constantName": to_screaming_snake_case(base),
    }
