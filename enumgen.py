"""Enum name-table generator for Python.

Reads integer enumerations from an XML enum registry, normalizes each one
into a packed name table, picks a lookup strategy and renders a standalone
Python module with name conversion, reverse lookup, value listing, validity
checks and optional serialization adapters.

Usage:
    python enumgen.py --registry enums.xml --type Day --json --output-dir out
"""

import argparse
import json
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

import yaml

DEFAULT_OUTPUT_DIR = Path(".")
TOOL_NAME = "enumgen"


# ===--- CLI config contracts ---=== #

FORMAT_TEXT = "text"
FORMAT_DOCUMENT = "document"
FORMAT_TAGGED_DOCUMENT = "tagged-document"
FORMAT_STORAGE_COLUMN = "storage-column"

FORMAT_ORDER: tuple[str, ...] = (
    FORMAT_TEXT,
    FORMAT_DOCUMENT,
    FORMAT_TAGGED_DOCUMENT,
    FORMAT_STORAGE_COLUMN,
)
"""Canonical adapter order. Rendered modules and summaries follow it."""


@dataclass(frozen=True)
class GenerateConfig:
    registry: Path
    type_names: tuple[str, ...]
    all_types: bool
    output_dir: Path
    output: str | None
    trim_prefix: str
    add_prefix: str
    transform: str
    use_annotation_as_name: bool
    formats: frozenset[str]
    jobs: int = 1


@dataclass(frozen=True)
class DiscoveryConfig:
    command: str
    registry: Path


VALID_ERROR_CODES = {
    "MISSING_TYPE",
    "INVALID_TYPE_NAME",
    "INVALID_TRANSFORM",
    "INVALID_PREFIX",
    "OUTPUT_WITH_MULTIPLE_TYPES",
    "CONFLICT_GENERATE_DISCOVERY",
    "INVALID_JOBS",
    "PATH_NOT_FOUND",
}
_TYPE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PREFIX_RE = re.compile(r"^[A-Za-z0-9_]*$")


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def validate_type_name(name: str) -> str:
    if _TYPE_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_TYPE_NAME",
        f"Invalid enum type name: {name}",
        "Type names must be identifiers (for example Day or HttpStatus).",
    )


def validate_prefix(prefix: str, flag: str) -> str:
    if _PREFIX_RE.match(prefix):
        return prefix
    raise ConfigError(
        "INVALID_PREFIX",
        f"Invalid {flag} value: {prefix!r}",
        "Prefixes must be identifier fragments without spaces or punctuation.",
    )


def validate_transform(name: str) -> str:
    if name in NAME_TRANSFORMS:
        return name
    raise ConfigError(
        "INVALID_TRANSFORM",
        f"Unknown name transform: {name}",
        f"Use one of: {', '.join(NAME_TRANSFORMS)}.",
    )


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate name tables and lookups for integer enums"
    )

    type_group = parser.add_mutually_exclusive_group()
    type_group.add_argument("--type", action="append", nargs="+", default=None)
    type_group.add_argument("--all-types", action="store_true", default=False)

    parser.add_argument("--registry", type=Path, default=None)
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--output", type=str, default=None)

    parser.add_argument("--trim-prefix", type=str, default="")
    parser.add_argument("--add-prefix", type=str, default="")
    parser.add_argument("--transform", type=str, default="noop")
    parser.add_argument("--line-comment", action="store_true", default=False)

    parser.add_argument("--text", action="store_true", default=False)
    parser.add_argument("--json", action="store_true", default=False)
    parser.add_argument("--yaml", action="store_true", default=False)
    parser.add_argument("--sql", action="store_true", default=False)

    parser.add_argument("--jobs", type=int, default=1)

    parser.add_argument("--list-types", action="store_true", default=False)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def normalize_type_names(raw_types: object) -> tuple[str, ...]:
    if raw_types is None:
        return tuple()
    if not isinstance(raw_types, list):
        raise ConfigError(
            "INVALID_TYPE_NAME",
            f"Invalid --type value type: {type(raw_types).__name__}",
            "Pass enum type names as --type Name.",
        )

    normalized: list[str] = []
    for entry in raw_types:
        names = entry if isinstance(entry, list) else [entry]
        for name in names:
            if not isinstance(name, str):
                raise ConfigError(
                    "INVALID_TYPE_NAME",
                    f"Invalid enum type name type: {type(name).__name__}",
                    "Pass enum type names as --type Name.",
                )
            # --type A,B is accepted alongside --type A B.
            normalized.extend(part.strip() for part in name.split(",") if part.strip())

    return tuple(dict.fromkeys(normalized))


def selected_formats(args: argparse.Namespace) -> frozenset[str]:
    flags = {
        FORMAT_TEXT: args.text,
        FORMAT_DOCUMENT: args.json,
        FORMAT_TAGGED_DOCUMENT: args.yaml,
        FORMAT_STORAGE_COLUMN: args.sql,
    }
    return frozenset(name for name, enabled in flags.items() if enabled)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    type_names = normalize_type_names(args.type)
    has_generate_input = bool(type_names or args.all_types)

    registry_hint = "Pass the enum registry XML: --registry /path/to/enums.xml"

    if args.list_types:
        if has_generate_input:
            raise ConfigError(
                "CONFLICT_GENERATE_DISCOVERY",
                "Generate flags cannot be combined with --list-types.",
                "Choose either --type/--all-types or --list-types.",
            )
        registry = validate_path_exists(args.registry, "--registry", registry_hint)
        return DiscoveryConfig(command="list-types", registry=registry)

    if not has_generate_input:
        raise ConfigError(
            "MISSING_TYPE",
            "Generate mode requires --type or --all-types.",
            "Pass --type with one or more enum type names, or use --list-types.",
        )

    for name in type_names:
        validate_type_name(name)

    if args.output is not None and (args.all_types or len(type_names) != 1):
        raise ConfigError(
            "OUTPUT_WITH_MULTIPLE_TYPES",
            "--output names a single file but more than one type was requested.",
            "Drop --output to get one <type>_enum.py per type.",
        )

    if args.jobs < 1:
        raise ConfigError(
            "INVALID_JOBS",
            f"--jobs must be at least 1, got {args.jobs}",
            "Use --jobs 1 for sequential generation.",
        )

    registry = validate_path_exists(args.registry, "--registry", registry_hint)

    return GenerateConfig(
        registry=registry,
        type_names=type_names,
        all_types=args.all_types,
        output_dir=args.output_dir,
        output=args.output,
        trim_prefix=validate_prefix(args.trim_prefix, "--trim-prefix"),
        add_prefix=validate_prefix(args.add_prefix, "--add-prefix"),
        transform=validate_transform(args.transform),
        use_annotation_as_name=args.line_comment,
        formats=selected_formats(args),
        jobs=args.jobs,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Generation errors ---=== #

VALID_GENERATION_ERROR_CODES = {
    "EMPTY_ENUMERATION",
    "AMBIGUOUS_TYPE_SELECTION",
    "INVALID_REGISTRY",
    "INVALID_TYPE_NAME",
    "FILENAME_COLLISION",
}


class GenerationError(Exception):
    """Fatal for the one enumeration being processed, never for its siblings."""

    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_GENERATION_ERROR_CODES:
            raise ValueError(f"Unknown generation error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


class EmptyEnumeration(GenerationError):
    def __init__(self, type_name: str | None):
        if type_name:
            message = f"No constants found for type {type_name}"
        else:
            message = "No constants found to build a name table from"
        super().__init__(
            "EMPTY_ENUMERATION",
            message,
            "Declare at least one <enum> inside the type's <enums> block.",
        )
        self.type_name = type_name


class InvalidTypeName(GenerationError):
    def __init__(self, type_name: str):
        super().__init__(
            "INVALID_TYPE_NAME",
            f"Type name {type_name!r} is not a valid identifier",
            "Rename the <enums> block to an identifier (for example HttpStatus).",
        )
        self.type_name = type_name


class FilenameCollision(GenerationError):
    def __init__(self, type_name: str, filename: str, owner: str):
        super().__init__(
            "FILENAME_COLLISION",
            f"Type {type_name} would overwrite {filename}, already written for {owner}",
            f"Generate {type_name} separately with --type {type_name} --output <file>.",
        )
        self.type_name = type_name
        self.filename = filename
        self.owner = owner


class AmbiguousTypeSelection(GenerationError):
    def __init__(
        self,
        type_name: str,
        candidates: tuple[str, ...] = (),
        suggestion: str | None = None,
    ):
        if candidates:
            message = (
                f"Type {type_name} matches {len(candidates)} declarations: "
                f"{', '.join(candidates)}"
            )
        else:
            message = f"Type {type_name} is not declared in the registry"
        super().__init__("AMBIGUOUS_TYPE_SELECTION", message, suggestion)
        self.type_name = type_name
        self.candidates = candidates


class RegistryError(GenerationError):
    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__("INVALID_REGISTRY", message, suggestion)


class NameNotFound(LookupError):
    """Reverse lookup miss. Recoverable; carries the offending string."""

    def __init__(self, name: str, type_name: str):
        super().__init__(f"{name} does not belong to {type_name} values")
        self.name = name
        self.type_name = type_name

    def __str__(self) -> str:
        return self.args[0]


class DecodeError(ValueError):
    def __init__(self, format_name: str, data: object, message: str):
        super().__init__(f"{format_name} decode failed for {data!r}: {message}")
        self.format_name = format_name
        self.data = data


# ===--- Data model ---=== #

VALID_BIT_WIDTHS = (8, 16, 32, 64)


@dataclass(frozen=True)
class EnumDomain:
    """Numeric universe of one enumeration.

    Attributes:
        type_name: Declared enum type name, e.g. "Day".
        signed: Whether values are interpreted as two's-complement signed.
        bit_width: Storage width in bits; one of VALID_BIT_WIDTHS.
    """

    type_name: str
    signed: bool = True
    bit_width: int = 64

    def __post_init__(self) -> None:
        if self.bit_width not in VALID_BIT_WIDTHS:
            raise ValueError(
                f"bit_width must be one of {VALID_BIT_WIDTHS}, got {self.bit_width}"
            )

    @property
    def min_value(self) -> int:
        return -(1 << (self.bit_width - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        if self.signed:
            return (1 << (self.bit_width - 1)) - 1
        return (1 << self.bit_width) - 1

    def contains(self, value: int) -> bool:
        return self.min_value <= value <= self.max_value

    def coerce(self, value: int) -> int:
        """Fold value into the domain with two's-complement wraparound."""
        modulus = 1 << self.bit_width
        value %= modulus
        if self.signed and value > self.max_value:
            value -= modulus
        return value

    def describe(self) -> str:
        sign = "signed" if self.signed else "unsigned"
        return f"{sign} {self.bit_width}-bit"


@dataclass(frozen=True)
class RawConstant:
    identifier: str
    value: int
    annotation: str | None = None


class NormalizedEntry(NamedTuple):
    value: int
    display_name: str


@dataclass(frozen=True)
class DuplicateValueDropped:
    """A later declaration whose value was already taken. Diagnostic only."""

    identifier: str
    value: int
    kept_identifier: str


@dataclass(frozen=True)
class NameShadowed:
    """Two values resolved to the same display name; reverse lookup keeps owner_value."""

    display_name: str
    value: int
    owner_value: int


@dataclass(frozen=True)
class NormalizedEnum:
    domain: EnumDomain
    entries: tuple[NormalizedEntry, ...]
    dropped: tuple[DuplicateValueDropped, ...] = ()
    shadowed: tuple[NameShadowed, ...] = ()

    @property
    def type_name(self) -> str:
        return self.domain.type_name


class NameSpan(NamedTuple):
    value: int
    start: int
    end: int


@dataclass(frozen=True)
class NameTable:
    """All display names packed into one string plus one span per value.

    Spans partition ``packed`` in order with no gaps or overlaps; the slice
    ``packed[span.start:span.end]`` is that value's display name.
    """

    packed: str
    spans: tuple[NameSpan, ...]

    def text(self, span: NameSpan) -> str:
        return self.packed[span.start : span.end]


STRATEGY_DIRECT_INDEX = "direct-index"
STRATEGY_LOOKUP_TABLE = "lookup-table"


@dataclass(frozen=True)
class DirectIndex:
    """Contiguous values: position = value - min_value.

    offsets holds n + 1 entries; name i spans offsets[i]:offsets[i + 1].
    """

    min_value: int
    max_value: int
    offsets: tuple[int, ...]
    index_width: int

    strategy = STRATEGY_DIRECT_INDEX


@dataclass(frozen=True)
class LookupTable:
    """Sparse values: explicit value -> (start, end) span mapping."""

    spans_by_value: Mapping[int, tuple[int, int]]
    index_width: int

    strategy = STRATEGY_LOOKUP_TABLE


RepresentationPlan = DirectIndex | LookupTable


# ===--- Constant collector (XML registry) ---=== #


@dataclass(frozen=True)
class DeclaredEnum:
    """Raw constants of one enum type, merged across its declaration groups."""

    domain: EnumDomain
    constants: tuple[RawConstant, ...]
    group_count: int = 1

    @property
    def type_name(self) -> str:
        return self.domain.type_name


def _parse_int_literal(text: str, context: str) -> int:
    s = text.strip()
    negative = s.startswith("-")
    if negative:
        s = s[1:].strip()
    try:
        if s.lower().startswith("0x"):
            value = int(s, 16)
        else:
            value = int(s, 10)
    except ValueError as err:
        raise RegistryError(
            f"Invalid integer literal {text!r} in {context}",
            "Use decimal or 0x-prefixed hexadecimal values.",
        ) from err
    return -value if negative else value


def _parse_bool_attr(block: ET.Element, attr: str, default: bool) -> bool:
    raw = block.get(attr)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise RegistryError(
        f"Invalid {attr}={raw!r} on <enums name={block.get('name')!r}>",
        'Use "true" or "false".',
    )


def parse_enum_domain(block: ET.Element) -> EnumDomain:
    name = block.get("name", "")
    signed = _parse_bool_attr(block, "signed", True)
    width_text = block.get("bitwidth", "64")
    bit_width = _parse_int_literal(width_text, f"bitwidth of {name}")
    if bit_width not in VALID_BIT_WIDTHS:
        raise RegistryError(
            f"Unsupported bitwidth {bit_width} for {name}",
            f"Use one of: {', '.join(str(w) for w in VALID_BIT_WIDTHS)}.",
        )
    return EnumDomain(type_name=name, signed=signed, bit_width=bit_width)


def collect_group_constants(
    block: ET.Element, known_values: dict[str, int]
) -> list[RawConstant]:
    """Resolve one <enums> group into raw constants in declaration order.

    A constant without value, bitpos or alias continues the group's
    auto-increment sequence, starting at the group's ``start`` attribute.
    known_values maps every identifier already declared for this type
    (across groups) to its value and is updated in place.
    """
    type_name = block.get("name", "")
    next_value = _parse_int_literal(block.get("start", "0"), f"start of {type_name}")
    constants: list[RawConstant] = []

    for val in block.findall("enum"):
        name = val.get("name")
        if not name:
            raise RegistryError(f"<enum> without a name in {type_name}")
        value_str = val.get("value")
        bitpos = val.get("bitpos")
        alias = val.get("alias")
        if value_str is not None:
            int_val = _parse_int_literal(value_str, f"{type_name}.{name}")
        elif bitpos is not None:
            int_val = 1 << _parse_int_literal(bitpos, f"{type_name}.{name}")
        elif alias is not None:
            if alias not in known_values:
                raise RegistryError(
                    f"{type_name}.{name} aliases unknown constant {alias}",
                    "Aliases must name a constant declared earlier for the same type.",
                )
            int_val = known_values[alias]
        else:
            int_val = next_value

        annotation = val.get("comment")
        constants.append(RawConstant(name, int_val, annotation))
        known_values[name] = int_val
        next_value = int_val + 1

    return constants


def collect_declared_enums(root: ET.Element) -> dict[str, tuple[DeclaredEnum, ...]]:
    """Group every <enums> block of the registry by type name.

    Groups that share a name and a domain are merged into one DeclaredEnum in
    document order. Groups that share a name but disagree on the domain stay
    separate, which makes selecting that name ambiguous.
    """
    merged: dict[str, dict[EnumDomain, list[RawConstant]]] = {}
    group_counts: dict[tuple[str, EnumDomain], int] = {}
    known_values: dict[str, dict[str, int]] = {}

    for block in root.findall("enums"):
        name = block.get("name", "")
        if not name:
            raise RegistryError("<enums> block without a name attribute")
        domain = parse_enum_domain(block)
        constants = collect_group_constants(block, known_values.setdefault(name, {}))
        merged.setdefault(name, {}).setdefault(domain, []).extend(constants)
        group_counts[(name, domain)] = group_counts.get((name, domain), 0) + 1

    return {
        name: tuple(
            DeclaredEnum(domain, tuple(constants), group_counts[(name, domain)])
            for domain, constants in by_domain.items()
        )
        for name, by_domain in merged.items()
    }


def select_declared_enum(
    declared: Mapping[str, tuple[DeclaredEnum, ...]], type_name: str
) -> DeclaredEnum:
    matches = declared.get(type_name, ())
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise AmbiguousTypeSelection(
            type_name,
            tuple(f"{type_name} ({m.domain.describe()})" for m in matches),
            "Declare every group of a type with the same signed/bitwidth attributes.",
        )
    near = sorted(n for n in declared if n.lower() == type_name.lower())
    suggestion = f"Did you mean: {', '.join(near)}?" if near else "Run --list-types."
    raise AmbiguousTypeSelection(type_name, (), suggestion)


def load_registry(path: Path) -> dict[str, tuple[DeclaredEnum, ...]]:
    return collect_declared_enums(ET.parse(path).getroot())


# ===--- Enum normalizer ---=== #


def to_snake_case(name: str) -> str:
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).lower()


def to_kebab_case(name: str) -> str:
    return to_snake_case(name).replace("_", "-")


NAME_TRANSFORMS: dict[str, Callable[[str], str]] = {
    "noop": lambda name: name,
    "snake": to_snake_case,
    "snake-upper": lambda name: to_snake_case(name).upper(),
    "kebab": to_kebab_case,
    "kebab-upper": lambda name: to_kebab_case(name).upper(),
    "lower": str.lower,
    "upper": str.upper,
    "first": lambda name: name[:1],
    "first-upper": lambda name: name[:1].upper(),
    "first-lower": lambda name: name[:1].lower(),
}


@dataclass(frozen=True)
class NormalizeOptions:
    trim_prefix: str = ""
    add_prefix: str = ""
    transform: str = "noop"
    use_annotation_as_name: bool = False


def resolve_display_name(constant: RawConstant, options: NormalizeOptions) -> str:
    """Annotation verbatim when enabled and non-empty, else the derived identifier."""
    if options.use_annotation_as_name and constant.annotation:
        return constant.annotation
    name = constant.identifier
    if options.trim_prefix:
        name = name.removeprefix(options.trim_prefix)
    name = NAME_TRANSFORMS[options.transform](name)
    return options.add_prefix + name


def normalize_enum(
    domain: EnumDomain,
    constants: Sequence[RawConstant],
    options: NormalizeOptions = NormalizeOptions(),
) -> NormalizedEnum:
    if not constants:
        raise EmptyEnumeration(domain.type_name)

    kept: dict[int, RawConstant] = {}
    names: dict[int, str] = {}
    dropped: list[DuplicateValueDropped] = []
    for constant in constants:
        value = domain.coerce(constant.value)
        if value in kept:
            dropped.append(
                DuplicateValueDropped(constant.identifier, value, kept[value].identifier)
            )
            continue
        kept[value] = constant
        names[value] = resolve_display_name(constant, options)

    entries = tuple(NormalizedEntry(value, names[value]) for value in sorted(kept))

    owners: dict[str, int] = {}
    shadowed: list[NameShadowed] = []
    for entry in entries:
        owner = owners.setdefault(entry.display_name, entry.value)
        if owner != entry.value:
            shadowed.append(NameShadowed(entry.display_name, entry.value, owner))

    return NormalizedEnum(domain, entries, tuple(dropped), tuple(shadowed))


# ===--- Name table builder ---=== #


def build_name_table(entries: Sequence[NormalizedEntry]) -> NameTable:
    parts: list[str] = []
    spans: list[NameSpan] = []
    offset = 0
    for entry in entries:
        end = offset + len(entry.display_name)
        spans.append(NameSpan(entry.value, offset, end))
        parts.append(entry.display_name)
        offset = end
    return NameTable("".join(parts), tuple(spans))


# ===--- Representation selector ---=== #


def index_width_for(length: int) -> int:
    for width in VALID_BIT_WIDTHS:
        if length < (1 << width):
            return width
    raise ValueError(f"Name table too large to index: {length} characters")


def is_contiguous(entries: Sequence[NormalizedEntry]) -> bool:
    """True when the ascending values form one unbroken run."""
    if not entries:
        return False
    return entries[-1].value - entries[0].value + 1 == len(entries)


def select_representation(
    entries: Sequence[NormalizedEntry],
    table: NameTable | None = None,
    type_name: str | None = None,
) -> RepresentationPlan:
    """Choose direct indexing for gap-free value sets, a lookup table otherwise.

    The choice depends only on the values. Offsets and spans are read from
    ``table``, which is built from the same entries when omitted.

    Raises:
        EmptyEnumeration: If entries is empty. type_name only feeds the message.
    """
    if not entries:
        raise EmptyEnumeration(type_name)
    if table is None:
        table = build_name_table(entries)
    width = index_width_for(len(table.packed))

    if is_contiguous(entries):
        offsets = tuple(span.start for span in table.spans) + (len(table.packed),)
        return DirectIndex(
            min_value=entries[0].value,
            max_value=entries[-1].value,
            offsets=offsets,
            index_width=width,
        )
    return LookupTable(
        spans_by_value={span.value: (span.start, span.end) for span in table.spans},
        index_width=width,
    )


# ===--- Accessor contract ---=== #


@dataclass(frozen=True)
class AccessorNames:
    """Identifiers a front end emits for one enumeration's accessors."""

    type_name: str
    stem: str

    @classmethod
    def for_type(cls, type_name: str) -> "AccessorNames":
        return cls(type_name=type_name, stem=to_snake_case(type_name))

    @property
    def constant_prefix(self) -> str:
        return f"_{self.stem.upper()}"

    @property
    def packed_name(self) -> str:
        return f"{self.constant_prefix}_NAME"

    @property
    def index_name(self) -> str:
        return f"{self.constant_prefix}_INDEX"

    @property
    def map_name(self) -> str:
        return f"{self.constant_prefix}_MAP"

    @property
    def values_name(self) -> str:
        return f"{self.constant_prefix}_VALUES"

    @property
    def reverse_name(self) -> str:
        return f"{self.constant_prefix}_NAME_TO_VALUE"

    @property
    def to_name(self) -> str:
        return f"{self.stem}_to_name"

    @property
    def from_name(self) -> str:
        return f"{self.stem}_from_name"

    @property
    def all_values(self) -> str:
        return f"{self.stem}_values"

    @property
    def is_valid(self) -> str:
        return f"is_valid_{self.stem}"

    def encoder(self, suffix: str) -> str:
        return f"{self.stem}_to_{suffix}"

    def decoder(self, suffix: str) -> str:
        return f"{self.stem}_from_{suffix}"

    def fallback(self, value: int) -> str:
        return f"{self.type_name}({value})"


class EnumAccessor:
    """The four canonical operations over one analysed enumeration."""

    def __init__(self, type_name: str, table: NameTable, plan: RepresentationPlan):
        self.type_name = type_name
        self.table = table
        self.plan = plan
        self._values = tuple(span.value for span in table.spans)
        self._name_to_value: dict[str, int] = {}
        for span in table.spans:
            self._name_to_value.setdefault(table.text(span), span.value)

    def _span(self, value: int) -> tuple[int, int] | None:
        plan = self.plan
        if isinstance(plan, DirectIndex):
            if not plan.min_value <= value <= plan.max_value:
                return None
            index = value - plan.min_value
            return plan.offsets[index], plan.offsets[index + 1]
        return plan.spans_by_value.get(value)

    def to_name(self, value: int) -> str:
        span = self._span(value)
        if span is None:
            return f"{self.type_name}({value})"
        start, end = span
        return self.table.packed[start:end]

    def from_name(self, name: str) -> int:
        try:
            return self._name_to_value[name]
        except KeyError:
            raise NameNotFound(name, self.type_name) from None

    def all_values(self) -> tuple[int, ...]:
        return self._values

    def is_valid(self, value: int) -> bool:
        return self._span(value) is not None


# ===--- Serialization adapters ---=== #


class FormatAdapter:
    """Symmetric encode/decode pair delegating name resolution to an accessor."""

    format_name = ""
    suffix = ""

    def __init__(self, accessor: EnumAccessor):
        self.accessor = accessor

    def encode(self, value: int):
        raise NotImplementedError

    def decode(self, data):
        raise NotImplementedError

    def _lookup(self, name: str, data: object) -> int:
        try:
            return self.accessor.from_name(name)
        except NameNotFound as err:
            raise DecodeError(self.format_name, data, str(err)) from err

    def _as_text(self, data: object) -> str:
        if isinstance(data, bytes):
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as err:
                raise DecodeError(self.format_name, data, "not valid UTF-8") from err
        if isinstance(data, str):
            return data
        raise DecodeError(
            self.format_name,
            data,
            f"expected str or bytes, got {type(data).__name__}",
        )


class TextAdapter(FormatAdapter):
    format_name = FORMAT_TEXT
    suffix = "text"

    def encode(self, value: int) -> str:
        return self.accessor.to_name(value)

    def decode(self, data: str | bytes) -> int:
        return self._lookup(self._as_text(data), data)


class JsonAdapter(FormatAdapter):
    format_name = FORMAT_DOCUMENT
    suffix = "json"

    def encode(self, value: int) -> str:
        return json.dumps(self.accessor.to_name(value))

    def decode(self, data: str | bytes) -> int:
        try:
            name = json.loads(data)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as err:
            raise DecodeError(self.format_name, data, f"invalid JSON: {err}") from err
        if not isinstance(name, str):
            raise DecodeError(
                self.format_name,
                data,
                f"{self.accessor.type_name} should be a string",
            )
        return self._lookup(name, data)


class YamlAdapter(FormatAdapter):
    format_name = FORMAT_TAGGED_DOCUMENT
    suffix = "yaml"

    def encode(self, value: int) -> str:
        return yaml.safe_dump(self.accessor.to_name(value), default_style='"')

    def decode(self, data: str | bytes) -> int:
        text = self._as_text(data)
        try:
            name = yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise DecodeError(self.format_name, data, f"invalid YAML: {err}") from err
        if not isinstance(name, str):
            raise DecodeError(
                self.format_name,
                data,
                f"{self.accessor.type_name} should be a string",
            )
        return self._lookup(name, data)


class SqlAdapter(FormatAdapter):
    """Storage-column adapter. NULL columns decode to None."""

    format_name = FORMAT_STORAGE_COLUMN
    suffix = "sql"

    def encode(self, value: int) -> str:
        return self.accessor.to_name(value)

    def decode(self, data: str | bytes | None) -> int | None:
        if data is None:
            return None
        return self._lookup(self._as_text(data), data)


ADAPTER_FACTORIES: dict[str, type[FormatAdapter]] = {
    FORMAT_TEXT: TextAdapter,
    FORMAT_DOCUMENT: JsonAdapter,
    FORMAT_TAGGED_DOCUMENT: YamlAdapter,
    FORMAT_STORAGE_COLUMN: SqlAdapter,
}


def build_adapters(
    accessor: EnumAccessor, formats: Iterable[str]
) -> dict[str, FormatAdapter]:
    requested = set(formats)
    unknown = requested - ADAPTER_FACTORIES.keys()
    if unknown:
        raise ValueError(f"Unknown adapter formats: {', '.join(sorted(unknown))}")
    return {
        name: ADAPTER_FACTORIES[name](accessor)
        for name in FORMAT_ORDER
        if name in requested
    }


# ===--- Analysis pipeline ---=== #


@dataclass(frozen=True)
class EnumAnalysis:
    """Everything produced for one enumeration by one generation pass."""

    normalized: NormalizedEnum
    table: NameTable
    plan: RepresentationPlan
    accessor: EnumAccessor
    adapters: Mapping[str, FormatAdapter]
    names: AccessorNames

    @property
    def type_name(self) -> str:
        return self.normalized.type_name

    @property
    def strategy(self) -> str:
        return self.plan.strategy


def analyze_enum(
    declared: DeclaredEnum,
    options: NormalizeOptions = NormalizeOptions(),
    formats: Iterable[str] = (),
) -> EnumAnalysis:
    """Run normalize -> table -> plan -> accessor -> adapters for one type.

    Raises:
        InvalidTypeName: If the type name cannot name generated identifiers.
        EmptyEnumeration: If the type declares no constants.
    """
    if not _TYPE_NAME_RE.match(declared.type_name):
        raise InvalidTypeName(declared.type_name)
    normalized = normalize_enum(declared.domain, declared.constants, options)
    table = build_name_table(normalized.entries)
    plan = select_representation(normalized.entries, table, normalized.type_name)
    accessor = EnumAccessor(normalized.type_name, table, plan)
    return EnumAnalysis(
        normalized=normalized,
        table=table,
        plan=plan,
        accessor=accessor,
        adapters=build_adapters(accessor, formats),
        names=AccessorNames.for_type(normalized.type_name),
    )


@dataclass(frozen=True)
class EnumFailure:
    type_name: str
    error: GenerationError


@dataclass(frozen=True)
class BatchResult:
    analyses: tuple[EnumAnalysis, ...]
    failures: tuple[EnumFailure, ...] = field(default=())


def _analyze_one(
    declared: Mapping[str, tuple[DeclaredEnum, ...]],
    type_name: str,
    options: NormalizeOptions,
    formats: frozenset[str],
) -> EnumAnalysis | EnumFailure:
    try:
        selected = select_declared_enum(declared, type_name)
        return analyze_enum(selected, options, formats)
    except GenerationError as err:
        return EnumFailure(type_name, err)


def analyze_batch(
    declared: Mapping[str, tuple[DeclaredEnum, ...]],
    type_names: Sequence[str],
    options: NormalizeOptions = NormalizeOptions(),
    formats: Iterable[str] = (),
    jobs: int = 1,
) -> BatchResult:
    """Analyse each requested type independently.

    A GenerationError for one type is recorded in failures and does not stop
    the others. With jobs > 1 the types run on a thread pool; results keep
    the order of type_names either way.
    """
    requested_formats = frozenset(formats)
    if jobs > 1 and len(type_names) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            outcomes = list(
                executor.map(
                    lambda name: _analyze_one(
                        declared, name, options, requested_formats
                    ),
                    type_names,
                )
            )
    else:
        outcomes = [
            _analyze_one(declared, name, options, requested_formats)
            for name in type_names
        ]

    return BatchResult(
        analyses=tuple(o for o in outcomes if isinstance(o, EnumAnalysis)),
        failures=tuple(o for o in outcomes if isinstance(o, EnumFailure)),
    )


# ===--- Python source rendering ---=== #


def _py_str(text: str) -> str:
    # JSON string escapes are a subset of Python's.
    return json.dumps(text, ensure_ascii=False)


def _slice_expr(names: AccessorNames, start: int, end: int) -> str:
    return f"{names.packed_name}[{start}:{end}]"


def _render_forward_table(analysis: EnumAnalysis) -> list[str]:
    names = analysis.names
    plan = analysis.plan
    lines: list[str] = []
    if isinstance(plan, DirectIndex):
        offsets = ", ".join(str(o) for o in plan.offsets)
        lines.append(f"{names.index_name} = ({offsets})")
        lines.append(f"{names.constant_prefix}_MIN = {plan.min_value}")
        lines.append(f"{names.constant_prefix}_MAX = {plan.max_value}")
    else:
        lines.append(f"{names.map_name} = {{")
        for value, (start, end) in plan.spans_by_value.items():
            lines.append(f"    {value}: {_slice_expr(names, start, end)},")
        lines.append("}")
    return lines


def _render_reverse_table(analysis: EnumAnalysis) -> list[str]:
    names = analysis.names
    shadowed = {s.value for s in analysis.normalized.shadowed}
    lines = [f"{names.reverse_name} = {{"]
    for span in analysis.table.spans:
        if span.value in shadowed:
            continue
        lines.append(
            f"    {_slice_expr(names, span.start, span.end)}: {span.value},"
        )
    lines.append("}")
    return lines


def _render_accessors(analysis: EnumAnalysis) -> list[str]:
    names = analysis.names
    type_name = analysis.type_name
    prefix = names.constant_prefix
    lines: list[str] = []

    lines.append(f"def {names.to_name}(value: int) -> str:")
    lines.append(
        f'    """Return the name of a {type_name} value, or "{type_name}(<value>)"."""'
    )
    if isinstance(analysis.plan, DirectIndex):
        lines.append(f"    if {prefix}_MIN <= value <= {prefix}_MAX:")
        lines.append(f"        i = value - {prefix}_MIN")
        lines.append(
            f"        return {names.packed_name}"
            f"[{names.index_name}[i] : {names.index_name}[i + 1]]"
        )
        lines.append(f'    return f"{type_name}({{value}})"')
    else:
        lines.append(f"    name = {names.map_name}.get(value)")
        lines.append("    if name is None:")
        lines.append(f'        return f"{type_name}({{value}})"')
        lines.append("    return name")
    lines.append("")
    lines.append("")

    lines.append(f"def {names.from_name}(name: str) -> int:")
    lines.append(f'    """Return the {type_name} value whose name is ``name``."""')
    lines.append("    try:")
    lines.append(f"        return {names.reverse_name}[name]")
    lines.append("    except KeyError:")
    lines.append(
        f'        raise ValueError(f"{{name}} does not belong to {type_name} values")'
        " from None"
    )
    lines.append("")
    lines.append("")

    lines.append(f"def {names.all_values}() -> tuple[int, ...]:")
    lines.append(f"    return {names.values_name}")
    lines.append("")
    lines.append("")

    lines.append(f"def {names.is_valid}(value: int) -> bool:")
    if isinstance(analysis.plan, DirectIndex):
        lines.append(f"    return {prefix}_MIN <= value <= {prefix}_MAX")
    else:
        lines.append(f"    return value in {names.map_name}")
    return lines


def _render_text_adapter(names: AccessorNames) -> list[str]:
    return [
        f"def {names.encoder('text')}(value: int) -> str:",
        f"    return {names.to_name}(value)",
        "",
        "",
        f"def {names.decoder('text')}(text: str | bytes) -> int:",
        "    if isinstance(text, bytes):",
        '        text = text.decode("utf-8")',
        f"    return {names.from_name}(text)",
    ]


def _render_document_adapter(
    names: AccessorNames,
    type_name: str,
    suffix: str,
    dump: str,
    load: str,
    load_error: str,
) -> list[str]:
    return [
        f"def {names.encoder(suffix)}(value: int) -> str:",
        f"    return {dump.format(f'{names.to_name}(value)')}",
        "",
        "",
        f"def {names.decoder(suffix)}(data: str | bytes) -> int:",
        "    try:",
        f"        name = {load}(data)",
        f"    except {load_error} as err:",
        "        raise ValueError(",
        f'            f"{type_name} {suffix} decode failed for {{data!r}}: {{err}}"',
        "        ) from err",
        "    if not isinstance(name, str):",
        f'        raise ValueError(f"{type_name} should be a string, got {{data!r}}")',
        f"    return {names.from_name}(name)",
    ]


def _render_sql_adapter(names: AccessorNames, type_name: str) -> list[str]:
    return [
        f"def {names.encoder('sql')}(value: int) -> str:",
        f"    return {names.to_name}(value)",
        "",
        "",
        f"def {names.decoder('sql')}(column: str | bytes | None) -> int | None:",
        "    if column is None:",
        "        return None",
        "    if isinstance(column, bytes):",
        '        column = column.decode("utf-8")',
        "    if not isinstance(column, str):",
        f'        raise ValueError(f"{type_name} column is not a string: {{column!r}}")',
        f"    return {names.from_name}(column)",
    ]


def render_adapter_lines(analysis: EnumAnalysis, format_name: str) -> list[str]:
    names = analysis.names
    type_name = analysis.type_name
    if format_name == FORMAT_TEXT:
        return _render_text_adapter(names)
    if format_name == FORMAT_DOCUMENT:
        return _render_document_adapter(
            names,
            type_name,
            "json",
            "json.dumps({})",
            "json.loads",
            "(json.JSONDecodeError, TypeError)",
        )
    if format_name == FORMAT_TAGGED_DOCUMENT:
        return _render_document_adapter(
            names,
            type_name,
            "yaml",
            "yaml.safe_dump({}, default_style='\"')",
            "yaml.safe_load",
            "(yaml.YAMLError, AttributeError)",
        )
    if format_name == FORMAT_STORAGE_COLUMN:
        return _render_sql_adapter(names, type_name)
    raise ValueError(f"Unknown adapter format: {format_name}")


def render_enum_lines(analysis: EnumAnalysis) -> list[str]:
    """Render the body of a generated module for one enumeration.

    Layout: packed name constant, forward table (offset tuple for direct
    indexing, value -> slice dict for lookup tables), values tuple, reverse
    dict, the four accessors, then one encode/decode pair per adapter in
    FORMAT_ORDER. Functions are separated by two blank lines.

    Returns:
        Source lines without trailing newlines and without header or imports.
    """
    names = analysis.names
    values = ", ".join(str(v) for v in analysis.accessor.all_values())
    if len(analysis.accessor.all_values()) == 1:
        values += ","

    lines: list[str] = [f"{names.packed_name} = {_py_str(analysis.table.packed)}", ""]
    lines.extend(_render_forward_table(analysis))
    lines.append("")
    lines.append(f"{names.values_name} = ({values})")
    lines.append("")
    lines.extend(_render_reverse_table(analysis))
    lines.append("")
    lines.append("")
    lines.extend(_render_accessors(analysis))

    for format_name in analysis.adapters:
        lines.append("")
        lines.append("")
        lines.extend(render_adapter_lines(analysis, format_name))

    return lines


def required_imports(formats: Iterable[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return (stdlib, third-party) module names the rendered adapters import."""
    requested = set(formats)
    stdlib = ("json",) if FORMAT_DOCUMENT in requested else ()
    third_party = ("yaml",) if FORMAT_TAGGED_DOCUMENT in requested else ()
    return stdlib, third_party


# ===--- Module writer ---=== #


@dataclass(frozen=True)
class WriteConfig:
    """Generation metadata embedded in every file header.

    Attributes:
        source_label: Registry the enums came from, e.g. "enums.xml".
        options: Normalization options used for this run.
    """

    source_label: str
    options: NormalizeOptions = NormalizeOptions()


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing one generated module.

    Attributes:
        filename: Filename written, e.g. "day_enum.py".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of UTF-8 bytes written.
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


_HEADER_BORDER: str = "# x-------------------------------------------x #"


def format_file_header(config: WriteConfig, analysis: EnumAnalysis) -> list[str]:
    """Return the boxed provenance comment for a generated module.

    Output format:
        # x-------------------------------------------x #
        # | Prime name table
        # | Generated by enumgen
        # | Source: enums.xml
        # | Strategy: lookup-table
        # | Formats: text, document
        # x-------------------------------------------x #

    The Formats line is omitted when no adapters were requested.

    Raises:
        ValueError: If config.source_label is empty.
    """
    if not config.source_label:
        raise ValueError("source_label must not be empty")

    lines = [
        _HEADER_BORDER,
        f"# | {analysis.type_name} name table",
        f"# | Generated by {TOOL_NAME}",
        f"# | Source: {config.source_label}",
        f"# | Strategy: {analysis.strategy}",
    ]
    if analysis.adapters:
        lines.append(f"# | Formats: {', '.join(analysis.adapters)}")
    lines.append(_HEADER_BORDER)
    return lines


def format_import_block(formats: Iterable[str]) -> list[str]:
    stdlib, third_party = required_imports(formats)
    lines = [f"import {name}" for name in stdlib]
    if stdlib and third_party:
        lines.append("")
    lines.extend(f"import {name}" for name in third_party)
    return lines


def assemble_module_source(config: WriteConfig, analysis: EnumAnalysis) -> str:
    parts: list[str] = list(format_file_header(config, analysis))

    imports = format_import_block(analysis.adapters)
    if imports:
        parts.append("")
        parts.extend(imports)

    parts.append("")
    parts.extend(render_enum_lines(analysis))
    return "\n".join(parts) + "\n"


def default_filename(type_name: str) -> str:
    return f"{to_snake_case(type_name)}_enum.py"


def write_module(
    output_dir: Path,
    config: WriteConfig,
    analysis: EnumAnalysis,
    filename: str | None = None,
) -> FileWriteResult:
    """Write one generated module, creating output_dir if absent.

    Raises:
        OSError: Propagated directly if the filesystem write fails.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    name = filename or default_filename(analysis.type_name)
    content = assemble_module_source(config, analysis)
    file_path = output_dir / name
    file_path.write_text(content, encoding="utf-8")
    resolved = file_path.resolve()
    return FileWriteResult(
        filename=name,
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(content.encode("utf-8")),
    )


# ===--- Discovery ---=== #


@dataclass(frozen=True)
class TypeSummary:
    name: str
    domain_label: str
    constant_count: int
    group_count: int


def gather_type_summaries(
    declared: Mapping[str, tuple[DeclaredEnum, ...]],
) -> list[TypeSummary]:
    summaries = []
    for name, variants in declared.items():
        for variant in variants:
            summaries.append(
                TypeSummary(
                    name=name,
                    domain_label=variant.domain.describe(),
                    constant_count=len(variant.constants),
                    group_count=variant.group_count,
                )
            )
    return summaries


def format_types_table(summaries: list[TypeSummary], source_label: str) -> str:
    """Return the complete --list-types output as a string.

    Output format:

        3 enum types in enums.xml:

          Day      signed 64-bit      7 constants  1 group
          Unum     unsigned 8-bit     5 constants  2 groups

    A name listed twice has conflicting declarations and cannot be selected.
    """
    lines = [f"{len(summaries)} enum types in {source_label}:", ""]
    name_width = max((len(s.name) for s in summaries), default=0)
    for s in summaries:
        groups = f"{s.group_count} group" + ("" if s.group_count == 1 else "s")
        lines.append(
            f"  {s.name.ljust(name_width)}  {s.domain_label:<16}"
            f" {s.constant_count:>4} constants  {groups}"
        )
    lines.append("")
    return "\n".join(lines)


def run_discovery(config: DiscoveryConfig) -> None:
    declared = load_registry(config.registry)
    if config.command == "list-types":
        output = format_types_table(
            gather_type_summaries(declared), config.registry.name
        )
        print(output, end="")


# ===--- Generation summary ---=== #


@dataclass(frozen=True)
class EnumSummaryRow:
    type_name: str
    strategy: str
    value_count: int
    dropped_count: int
    shadowed_count: int


@dataclass(frozen=True)
class GenerationSummary:
    """Immutable data for the post-generation console report."""

    source_label: str
    output_dir: str
    rows: tuple[EnumSummaryRow, ...]
    failures: tuple[EnumFailure, ...]
    files: tuple[FileWriteResult, ...]


def build_generation_summary(
    write_config: WriteConfig,
    batch: BatchResult,
    files: tuple[FileWriteResult, ...],
    output_dir: Path,
) -> GenerationSummary:
    rows = tuple(
        EnumSummaryRow(
            type_name=a.type_name,
            strategy=a.strategy,
            value_count=len(a.normalized.entries),
            dropped_count=len(a.normalized.dropped),
            shadowed_count=len(a.normalized.shadowed),
        )
        for a in batch.analyses
    )
    return GenerationSummary(
        source_label=write_config.source_label,
        output_dir=str(output_dir),
        rows=rows,
        failures=batch.failures,
        files=files,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    lines: list[str] = ["Enum tables generated:", ""]
    lines.append(f"  Source:     {summary.source_label}")
    lines.append(f"  Output:     {summary.output_dir}")
    lines.append("")
    lines.append("  Types:")
    name_width = max((len(r.type_name) for r in summary.rows), default=0)
    for row in summary.rows:
        line = (
            f"    {row.type_name.ljust(name_width)}  {row.strategy:<13}"
            f"{row.value_count:>6} values"
        )
        notes = []
        if row.dropped_count:
            plural = "" if row.dropped_count == 1 else "s"
            notes.append(f"{row.dropped_count} duplicate{plural} dropped")
        if row.shadowed_count:
            notes.append(f"{row.shadowed_count} shadowed name(s)")
        if notes:
            line += f"  ({', '.join(notes)})"
        lines.append(line)

    if summary.failures:
        lines.append("")
        lines.append("  Failed:")
        for failure in summary.failures:
            lines.append(
                f"    {failure.type_name}: [{failure.error.code}] {failure.error.message}"
            )

    lines.append("")
    lines.append("  Files written:")
    for file_result in summary.files:
        lines.append(f"    {file_result.filename:<28} {file_result.line_count:>6,} lines")

    total_lines = sum(f.line_count for f in summary.files)
    lines.append("")
    lines.append(f"  Total: {total_lines:,} lines across {len(summary.files)} files")
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Generate pipeline ---=== #


@dataclass(frozen=True)
class GenerateResult:
    batch: BatchResult
    files: tuple[FileWriteResult, ...]

    @property
    def failed(self) -> bool:
        return bool(self.batch.failures)


def build_normalize_options(config: GenerateConfig) -> NormalizeOptions:
    return NormalizeOptions(
        trim_prefix=config.trim_prefix,
        add_prefix=config.add_prefix,
        transform=config.transform,
        use_annotation_as_name=config.use_annotation_as_name,
    )


def report_diagnostics(analysis: EnumAnalysis) -> None:
    for dropped in analysis.normalized.dropped:
        print(
            f"    Dropped duplicate: {dropped.identifier} = {dropped.value}"
            f" (kept {dropped.kept_identifier})"
        )
    for shadow in analysis.normalized.shadowed:
        print(
            f"    Shadowed name: {shadow.display_name!r} for {shadow.value}"
            f" (reverse lookup returns {shadow.owner_value})"
        )


def plan_output_files(batch: BatchResult, output: str | None = None) -> BatchResult:
    """Move analyses whose module filename is already taken into failures.

    The first type in batch order keeps the filename. Comparison ignores
    case so the plan holds on case-insensitive filesystems.
    """
    owners: dict[str, str] = {}
    kept: list[EnumAnalysis] = []
    collisions: list[EnumFailure] = []
    for analysis in batch.analyses:
        filename = output or default_filename(analysis.type_name)
        owner = owners.setdefault(filename.lower(), analysis.type_name)
        if owner != analysis.type_name:
            error = FilenameCollision(analysis.type_name, filename, owner)
            collisions.append(EnumFailure(analysis.type_name, error))
            continue
        kept.append(analysis)
    return BatchResult(
        analyses=tuple(kept),
        failures=batch.failures + tuple(collisions),
    )


def run_generate(config: GenerateConfig) -> GenerateResult:
    """Run collect -> analyse -> write for every requested type.

    Raises:
        OSError: Registry not readable or filesystem write failure.
        ET.ParseError: Malformed registry XML.
        RegistryError: Registry content that cannot be resolved to constants.
    """
    print(f"Parsing: {config.registry}")
    declared = load_registry(config.registry)
    print(f"  Registry: {len(declared)} enum types")

    type_names = tuple(declared) if config.all_types else config.type_names
    options = build_normalize_options(config)
    batch = plan_output_files(
        analyze_batch(declared, type_names, options, config.formats, config.jobs),
        config.output,
    )

    write_config = WriteConfig(source_label=config.registry.name, options=options)
    files: list[FileWriteResult] = []
    for analysis in batch.analyses:
        print(
            f"  {analysis.type_name}: {analysis.strategy}, "
            f"{len(analysis.normalized.entries)} values"
        )
        report_diagnostics(analysis)
        files.append(write_module(config.output_dir, write_config, analysis, config.output))
    for failure in batch.failures:
        print(f"  {failure.type_name}: failed [{failure.error.code}] {failure.error.message}")
        if failure.error.suggestion:
            print(f"    Hint: {failure.error.suggestion}")

    summary = build_generation_summary(write_config, batch, tuple(files), config.output_dir)
    print_generation_summary(summary)
    return GenerateResult(batch=batch, files=tuple(files))


# ===--- Main ---=== #


def main(argv: list[str] | None = None):
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
            return
        result = run_generate(config)
    except (OSError, ET.ParseError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err
    except GenerationError as err:
        print(f"Registry error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    if result.failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
