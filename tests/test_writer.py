from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

import enumgen

NUMBER_MODULE = '''\
# x-------------------------------------------x #
# | Number name table
# | Generated by enumgen
# | Source: enums.xml
# | Strategy: direct-index
# x-------------------------------------------x #

_NUMBER_NAME = "OneTwoThree"

_NUMBER_INDEX = (0, 3, 6, 11)
_NUMBER_MIN = 1
_NUMBER_MAX = 3

_NUMBER_VALUES = (1, 2, 3)

_NUMBER_NAME_TO_VALUE = {
    _NUMBER_NAME[0:3]: 1,
    _NUMBER_NAME[3:6]: 2,
    _NUMBER_NAME[6:11]: 3,
}


def number_to_name(value: int) -> str:
    """Return the name of a Number value, or "Number(<value>)"."""
    if _NUMBER_MIN <= value <= _NUMBER_MAX:
        i = value - _NUMBER_MIN
        return _NUMBER_NAME[_NUMBER_INDEX[i] : _NUMBER_INDEX[i + 1]]
    return f"Number({value})"


def number_from_name(name: str) -> int:
    """Return the Number value whose name is ``name``."""
    try:
        return _NUMBER_NAME_TO_VALUE[name]
    except KeyError:
        raise ValueError(f"{name} does not belong to Number values") from None


def number_values() -> tuple[int, ...]:
    return _NUMBER_VALUES


def is_valid_number(value: int) -> bool:
    return _NUMBER_MIN <= value <= _NUMBER_MAX
'''


def _write_config() -> enumgen.WriteConfig:
    return enumgen.WriteConfig(source_label="enums.xml")


def _analyze(
    make_declared: Callable[..., enumgen.DeclaredEnum],
    type_name: str,
    constants: list[tuple],
    formats: tuple[str, ...] = (),
    options: enumgen.NormalizeOptions = enumgen.NormalizeOptions(),
) -> enumgen.EnumAnalysis:
    return enumgen.analyze_enum(make_declared(type_name, constants), options, formats)


@pytest.fixture
def number(make_declared: Callable[..., enumgen.DeclaredEnum]) -> enumgen.EnumAnalysis:
    return _analyze(
        make_declared,
        "Number",
        [("One", 1), ("Two", 2), ("Three", 3), ("AnotherOne", 1)],
    )


@pytest.fixture
def gap(make_declared: Callable[..., enumgen.DeclaredEnum]) -> enumgen.EnumAnalysis:
    return _analyze(
        make_declared,
        "Gap",
        [("Two", 2), ("Three", 3), ("Five", 5), ("Eleven", 11)],
        tuple(enumgen.FORMAT_ORDER),
    )


def _load_generated(source: str) -> dict[str, object]:
    namespace: dict[str, object] = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    return namespace


def test_t_01_assemble_module_source_direct_index_golden(
    number: enumgen.EnumAnalysis,
) -> None:
    assert enumgen.assemble_module_source(_write_config(), number) == NUMBER_MODULE


def test_t_02_lookup_table_renders_value_to_slice_map(gap: enumgen.EnumAnalysis) -> None:
    lines = enumgen.render_enum_lines(gap)

    assert lines[0] == '_GAP_NAME = "TwoThreeFiveEleven"'
    assert "_GAP_MAP = {" in lines
    assert "    2: _GAP_NAME[0:3]," in lines
    assert "    11: _GAP_NAME[12:18]," in lines
    assert "    return value in _GAP_MAP" in lines
    assert not any("_GAP_INDEX" in line for line in lines)


def test_t_03_header_lists_formats_and_strategy(gap: enumgen.EnumAnalysis) -> None:
    lines = enumgen.format_file_header(_write_config(), gap)

    assert "# | Strategy: lookup-table" in lines
    assert "# | Formats: text, document, tagged-document, storage-column" in lines
    assert lines[0] == lines[-1]


def test_t_04_header_omits_formats_line_without_adapters(
    number: enumgen.EnumAnalysis,
) -> None:
    lines = enumgen.format_file_header(_write_config(), number)

    assert not any(line.startswith("# | Formats:") for line in lines)


def test_t_05_header_requires_source_label(number: enumgen.EnumAnalysis) -> None:
    with pytest.raises(ValueError):
        enumgen.format_file_header(enumgen.WriteConfig(source_label=""), number)


def test_t_06_import_block_groups_stdlib_before_third_party() -> None:
    assert enumgen.format_import_block(
        [enumgen.FORMAT_TAGGED_DOCUMENT, enumgen.FORMAT_DOCUMENT]
    ) == ["import json", "", "import yaml"]
    assert enumgen.format_import_block([enumgen.FORMAT_TEXT]) == []


def test_t_07_generated_module_round_trips_every_adapter(
    gap: enumgen.EnumAnalysis,
) -> None:
    module = _load_generated(enumgen.assemble_module_source(_write_config(), gap))

    for value in gap.accessor.all_values():
        name = module["gap_to_name"](value)
        assert name == gap.accessor.to_name(value)
        assert module["gap_from_name"](name) == value
        assert module["gap_from_text"](module["gap_to_text"](value)) == value
        assert module["gap_from_json"](module["gap_to_json"](value)) == value
        assert module["gap_from_yaml"](module["gap_to_yaml"](value)) == value
        assert module["gap_from_sql"](module["gap_to_sql"](value)) == value
    assert module["gap_to_name"](4) == "Gap(4)"
    assert module["is_valid_gap"](4) is False
    assert module["gap_values"]() == (2, 3, 5, 11)
    assert module["gap_from_sql"](None) is None


def test_t_08_generated_from_name_reports_offending_string(
    number: enumgen.EnumAnalysis,
) -> None:
    module = _load_generated(enumgen.assemble_module_source(_write_config(), number))

    with pytest.raises(ValueError, match="NotARealName does not belong to Number"):
        module["number_from_name"]("NotARealName")


def test_t_09_shadowed_names_are_left_out_of_reverse_table(
    make_declared: Callable[..., enumgen.DeclaredEnum],
) -> None:
    analysis = _analyze(
        make_declared,
        "Alias",
        [("A", 1, "Same"), ("B", 2, "Same")],
        options=enumgen.NormalizeOptions(use_annotation_as_name=True),
    )

    lines = enumgen.render_enum_lines(analysis)

    assert "    _ALIAS_NAME[0:4]: 1," in lines
    assert "    _ALIAS_NAME[4:8]: 2," not in lines


def test_t_10_single_value_tuple_keeps_trailing_comma(
    make_declared: Callable[..., enumgen.DeclaredEnum],
) -> None:
    analysis = _analyze(make_declared, "Solo", [("Only", 5)])

    assert "_SOLO_VALUES = (5,)" in enumgen.render_enum_lines(analysis)


def test_t_11_packed_string_is_escaped_as_python_literal(
    make_declared: Callable[..., enumgen.DeclaredEnum],
) -> None:
    analysis = _analyze(
        make_declared,
        "Quote",
        [("A", 0, 'say "hi"'), ("B", 1, "back\\slash")],
        options=enumgen.NormalizeOptions(use_annotation_as_name=True),
    )

    module = _load_generated(enumgen.assemble_module_source(_write_config(), analysis))

    assert module["quote_to_name"](0) == 'say "hi"'
    assert module["quote_to_name"](1) == "back\\slash"


def test_t_12_write_module_reports_truthful_counts(
    tmp_path: Path, number: enumgen.EnumAnalysis
) -> None:
    output_dir = tmp_path / "nested" / "out"

    result = enumgen.write_module(output_dir, _write_config(), number)

    content = (output_dir / "number_enum.py").read_text(encoding="utf-8")
    assert result.filename == "number_enum.py"
    assert result.path == (output_dir / "number_enum.py").resolve()
    assert result.line_count == content.count("\n")
    assert result.byte_count == len(content.encode("utf-8"))


def test_t_13_write_module_honours_explicit_filename(
    tmp_path: Path, number: enumgen.EnumAnalysis
) -> None:
    result = enumgen.write_module(tmp_path, _write_config(), number, "numbers.py")

    assert result.filename == "numbers.py"
    assert (tmp_path / "numbers.py").exists()


def test_t_14_render_is_deterministic(gap: enumgen.EnumAnalysis) -> None:
    assert enumgen.render_enum_lines(gap) == enumgen.render_enum_lines(gap)


@pytest.mark.parametrize(
    ("function", "payload"),
    [
        ("gap_from_json", "{not json"),
        ("gap_from_json", b"nope"),
        ("gap_from_yaml", "key: [unclosed"),
        ("gap_from_yaml", 5),
    ],
)
def test_t_15_generated_document_decoders_name_malformed_input(
    gap: enumgen.EnumAnalysis, function: str, payload: object
) -> None:
    module = _load_generated(enumgen.assemble_module_source(_write_config(), gap))

    with pytest.raises(ValueError) as exc_info:
        module[function](payload)

    assert repr(payload) in str(exc_info.value)
    assert str(exc_info.value).startswith("Gap ")
