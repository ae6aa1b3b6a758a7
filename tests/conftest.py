import argparse
import sys
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import enumgen  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixture_registry() -> Path:
    return FIXTURES_DIR / "enums_minimal.xml"


@pytest.fixture
def existing_paths(tmp_path: Path) -> dict[str, Path]:
    registry = tmp_path / "enums.xml"
    registry.write_text("<registry />\n", encoding="utf-8")
    return {"registry": registry, "output_dir": tmp_path / "out"}


@pytest.fixture
def missing_path(tmp_path: Path) -> Path:
    return tmp_path / "missing"


@pytest.fixture
def make_args(existing_paths: dict[str, Path]) -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "type": None,
            "all_types": False,
            "registry": existing_paths["registry"],
            "output_dir": existing_paths["output_dir"],
            "output": None,
            "trim_prefix": "",
            "add_prefix": "",
            "transform": "noop",
            "line_comment": False,
            "text": False,
            "json": False,
            "yaml": False,
            "sql": False,
            "jobs": 1,
            "list_types": False,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_registry_root() -> Callable[[str], ET.Element]:
    def _make_registry_root(inner_xml: str) -> ET.Element:
        return ET.fromstring(f"<registry>{inner_xml}</registry>")

    return _make_registry_root


@pytest.fixture
def make_declared() -> Callable[..., enumgen.DeclaredEnum]:
    def _make_declared(
        type_name: str,
        constants: list[tuple],
        *,
        signed: bool = True,
        bit_width: int = 64,
    ) -> enumgen.DeclaredEnum:
        return enumgen.DeclaredEnum(
            domain=enumgen.EnumDomain(type_name, signed=signed, bit_width=bit_width),
            constants=tuple(enumgen.RawConstant(*c) for c in constants),
        )

    return _make_declared


@pytest.fixture
def make_entries() -> Callable[..., tuple[enumgen.NormalizedEntry, ...]]:
    def _make_entries(*pairs: tuple[int, str]) -> tuple[enumgen.NormalizedEntry, ...]:
        return tuple(enumgen.NormalizedEntry(v, n) for v, n in pairs)

    return _make_entries
