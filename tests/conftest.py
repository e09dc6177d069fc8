import sys
from collections.abc import Callable
from pathlib import Path

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import ptrgen  # noqa: E402


@pytest.fixture
def make_catalogue() -> Callable[..., ptrgen.Catalogue]:
    def _make_catalogue(*entries: tuple[str, str | None]) -> ptrgen.Catalogue:
        scalars = []
        for type_name, locator in entries:
            reference = None if locator is None else ptrgen.ExternalReference(locator)
            scalars.append(ptrgen.ScalarType(type_name, reference))
        return ptrgen.Catalogue(tuple(scalars))

    return _make_catalogue


@pytest.fixture
def scenario_catalogue(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> ptrgen.Catalogue:
    return make_catalogue(("string", None), ("Time", "time"))


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"
