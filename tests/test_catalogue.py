from collections.abc import Callable
from dataclasses import FrozenInstanceError

import pytest

import ptrgen


def test_reference_name_is_last_path_segment() -> None:
    reference = ptrgen.ExternalReference("github.com/acme/units")

    assert reference.reference_name == "units"
    assert reference.import_spec == '"github.com/acme/units"'


def test_reference_alias_overrides_path_segment() -> None:
    reference = ptrgen.ExternalReference("github.com/acme/units/v2", alias="units")

    assert reference.reference_name == "units"
    assert reference.import_spec == 'units "github.com/acme/units/v2"'


@pytest.mark.parametrize("locator", ["", "github.com/acme/"])
def test_reference_with_empty_package_name_is_rejected(locator: str) -> None:
    with pytest.raises(ptrgen.CatalogueError) as exc_info:
        ptrgen.ExternalReference(locator)

    assert "empty package name" in str(exc_info.value)


@pytest.mark.parametrize(
    ("type_name", "display_name"),
    [
        ("string", "String"),
        ("float64", "Float64"),
        ("Time", "Time"),
        ("byteSize", "ByteSize"),
    ],
)
def test_display_name_upper_cases_first_character_only(
    type_name: str, display_name: str
) -> None:
    assert ptrgen.ScalarType(type_name).display_name == display_name


def test_symbol_is_qualified_only_for_external_types() -> None:
    builtin = ptrgen.ScalarType("int32")
    external = ptrgen.ScalarType("Time", ptrgen.ExternalReference("time"))

    assert builtin.symbol == "int32"
    assert not builtin.is_external
    assert external.symbol == "time.Time"
    assert external.is_external


def test_catalogue_rejects_duplicate_type_names(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> None:
    with pytest.raises(ptrgen.CatalogueError) as exc_info:
        make_catalogue(("int", None), ("string", None), ("int", None))

    assert "Duplicate scalar type name: int" in str(exc_info.value)


def test_catalogue_rejects_empty_type_name(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> None:
    with pytest.raises(ptrgen.CatalogueError):
        make_catalogue(("", None))


def test_catalogue_rejects_conflicting_package_names(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> None:
    with pytest.raises(ptrgen.CatalogueError) as exc_info:
        make_catalogue(("Time", "time"), ("Duration", "example.com/other/time"))

    assert "'time'" in str(exc_info.value)


def test_catalogue_error_is_a_value_error() -> None:
    assert issubclass(ptrgen.CatalogueError, ValueError)


def test_required_references_deduplicated_in_first_appearance_order(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> None:
    catalogue = make_catalogue(
        ("Time", "time"),
        ("string", None),
        ("Meters", "github.com/acme/units"),
        ("Duration", "time"),
    )

    assert catalogue.required_references == (
        ptrgen.ExternalReference("time"),
        ptrgen.ExternalReference("github.com/acme/units"),
    )


def test_catalogue_preserves_insertion_order_and_is_immutable(
    make_catalogue: Callable[..., ptrgen.Catalogue],
) -> None:
    catalogue = make_catalogue(("uint8", None), ("string", None), ("int", None))

    assert [s.type_name for s in catalogue] == ["uint8", "string", "int"]
    assert len(catalogue) == 3
    with pytest.raises(FrozenInstanceError):
        catalogue.scalars = ()  # type: ignore[misc]


def test_catalogue_accepts_list_input_and_stores_tuple() -> None:
    catalogue = ptrgen.Catalogue([ptrgen.ScalarType("int")])

    assert isinstance(catalogue.scalars, tuple)


def test_default_catalogue_covers_required_scalars() -> None:
    catalogue = ptrgen.default_catalogue()
    names = [s.type_name for s in catalogue]

    assert names == [
        "string",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "float32",
        "float64",
        "Time",
    ]
    assert [s.symbol for s in catalogue if s.is_external] == ["time.Time"]
    assert catalogue.required_references == (ptrgen.ExternalReference("time"),)


def test_default_catalogue_is_built_fresh_each_call() -> None:
    assert ptrgen.default_catalogue() == ptrgen.default_catalogue()
    assert ptrgen.default_catalogue() is not ptrgen.default_catalogue()


@pytest.mark.parametrize(
    ("first", "second"),
    [
        (("time", None), ("Time", "time")),
        (("int", None), ("Int", None)),
    ],
)
def test_catalogue_rejects_types_exporting_the_same_function_names(
    make_catalogue: Callable[..., ptrgen.Catalogue],
    first: tuple[str, str | None],
    second: tuple[str, str | None],
) -> None:
    with pytest.raises(ptrgen.CatalogueError) as exc_info:
        make_catalogue(first, second)

    message = str(exc_info.value)
    assert f"{first[0]!r} and {second[0]!r}" in message
    assert f"both export {second[0]}" in message
