"""Go pointer helper generator.

Generates the `ptr` package helpers (value -> pointer and pointer -> value,
plus slice and map variants) for a fixed catalogue of Go scalar types.
Produces `to_ptr.go` and `from_ptr.go` in the output directory.

Usage:
    python ptrgen.py
    python ptrgen.py --output-dir ptr
    python ptrgen.py --list-types
"""

import argparse
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import jinja2

DEFAULT_OUTPUT_DIR = Path(".")
DEFAULT_PACKAGE = "ptr"
GENERATOR_NAME = "ptrgen"


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    output_dir: Path
    package: str = DEFAULT_PACKAGE
    list_types: bool = False


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Go pointer helpers for scalar types"
    )
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--list-types", action="store_true", default=False)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def build_config(argv: list[str] | None = None) -> GenerateConfig:
    args = parse_args(argv)
    return GenerateConfig(
        output_dir=args.output_dir,
        package=DEFAULT_PACKAGE,
        list_types=args.list_types,
    )


# ===--- Errors ---=== #


VALID_ERROR_STAGES = {
    "CREATE",
    "RENDER",
}


class CatalogueError(ValueError):
    """Raised when a catalogue entry violates the construction contract."""


class GenerationError(Exception):
    def __init__(
        self,
        stage: str,
        filename: str,
        message: str,
        template_name: str | None = None,
    ):
        if stage not in VALID_ERROR_STAGES:
            raise ValueError(f"Unknown generation error stage: {stage}")
        super().__init__(message)
        self.stage = stage
        self.filename = filename
        self.message = message
        self.template_name = template_name


# ===--- Type catalogue ---=== #


@dataclass(frozen=True)
class ExternalReference:
    """Home module of a scalar type declared outside the generated package.

    Attributes:
        locator: Go import path, e.g. "time" or "github.com/org/pkg/units".
        alias: Optional import alias. When set it replaces the package name
            derived from the locator in both the import line and the symbol.
    """

    locator: str
    alias: str | None = None

    def __post_init__(self) -> None:
        if not self.reference_name:
            raise CatalogueError(
                f"External reference {self.locator!r} resolves to an empty "
                f"package name"
            )

    @property
    def reference_name(self) -> str:
        """Package name used to qualify symbols: alias, else last path segment."""
        if self.alias:
            return self.alias
        return self.locator.rsplit("/", 1)[-1]

    @property
    def import_spec(self) -> str:
        if self.alias:
            return f'{self.alias} "{self.locator}"'
        return f'"{self.locator}"'


@dataclass(frozen=True)
class ScalarType:
    type_name: str
    reference: ExternalReference | None = None

    @property
    def display_name(self) -> str:
        # Only the first character changes: "float64" -> "Float64".
        return self.type_name[:1].upper() + self.type_name[1:]

    @property
    def symbol(self) -> str:
        if self.reference is not None:
            return f"{self.reference.reference_name}.{self.type_name}"
        return self.type_name

    @property
    def is_external(self) -> bool:
        return self.reference is not None


@dataclass(frozen=True)
class Catalogue:
    """Ordered, immutable list of scalar types to generate helpers for.

    Order is significant: it is the emission order of every generated
    document, so it also fixes the byte-for-byte output.

    Raises:
        CatalogueError: On an empty or duplicate type name, when two types
            export the same function names, or when two
            different references would be imported under the same package
            name.
    """

    scalars: tuple[ScalarType, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "scalars", tuple(self.scalars))

        seen_types: set[str] = set()
        exported: dict[str, str] = {}
        for scalar in self.scalars:
            if not scalar.type_name:
                raise CatalogueError("Scalar type name must not be empty")
            if scalar.type_name in seen_types:
                raise CatalogueError(
                    f"Duplicate scalar type name: {scalar.type_name}"
                )
            seen_types.add(scalar.type_name)

            previous_type = exported.get(scalar.display_name)
            if previous_type is not None:
                raise CatalogueError(
                    f"Scalar types {previous_type!r} and {scalar.type_name!r} "
                    f"both export {scalar.display_name}"
                )
            exported[scalar.display_name] = scalar.type_name

        seen_names: dict[str, ExternalReference] = {}
        for reference in self.required_references:
            previous = seen_names.get(reference.reference_name)
            if previous is not None:
                raise CatalogueError(
                    f"Imports {previous.locator!r} and {reference.locator!r} "
                    f"both resolve to package name "
                    f"{reference.reference_name!r}"
                )
            seen_names[reference.reference_name] = reference

    def __iter__(self):
        return iter(self.scalars)

    def __len__(self) -> int:
        return len(self.scalars)

    @property
    def required_references(self) -> tuple[ExternalReference, ...]:
        """Distinct external references in order of first appearance."""
        references: list[ExternalReference] = []
        for scalar in self.scalars:
            if scalar.reference is not None and scalar.reference not in references:
                references.append(scalar.reference)
        return tuple(references)


def default_catalogue() -> Catalogue:
    return Catalogue(
        (
            ScalarType("string"),
            ScalarType("int"),
            ScalarType("int8"),
            ScalarType("int16"),
            ScalarType("int32"),
            ScalarType("int64"),
            ScalarType("uint"),
            ScalarType("uint8"),
            ScalarType("uint16"),
            ScalarType("uint32"),
            ScalarType("uint64"),
            ScalarType("float32"),
            ScalarType("float64"),
            ScalarType("Time", ExternalReference("time")),
        )
    )


# ===--- Templates ---=== #

# Every template that renders a function starts with a blank line and ends
# with a newline, so documents concatenate without extra joins.

TEMPLATE_HEADER: str = "header.go"
TEMPLATE_TO_PTR: str = "to_ptr.go"
TEMPLATE_FROM_PTR: str = "from_ptr.go"
TEMPLATE_TO_POINTER_FUNC: str = "to_pointer_func.go"
TEMPLATE_TO_POINTERS_FUNC: str = "to_pointers_func.go"
TEMPLATE_FROM_POINTER_FUNC: str = "from_pointer_func.go"
TEMPLATE_FROM_POINTERS_FUNC: str = "from_pointers_func.go"

_HEADER_SOURCE = """\
// Code generated by {{ generator }}. DO NOT EDIT.

package {{ package }}
{% if references %}

import (
{% for reference in references %}
\t{{ reference.import_spec }}
{% endfor %}
)
{% endif %}
"""

_TO_PTR_SOURCE = """\
{% include "header.go" %}
{% for scalar in scalars %}
{% include "to_pointer_func.go" %}
{% include "to_pointers_func.go" %}
{% endfor %}
"""

_FROM_PTR_SOURCE = """\
{% include "header.go" %}
{% for scalar in scalars %}
{% include "from_pointer_func.go" %}
{% include "from_pointers_func.go" %}
{% endfor %}
"""

_TO_POINTER_FUNC_SOURCE = """
// {{ scalar.display_name }} returns a pointer value for the {{ scalar.symbol }} value passed in.
func {{ scalar.display_name }}(v {{ scalar.symbol }}) *{{ scalar.symbol }} {
\treturn &v
}
"""

_TO_POINTERS_FUNC_SOURCE = """
// {{ scalar.display_name }}Slice returns a slice of {{ scalar.symbol }} pointers from the values
// passed in.
func {{ scalar.display_name }}Slice(vs []{{ scalar.symbol }}) []*{{ scalar.symbol }} {
\tps := make([]*{{ scalar.symbol }}, len(vs))
\tfor i := range vs {
\t\tv := vs[i]
\t\tps[i] = &v
\t}

\treturn ps
}

// {{ scalar.display_name }}Map returns a map of {{ scalar.symbol }} pointers from the values
// passed in.
func {{ scalar.display_name }}Map(vs map[string]{{ scalar.symbol }}) map[string]*{{ scalar.symbol }} {
\tps := make(map[string]*{{ scalar.symbol }}, len(vs))
\tfor k := range vs {
\t\tv := vs[k]
\t\tps[k] = &v
\t}

\treturn ps
}
"""

_FROM_POINTER_FUNC_SOURCE = """
// To{{ scalar.display_name }} returns {{ scalar.symbol }} value dereferenced if the passed
// in pointer was not nil. Returns a {{ scalar.symbol }} zero value if the
// pointer was nil.
func To{{ scalar.display_name }}(p *{{ scalar.symbol }}) (v {{ scalar.symbol }}) {
\tif p == nil {
\t\treturn v
\t}

\treturn *p
}
"""

_FROM_POINTERS_FUNC_SOURCE = """
// To{{ scalar.display_name }}Slice returns a slice of {{ scalar.symbol }} values, that are
// dereferenced if the passed in pointer was not nil. Returns a {{ scalar.symbol }}
// zero value if the pointer was nil.
func To{{ scalar.display_name }}Slice(vs []*{{ scalar.symbol }}) []{{ scalar.symbol }} {
\tps := make([]{{ scalar.symbol }}, len(vs))
\tfor i, v := range vs {
\t\tps[i] = To{{ scalar.display_name }}(v)
\t}

\treturn ps
}

// To{{ scalar.display_name }}Map returns a map of {{ scalar.symbol }} values, that are
// dereferenced if the passed in pointer was not nil. The {{ scalar.symbol }}
// zero value is used if the pointer was nil.
func To{{ scalar.display_name }}Map(vs map[string]*{{ scalar.symbol }}) map[string]{{ scalar.symbol }} {
\tps := make(map[string]{{ scalar.symbol }}, len(vs))
\tfor k, v := range vs {
\t\tps[k] = To{{ scalar.display_name }}(v)
\t}

\treturn ps
}
"""

TEMPLATES: dict[str, str] = {
    TEMPLATE_HEADER: _HEADER_SOURCE,
    TEMPLATE_TO_PTR: _TO_PTR_SOURCE,
    TEMPLATE_FROM_PTR: _FROM_PTR_SOURCE,
    TEMPLATE_TO_POINTER_FUNC: _TO_POINTER_FUNC_SOURCE,
    TEMPLATE_TO_POINTERS_FUNC: _TO_POINTERS_FUNC_SOURCE,
    TEMPLATE_FROM_POINTER_FUNC: _FROM_POINTER_FUNC_SOURCE,
    TEMPLATE_FROM_POINTERS_FUNC: _FROM_POINTERS_FUNC_SOURCE,
}
"""Named template sources, keyed by the name used in `{% include %}`."""


class DocumentKind(enum.Enum):
    TO_POINTER = "toPointer"
    FROM_POINTER = "fromPointer"

    @property
    def template_name(self) -> str:
        if self is DocumentKind.TO_POINTER:
            return TEMPLATE_TO_PTR
        return TEMPLATE_FROM_PTR


# ===--- Template engine ---=== #


def build_environment(templates: dict[str, str] | None = None) -> jinja2.Environment:
    """Return a jinja2 environment serving the named Go templates.

    Unresolved names and attributes raise UndefinedError at render time.

    Args:
        templates: Template sources keyed by name. Defaults to TEMPLATES.
    """
    return jinja2.Environment(
        loader=jinja2.DictLoader(TEMPLATES if templates is None else templates),
        autoescape=False,
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def template_context(catalogue: Catalogue, package: str = DEFAULT_PACKAGE) -> dict:
    return {
        "generator": GENERATOR_NAME,
        "package": package,
        "scalars": catalogue.scalars,
        "references": catalogue.required_references,
    }


def render_document(
    kind: DocumentKind,
    catalogue: Catalogue,
    package: str = DEFAULT_PACKAGE,
    environment: jinja2.Environment | None = None,
) -> str:
    """Render one complete Go source document to a string.

    Raises:
        jinja2.TemplateError: A template name or context value could not be
            resolved.
    """
    env = build_environment() if environment is None else environment
    template = env.get_template(kind.template_name)
    return template.render(template_context(catalogue, package))


def stream_document(
    kind: DocumentKind,
    catalogue: Catalogue,
    handle: TextIO,
    package: str = DEFAULT_PACKAGE,
    environment: jinja2.Environment | None = None,
) -> None:
    """Render one document directly into an open text handle.

    Output is written as it is produced, so a render failure leaves a
    truncated document behind in `handle`.

    Raises:
        jinja2.TemplateError: A template name or context value could not be
            resolved.
    """
    env = build_environment() if environment is None else environment
    template = env.get_template(kind.template_name)
    template.stream(template_context(catalogue, package)).dump(handle)


# ===--- Emitter ---=== #


OUTPUT_DOCUMENTS: tuple[tuple[str, DocumentKind], ...] = (
    ("to_ptr.go", DocumentKind.TO_POINTER),
    ("from_ptr.go", DocumentKind.FROM_POINTER),
)
"""Generated files in write order, each with the document kind it holds."""


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single generated file.

    Attributes:
        filename: Filename written, e.g. "to_ptr.go".
        kind: Document kind rendered into the file.
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    kind: DocumentKind
    path: Path
    line_count: int
    byte_count: int


@dataclass(frozen=True)
class GenerationResult:
    output_dir: Path
    package: str
    type_count: int
    external_count: int
    files: tuple[FileWriteResult, ...]

    @property
    def total_lines(self) -> int:
        """Sum of line_count across all written files."""
        return sum(f.line_count for f in self.files)


def emit_document(
    output_dir: Path,
    filename: str,
    kind: DocumentKind,
    catalogue: Catalogue,
    package: str = DEFAULT_PACKAGE,
    environment: jinja2.Environment | None = None,
) -> FileWriteResult:
    """Create (or truncate) one output file and render a document into it.

    The file handle is closed on every exit path. A file left behind by a
    failed render is a diagnostic artifact only.

    Raises:
        GenerationError: stage "CREATE" when the file cannot be opened (the
            template engine is never invoked), stage "RENDER" when template
            expansion or the write fails after the file was created.
    """
    file_path = Path(output_dir) / filename
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handle = file_path.open("w", encoding="utf-8", newline="\n")
    except OSError as err:
        raise GenerationError(
            "CREATE",
            filename,
            f"failed to create {filename} file, {err}",
        ) from err

    try:
        with handle:
            stream_document(kind, catalogue, handle, package, environment)
        resolved = file_path.resolve()
        content = resolved.read_bytes()
    except jinja2.TemplateError as err:
        raise GenerationError(
            "RENDER",
            filename,
            f"failed to generate {filename} file from template "
            f"{kind.template_name!r} ({kind.value}), {err}",
            template_name=kind.template_name,
        ) from err
    except OSError as err:
        raise GenerationError(
            "RENDER",
            filename,
            f"failed to write {filename} file from template "
            f"{kind.template_name!r} ({kind.value}), {err}",
            template_name=kind.template_name,
        ) from err

    return FileWriteResult(
        filename=filename,
        kind=kind,
        path=resolved,
        line_count=content.count(b"\n"),
        byte_count=len(content),
    )


def emit_all(
    config: GenerateConfig,
    catalogue: Catalogue,
    environment: jinja2.Environment | None = None,
) -> GenerationResult:
    """Write every OUTPUT_DOCUMENTS file in order, stopping at the first error.

    Raises:
        GenerationError: Propagated from emit_document; later files are not
            attempted.
    """
    env = build_environment() if environment is None else environment
    files: list[FileWriteResult] = []
    for filename, kind in OUTPUT_DOCUMENTS:
        print(f"Generating: {filename}")
        files.append(
            emit_document(
                config.output_dir, filename, kind, catalogue, config.package, env
            )
        )
    return GenerationResult(
        output_dir=Path(config.output_dir).resolve(),
        package=config.package,
        type_count=len(catalogue),
        external_count=sum(1 for s in catalogue if s.is_external),
        files=tuple(files),
    )


# ===--- Summary report ---=== #


def format_generation_summary(result: GenerationResult) -> str:
    """Render a GenerationResult to the console summary string.

    Returns a string with exactly one trailing newline. Line counts use
    thousands separators.
    """
    lines: list[str] = []
    lines.append("Pointer helpers generated:")
    lines.append("")
    lines.append(f"  Package:    {result.package}")
    lines.append(f"  Output:     {result.output_dir}")
    if result.external_count > 0:
        lines.append(
            f"  Types:      {result.type_count}"
            f"  ({result.external_count} from external packages)"
        )
    else:
        lines.append(f"  Types:      {result.type_count}")
    lines.append("")
    lines.append("  Files written:")
    for file_result in result.files:
        line_str = f"{file_result.line_count:>6,} lines"
        lines.append(f"    {file_result.filename:<16} {line_str}")
    lines.append("")
    lines.append(
        f"  Total: {result.total_lines:,} lines across {len(result.files)} files"
    )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(result: GenerationResult) -> None:
    print(format_generation_summary(result), end="")


def format_types_table(catalogue: Catalogue) -> str:
    """Render the catalogue as a fixed-width table for --list-types."""
    rows = [("Type", "Name", "Symbol", "Import")]
    for scalar in catalogue:
        locator = scalar.reference.locator if scalar.reference is not None else "-"
        rows.append((scalar.type_name, scalar.display_name, scalar.symbol, locator))

    widths = [max(len(row[col]) for row in rows) for col in range(3)]
    lines: list[str] = []
    for row in rows:
        cells = [row[col].ljust(widths[col]) for col in range(3)]
        lines.append("  ".join([*cells, row[3]]))
    lines.append("")
    lines.append(f"{len(catalogue)} types")
    return "\n".join(lines) + "\n"


# ===--- Main generation ---=== #


def run_generate(config: GenerateConfig, catalogue: Catalogue) -> GenerationResult:
    result = emit_all(config, catalogue)
    print_generation_summary(result)
    return result


def main(argv: list[str] | None = None) -> None:
    config = build_config(argv)

    try:
        catalogue = default_catalogue()
    except ValueError as err:
        print(f"Internal error: {err}")
        raise SystemExit(1) from err

    if config.list_types:
        print(format_types_table(catalogue), end="")
        return

    try:
        run_generate(config, catalogue)
    except GenerationError as err:
        print(f"Generation error [{err.stage}]: {err.message}")
        if err.stage == "RENDER":
            print(f"Hint: {err.filename} is incomplete and must not be used.")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
