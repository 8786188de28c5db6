from __future__ import annotations

import pytest

from builderopts import RunConfig, generate, generate_file, generate_source
from builderopts.errors import (
    EmptyResultError,
    ParseError,
    TypeNotFoundError,
    UnsupportedFieldError,
)
from builderopts.gosyntax.nodes import FuncDecl, GenDecl
from builderopts.gosyntax.parser import parse_file

STRUCT_A = "\n".join(
    [
        "package main",
        "",
        "type A struct {",
        "\tB string",
        "\tC int",
        "\tD bool",
        "\te float32",
        "\tF interface{}",
        "}",
        "",
    ]
)


def _setter(field: str, param: str, typ: str, fn_type: str = "AFieldSetter", recv: str = "aGen", struct: str = "A") -> list[str]:
    return [
        f"func Set{field[0].upper()}{field[1:]}({param} {typ}) {fn_type} {{",
        f"\treturn func({recv} *{struct}) {{",
        f"\t\t{recv}.{field} = {param}",
        "\t}",
        "}",
    ]


def test_exported_fields_only():
    out = generate_source(STRUCT_A, RunConfig(struct_name="A"))
    assert out == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("B", "bGen", "string"),
            *_setter("C", "cGen", "int"),
            *_setter("D", "dGen", "bool"),
            *_setter("F", "fGen", "interface{}"),
            "",
        ]
    )


def test_unexported_fields_included():
    out = generate_source(STRUCT_A, RunConfig(struct_name="A", generate_for_unexported_fields=True))
    assert out == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("B", "bGen", "string"),
            *_setter("C", "cGen", "int"),
            *_setter("D", "dGen", "bool"),
            *_setter("e", "eGen", "float32"),
            *_setter("F", "fGen", "interface{}"),
            "",
        ]
    )
    assert "func SetE(eGen float32) AFieldSetter {" in out


def test_unexported_fn_type():
    out = generate_source(
        STRUCT_A,
        RunConfig(struct_name="A", export_fn_type=False, generate_for_unexported_fields=True),
    )
    assert "type aFieldSetter func(*A)\n" in out
    assert out.count(") aFieldSetter {") == 5
    assert "AFieldSetter" not in out


def test_missing_type():
    with pytest.raises(TypeNotFoundError, match=r"could not find struct type B"):
        generate_source(STRUCT_A, RunConfig(struct_name="B"))


def test_non_struct_type_with_matching_name_is_not_found():
    src = "\n".join(["package main", "", "type A string", ""])
    with pytest.raises(TypeNotFoundError):
        generate_source(src, RunConfig(struct_name="A"))


def test_unparsable_file():
    src = "\n".join(["package main", "", "type A struct {", "\tB string", ""])
    with pytest.raises(ParseError):
        generate_source(src, RunConfig(struct_name="A"))


def test_embedded_field_rejected():
    src = "\n".join(["package main", "", "type A struct {", "\tB", "\tC int", "}", ""])
    with pytest.raises(UnsupportedFieldError, match=r"embedded fields disallowed") as e:
        generate_source(src, RunConfig(struct_name="A", ignore_unsupported=False))
    assert e.value.rule == "embedded"


def test_unexported_struct_with_unexported_field():
    src = "\n".join(["package main", "", "type a struct {", "\tb int", "}", ""])
    out = generate_source(src, RunConfig(struct_name="a", generate_for_unexported_fields=True))
    assert out == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*a)",
            "",
            *_setter("b", "bGen", "int", struct="a"),
            "",
        ]
    )


def test_pointer_field():
    src = "\n".join(["package main", "", "type A struct {", "\tB *int", "}", ""])
    out = generate_source(src, RunConfig(struct_name="A"))
    assert "func SetB(bGen *int) AFieldSetter {" in out


def test_assorted_field_types():
    src = "\n".join(
        [
            "package opts",
            "",
            "type A struct {",
            "\tB, C int",
            "\td    map[string][]*int",
            "\tE    func(a, b int) (string, error)",
            "\tF    chan<- struct{}",
            "\tG    [4]byte `json:\"g\"`",
            "}",
            "",
        ]
    )
    out = generate_source(
        src,
        RunConfig(struct_name="A", generate_for_unexported_fields=True, ignore_unsupported=False),
    )
    assert out == "\n".join(
        [
            "package opts",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("B", "bGen", "int"),
            *_setter("C", "cGen", "int"),
            *_setter("d", "dGen", "map[string][]*int"),
            *_setter("E", "eGen", "func(a, b int) (string, error)"),
            *_setter("F", "fGen", "chan<- struct{}"),
            *_setter("G", "gGen", "[4]byte"),
            "",
        ]
    )


@pytest.mark.parametrize(
    "field_type",
    [
        "otherpkg.Thing",
        "*otherpkg.Thing",
        "map[string][]*otherpkg.Thing",
        "func(ctx context.Context) error",
    ],
)
def test_imported_field_types_rejected(field_type: str):
    src = "\n".join(["package main", "", "type a struct {", f"\tb {field_type}", "}", ""])
    with pytest.raises(UnsupportedFieldError, match=r"cannot generate for fields whose type is imported") as e:
        generate_source(
            src,
            RunConfig(struct_name="a", generate_for_unexported_fields=True, ignore_unsupported=False),
        )
    assert e.value.rule == "imported"
    assert e.value.field == "b"


def test_imported_only_field_ignored_leaves_nothing():
    src = "\n".join(["package main", "", "type A struct {", "\tB otherpkg.Thing", "}", ""])
    with pytest.raises(EmptyResultError, match=r"no fields in struct"):
        generate_source(src, RunConfig(struct_name="A", ignore_unsupported=True))


def test_imported_and_embedded_ignored():
    src = "\n".join(
        [
            "package main",
            "",
            'import "otherpkg"',
            "",
            "type A struct {",
            "\totherpkg.Embedded",
            "\t*Local",
            "\tB otherpkg.Thing",
            "\tC int",
            "}",
            "",
        ]
    )
    out = generate_source(src, RunConfig(struct_name="A", generate_for_unexported_fields=True))
    assert out == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("C", "cGen", "int"),
            "",
        ]
    )


def test_imported_and_embedded_with_nothing_left():
    src = "\n".join(
        [
            "package main",
            "",
            "type A struct {",
            "\totherpkg.Embedded",
            "\tB otherpkg.Thing",
            "}",
            "",
        ]
    )
    with pytest.raises(EmptyResultError):
        generate_source(src, RunConfig(struct_name="A", generate_for_unexported_fields=True))


def test_skip_struct_fields():
    src = "\n".join(["package main", "", "type A struct {", "\tB string", "\tC int", "\tD bool", "}", ""])
    out = generate_source(
        src,
        RunConfig(struct_name="A", ignore_unsupported=False, skip_fields=frozenset({"C", "D"})),
    )
    assert out == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("B", "bGen", "string"),
            "",
        ]
    )


def test_all_fields_skipped():
    src = "\n".join(["package main", "", "type A struct {", "\tC int", "\tD bool", "}", ""])
    with pytest.raises(EmptyResultError):
        generate_source(src, RunConfig(struct_name="A", skip_fields=frozenset({"C", "D"})))


def test_skipping_absent_field_changes_nothing():
    base = generate_source(STRUCT_A, RunConfig(struct_name="A"))
    skipped = generate_source(STRUCT_A, RunConfig(struct_name="A", skip_fields=frozenset({"Z", "Missing"})))
    assert skipped == base


def test_output_is_deterministic():
    cfg = RunConfig(struct_name="A", generate_for_unexported_fields=True)
    assert generate_source(STRUCT_A, cfg) == generate_source(STRUCT_A, cfg)


def test_generate_returns_declarations_in_field_order():
    output = generate(parse_file(STRUCT_A), RunConfig(struct_name="A"))
    decls = output.decls
    assert isinstance(decls[0], GenDecl)
    assert all(isinstance(d, FuncDecl) for d in decls[1:])
    assert [d.name for d in output.setters] == ["SetB", "SetC", "SetD", "SetF"]


def test_struct_found_after_other_declarations():
    src = "\n".join(
        [
            "package main",
            "",
            'import "fmt"',
            "",
            "const Version = \"1.0\"",
            "",
            "func helper() {",
            '\tfmt.Println("}")',
            "}",
            "",
            "type (",
            "\tName string",
            "\tA    struct {",
            "\t\tName Name",
            "\t}",
            ")",
            "",
        ]
    )
    out = generate_source(src, RunConfig(struct_name="A"))
    assert "func SetName(nameGen Name) AFieldSetter {" in out


def test_generate_file_reads_definition(write_go):
    path = write_go(STRUCT_A.splitlines())
    out = generate_file(path, RunConfig(struct_name="A"))
    assert out.startswith("package main\n\ntype AFieldSetter func(*A)\n")


def test_parse_error_names_definition_file(write_go):
    path = write_go(["package main", "", "type A struct {", "\tB string"], name="broken.go")
    with pytest.raises(ParseError, match=r"broken\.go:\d+:\d+:"):
        generate_file(path, RunConfig(struct_name="A"))


def test_array_length_composite_literals():
    src = "\n".join(
        [
            "package main",
            "",
            "type pad struct{ x [3]int }",
            "",
            "type A struct {",
            "\tB   int",
            "\tgap [128 - len(pad{}.x)%128]byte",
            "\tBuf [len([4]int{})]byte",
            "\tP   [unsafe.Sizeof(pad{})]byte",
            "}",
            "",
        ]
    )
    assert generate_source(src, RunConfig(struct_name="A")) == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("B", "bGen", "int"),
            *_setter("Buf", "bufGen", "[len([4]int{})]byte"),
            "",
        ]
    )


def test_parenthesized_field_type_is_unwrapped():
    src = "\n".join(["package main", "", "type A struct {", "\tS (int)", "\tF (func() (error))", "}", ""])
    assert generate_source(src, RunConfig(struct_name="A")) == "\n".join(
        [
            "package main",
            "",
            "type AFieldSetter func(*A)",
            "",
            *_setter("S", "sGen", "int"),
            *_setter("F", "fGen", "func() error"),
            "",
        ]
    )


def test_generate_file_rejects_invalid_utf8(tmp_path):
    path = tmp_path / "latin1.go"
    path.write_bytes("package main\n\n// caf\xe9\ntype A struct{ B int }\n".encode("latin-1"))
    with pytest.raises(ParseError, match=r"latin1\.go: illegal UTF-8 encoding"):
        generate_file(path, RunConfig(struct_name="A"))
