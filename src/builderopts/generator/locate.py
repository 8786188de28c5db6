from __future__ import annotations

from ..errors import TypeNotFoundError
from ..gosyntax.nodes import File, GenDecl, StructType, TypeSpec


def find_struct_type(program: File, name: str) -> TypeSpec:
    """Return the first type declaration named `name` whose underlying type is a struct.

    A same-named type with any other underlying type is treated as absent.
    """
    for decl in program.decls:
        if not isinstance(decl, GenDecl) or decl.keyword != "type":
            continue
        for spec in decl.specs:
            if isinstance(spec, TypeSpec) and spec.name == name and isinstance(spec.type, StructType):
                return spec
    raise TypeNotFoundError(f"could not find struct type {name} in definition file")
