from commoner.services.transform.scope import BindingKind, ScopeTree
from tests.utils import find_nodes, first_node, parse


def test_scope_tree__on_var_assigned_later__marks_binding_non_constant() -> None:
    source_file = parse("var a = 1;\nfunction f(b) { let c = a + b; return c; }\na = 2;\n")
    scopes = ScopeTree(source_file)

    a = scopes.binding_for_declaration(first_node(source_file, "identifier", "a"))
    f = scopes.program.bindings["f"]

    assert a is not None
    assert not a.constant
    assert len(a.references) == 2
    assert len(a.violations) == 1
    assert f.kind == BindingKind.FUNCTION
    assert f.constant


def test_scope_tree__on_shadowing_parameter__resolves_to_inner_binding() -> None:
    source_file = parse("var c = 1;\nfunction f(c) { return c; }\nc;\n")
    scopes = ScopeTree(source_file)

    outer = scopes.program.bindings["c"]
    c_nodes = find_nodes(source_file, "identifier", "c")
    inner_reference = c_nodes[2]

    assert outer.constant
    assert len(outer.references) == 1
    inner = scopes.binding_for_reference(inner_reference)
    assert inner is not None
    assert inner is not outer
    assert inner.kind == BindingKind.PARAM


def test_scope_tree__on_block_scoped_let__does_not_leak_out_of_block() -> None:
    source_file = parse("let x = 1;\n{ let x = 2; x; }\nx;\n")
    scopes = ScopeTree(source_file)

    outer = scopes.program.bindings["x"]

    assert len(outer.declarations) == 1
    assert len(outer.references) == 1
    assert outer.constant


def test_scope_tree__on_var_in_block__hoists_to_function_scope() -> None:
    source_file = parse("function f() { if (a) { var x = 1; } return x; }\n")
    scopes = ScopeTree(source_file)

    x = scopes.binding_for_declaration(first_node(source_file, "identifier", "x"))

    assert x is not None
    assert x.kind == BindingKind.VAR
    assert len(x.references) == 1
    assert "x" not in scopes.program.bindings


def test_scope_tree__on_redeclared_var__is_not_constant() -> None:
    source_file = parse("var a = 1;\nvar a = 2;\n")
    scopes = ScopeTree(source_file)

    assert not scopes.program.bindings["a"].constant


def test_scope_tree__on_writes__records_every_violation_kind() -> None:
    source_file = parse(
        "var a = 1;\na++;\na += 1;\n[a] = [2];\n({ a } = { a: 3 });\nfor (a in {}) {}\n"
    )
    scopes = ScopeTree(source_file)

    assert len(scopes.program.bindings["a"].violations) == 5


def test_scope_tree__on_destructuring_declaration__binds_every_name() -> None:
    source_file = parse("const { a, b: [c, d = 1], ...rest } = obj;\n")
    scopes = ScopeTree(source_file)

    assert set(scopes.program.bindings) == {"a", "c", "d", "rest"}
    assert all(
        binding.kind == BindingKind.CONST
        for binding in scopes.program.bindings.values()
    )


def test_rename_edits__on_shorthand_and_export__keeps_property_names() -> None:
    source_file = parse("var c = 1;\nvar o = { c };\nexport { c };\n")
    scopes = ScopeTree(source_file)

    edits = scopes.rename_edits(
        scopes.program.bindings["c"], "renamed", include_declarations=False
    )

    assert sorted(edit.replacement for edit in edits) == [
        "c: renamed",
        "renamed as c",
    ]


def test_generate_uid__on_taken_names__picks_next_free_name() -> None:
    source_file = parse("var _$ = 1, $ = 2;\n")
    scopes = ScopeTree(source_file)

    assert scopes.generate_uid("$") == "_$2"
    assert scopes.generate_uid("$") == "_$3"
