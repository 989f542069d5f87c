"""
Tests for the olang runtime building blocks (values, environment, builtins).
"""

import io

import pytest

from olang.runtime import (
    Value, ValueType, DefinedFunction, NativeFunction, NULL,
    int_val, string_val, bool_val, list_val, function_val, null_val, display,
    Environment, create_environment,
    BuiltinRegistry,
    ScriptException, ExceptionKind, checked_pow,
)
from olang import parse, tokenize


def empty_block():
    return parse(tokenize("{ }")).expressions[0]


def call(registry: BuiltinRegistry, name: str, args):
    """Call a registered builtin by name."""
    return registry.get_function(name).implementation(args)


# --- Value Tests ---

class TestValues:
    """Test runtime value wrappers."""

    def test_int_value(self):
        v = int_val(42)
        assert v.data == 42
        assert v.type == ValueType.INT

    def test_int_value_wraps(self):
        """Integers wrap to the signed 64-bit range."""
        assert int_val(2 ** 63).data == -(2 ** 63)
        assert int_val(-(2 ** 63) - 1).data == 2 ** 63 - 1

    def test_string_and_bool(self):
        assert string_val("hi").type == ValueType.STRING
        assert bool_val(True).data is True
        assert bool_val(0).data is False

    def test_null(self):
        assert null_val() is NULL
        assert NULL.is_null

    def test_list_value_copies(self):
        """list_val copies its input list."""
        items = [int_val(1)]
        v = list_val(items)
        items.append(int_val(2))
        assert len(v.data) == 1

    def test_structural_equality(self):
        assert int_val(3) == int_val(3)
        assert string_val("a") == string_val("a")
        assert list_val([int_val(1), string_val("x")]) == list_val([int_val(1), string_val("x")])
        assert NULL == null_val()

    def test_different_kinds_unequal(self):
        """Values of different kinds never compare equal."""
        assert int_val(1) != bool_val(True)
        assert int_val(0) != NULL
        assert string_val("1") != int_val(1)

    def test_functions_never_equal(self):
        """A function is not even equal to itself."""
        f = function_val(DefinedFunction(["a"], empty_block()))
        assert f != f
        assert not (f == f)
        assert list_val([f]) != list_val([f])

    def test_conversions(self):
        assert int_val(5).into_int() == 5
        assert string_val("s").into_str() == "s"
        assert bool_val(False).into_bool() is False
        assert list_val([]).into_list() == []

    @pytest.mark.parametrize("value,method", [
        (string_val("5"), "into_int"),
        (int_val(5), "into_str"),
        (int_val(1), "into_bool"),
        (NULL, "into_list"),
    ])
    def test_conversion_failures(self, value, method):
        with pytest.raises(ScriptException) as exc_info:
            getattr(value, method)()
        assert exc_info.value.kind == ExceptionKind.VALUE_IS_WRONG_TYPE


class TestDisplay:
    """Test the display form of values."""

    def test_scalars(self):
        assert display(bool_val(True)) == "true"
        assert display(bool_val(False)) == "false"
        assert display(int_val(-17)) == "-17"
        assert display(string_val("verbatim \\n")) == "verbatim \\n"
        assert display(NULL) == "null"

    def test_lists(self):
        v = list_val([int_val(1), string_val("two"), list_val([NULL]), list_val([])])
        assert display(v) == "[1 two [null] []]"

    def test_functions(self):
        defined = function_val(DefinedFunction(["a", "b"], empty_block()))
        native = function_val(NativeFunction("len", lambda args: NULL))
        assert display(defined) == "<fun(a b)>"
        assert display(native) == "<builtin len>"

    def test_str_uses_display(self):
        assert str(list_val([int_val(1), int_val(2)])) == "[1 2]"


class TestCheckedPow:
    """Test exponentiation overflow rules."""

    def test_small_powers(self):
        assert checked_pow(2, 10) == 1024
        assert checked_pow(-5, 1) == -5
        assert checked_pow(7, 0) == 1

    def test_zero_and_one_bases(self):
        assert checked_pow(0, 0) == 1
        assert checked_pow(0, 5) == 0
        assert checked_pow(1, -1) == 1

    def test_wraps_into_signed_range(self):
        """Results up to 2**64-1 are allowed and reinterpreted as signed."""
        assert checked_pow(2, 63) == -(2 ** 63)

    @pytest.mark.parametrize("base,exponent", [(2, 64), (2, -2), (10, 20), (-1, 2)])
    def test_overflow(self, base, exponent):
        """Negative exponents and negative bases are huge unsigned numbers."""
        with pytest.raises(ScriptException) as exc_info:
            checked_pow(base, exponent)
        assert exc_info.value.kind == ExceptionKind.EXPONENTIATION_OVERFLOWED


# --- Environment Tests ---

class TestEnvironment:
    """Test scope stack behavior."""

    def test_declare_and_get(self):
        env = Environment()
        env.declare("x", int_val(1))
        assert env.get("x") == int_val(1)
        assert env.get("missing") is None

    def test_shadowing(self):
        env = Environment()
        env.declare("x", int_val(1))
        env.push()
        env.declare("x", int_val(2))
        assert env.get("x") == int_val(2)
        env.pop()
        assert env.get("x") == int_val(1)

    def test_redeclare_overwrites(self):
        env = Environment()
        env.declare("x", int_val(1))
        env.declare("x", string_val("again"))
        assert env.get("x") == string_val("again")

    def test_assign_updates_nearest_binding(self):
        env = Environment()
        env.declare("x", int_val(1))
        env.push()
        env.assign("x", int_val(5))
        env.pop()
        assert env.get("x") == int_val(5)

    def test_assign_undeclared(self):
        env = Environment()
        with pytest.raises(ScriptException) as exc_info:
            env.assign("ghost", int_val(1))
        assert exc_info.value.kind == ExceptionKind.UNDECLARED_IDENTIFIER

    def test_get_or_fail(self):
        env = Environment()
        with pytest.raises(ScriptException) as exc_info:
            env.get_or_fail("ghost")
        assert exc_info.value.kind == ExceptionKind.UNDECLARED_IDENTIFIER
        assert exc_info.value.message == "ghost"

    def test_unwind(self):
        """unwind drops scopes back to a recorded depth."""
        env = Environment()
        env.declare("g", int_val(1))
        for _ in range(3):
            env.push()
        env.unwind(2)
        assert env.depth == 2
        env.unwind(0)
        assert env.depth == 1
        assert env.get("g") == int_val(1)

    def test_global_scope_never_popped(self):
        env = Environment()
        with pytest.raises(RuntimeError):
            env.pop()
        assert env.depth == 1

    def test_new_scope_pops_on_error(self):
        """The scope is removed even when the body raises."""
        env = Environment()
        with pytest.raises(ValueError):
            with env.new_scope():
                env.declare("tmp", int_val(1))
                assert env.depth == 2
                raise ValueError("boom")
        assert env.depth == 1
        assert env.get("tmp") is None

    def test_create_environment_has_builtins(self):
        env = create_environment()
        for name in ("printLn", "toString", "readLn", "len"):
            assert env.get(name).type == ValueType.FUNCTION

    def test_environments_are_independent(self):
        a = create_environment()
        b = create_environment()
        a.declare("x", int_val(1))
        assert b.get("x") is None


# --- Builtin Tests ---

class TestBuiltins:
    """Test the builtin functions."""

    def test_registry_names(self):
        assert BuiltinRegistry().names() == ["len", "printLn", "readLn", "toString"]

    def test_print_ln_concatenates(self):
        out = io.StringIO()
        registry = BuiltinRegistry(stdout=out)
        result = call(registry, "printLn",
                              [string_val("x = "), int_val(3), list_val([bool_val(True)])])
        assert result == NULL
        assert out.getvalue() == "x = 3[true]\n"

    def test_print_ln_without_arguments(self, capsys):
        """With no stream given, printLn writes to sys.stdout."""
        call(BuiltinRegistry(), "printLn", [])
        assert capsys.readouterr().out == "\n"

    def test_to_string(self):
        registry = BuiltinRegistry()
        assert call(registry, "toString", [int_val(12)]) == string_val("12")
        assert call(registry, "toString", [NULL]) == string_val("null")

    def test_to_string_arity(self):
        with pytest.raises(ScriptException) as exc_info:
            call(BuiltinRegistry(), "toString", [int_val(1), int_val(2)])
        assert exc_info.value.kind == ExceptionKind.WRONG_NUMBER_OF_ARGUMENTS

    def test_len(self):
        registry = BuiltinRegistry()
        assert call(registry, "len", [list_val([NULL, NULL])]) == int_val(2)

    def test_len_requires_list(self):
        with pytest.raises(ScriptException) as exc_info:
            call(BuiltinRegistry(), "len", [string_val("abc")])
        assert exc_info.value.kind == ExceptionKind.VALUE_IS_WRONG_TYPE

    def test_len_arity(self):
        with pytest.raises(ScriptException) as exc_info:
            call(BuiltinRegistry(), "len", [])
        assert exc_info.value.kind == ExceptionKind.WRONG_NUMBER_OF_ARGUMENTS

    def test_read_ln(self):
        registry = BuiltinRegistry(stdin=io.StringIO("first line\nsecond\n"))
        assert call(registry, "readLn", []) == string_val("first line")
        assert call(registry, "readLn", []) == string_val("second")
        assert call(registry, "readLn", []) == string_val("")

    def test_read_ln_from_sys_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("typed\n"))
        assert call(BuiltinRegistry(), "readLn", []) == string_val("typed")

    def test_read_ln_arity(self):
        with pytest.raises(ScriptException) as exc_info:
            call(BuiltinRegistry(), "readLn", [int_val(1)])
        assert exc_info.value.kind == ExceptionKind.WRONG_NUMBER_OF_ARGUMENTS

    def test_read_ln_io_error(self):
        """I/O failures become Custom exceptions carrying the message."""
        class BrokenStream(io.StringIO):
            def readline(self, *args):
                raise OSError("device gone")

        registry = BuiltinRegistry(stdin=BrokenStream())
        with pytest.raises(ScriptException) as exc_info:
            call(registry, "readLn", [])
        assert exc_info.value.kind == ExceptionKind.CUSTOM
        assert exc_info.value.message == "device gone"

    def test_unknown_builtin(self):
        assert BuiltinRegistry().get_function("nope") is None

    def test_as_value_is_native_function(self):
        value = BuiltinRegistry().get_function("len").as_value()
        assert value.type == ValueType.FUNCTION
        assert display(value) == "<builtin len>"
