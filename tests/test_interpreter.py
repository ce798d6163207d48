"""Evaluator tests: expression semantics, control flow, closures and classes."""

import pytest

from loxlib.loxast import (
    GroupingExpression,
    LiteralExpression,
    PrintStatement,
    SequenceExpression,
)
from loxlib.loxerrors import (
    ArityMismatch,
    DivisionByZero,
    LoxTypeError,
    UndefinedProperty,
    UndefinedVariable,
)


# --------------------------------------------------------------------
# Arithmetic and operators


def test_float_arithmetic(session):
    assert session.evaluate("(-50) * 23.133") == pytest.approx(-1156.65)
    assert session.evaluate("1.0 / 2.0") == 0.5
    assert session.evaluate("1 + 2 * 3 - 4") == 3.0
    assert session.evaluate("-(3 - 5)") == 2.0


def test_division_by_zero(session):
    with pytest.raises(DivisionByZero):
        session.evaluate("1 / 0")


def test_division_by_zero_is_checked_before_operand_types(session):
    with pytest.raises(DivisionByZero):
        session.evaluate('"a" / 0')
    with pytest.raises(LoxTypeError):
        session.evaluate('"a" / 2')


@pytest.mark.parametrize(
    "source,expected",
    [
        ('"a" + "b"', "ab"),
        ('"x" + 1', "x1"),
        ('1 + "x"', "1x"),
        ('"x" + 1.5', "x1.5"),
        ('"is " + true', "is true"),
        ('"is " + nil', "is nil"),
    ],
)
def test_string_concatenation(session, source, expected):
    assert session.evaluate(source) == expected


@pytest.mark.parametrize(
    "source,message",
    [
        ("1 + nil", "Operands must be two numbers or at least one string."),
        ('1 < "a"', "Operands must be numbers."),
        ("true - 1", "Operands must be numbers."),
        ('-"a"', "Operand must be a number."),
    ],
)
def test_operand_type_errors(session, source, message):
    with pytest.raises(LoxTypeError, match=message):
        session.evaluate(source)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("nil == nil", True),
        ("nil == false", False),
        ("false == nil", False),
        ("1 == 1", True),
        ('"a" == "a"', True),
        ('1 == "1"', False),
        ("true == 1", False),
        ("0 == false", False),
        ("1 != 2", True),
        ("nil != nil", False),
    ],
)
def test_equality(session, source, expected):
    assert session.evaluate(source) is expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("1 < 2", True),
        ("2 <= 2", True),
        ("3 > 4", False),
        ("4 >= 5", False),
    ],
)
def test_comparison(session, source, expected):
    assert session.evaluate(source) is expected


def test_truthiness(lox):
    s = lox(
        """
        if (0) print "zero";
        if ("") print "empty";
        if (nil) print "nil"; else print "nil is falsy";
        if (false) print "false"; else print "false is falsy";
        print !nil;
        print !0;
        """
    )
    assert s.output == ["zero", "empty", "nil is falsy", "false is falsy", "true", "false"]


def test_logical_operators_short_circuit(lox):
    s = lox(
        """
        var calls = 0;
        fun bump() { calls = calls + 1; return true; }
        print nil or "right";
        print "left" or bump();
        print false and bump();
        print 1 and 2;
        print calls;
        """
    )
    assert s.output == ["right", "left", "false", "2", "0"]


def test_sequence_yields_last_value(lox, session):
    s = lox(
        """
        var a = 0;
        print (a = 1, a = a + 1, a * 10);
        print a;
        """
    )
    assert s.output == ["20", "2"]
    assert session.interpreter.for_expression(SequenceExpression([])) is None


# --------------------------------------------------------------------
# Printing


def test_print_renders_values(lox):
    s = lox(
        """
        print 3;
        print 2.5;
        print -0.25;
        print true;
        print nil;
        print "text";
        fun f() {}
        print f;
        print fun () {};
        print clock;
        class A {}
        print A;
        print A();
        """
    )
    assert s.output == [
        "3", "2.5", "-0.25", "true", "nil", "text",
        "<fn f>", "<fn>", "<native fn>", "A", "A instance",
    ]


def test_top_level_expressions_are_echoed(lox):
    s = lox("1 + 2; var a = 4; a; print 5;", echo=True)
    assert s.output == ["3", "4", "5"]


def test_echo_can_be_disabled(lox):
    s = lox("1 + 2; print 5;", echo=False)
    assert s.output == ["5"]


def test_clock_is_a_number(lox):
    s = lox("print clock() > 0;")
    assert s.output == ["true"]


# --------------------------------------------------------------------
# Variables and scopes


def test_variables(lox):
    s = lox(
        """
        var a;
        print a;
        var b = 1;
        print b = 2;
        print b;
        var b = "redefined";
        print b;
        """
    )
    assert s.output == ["nil", "2", "2", "redefined"]


def test_block_shadowing(lox):
    s = lox(
        """
        var x = "outer";
        {
            var x = "inner";
            print x;
            x = "changed";
            print x;
        }
        print x;
        """
    )
    assert s.output == ["inner", "changed", "outer"]


def test_assignment_to_enclosing_scope(lox):
    s = lox(
        """
        {
            var a = 1;
            {
                a = a + 1;
            }
            print a;
        }
        """
    )
    assert s.output == ["2"]


def test_undefined_variable(session):
    with pytest.raises(UndefinedVariable, match="Undefined variable 'nope'."):
        session.evaluate("nope")
    with pytest.raises(UndefinedVariable):
        session.evaluate("nope = 1")


def test_runtime_error_aborts_only_its_statement(lox):
    s = lox(
        """
        print "before";
        print undefinedVar;
        print "after";
        """
    )
    assert s.output == ["before", "after"]
    assert s.errors == ["Undefined variable 'undefinedVar'.\n[line 3]"]
    assert s.reporter.had_runtime_error
    assert not s.reporter.had_error


def test_environment_is_restored_after_error_in_block(lox):
    s = lox(
        """
        { var a = 1; print nope; }
        var y = "ok";
        print y;
        """
    )
    assert s.output == ["ok"]
    assert len(s.errors) == 1


def test_static_errors_prevent_execution(lox):
    s = lox('print "never"; break;')
    assert s.output == []
    assert s.errors == [
        "[line 1] Error at 'break': break statement must be used inside a loop."
    ]

    s = lox('print "never"; { var a = a; }')
    assert s.output == []
    assert len(s.errors) == 1


# --------------------------------------------------------------------
# Control flow


def test_if_else(lox):
    s = lox(
        """
        if (1 > 2) print "then"; else print "else";
        if (true) if (false) print "inner"; else print "dangling";
        """
    )
    assert s.output == ["else", "dangling"]


def test_while_and_for(lox):
    s = lox(
        """
        var i = 0;
        while (i < 3) { print i; i = i + 1; }
        for (var j = 0; j < 2; j = j + 1) print "j" + j;
        """
    )
    assert s.output == ["0", "1", "2", "j0", "j1"]


def test_for_loop_variable_is_scoped(lox):
    s = lox(
        """
        for (var k = 0; k < 1; k = k + 1) {}
        print k;
        """
    )
    assert s.output == []
    assert s.errors == ["Undefined variable 'k'.\n[line 3]"]


def test_break_exits_innermost_loop_only(lox):
    s = lox(
        """
        for (var i = 0; i < 3; i = i + 1) {
            for (var j = 0; j < 3; j = j + 1) {
                if (j == 1) break;
                print i * 10 + j;
            }
        }
        """
    )
    assert s.output == ["0", "10", "20"]


def test_break_from_infinite_loop(lox):
    s = lox(
        """
        var n = 0;
        while (true) {
            n = n + 1;
            if (n == 5) break;
        }
        print n;
        """
    )
    assert s.output == ["5"]


def test_return_unwinds_loops(lox):
    s = lox(
        """
        fun find(limit) {
            for (var i = 0; ; i = i + 1) {
                while (true) {
                    if (i == limit) return i;
                    break;
                }
            }
        }
        print find(3);
        """
    )
    assert s.output == ["3"]


# --------------------------------------------------------------------
# Functions and closures


def test_function_calls(lox):
    s = lox(
        """
        fun add(a, b) { return a + b; }
        fun nothing() {}
        fun early() { return; print "unreachable"; }
        print add(1, 2);
        print nothing();
        print early();
        """
    )
    assert s.output == ["3", "nil", "nil"]


def test_recursion(lox):
    s = lox(
        """
        fun fib(n) {
            if (n < 2) return n;
            return fib(n - 1) + fib(n - 2);
        }
        print fib(15);
        {
            fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); }
            print fact(5);
        }
        """
    )
    assert s.output == ["610", "120"]


def test_closure_counter(lox):
    s = lox(
        """
        fun make() {
            var i = 0;
            fun inc() { i = i + 1; return i; }
            return inc;
        }
        var c = make();
        print c();
        print c();
        var d = make();
        print d();
        """
    )
    assert s.output == ["1", "2", "1"]


def test_closures_share_captured_frame(lox):
    s = lox(
        """
        var get;
        var set;
        {
            var value = "initial";
            get = fun () { return value; };
            set = fun (v) { value = v; };
        }
        set("updated");
        print get();
        """
    )
    assert s.output == ["updated"]


def test_closure_binds_at_declaration(lox):
    s = lox(
        """
        var a = "global";
        {
            fun show() { print a; }
            show();
            var a = "block";
            show();
        }
        """
    )
    assert s.output == ["global", "global"]


def test_function_literals(lox):
    s = lox(
        """
        var twice = fun (f, x) { return f(f(x)); };
        print twice(fun (n) { return n * 3; }, 2);
        print (fun () { return "now"; })();
        """
    )
    assert s.output == ["18", "now"]


def test_call_errors(session):
    session.run("fun f(a, b) {} class A {} class B { init(x) {} }")

    with pytest.raises(LoxTypeError, match="Can only call functions and classes."):
        session.evaluate('"abc"()')

    with pytest.raises(ArityMismatch, match="Expected 2 arguments but got 1.") as info:
        session.evaluate("f(1)")
    assert (info.value.expected, info.value.got) == (2, 1)

    with pytest.raises(ArityMismatch, match="Expected 0 arguments but got 1."):
        session.evaluate("A(1)")

    with pytest.raises(ArityMismatch, match="Expected 1 arguments but got 0."):
        session.evaluate("B()")


def test_arguments_are_evaluated_left_to_right(lox):
    s = lox(
        """
        fun show(x) { print x; return x; }
        fun three(a, b, c) { return a + b + c; }
        print three(show("a"), show("b"), show("c"));
        """
    )
    assert s.output == ["a", "b", "c", "abc"]


def test_stack_overflow_is_a_runtime_error(lox):
    s = lox(
        """
        fun forever() { forever(); }
        forever();
        print "after";
        """
    )
    assert s.output == ["after"]
    assert s.errors == ["Stack overflow.\n[line 2]"]


# --------------------------------------------------------------------
# Classes


def test_fields_and_methods(lox):
    s = lox(
        """
        class Point {
            init(x, y) { this.x = x; this.y = y; }
            sum() { return this.x + this.y; }
        }
        var p = Point(1, 2);
        print p.sum();
        p.x = 10;
        print p.sum();
        var m = p.sum;
        print m();
        """
    )
    assert s.output == ["3", "12", "12"]


def test_fields_shadow_methods(lox):
    s = lox(
        """
        class A { m() { return "method"; } }
        var a = A();
        a.m = "field";
        print a.m;
        """
    )
    assert s.output == ["field"]


def test_init_always_returns_the_instance(lox):
    s = lox(
        """
        class P {
            init(x) { this.x = x; return; }
        }
        class Q { init() { return 5; } }
        var p = P(3);
        print p;
        print p.x;
        print Q();
        print p.init(7);
        print p.x;
        """
    )
    assert s.output == ["P instance", "3", "Q instance", "P instance", "7"]


def test_inherited_method_is_bound_to_subclass_instance(lox):
    s = lox(
        """
        class A {
            name() { return "A"; }
            who() { return this.name(); }
        }
        class B < A {
            name() { return "B"; }
        }
        var b = B();
        print b.who();
        var who = b.who;
        print who();
        """
    )
    assert s.output == ["B", "B"]


def test_inherited_initializer(lox):
    s = lox(
        """
        class Base { init(v) { this.v = v; } }
        class Derived < Base {}
        print Derived(4).v;
        """
    )
    assert s.output == ["4"]


def test_super_dispatches_from_defining_class(lox):
    s = lox(
        """
        class A { method() { return "A method"; } }
        class B < A {
            method() { return "B method"; }
            test() { return super.method(); }
        }
        class C < B {}
        print C().test();
        """
    )
    assert s.output == ["A method"]


def test_super_in_initializer_chain(lox):
    s = lox(
        """
        class Shape { init(name) { this.name = name; } }
        class Circle < Shape {
            init(r) { super.init("circle"); this.r = r; }
            describe() { return this.name + " " + this.r; }
        }
        print Circle(2).describe();
        """
    )
    assert s.output == ["circle 2"]


def test_class_can_reference_itself(lox):
    s = lox(
        """
        class Node {
            init(next) { this.next = next; }
            prepend() { return Node(this); }
        }
        var list = Node(nil).prepend().prepend();
        print list.next.next.next;
        """
    )
    assert s.output == ["nil"]


def test_property_errors(session):
    session.run("class A {} class B < A { m() { return super.nope; } } var x = 1;")

    with pytest.raises(UndefinedProperty, match="Undefined property 'missing'."):
        session.evaluate("A().missing")
    with pytest.raises(UndefinedProperty, match="Undefined property 'nope'."):
        session.evaluate("B().m()")
    with pytest.raises(LoxTypeError, match="Only instances have properties."):
        session.evaluate("x.y")
    with pytest.raises(LoxTypeError, match="Only instances have fields."):
        session.evaluate("x.y = 2")


def test_superclass_must_be_a_class(lox):
    s = lox(
        """
        var NotAClass = "nope";
        class B < NotAClass {}
        print "after";
        """
    )
    assert s.output == ["after"]
    assert s.errors == ["Superclass must be a class.\n[line 3]"]


def test_deep_recursion_is_not_an_overflow(lox):
    s = lox(
        """
        fun depth(n) {
            if (n == 0) return 0;
            return 1 + depth(n - 1);
        }
        print depth(1000);
        """
    )
    assert s.errors == []
    assert s.output == ["1000"]


def test_deeply_nested_expression_is_reported(lox):
    nesting = 20000
    s = lox("print " + "(" * nesting + "1" + ")" * nesting + ";\nprint 2;")
    assert s.output == []
    assert len(s.errors) == 1
    assert s.errors[0].startswith("[line 1] Error at ")
    assert s.errors[0].endswith(": Nesting too deep.")


def test_runaway_evaluation_depth_is_reported(session):
    expr = LiteralExpression(1.0)
    for _ in range(100000):
        expr = GroupingExpression(expr)

    session.interpreter.interpret([PrintStatement(expr)])
    session.run('print "after";')
    assert session.errors == ["Stack overflow."]
    assert session.output == ["after"]


# --------------------------------------------------------------------
# Numbers


def test_number_rendering(lox):
    s = lox(
        """
        print 1000000000000000000000000;
        print "n=" + 100000000000000000000000;
        print -1000000000000000000000000;
        print 12345678.5;
        print 9999999;
        print 0.0001;
        print 0.001;
        print -0;
        """
    )
    assert s.output == [
        "1.0E24", "n=1.0E23", "-1.0E24", "1.23456785E7",
        "9999999", "1.0E-4", "0.001", "-0",
    ]


def test_nan_equals_itself(lox):
    huge = "1" + "0" * 400
    s = lox(
        f"""
        var inf = {huge};
        var nan = inf - inf;
        print inf;
        print -inf;
        print nan;
        print nan == nan;
        print nan != nan;
        print nan == 0;
        print "x" + nan;
        """
    )
    assert s.output == [
        "Infinity", "-Infinity", "NaN", "true", "false", "false", "xNaN",
    ]
