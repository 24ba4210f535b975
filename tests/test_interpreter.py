import pytest

from dryad.errors import DryadError
from dryad.interpreter import Interpreter
from dryad.nodes import (
    ArrayLiteral,
    Assignment,
    Binary,
    Block,
    Break,
    CatchClause,
    ClassDeclaration,
    Continue,
    DoWhile,
    Expression,
    For,
    ForEach,
    FunctionDeclaration,
    If,
    IfElse,
    Index,
    Lambda,
    Literal,
    MethodCall,
    MethodEntry,
    MethodMember,
    ObjectLiteral,
    PostIncrement,
    Program,
    PropertyAccess,
    PropertyAssignment,
    PropertyEntry,
    PropertyMember,
    Return,
    This,
    Throw,
    Try,
    TupleLiteral,
    Unary,
    Variable,
    VarDeclaration,
    Visibility,
    While,
    Call,
)
from dryad.values import DryadException, Instance, same_value


def L(value):
    return Literal(value)


def V(name):
    return Variable(name)


def B(left, op, right):
    return Binary(left, op, right)


def E(expr):
    return Expression(expr)


def let(name, init=None):
    return VarDeclaration(name, init)


def assign(name, expr):
    return Assignment(name, expr)


def block(*statements):
    return Block(statements)


def call(name, *args):
    return Call(V(name), args)


def fn(name, params, *body):
    return FunctionDeclaration(name, params, Block(body))


def run(*statements):
    return Interpreter().execute_and_return_value(Program(statements))


# ---------------------------------------------------------------- blocks


def test_empty_block():
    assert run(block()) is None


def test_simple_block_with_variable():
    assert run(block(let("x", L(42)))) is None


def test_block_variable_scoping():
    interp = Interpreter()
    result = interp.execute_and_return_value(
        Program([block(let("x", L(10))), let("y", L(20))])
    )
    assert result is None
    with pytest.raises(DryadError) as info:
        interp.evaluate(V("x"))
    assert info.value.code == 3001


def test_nested_block_scoping():
    assert run(block(let("x", L(1)), block(let("y", L(2))))) is None


def test_block_with_expressions():
    assert run(block(E(B(L(5), "+", L(3))), E(L("hello")), E(L(True)))) is True


def test_block_multiple_statements():
    assert run(block(let("a", L(5)), let("b", L(10)), E(B(V("a"), "+", V("b"))))) == 15.0


def test_block_variable_access_and_modification():
    assert run(block(let("x", L(42)), E(V("x")))) == 42.0
    assert run(block(let("x", L(10)), assign("x", L(20)), E(V("x")))) == 20.0


def test_multiple_blocks_separate_scopes():
    assert run(block(let("x", L(1))), block(let("x", L(2)), E(V("x")))) == 2.0


def test_deeply_nested_blocks():
    assert run(block(block(block(let("x", L(99)), E(V("x")))))) == 99.0


def test_block_complex_expression():
    body = B(B(V("a"), "+", V("b")), "*", L(2))
    assert run(block(let("a", L(5)), let("b", L(3)), E(body))) == 16.0


def test_block_string_operations():
    expr = B(B(V("greeting"), "+", L(" ")), "+", V("name"))
    result = run(block(let("greeting", L("Hello")), let("name", L("World")), E(expr)))
    assert result == "Hello World"


def test_block_boolean_logic():
    expr = B(V("a"), "&&", Unary("!", V("b")))
    assert run(block(let("a", L(True)), let("b", L(False)), E(expr))) is True


def test_block_sequence_evaluation():
    assert run(block(E(L(1)), E(L(2)), E(L(3)))) == 3.0


def test_block_variable_shadowing():
    assert run(let("x", L(1)), block(let("x", L(2)), E(V("x")))) == 2.0


def test_block_preserves_outer_scope():
    assert run(let("x", L(10)), block(let("x", L(20))), E(V("x"))) == 10.0


def test_mixed_nested_block_patterns():
    inner = block(let("c", L(3)), E(B(B(V("a"), "+", V("b")), "+", V("c"))))
    assert run(block(let("a", L(1)), block(let("b", L(2)), inner))) == 6.0


def test_block_mathematical_sequence():
    stmts = [let("sum", L(0))]
    stmts += [assign("sum", B(V("sum"), "+", L(n))) for n in (1, 2, 3)]
    stmts.append(E(V("sum")))
    assert run(block(*stmts)) == 6.0


# ---------------------------------------------------------- control flow


@pytest.mark.parametrize("condition,expected", [(True, "alterado"), (False, "nao_alterado")])
def test_simple_if(condition, expected):
    result = run(
        let("resultado", L("nao_alterado")),
        If(L(condition), block(assign("resultado", L("alterado")))),
        E(V("resultado")),
    )
    assert result == expected


@pytest.mark.parametrize("idade,expected", [(20, "maior"), (16, "menor"), (18, "maior")])
def test_if_with_condition(idade, expected):
    result = run(
        let("idade", L(idade)),
        let("status", L("menor")),
        If(B(V("idade"), ">=", L(18)), block(assign("status", L("maior")))),
        E(V("status")),
    )
    assert result == expected


@pytest.mark.parametrize("nota,expected", [(8.5, "aprovado"), (5.5, "reprovado"), (7.5, "aprovado")])
def test_if_else(nota, expected):
    result = run(
        let("nota", L(nota)),
        let("resultado", L("")),
        IfElse(
            B(V("nota"), ">=", L(7.0)),
            block(assign("resultado", L("aprovado"))),
            block(assign("resultado", L("reprovado"))),
        ),
        E(V("resultado")),
    )
    assert result == expected


@pytest.mark.parametrize(
    "pontuacao,expected",
    [(95, "excelente"), (85, "bom"), (75, "regular"), (60, "insuficiente")],
)
def test_if_else_chain(pontuacao, expected):
    def set_to(text):
        return block(assign("classificacao", L(text)))

    chain = IfElse(
        B(V("pontuacao"), ">=", L(90)),
        set_to("excelente"),
        IfElse(
            B(V("pontuacao"), ">=", L(80)),
            set_to("bom"),
            IfElse(B(V("pontuacao"), ">=", L(70)), set_to("regular"), set_to("insuficiente")),
        ),
    )
    result = run(
        let("pontuacao", L(pontuacao)), let("classificacao", L("")), chain,
        E(V("classificacao")),
    )
    assert result == expected


@pytest.mark.parametrize("y,expected", [(3, "ambos_positivos"), (-3, "nenhum")])
def test_nested_if(y, expected):
    result = run(
        let("x", L(5)),
        let("y", L(y)),
        let("resultado", L("nenhum")),
        If(
            B(V("x"), ">", L(0)),
            block(If(B(V("y"), ">", L(0)), block(assign("resultado", L("ambos_positivos"))))),
        ),
        E(V("resultado")),
    )
    assert result == expected


@pytest.mark.parametrize("ativo,expected", [(True, True), (False, False)])
def test_if_complex_condition(ativo, expected):
    cond = B(B(V("idade"), ">=", L(18)), "&&", B(V("ativo"), "==", L(True)))
    result = run(
        let("idade", L(25)), let("ativo", L(ativo)), let("elegivel", L(False)),
        If(cond, block(assign("elegivel", L(True)))), E(V("elegivel")),
    )
    assert result is expected


def test_if_with_multiple_statements():
    result = run(
        let("valor", L(150)), let("total", L(100)), let("bonus", L(0)),
        let("aplicado", L(False)),
        If(
            B(V("valor"), ">", L(100)),
            block(
                assign("bonus", B(V("valor"), "*", L(0.1))),
                assign("total", B(V("total"), "+", V("bonus"))),
                assign("aplicado", L(True)),
            ),
        ),
        E(V("total")),
    )
    assert result == 115.0


def test_if_scoping_and_shadowing():
    assert run(
        let("x", L(10)),
        If(L(True), block(let("y", L(20)), assign("x", B(V("x"), "+", V("y"))))),
        E(V("x")),
    ) == 30.0
    assert run(
        let("resultado", L("externo")),
        If(L(True), block(let("resultado", L("interno")))),
        E(V("resultado")),
    ) == "externo"


def test_if_else_scoping():
    result = run(
        let("escolha", L(True)), let("resultado", L(0)),
        IfElse(
            V("escolha"),
            block(let("temp", L(10)), assign("resultado", B(V("temp"), "*", L(2)))),
            block(let("temp", L(5)), assign("resultado", B(V("temp"), "*", L(3)))),
        ),
        E(V("resultado")),
    )
    assert result == 20.0


def test_while_loop_counts():
    result = run(
        let("i", L(0)),
        While(B(V("i"), "<", L(5)), block(assign("i", B(V("i"), "+", L(1))))),
        E(V("i")),
    )
    assert result == 5.0


def test_do_while_runs_body_once():
    result = run(
        let("n", L(0)),
        DoWhile(block(assign("n", B(V("n"), "+", L(1)))), L(False)),
        E(V("n")),
    )
    assert result == 1.0


def test_for_with_undeclared_variable_fails():
    loop = For(assign("i", L(0)), B(V("i"), "<", L(3)),
               assign("i", B(V("i"), "+", L(1))), block())
    with pytest.raises(DryadError) as info:
        run(loop)
    assert info.value.code == 3001


# -------------------------------------------------------------- functions


def test_simple_function():
    assert run(fn("test", (), Return(L(42))), E(call("test"))) == 42.0


def test_function_with_parameters():
    assert run(fn("dobrar", ("x",), Return(B(V("x"), "*", L(2)))), E(call("dobrar", L(21)))) == 42.0


def test_function_with_multiple_parameters():
    body = Return(B(B(V("a"), "+", V("b")), "+", V("c")))
    assert run(fn("somar", ("a", "b", "c"), body),
               E(call("somar", L(10), L(20), L(12)))) == 42.0


def test_function_without_return():
    assert run(fn("semRetorno", (), let("x", L(10))), E(call("semRetorno"))) is None


def test_function_string_concatenation():
    body = Return(B(B(L("Olá, "), "+", V("nome")), "+", L("!")))
    assert run(fn("saudacao", ("nome",), body), E(call("saudacao", L("Maria")))) == "Olá, Maria!"


def test_function_calling_another():
    result = run(
        fn("dobrar", ("x",), Return(B(V("x"), "*", L(2)))),
        fn("quadruplar", ("x",), Return(call("dobrar", call("dobrar", V("x"))))),
        E(call("quadruplar", L(10))),
    )
    assert result == 40.0


def test_recursive_function():
    result = run(
        fn("fatorial", ("n",),
           If(B(V("n"), "<=", L(1)), block(Return(L(1)))),
           Return(B(V("n"), "*", call("fatorial", B(V("n"), "-", L(1)))))),
        E(call("fatorial", L(5))),
    )
    assert result == 120.0


def test_function_with_local_variables():
    result = run(
        fn("calcular", (), let("a", L(10)), let("b", L(20)),
           let("c", B(V("a"), "+", V("b"))), Return(B(V("c"), "*", L(2)))),
        E(call("calcular")),
    )
    assert result == 60.0


def test_function_scope_isolation():
    result = run(
        let("global", L(100)),
        fn("modificar", (), let("global", L(50)), Return(V("global"))),
        let("resultado", call("modificar")),
        E(B(V("global"), "+", V("resultado"))),
    )
    assert result == 150.0


def test_function_early_return():
    result = run(
        fn("verificar", ("x",),
           If(B(V("x"), ">", L(10)), block(Return(L("grande")))),
           Return(L("pequeno"))),
        E(call("verificar", L(15))),
    )
    assert result == "grande"


def test_function_expression_arguments():
    result = run(
        fn("somar", ("a", "b"), Return(B(V("a"), "+", V("b")))),
        E(call("somar", B(L(5), "*", L(2)), B(L(8), "+", L(4)))),
    )
    assert result == 22.0


def test_function_wrong_argument_count():
    with pytest.raises(DryadError) as info:
        run(fn("test", ("a", "b"), Return(B(V("a"), "+", V("b")))), E(call("test", L(1))))
    assert info.value.code == 3004


def test_undefined_function():
    with pytest.raises(DryadError) as info:
        run(E(call("inexistente")))
    assert info.value.code == 3003


def test_returned_array_becomes_text():
    result = run(fn("lista", (), Return(ArrayLiteral([L(1), L(2)]))), E(call("lista")))
    assert result == "[1, 2]"


def test_print_fallback_returns_text():
    assert run(E(call("print", L(3)))) == "3"


def test_lambda_captures_scope():
    result = run(
        let("k", L(10)),
        let("f", Lambda(("x",), B(V("x"), "+", V("k")))),
        assign("k", L(20)),
        E(call("f", L(1))),
    )
    assert result == 11.0


# ---------------------------------------------------------------- foreach


def test_foreach_array_sum():
    result = run(
        let("sum", L(0)),
        let("numbers", ArrayLiteral([L(n) for n in (10, 20, 30, 40, 50)])),
        ForEach("num", V("numbers"), block(assign("sum", B(V("sum"), "+", V("num"))))),
        E(V("sum")),
    )
    assert result == 150.0


def test_foreach_nested_arrays():
    matrix = ArrayLiteral([ArrayLiteral([L(1), L(2)]), ArrayLiteral([L(3), L(4)]),
                           ArrayLiteral([L(5), L(6)])])
    result = run(
        let("total", L(0)), let("matrix", matrix),
        ForEach("row", V("matrix"), block(
            ForEach("cell", V("row"), block(assign("total", B(V("total"), "+", V("cell"))))))),
        E(V("total")),
    )
    assert result == 21.0


def test_foreach_string_iteration():
    result = run(
        let("char_count", L(0)), let("text", L("Hello")),
        ForEach("c", V("text"), block(assign("char_count", B(V("char_count"), "+", L(1))))),
        E(V("char_count")),
    )
    assert result == 5.0


def test_foreach_break_continue():
    result = run(
        let("sum", L(0)),
        ForEach("x", ArrayLiteral([L(n) for n in range(1, 11)]), block(
            If(B(V("x"), "==", L(5)), block(Continue())),
            If(B(V("x"), "==", L(8)), block(Break())),
            assign("sum", B(V("sum"), "+", V("x"))),
        )),
        E(V("sum")),
    )
    assert result == 23.0


def test_foreach_tuple_mixed_types():
    result = run(
        let("count", L(0)),
        let("mixed", TupleLiteral([L(1), L("text"), L(True), L(42)])),
        ForEach("item", V("mixed"), block(assign("count", B(V("count"), "+", L(1))))),
        E(V("count")),
    )
    assert result == 4.0


def test_foreach_vs_traditional_for():
    foreach = run(
        let("sum_foreach", L(0)),
        ForEach("x", ArrayLiteral([L(n) for n in range(1, 6)]),
                block(assign("sum_foreach", B(V("sum_foreach"), "+", V("x"))))),
        E(V("sum_foreach")),
    )
    traditional = run(
        let("sum_traditional", L(0)),
        let("i", L(1)),
        For(assign("i", L(1)), B(V("i"), "<=", L(5)), assign("i", B(V("i"), "+", L(1))),
            block(assign("sum_traditional", B(V("sum_traditional"), "+", V("i"))))),
        E(V("sum_traditional")),
    )
    assert foreach == 15.0
    assert traditional == 15.0
    assert same_value(foreach, traditional)


def test_foreach_empty_collections():
    inc = block(assign("count", B(V("count"), "+", L(1))))
    result = run(
        let("count", L(0)),
        ForEach("x", ArrayLiteral([]), inc),
        ForEach("y", TupleLiteral([]), inc),
        ForEach("z", L(""), inc),
        E(V("count")),
    )
    assert result == 0.0


def test_foreach_not_iterable():
    with pytest.raises(DryadError) as info:
        run(ForEach("x", L(5), block()))
    assert info.value.code == 3030


# ---------------------------------------------------------------- classes


def test_simple_static_method():
    cls = ClassDeclaration("MathUtils", None, [
        MethodMember(Visibility.PUBLIC, True, "pi", (), block(Return(L(3.14159)))),
    ])
    assert run(cls, E(MethodCall(V("MathUtils"), "pi", ()))) == 3.14159


def test_static_method_with_parameters():
    cls = ClassDeclaration("Calculadora", None, [
        MethodMember(Visibility.PUBLIC, True, "somar", ("a", "b"),
                     block(Return(B(V("a"), "+", V("b"))))),
    ])
    assert run(cls, E(MethodCall(V("Calculadora"), "somar", (L(5), L(3))))) == 8.0


def _calculadora():
    return ClassDeclaration("Calculadora", None, [
        MethodMember(Visibility.PUBLIC, True, "pi", (), block(Return(L(3.14159)))),
        MethodMember(Visibility.PUBLIC, True, "circunferencia", ("raio",), block(Return(
            B(B(L(2), "*", MethodCall(V("Calculadora"), "pi", ())), "*", V("raio"))))),
    ])


def test_static_method_calling_another():
    result = run(_calculadora(), E(MethodCall(V("Calculadora"), "circunferencia", (L(5),))))
    assert result == 2.0 * 3.14159 * 5.0


def test_static_syntax_example():
    result = run(
        _calculadora(),
        let("circ", MethodCall(V("Calculadora"), "circunferencia", (L(5),))),
        E(V("circ")),
    )
    assert result == 2.0 * 3.14159 * 5.0


def test_non_static_method_called_statically():
    cls = ClassDeclaration("Test", None, [
        MethodMember(Visibility.PUBLIC, False, "instanceMethod", (),
                     block(Return(L("instance")))),
    ])
    with pytest.raises(DryadError) as info:
        run(cls, E(MethodCall(V("Test"), "instanceMethod", ())))
    assert "não é estático" in info.value.message
    assert info.value.code == 3024


def test_multiple_static_methods():
    cls = ClassDeclaration("MathUtils", None, [
        MethodMember(Visibility.PUBLIC, True, "add", ("a", "b"),
                     block(Return(B(V("a"), "+", V("b"))))),
        MethodMember(Visibility.PUBLIC, True, "multiply", ("a", "b"),
                     block(Return(B(V("a"), "*", V("b"))))),
        MethodMember(Visibility.PUBLIC, True, "calculate", ("x", "y"), block(
            let("sum", MethodCall(V("MathUtils"), "add", (V("x"), V("y")))),
            let("product", MethodCall(V("MathUtils"), "multiply", (V("x"), V("y")))),
            Return(B(V("sum"), "+", V("product"))),
        )),
    ])
    assert run(cls, E(MethodCall(V("MathUtils"), "calculate", (L(3), L(4))))) == 19.0


def _pessoa():
    return ClassDeclaration("Pessoa", None, [
        PropertyMember(Visibility.PUBLIC, False, "nome"),
        MethodMember(Visibility.PUBLIC, False, "init", ("n",),
                     block(PropertyAssignment(This(), "nome", V("n")))),
        MethodMember(Visibility.PUBLIC, False, "saudar", (),
                     block(Return(B(L("Oi, "), "+", PropertyAccess(This(), "nome"))))),
        MethodMember(Visibility.PRIVATE, False, "segredo", (), block(Return(L(1)))),
    ])


def test_instance_constructor_and_method():
    interp = Interpreter()
    result = interp.execute_and_return_value(Program([
        _pessoa(),
        let("p", call("Pessoa", L("Ana"))),
        E(MethodCall(V("p"), "saudar", ())),
    ]))
    assert result == "Oi, Ana"
    instance = interp.get_variable("p")
    assert isinstance(instance, Instance)
    assert instance.properties == {"nome": "Ana"}
    assert interp.evaluate(PropertyAccess(V("p"), "nome")) == "Ana"


def test_private_method_rejected():
    with pytest.raises(DryadError) as info:
        run(_pessoa(), let("p", call("Pessoa", L("Ana"))),
            E(MethodCall(V("p"), "segredo", ())))
    assert info.value.code == 3024


def test_constructor_argument_count():
    with pytest.raises(DryadError) as info:
        run(_pessoa(), E(call("Pessoa")))
    assert info.value.code == 3032


def test_object_literal_method_uses_this():
    obj = ObjectLiteral([
        PropertyEntry("valor", L(3)),
        MethodEntry("dobro", (), block(Return(B(PropertyAccess(This(), "valor"), "*", L(2))))),
    ])
    assert run(let("obj", obj), E(MethodCall(V("obj"), "dobro", ()))) == 6.0


def test_this_outside_instance():
    with pytest.raises(DryadError) as info:
        run(E(This()))
    assert info.value.code == 3022


# ------------------------------------------------------------ try / misc


def test_catch_binds_exception():
    interp = Interpreter()
    result = interp.execute_and_return_value(Program([
        Try(block(Throw(L("falhou"))), CatchClause("e", block(E(V("e"))))),
    ]))
    assert result == DryadException("falhou")
    assert interp.get_variable("e") is None


def test_finally_value_and_rethrow():
    assert run(Try(block(E(L(1))), None, block(E(L(2))))) == 2.0
    with pytest.raises(DryadError) as info:
        run(Try(block(Throw(L("erro"))), None, block(E(L(2)))))
    assert info.value.code == 3020
    assert info.value.message == "erro"


def test_index_access_and_errors():
    arr = ArrayLiteral([L(10), L(20)])
    assert run(E(Index(arr, L(1)))) == 20.0
    for index, code in ((L(2), 3082), (L(-1), 3080), (L("a"), 3081)):
        with pytest.raises(DryadError) as info:
            run(E(Index(arr, index)))
        assert info.value.code == code
    with pytest.raises(DryadError) as info:
        run(E(Index(L("abc"), L(0))))
    assert info.value.code == 3083


def test_post_increment():
    interp = Interpreter()
    result = interp.execute_and_return_value(Program([let("x", L(5)), E(PostIncrement(V("x")))]))
    assert result == 5.0
    assert interp.get_variable("x") == 6.0


def test_execute_returns_display_text():
    assert Interpreter().execute(Program([E(B(L(7), "/", L(2)))])) == "3.5"
    with pytest.raises(DryadError) as info:
        Interpreter().execute(Program([E(B(L(5), "/", L(0)))]))
    assert info.value.code == 3007


def test_set_variable_and_evaluate_to_string():
    interp = Interpreter()
    interp.set_variable("x", 4.0)
    assert interp.evaluate_to_string(B(V("x"), "*", L(2))) == "8"


def test_assignment_to_undeclared_variable():
    with pytest.raises(DryadError) as info:
        run(assign("y", L(1)))
    assert info.value.code == 3001