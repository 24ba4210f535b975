# dryad

`dryad` evaluates programs written in Dryad, a small dynamically typed
scripting language. It provides numbers, strings, booleans, `null`, arrays,
tuples, lambdas with closures, functions, classes with static and instance
members, object literals, block scoping, `if`/`else`, `while`, `do`/`while`,
`for` and `for ... in` loops with `break` and `continue`, and
`try`/`catch`/`finally` with `throw`.

## What it does not do

The package works on syntax trees only. It has no lexer or parser, so it
cannot read Dryad source text, and it has no command-line program. You build
a program from the node classes in `dryad.nodes` and hand it to
`dryad.interpreter.Interpreter`.

The built-in `print` call does not write anything: it returns the display
text of its first argument (or an empty string). `super` is not supported
and raises an error (code 3023).

## Evaluating a program

```python
from dryad.interpreter import Interpreter
from dryad.nodes import Binary, Expression, Literal, Program, VarDeclaration, Variable

program = Program([
    VarDeclaration("x", Literal(40.0)),
    Expression(Binary(Variable("x"), "+", Literal(2.0))),
])

interpreter = Interpreter()
print(interpreter.execute(program))                   # "42"
```

`Interpreter.execute` returns the value of the last statement rendered as
text, the way the language prints it: whole numbers without a decimal
point, arrays as `[1, 2]`, tuples as `(1, 2)`.
`Interpreter.execute_and_return_value` returns the value itself.
`Interpreter.execute_statement` runs a single statement node,
`Interpreter.evaluate` evaluates a single expression node, and
`Interpreter.evaluate_to_string` returns the display text of an expression.

Variables can be read and seeded from Python with
`Interpreter.get_variable` (which returns `None` for an unknown name) and
`Interpreter.set_variable`.

A function or method that returns a number, string, boolean or `null`
yields that value; any other returned value comes back as its display text.

## Nodes

`dryad.nodes` holds immutable dataclasses for every expression (`Literal`,
`Variable`, `Binary`, `Unary`, `Call`, `Lambda`, `ArrayLiteral`,
`TupleLiteral`, `Index`, `TupleAccess`, `MethodCall`, `PropertyAccess`,
`ClassInstantiation`, `ObjectLiteral`, the increment and decrement forms,
`This`, `Super`) and statement (`Expression`, `VarDeclaration`,
`Assignment`, `PropertyAssignment`, `Block`, `If`, `IfElse`, `While`,
`DoWhile`, `For`, `ForEach`, `Break`, `Continue`, `Try` with `CatchClause`,
`Throw`, `FunctionDeclaration`, `ClassDeclaration` with `MethodMember` and
`PropertyMember`, `Return`), plus `Program` and the `Visibility` enum.
Sequence fields are stored as tuples, and numeric literals as floats.

## Values

Plain values map onto Python types: numbers are `float`, strings are `str`,
booleans are `bool`, `null` is `None`, arrays are `list` and tuples are
`tuple`. Functions, lambdas, classes, instances, objects and caught
exceptions are represented by the classes in `dryad.values`
(`FunctionValue`, `LambdaValue`, `ClassValue`, `Instance`, `ObjectValue`,
`DryadException`).
`dryad.values.to_display` renders any value as the language shows it,
`dryad.values.is_truthy` applies the language's rules of truth,
`dryad.values.values_equal` is the equality of `==` (only primitives of the
same kind are ever equal) and `dryad.values.same_value` compares values
structurally.

The operators (`+`, `-`, `*`, `/`, `%`, `**`, `^^` for n-th root, `%%` for
non-negative modulo, `##` for scaling by a power of ten, the bitwise and
shift operators, comparisons and logical operators) are available on their
own through `dryad.operators.binary_op` and `dryad.operators.unary_op`.
Both operands are always evaluated, so `&&` and `||` do not short-circuit.

## Errors

Every runtime failure raises `dryad.errors.DryadError`, which carries a
numeric `code` and a `message`. For example, division by zero raises code
3007, using `-` on non-numbers raises 3005, comparing non-numbers raises
3009, and calling a function with the wrong number of arguments raises 3004.
A value thrown by the program with `throw` and not caught arrives as a
`DryadError` with code 3020.

```python
from dryad.errors import DryadError
from dryad.interpreter import Interpreter
from dryad.nodes import Binary, Literal

try:
    Interpreter().evaluate(Binary(Literal(5.0), "/", Literal(0.0)))
except DryadError as error:
    print(error.code)                                  # 3007
```

`break`, `continue` and `return` are carried by `BreakSignal`,
`ContinueSignal` and `ReturnSignal`, subclasses of `DryadError`; a
`catch` clause lets them pass through.