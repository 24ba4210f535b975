"""Tree-walking interpreter for Dryad programs."""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional, Sequence

from .errors import BreakSignal, ContinueSignal, DryadError, ReturnSignal
from .nodes import (
    ArrayLiteral,
    Assignment,
    Binary,
    Block,
    Break,
    Call,
    CatchClause,
    ClassDeclaration,
    ClassInstantiation,
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
    PostDecrement,
    PostIncrement,
    PreDecrement,
    PreIncrement,
    Program,
    PropertyAccess,
    PropertyAssignment,
    PropertyEntry,
    PropertyMember,
    Return,
    Super,
    This,
    Throw,
    Try,
    TupleAccess,
    TupleLiteral,
    Unary,
    Variable,
    VarDeclaration,
    Visibility,
    While,
)
from .operators import binary_op, unary_op
from .values import (
    ClassMethod,
    ClassProperty,
    ClassValue,
    DryadException,
    FunctionValue,
    Instance,
    LambdaValue,
    ObjectMethod,
    ObjectValue,
    is_truthy,
    to_display,
)

__all__ = ["Interpreter"]

# Control-flow signals pass through ``catch`` clauses untouched.
_CONTROL = (BreakSignal, ContinueSignal, ReturnSignal)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _returned(value: Any) -> Any:
    """The value a call yields for ``return value``.

    Numbers, strings, booleans and null come back unchanged; any other value
    comes back as its display text.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if _is_number(value):
        return float(value)
    return to_display(value)


def _copy_instance(value: Any) -> Any:
    if isinstance(value, Instance):
        return Instance(value.class_name, dict(value.properties))
    return value


class Interpreter:
    """Runs statements and evaluates expressions against one global state."""

    def __init__(self) -> None:
        self._variables: Dict[str, Any] = {}
        self._classes: Dict[str, ClassValue] = {}
        self._current_instance: Any = None

    # ------------------------------------------------------------ public API

    def execute(self, program: Program) -> str:
        """Run a program and return the display text of its last value."""
        return to_display(self.execute_and_return_value(program))

    def execute_and_return_value(self, program: Program) -> Any:
        """Run a program and return the value of its last statement."""
        last = None
        for statement in program.statements:
            last = self.execute_statement(statement)
        return last

    def evaluate_to_string(self, expr: Any) -> str:
        """Evaluate an expression and return its display text."""
        return to_display(self.evaluate(expr))

    def get_variable(self, name: str) -> Any:
        """Return the value of a variable, or None if it is not defined."""
        return self._variables.get(name)

    def set_variable(self, name: str, value: Any) -> None:
        """Define or overwrite a variable."""
        self._variables[name] = value

    # ------------------------------------------------------------ statements

    def execute_statement(self, stmt: Any) -> Any:
        """Run one statement and return its value."""
        match stmt:
            case Expression(expr):
                return self.evaluate(expr)
            case VarDeclaration(name, initializer):
                value = None if initializer is None else self.evaluate(initializer)
                self._variables[name] = value
                return None
            case Assignment(name, value_expr):
                value = self.evaluate(value_expr)
                if name not in self._variables:
                    raise DryadError(3001, f"Variável '{name}' não foi declarada")
                self._variables[name] = value
                return value
            case PropertyAssignment(target, name, value_expr):
                return self._assign_property(target, name, value_expr)
            case Block(statements):
                return self._execute_block(statements)
            case If(condition, then_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute_statement(then_branch)
                return None
            case IfElse(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute_statement(then_branch)
                return self.execute_statement(else_branch)
            case While(condition, body):
                return self._execute_while(condition, body)
            case DoWhile(body, condition):
                return self._execute_do_while(body, condition)
            case Break():
                raise BreakSignal()
            case Continue():
                raise ContinueSignal()
            case For(init, condition, update, body):
                return self._execute_for(init, condition, update, body)
            case ForEach(variable, iterable, body):
                return self._execute_foreach(variable, iterable, body)
            case Try(body, catch, finally_body):
                return self._execute_try(body, catch, finally_body)
            case Throw(value_expr):
                value = self.evaluate(value_expr)
                message = value if isinstance(value, str) else to_display(value)
                raise DryadError(3020, message)
            case FunctionDeclaration(name, params, body):
                self._variables[name] = FunctionValue(name, params, body)
                return None
            case ClassDeclaration(name, parent, members):
                self._declare_class(name, parent, members)
                return None
            case Return(value_expr):
                value = None if value_expr is None else self.evaluate(value_expr)
                raise ReturnSignal(value)
        raise TypeError(f"not a Dryad statement: {stmt!r}")

    def _execute_block(self, statements: Sequence[Any]) -> Any:
        backup = dict(self._variables)
        declared = set()
        try:
            last = None
            for statement in statements:
                if isinstance(statement, VarDeclaration):
                    declared.add(statement.name)
                last = self.execute_statement(statement)
            return last
        finally:
            for name in declared:
                self._variables.pop(name, None)
                if name in backup:
                    self._variables[name] = backup[name]

    def _execute_while(self, condition: Any, body: Any) -> Any:
        last = None
        while is_truthy(self.evaluate(condition)):
            try:
                last = self.execute_statement(body)
            except BreakSignal:
                break
            except ContinueSignal:
                continue
        return last

    def _execute_do_while(self, body: Any, condition: Any) -> Any:
        last = None
        while True:
            try:
                last = self.execute_statement(body)
            except BreakSignal:
                break
            except ContinueSignal:
                pass
            if not is_truthy(self.evaluate(condition)):
                break
        return last

    def _execute_for(
        self, init: Optional[Any], condition: Optional[Any],
        update: Optional[Any], body: Any,
    ) -> Any:
        if init is not None:
            self.execute_statement(init)
        last = None
        while condition is None or is_truthy(self.evaluate(condition)):
            try:
                last = self.execute_statement(body)
            except BreakSignal:
                break
            except ContinueSignal:
                pass
            if update is not None:
                self.execute_statement(update)
        return last

    def _execute_foreach(self, variable: str, iterable: Any, body: Any) -> Any:
        collection = self.evaluate(iterable)
        if not isinstance(collection, (list, tuple, str)):
            raise DryadError(
                3030, f"Valor não é iterável: {to_display(collection)}"
            )
        existed = variable in self._variables
        previous = self._variables.get(variable)
        last = None
        try:
            for item in collection:
                self._variables[variable] = item
                try:
                    last = self.execute_statement(body)
                except BreakSignal:
                    break
                except ContinueSignal:
                    continue
        finally:
            if existed:
                self._variables[variable] = previous
            else:
                self._variables.pop(variable, None)
        return last

    def _execute_try(
        self, body: Any, catch: Optional[CatchClause], finally_body: Optional[Any]
    ) -> Any:
        result = None
        pending: Optional[DryadError] = None
        try:
            result = self.execute_statement(body)
        except DryadError as error:
            pending = error

        if pending is not None and catch is not None and not isinstance(pending, _CONTROL):
            name = catch.variable
            existed = name in self._variables
            previous = self._variables.get(name)
            self._variables[name] = DryadException(pending.message)
            try:
                result = self.execute_statement(catch.body)
                pending = None
            except DryadError as error:
                pending = error
            finally:
                if existed:
                    self._variables[name] = previous
                else:
                    self._variables.pop(name, None)

        if finally_body is not None:
            value = self.execute_statement(finally_body)
            if pending is None:
                result = value

        if pending is not None:
            raise pending
        return result

    def _declare_class(
        self, name: str, parent: Optional[str], members: Iterable[Any]
    ) -> None:
        methods: Dict[str, ClassMethod] = {}
        properties: Dict[str, ClassProperty] = {}
        for member in members:
            if isinstance(member, MethodMember):
                methods[member.name] = ClassMethod(
                    member.visibility, member.is_static, member.params, member.body
                )
            elif isinstance(member, PropertyMember):
                default = None if member.default is None else self.evaluate(member.default)
                properties[member.name] = ClassProperty(
                    member.visibility, member.is_static, default
                )
            else:
                raise TypeError(f"not a class member: {member!r}")
        cls = ClassValue(name, parent, methods, properties)
        self._classes[name] = cls
        self._variables[name] = cls

    def _assign_property(self, target: Any, name: str, value_expr: Any) -> Any:
        value = self.evaluate(value_expr)
        obj = self.evaluate(target)
        if not isinstance(obj, Instance):
            raise DryadError(
                3034, "Tentativa de atribuir propriedade a valor que não é uma instância"
            )
        current = self._current_instance
        if isinstance(current, Instance) and current.class_name == obj.class_name:
            current.properties[name] = value
        return value

    # ----------------------------------------------------------- expressions

    def evaluate(self, expr: Any) -> Any:
        """Evaluate an expression and return its value."""
        match expr:
            case Literal(value):
                return value
            case Variable(name):
                return self._lookup(name)
            case Binary(left, operator, right):
                left_value = self.evaluate(left)
                right_value = self.evaluate(right)
                return binary_op(operator, left_value, right_value)
            case Unary(operator, operand):
                return unary_op(operator, self.evaluate(operand))
            case Call(callee, args):
                return self._eval_call(callee, args)
            case PostIncrement(target):
                return self._step(target, 1.0, True, 3007, 3008, "++")
            case PostDecrement(target):
                return self._step(target, -1.0, True, 3009, 3010, "--")
            case PreIncrement(target):
                return self._step(target, 1.0, False, 3011, 3012, "++")
            case PreDecrement(target):
                return self._step(target, -1.0, False, 3013, 3014, "--")
            case ArrayLiteral(elements):
                return [self.evaluate(element) for element in elements]
            case TupleLiteral(elements):
                return tuple(self.evaluate(element) for element in elements)
            case Index(target, index):
                return self._eval_index(target, index)
            case TupleAccess(target, index):
                return self._eval_tuple_access(target, index)
            case Lambda(params, body):
                return LambdaValue(params, body, dict(self._variables))
            case This():
                if self._current_instance is None:
                    raise DryadError(
                        3022, "'this' usado fora do contexto de uma instância"
                    )
                return _copy_instance(self._current_instance)
            case Super():
                raise DryadError(3023, "'super' ainda não implementado")
            case MethodCall(target, method, args):
                return self._eval_method_call(target, method, args)
            case PropertyAccess(target, name):
                return self._eval_property_access(target, name)
            case ClassInstantiation(class_name, args):
                return self._instantiate(class_name, args)
            case ObjectLiteral(entries):
                return self._eval_object_literal(entries)
        raise TypeError(f"not a Dryad expression: {expr!r}")

    def _lookup(self, name: str) -> Any:
        try:
            return self._variables[name]
        except KeyError:
            raise DryadError(3001, f"Variável '{name}' não definida") from None

    def _step(
        self, target: Any, delta: float, post: bool,
        number_code: int, variable_code: int, symbol: str,
    ) -> float:
        if not isinstance(target, Variable):
            raise DryadError(
                variable_code, f"Operador {symbol} só pode ser aplicado a variáveis"
            )
        current = self._lookup(target.name)
        if not _is_number(current):
            raise DryadError(number_code, f"Operador {symbol} só é válido para números")
        updated = float(current) + delta
        self._variables[target.name] = updated
        return float(current) if post else updated

    def _eval_index(self, target: Any, index_expr: Any) -> Any:
        array = self.evaluate(target)
        index = self.evaluate(index_expr)
        if not _is_number(index):
            raise DryadError(3081, "Índice deve ser um número")
        index = float(index)
        if not (math.isfinite(index) and index >= 0 and index.is_integer()):
            raise DryadError(3080, "Índice deve ser um número inteiro não negativo")
        if not isinstance(array, list):
            raise DryadError(3083, "Operador [] só pode ser usado em arrays")
        position = int(index)
        if position >= len(array):
            raise DryadError(
                3082,
                f"Índice {position} fora dos limites do array (tamanho: {len(array)})",
            )
        return array[position]

    def _eval_tuple_access(self, target: Any, index: int) -> Any:
        value = self.evaluate(target)
        if not isinstance(value, tuple):
            raise DryadError(3085, "Operador . só pode ser usado em tuplas")
        if index >= len(value):
            raise DryadError(
                3084,
                f"Índice {index} fora dos limites da tupla (tamanho: {len(value)})",
            )
        return value[index]

    def _eval_object_literal(self, entries: Iterable[Any]) -> ObjectValue:
        properties: Dict[str, Any] = {}
        methods: Dict[str, ObjectMethod] = {}
        for entry in entries:
            if isinstance(entry, PropertyEntry):
                properties[entry.key] = self.evaluate(entry.value)
            elif isinstance(entry, MethodEntry):
                methods[entry.key] = ObjectMethod(entry.params, entry.body)
            else:
                raise TypeError(f"not an object literal entry: {entry!r}")
        return ObjectValue(properties, methods)

    # ----------------------------------------------------------------- calls

    def _eval_call(self, callee: Any, args: Sequence[Any]) -> Any:
        if isinstance(callee, Variable):
            return self._call_by_name(callee.name, args)
        function = self.evaluate(callee)
        return self._call_value(function, args, "Expressão não é uma função")

    def _call_by_name(self, name: str, args: Sequence[Any]) -> Any:
        if name in self._classes:
            return self._instantiate(name, args)
        if name == "print":
            return to_display(self.evaluate(args[0])) if args else ""
        if name not in self._variables:
            raise DryadError(3003, f"Função '{name}' não definida")
        return self._call_value(
            self._variables[name], args, f"'{name}' não é uma função"
        )

    def _call_value(self, function: Any, args: Sequence[Any], message: str) -> Any:
        if isinstance(function, FunctionValue):
            return self._call_function(function, args)
        if isinstance(function, LambdaValue):
            return self._call_lambda(function, args)
        raise DryadError(3003, message)

    @staticmethod
    def _check_arity(params: Sequence[str], args: Sequence[Any]) -> None:
        if len(args) != len(params):
            raise DryadError(
                3004,
                "Número incorreto de argumentos: esperado "
                f"{len(params)}, encontrado {len(args)}",
            )

    def _call_function(self, function: FunctionValue, args: Sequence[Any]) -> Any:
        self._check_arity(function.params, args)
        saved = dict(self._variables)
        try:
            for param, arg in zip(function.params, args):
                self._variables[param] = self.evaluate(arg)
            try:
                return self.execute_statement(function.body)
            except ReturnSignal as signal:
                return _returned(signal.value)
        finally:
            self._variables = saved

    def _call_lambda(self, function: LambdaValue, args: Sequence[Any]) -> Any:
        self._check_arity(function.params, args)
        saved = self._variables
        self._variables = dict(function.closure)
        try:
            for param, arg in zip(function.params, args):
                self._variables[param] = self.evaluate(arg)
            return self.evaluate(function.body)
        finally:
            self._variables = saved

    def _invoke_method(
        self, name: str, params: Sequence[str], body: Any,
        args: Sequence[Any], instance: Any,
    ) -> Any:
        values = [self.evaluate(arg) for arg in args]
        if len(values) != len(params):
            raise DryadError(
                3025,
                f"Método '{name}' espera {len(params)} argumentos, "
                f"mas recebeu {len(values)}",
            )
        saved_variables = dict(self._variables)
        saved_instance = self._current_instance
        self._current_instance = instance
        try:
            self._variables.update(zip(params, values))
            try:
                return self.execute_statement(body)
            except ReturnSignal as signal:
                return _returned(signal.value)
        finally:
            self._variables = saved_variables
            self._current_instance = saved_instance

    def _eval_method_call(self, target: Any, name: str, args: Sequence[Any]) -> Any:
        obj = self.evaluate(target)
        if isinstance(obj, ClassValue):
            method = obj.methods.get(name)
            if method is None:
                raise DryadError(
                    3026,
                    f"Método estático '{name}' não encontrado na classe '{obj.name}'",
                )
            if not method.is_static:
                raise DryadError(3024, f"Método '{name}' não é estático")
            if method.visibility is Visibility.PRIVATE:
                raise DryadError(3024, f"Método '{name}' é privado")
            return self._invoke_method(name, method.params, method.body, args, None)
        if isinstance(obj, Instance):
            cls = self._classes.get(obj.class_name)
            if cls is None:
                raise DryadError(
                    3027, f"Definição da classe '{obj.class_name}' não encontrada"
                )
            method = cls.methods.get(name)
            if method is None:
                raise DryadError(
                    3026,
                    f"Método '{name}' não encontrado na classe '{obj.class_name}'",
                )
            if method.visibility is Visibility.PRIVATE:
                raise DryadError(3024, f"Método '{name}' é privado")
            return self._invoke_method(
                name, method.params, method.body, args, _copy_instance(obj)
            )
        if isinstance(obj, ObjectValue):
            method = obj.methods.get(name)
            if method is None:
                raise DryadError(3026, f"Método '{name}' não encontrado no objeto")
            return self._invoke_method(name, method.params, method.body, args, obj)
        raise DryadError(
            3028,
            "Tentativa de chamar método em valor que não é uma instância ou objeto",
        )

    def _eval_property_access(self, target: Any, name: str) -> Any:
        obj = self.evaluate(target)
        if isinstance(obj, ClassValue):
            prop = obj.properties.get(name)
            if prop is None:
                raise DryadError(
                    3030,
                    f"Propriedade estática '{name}' não encontrada na classe '{obj.name}'",
                )
            if not prop.is_static:
                raise DryadError(3029, f"Propriedade '{name}' não é estática")
            if prop.visibility is Visibility.PRIVATE:
                raise DryadError(3029, f"Propriedade '{name}' é privada")
            return prop.default_value
        if isinstance(obj, Instance):
            if name in obj.properties:
                return obj.properties[name]
            cls = self._classes.get(obj.class_name)
            prop = cls.properties.get(name) if cls is not None else None
            if prop is not None:
                if prop.visibility is Visibility.PRIVATE:
                    raise DryadError(3029, f"Propriedade '{name}' é privada")
                return prop.default_value
            raise DryadError(3030, f"Propriedade '{name}' não encontrada")
        if isinstance(obj, ObjectValue):
            if name in obj.properties:
                return obj.properties[name]
            raise DryadError(3030, f"Propriedade '{name}' não encontrada")
        raise DryadError(
            3031,
            "Tentativa de acessar propriedade em valor que não é uma instância ou objeto",
        )

    def _instantiate(self, class_name: str, args: Sequence[Any]) -> Any:
        cls = self._classes.get(class_name)
        if cls is None:
            return self._call_by_name(class_name, args)
        properties = {
            name: prop.default_value
            for name, prop in cls.properties.items()
            if not prop.is_static
        }
        init = cls.methods.get("init")
        if init is None:
            if args:
                raise DryadError(
                    3033,
                    f"Classe '{class_name}' não tem construtor 'init', "
                    "mas argumentos foram fornecidos",
                )
            return Instance(class_name, properties)

        values = [self.evaluate(arg) for arg in args]
        if len(values) != len(init.params):
            raise DryadError(
                3032,
                f"Construtor da classe '{class_name}' espera {len(init.params)} "
                f"argumentos, mas recebeu {len(values)}",
            )
        saved_variables = dict(self._variables)
        saved_instance = self._current_instance
        self._current_instance = Instance(class_name, properties)
        try:
            self._variables.update(zip(init.params, values))
            try:
                self.execute_statement(init.body)
            except ReturnSignal:
                pass
            current = self._current_instance
            if isinstance(current, Instance):
                properties = dict(current.properties)
        finally:
            self._variables = saved_variables
            self._current_instance = saved_instance
        return Instance(class_name, properties)