import pytest

from auralib import Boolean, Float, Null, Number, RTError, String, run


#######################################
# END TO END
#######################################

def test_closure_over_global(evaluate):
    value = evaluate('var x = 5; var f = funcion(y) { regresa x + y; }; f(3);')
    assert isinstance(value, Number)
    assert value.value == 8


def test_if_else(evaluate):
    assert repr(evaluate('si (falso) { 1 } si_no { 2 }')) == '2'


def test_list_append(evaluate):
    assert repr(evaluate('var l = lista[1,2,3]; l:append(4); l')) == '[1, 2, 3, 4]'

#######################################
# OPERATORS
#######################################

@pytest.mark.parametrize('text, expected', [
    ('1 + 2 * 3', '7'),
    ('7 / 2', '3'),
    ('-7 / 2', '-3'),
    ('-7 % 3', '-1'),
    ('7 % -3', '1'),
    ('7.0 / 2', '3.5'),
    ('1 + 2.5', '3.5'),
    ('2 ** 10', '1024'),
    ('2 ** -1', '0.5'),
    ('"a" + "b"', '"ab"'),
    ('"ab" * 2', '"abab"'),
    ('1 < 2', 'verdadero'),
    ('2 <= 1', 'falso'),
    ('1 == 1.0', 'verdadero'),
    ('"a" != "b"', 'verdadero'),
    ('verdadero == falso', 'falso'),
    ('falso < verdadero', 'verdadero'),
    ('verdadero >= verdadero', 'verdadero'),
    ('verdadero <= falso', 'falso'),
    ('nulo == nulo', 'verdadero'),
    ('1 == nulo', 'falso'),
    ('lista[] != nulo', 'verdadero'),
    ('!verdadero', 'falso'),
    ('-(1 + 2)', '-3'),
    ('verdadero && falso', 'falso'),
    ('falso || verdadero', 'verdadero'),
])
def test_operators(evaluate, text, expected):
    assert repr(evaluate(text)) == expected


def test_float_result_kind(evaluate):
    assert isinstance(evaluate('1 + 2.5'), Float)
    assert isinstance(evaluate('4 / 2'), Number)


@pytest.mark.parametrize('text, details', [
    ('1 / 0', 'division by zero'),
    ('1 % 0', 'division by zero'),
    ('1 + "a"', 'type mismatch: INTEGER + STRING'),
    ('"a" - "b"', 'unknown operator: STRING - STRING'),
    ('-verdadero', 'unknown operator: -BOOLEAN'),
    ('!5', 'unknown operator: !INTEGER'),
    ('10.0 ** 1000', 'numeric overflow: FLOAT ** INTEGER'),
    ('1.5 + 10 ** 400', 'numeric overflow: FLOAT + INTEGER'),
    ('(10 ** 400) / 2.0', 'numeric overflow: INTEGER / FLOAT'),
    ('(10 ** 400) * 1.5', 'numeric overflow: INTEGER * FLOAT'),
    ('verdadero < 1', 'type mismatch: BOOLEAN < INTEGER'),
    ('lista[] == lista[]', 'unknown operator: LIST == LIST'),
    ('1 && verdadero', "type mismatch: '&&' requires BOOLEAN operands, got INTEGER"),
])
def test_operator_errors(evaluate_error, text, details):
    error = evaluate_error(text)
    assert isinstance(error, RTError)
    assert error.details == details


def test_logical_operators_short_circuit(evaluate):
    assert repr(evaluate('falso && (1 / 0 == 1)')) == 'falso'
    assert repr(evaluate('verdadero || (1 / 0 == 1)')) == 'verdadero'

#######################################
# CONTROL FLOW
#######################################

def test_if_without_else_yields_null(evaluate):
    assert evaluate('si (1 > 2) { 10 }') is Null.null


def test_if_requires_boolean(evaluate_error):
    assert evaluate_error('si (1) { 2 }').details == 'condition must be BOOLEAN, got INTEGER'


def test_else_if_chain(evaluate):
    value = evaluate('var x = 5; si (x < 3) { "a" } si_no si (x < 10) { "b" } si_no { "c" }')
    assert str(value) == 'b'


def test_if_branch_has_its_own_scope(evaluate_error):
    error = evaluate_error('si (verdadero) { var adentro = 1; }; adentro')
    assert error.details == 'identifier not found: adentro'


def test_while(evaluate):
    assert repr(evaluate('var i = 0; var s = 0; mientras (i < 5) { s += i; i++ }; s')) == '10'


def test_while_condition_must_be_boolean(evaluate_error):
    assert evaluate_error('mientras (nulo) { }').details == 'condition must be BOOLEAN, got NULL'


def test_for_over_list(evaluate):
    assert repr(evaluate('var s = 0; por (x en lista[1, 2, 3]) { s += x }; s')) == '6'


def test_for_over_integer(evaluate):
    assert str(evaluate('var s = ""; por (i en 3) { s += texto(i) }; s')) == '012'


def test_for_over_string(evaluate):
    assert repr(evaluate('var n = 0; por (c en "hola") { n++ }; n')) == '4'


def test_for_over_non_iterable(evaluate_error):
    assert evaluate_error('por (x en verdadero) { }').details == 'BOOLEAN is not iterable'


def test_for_variable_does_not_leak(evaluate_error):
    assert evaluate_error('por (i en 3) { }; i').details == 'identifier not found: i'


def test_for_binds_fresh_variable_per_iteration(evaluate):
    value = evaluate('''
        var fs = lista[];
        por (i en 3) { fs:append(funcion() { regresa i; }) };
        fs[0]() + fs[2]()
    ''')
    assert repr(value) == '2'


def test_return_from_nested_block(evaluate):
    value = evaluate('var f = funcion() { si (verdadero) { regresa 1; } regresa 2; }; f()')
    assert repr(value) == '1'


def test_return_from_loop(evaluate):
    value = evaluate('''
        var primero = funcion(l) { por (x en l) { si (x > 1) { regresa x; } } regresa -1; };
        primero(lista[1, 5, 7])
    ''')
    assert repr(value) == '5'


def test_top_level_return_stops_program(evaluate):
    assert repr(evaluate('regresa 5; 10')) == '5'


def test_function_yields_last_value(evaluate):
    assert repr(evaluate('var f = funcion(a) { a * 2 }; f(4)')) == '8'


def test_empty_function_yields_null(evaluate):
    assert evaluate('funcion() { }()') is Null.null


def test_arrow_functions(evaluate):
    assert repr(evaluate('var suma = |a, b| -> a + b; suma(2, 3)')) == '5'
    assert repr(evaluate('var f = |x| -> { regresa x * x; }; f(4)')) == '16'

#######################################
# FUNCTIONS AND CLOSURES
#######################################

def test_wrong_number_of_arguments(evaluate_error):
    error = evaluate_error('var f = funcion(a) { a }; f(1, 2)')
    assert error.details == 'wrong number of arguments: expected 1, got 2'


def test_not_a_function(evaluate_error):
    assert evaluate_error('5()').details == 'not a function: INTEGER'


def test_identifier_not_found(evaluate_error):
    assert evaluate_error('y').details == 'identifier not found: y'


def test_closure_counter(evaluate):
    value = evaluate('''
        var contador = funcion() {
            var n = 0;
            regresa || -> { n = n + 1; regresa n; };
        };
        var c = contador();
        c(); c(); c()
    ''')
    assert repr(value) == '3'


def test_closure_observes_later_mutation(evaluate):
    value = evaluate('''
        var x = 1;
        var f = funcion() { regresa funcion() { regresa x; }; };
        var g = f();
        x = 10;
        g()
    ''')
    assert repr(value) == '10'


def test_recursion(evaluate):
    value = evaluate('''
        var fib = funcion(n) { si (n < 2) { regresa n; } regresa fib(n - 1) + fib(n - 2); };
        fib(10)
    ''')
    assert repr(value) == '55'


def test_functions_are_values(evaluate):
    value = evaluate('''
        var aplicar = funcion(f, x) { f(x) };
        aplicar(|n| -> n + 1, 41)
    ''')
    assert repr(value) == '42'

#######################################
# ASSIGNMENT
#######################################

def test_reassignment_yields_value(evaluate):
    assert repr(evaluate('var x = 1; x = 2')) == '2'


def test_chained_reassignment(evaluate):
    assert repr(evaluate('var a = 0; var b = 0; a = b = 3; a + b')) == '6'


def test_reassignment_requires_existing_binding(evaluate_error):
    assert evaluate_error('y = 1').details == 'identifier not found: y'


def test_reassignment_mutates_outer_scope(evaluate):
    assert repr(evaluate('var x = 1; var f = funcion() { x = 5; }; f(); x')) == '5'


def test_let_shadows(evaluate):
    assert repr(evaluate('var x = 1; var f = funcion() { var x = 5; }; f(); x')) == '1'


def test_assignment_expression_binds_locally(evaluate):
    assert repr(evaluate('x := 3; x')) == '3'
    assert repr(evaluate('var y = 1; var f = funcion() { y := 5; y }; f() + y')) == '6'


def test_cannot_assign_to_literal(evaluate_error):
    assert evaluate_error('1 = 2').details == "cannot assign to '1'"


def test_compound_assignment(evaluate):
    assert repr(evaluate('var x = 10; x -= 3; x *= 2; x /= 7; x')) == '2'
    assert repr(evaluate('var x = 1; x += 2 * 3; x')) == '7'


def test_compound_assignment_on_subscript(evaluate):
    assert repr(evaluate('var l = lista[1, 2]; l[0] += 5; l')) == '[6, 2]'


def test_increment_and_decrement(evaluate):
    assert repr(evaluate('var x = 1; x++; x++; x--; x')) == '2'
    assert repr(evaluate('var l = lista[1]; l[0]++; l')) == '[2]'


def test_square_suffix_does_not_write_back(evaluate):
    assert repr(evaluate('var x = 3; var y = x**; x + y')) == '12'

#######################################
# ALIASING
#######################################

def test_list_aliasing(evaluate):
    assert repr(evaluate('var a = lista[1, 2]; var b = a; b:append(3); a')) == '[1, 2, 3]'
    assert repr(evaluate('var a = lista[1, 2]; var b = a; b[0] = 9; a')) == '[9, 2]'


def test_map_aliasing(evaluate):
    assert repr(evaluate('var a = mapa{}; var b = a; b["k"] = 1; a["k"]')) == '1'


def test_number_value_semantics(evaluate):
    assert repr(evaluate('var a = 1; var b = a; b++; a')) == '1'
    assert repr(evaluate('var a = 1; var b = a; b = 7; a')) == '1'


def test_list_argument_is_shared(evaluate):
    assert repr(evaluate('var l = lista[]; var f = funcion(x) { x:append(1) }; f(l); l')) == '[1]'

#######################################
# MAPS
#######################################

def test_map_duplicate_keys(evaluate_error):
    assert evaluate_error('mapa{"x" -> 1, "x" -> 2}').details == 'duplicate keys not allowed'


def test_map_reassignment_upserts(evaluate):
    assert repr(evaluate('var m = mapa{"x" -> 1}; m["x"] = 2; m["x"]')) == '2'
    assert repr(evaluate('var m = mapa{}; m["y"] = 3; m')) == '{"y": 3}'


def test_map_missing_key_is_null(evaluate):
    assert evaluate('mapa{"x" -> 1}["y"]') is Null.null


def test_map_key_kinds(evaluate):
    value = evaluate('var m = mapa{1 -> "uno", verdadero -> "si"}; m[1] + m[verdadero]')
    assert str(value) == 'unosi'


def test_unusable_map_key(evaluate_error):
    assert evaluate_error('mapa{lista[] -> 1}').details == 'unusable as map key: LIST'


def test_map_methods(evaluate):
    assert repr(evaluate('var m = mapa{"a" -> 1}; m:contains("a")')) == 'verdadero'
    assert repr(evaluate('var m = mapa{"a" -> 1}; m:contains("b")')) == 'falso'
    assert repr(evaluate('mapa{"a" -> 1, "b" -> 2}:values()')) == '[1, 2]'


def test_for_over_map_keys(evaluate):
    assert str(evaluate('var s = ""; por (k en mapa{"a" -> 1, "b" -> 2}) { s += k }; s')) == 'ab'

#######################################
# LISTS
#######################################

def test_list_assignment_out_of_range(evaluate_error):
    error = evaluate_error('var l = lista[1, 2]; l[2] = 5')
    assert 'index out of range' in error.details


def test_list_read_out_of_range(evaluate_error):
    assert 'index out of range' in evaluate_error('lista[1][3]').details
    assert 'index out of range' in evaluate_error('lista[1][-1]').details


def test_list_index_must_be_integer(evaluate_error):
    assert evaluate_error('lista[1]["a"]').details == 'index must be INTEGER, got STRING'


def test_string_index(evaluate):
    assert str(evaluate('"hola"[1]')) == 'o'


def test_list_remove(evaluate):
    assert repr(evaluate('var l = lista[1, 2, 3]; var r = l:remove(1); r * 10 + longitud(l)')) == '22'


def test_list_remove_out_of_range(evaluate_error):
    assert 'index out of range' in evaluate_error('var l = lista[1]; l:remove(5)').details


def test_list_pop(evaluate):
    assert repr(evaluate('var l = lista[1, 2]; l:pop() + longitud(l)')) == '3'


def test_list_pop_empty(evaluate_error):
    assert evaluate_error('lista[]:pop()').details == 'pop from empty list'


@pytest.mark.parametrize('text, details', [
    ('lista[]:foo()', "no such method 'foo' for LIST"),
    ('lista[]:values()', "no such method 'values' for LIST"),
    ('5:pop()', "no such method 'pop' for INTEGER"),
    ('lista[]:append()', 'wrong number of arguments: expected 1, got 0'),
])
def test_method_errors(evaluate_error, text, details):
    assert evaluate_error(text).details == details


def test_mutations_before_error_remain_visible(env):
    _, errors = run('<test>', 'var l = lista[]; var f = funcion() { l:append(1); l[5] = 0; }; f();', env)
    assert len(errors) == 1
    value, errors = run('<test>', 'l', env)
    assert errors == []
    assert repr(value) == '[1]'

#######################################
# CLASSES
#######################################

PUNTO = '''
clase Punto(x, y) {
    suma() { regresa x + y; }
    funcion mover(dx) { yo.x = yo.x + dx; regresa yo; }
    doble() { regresa yo.suma() * 2; }
}
var p = nuevo Punto(1, 2);
'''


def test_method_call(evaluate):
    assert repr(evaluate(PUNTO + 'p.suma()')) == '3'


def test_method_chain_mutates_instance(evaluate):
    assert repr(evaluate(PUNTO + 'p.mover(5).suma()')) == '8'
    assert repr(evaluate('p.x')) == '6'


def test_method_calling_method(evaluate):
    assert repr(evaluate(PUNTO + 'p.doble()')) == '6'


def test_fields(evaluate):
    assert repr(evaluate(PUNTO + 'p.x')) == '1'
    assert repr(evaluate('p.z = 9; p.z')) == '9'


def test_instances_are_independent(evaluate):
    assert repr(evaluate(PUNTO + 'var q = nuevo Punto(10, 20); p.mover(1); q.x')) == '10'


def test_missing_field(evaluate_error, evaluate):
    evaluate(PUNTO)
    assert evaluate_error('p.w').details == "instance of Punto has no field or method 'w'"


def test_instantiation_arity(evaluate_error):
    error = evaluate_error(PUNTO + 'nuevo Punto(1)')
    assert error.details == 'wrong number of arguments: expected 2, got 1'


def test_not_a_class(evaluate_error):
    assert evaluate_error('var q = 1; nuevo q()').details == 'not a class: q'


def test_colon_method_on_instance(evaluate_error):
    assert evaluate_error(PUNTO + 'p:suma()').details == "no such method 'suma' for INSTANCE"


def test_instance_type(evaluate):
    assert str(evaluate(PUNTO + 'tipo(p)')) == 'INSTANCE'

#######################################
# ERROR REPORTING
#######################################

def test_runtime_error_traceback(evaluate_error):
    error = evaluate_error('var f = funcion() { 1 / 0 };\nf()')
    text = error.as_string()
    assert text.startswith('Traceback (most recent call last):')
    assert 'in f' in text
    assert 'in <program>' in text
    assert 'Runtime Error: division by zero' in text


def test_syntax_errors_stop_evaluation(env):
    value, errors = run('<test>', 'var x = 1; var = 2;', env)
    assert value is None
    assert errors
    assert env.get('x') is None


def test_value_kinds(evaluate):
    assert isinstance(evaluate('"a"'), String)
    assert isinstance(evaluate('verdadero'), Boolean)
    assert evaluate('nulo') is Null.null
