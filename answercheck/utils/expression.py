# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2018-2025 Stellan Östlund and Hampus Linander

"""
Expression engine for learner answers.

Learner text is untrusted, so it is never handed to eval or sympify. It is
tokenized against a fixed vocabulary (numbers, single letter variables, pi, e,
sqrt, cbrt, + - * / ^ and parentheses), implicit multiplication is made
explicit, and the result is parsed with ast.parse and checked node by node
against a whitelist. Evaluation walks that tree with numpy so a whole battery
of sample points is computed in one pass; to_sympy builds the equivalent
sympy expression node by node for the symbolic checks.
"""

import ast
import logging
import math
import re

import numpy
import sympy
from django.utils.translation import gettext as _

from answercheck.conf import get_config
from answercheck.exceptions import EvalError, ParseError

logger = logging.getLogger(__name__)

CONSTANTS = {"pi": math.pi, "e": math.e}
SYMPY_CONSTANTS = {"pi": sympy.pi, "e": sympy.E}
FUNCTIONS = {"sqrt": numpy.sqrt, "cbrt": numpy.cbrt}
SYMPY_FUNCTIONS = {"sqrt": sympy.sqrt, "cbrt": lambda x: sympy.real_root(x, 3)}

BINOPS = {
    ast.Add: numpy.add,
    ast.Sub: numpy.subtract,
    ast.Mult: numpy.multiply,
    ast.Div: numpy.divide,
    ast.Pow: numpy.power,
}
UNARYOPS = {ast.UAdd: numpy.positive, ast.USub: numpy.negative}

TOKEN_PATTERN = re.compile(r"\s*(?:(?P<number>\d+\.?\d*|\.\d+)|(?P<name>[A-Za-z]+)|(?P<op>[-+*/^()]))")

# token kinds
NUMBER, NAME, FUNC, OP = "number", "name", "func", "op"


class ParsedExpression:
    """
    A parsed, whitelisted expression.

    tree is the ast.Expression produced by ast.parse, variables the names that
    need a binding and constants the names bound to pi or e.
    """

    def __init__(self, text, tree, variables, constants):
        self.text = text
        self.tree = tree
        self.variables = frozenset(variables)
        self.constants = frozenset(constants)

    @property
    def body(self):
        return self.tree.body

    def __repr__(self):
        return "ParsedExpression(%r)" % self.text


def _split_name(run, declared):
    # A run of letters is a product of single letter variables, except for the
    # function and constant names, e.g. "xy" -> x*y and "2pix" -> 2*pi*x.
    pieces = []
    pos = 0
    while pos < len(run):
        for word in sorted(list(FUNCTIONS) + list(CONSTANTS), key=len, reverse=True):
            if run.startswith(word, pos) and word not in declared:
                pieces.append((FUNC if word in FUNCTIONS else NAME, word))
                pos = pos + len(word)
                break
        else:
            pieces.append((NAME, run[pos]))
            pos = pos + 1
    return pieces


def tokenize(text, declared=()):
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = TOKEN_PATTERN.match(text, pos)
        if m is None:
            bad = text[pos:].strip()[:1]
            raise ParseError(_("Answer contains invalid character or string ") + bad)
        pos = m.end()
        if m.group("number") is not None:
            tokens.append((NUMBER, m.group("number")))
        elif m.group("name") is not None:
            tokens.extend(_split_name(m.group("name"), declared))
        else:
            tokens.append((OP, m.group("op")))
    return tokens


def _starts_atom(token):
    kind, value = token
    return kind in (NUMBER, NAME, FUNC) or value == "("


def _ends_atom(token):
    kind, value = token
    return kind in (NUMBER, NAME) or value == ")"


def to_python_source(tokens):
    """
    Join tokens into python arithmetic syntax: ^ becomes ** and implicit
    multiplication gets an explicit *.
    """
    out = []
    prev = None
    ind = 0
    while ind < len(tokens):
        token = tokens[ind]
        kind, value = token
        if prev is not None and _ends_atom(prev) and _starts_atom(token):
            if prev[0] == NUMBER and kind == NUMBER:
                raise ParseError(_("Two numbers without an operator between them"))
            out.append("*")
        if kind == FUNC:
            following = tokens[ind + 1] if ind + 1 < len(tokens) else None
            if following is None:
                raise ParseError(_("%s needs an argument in parentheses") % value)
            if following[0] in (NUMBER, NAME):
                # sqrt2 or sqrt x
                out.extend([value, "(", following[1], ")"])
                prev = (OP, ")")
                ind = ind + 2
                continue
            if following[1] != "(":
                raise ParseError(_("%s needs an argument in parentheses") % value)
            out.append(value)
            prev = (OP, "")
            ind = ind + 1
            continue
        out.append("**" if value == "^" else value)
        prev = token
        ind = ind + 1
    return " ".join(out)


def _check_node(node, depth, config):
    if depth > config["MAX_DEPTH"]:
        raise ParseError(_("Expression is nested too deeply"))
    if isinstance(node, ast.Constant):
        if type(node.value) not in (int, float):
            raise ParseError(_("Only numbers are allowed as constants"))
        return
    if isinstance(node, ast.Name):
        return
    if isinstance(node, ast.BinOp):
        if type(node.op) not in BINOPS:
            raise ParseError(_("Operator not allowed"))
        _check_node(node.left, depth + 1, config)
        _check_node(node.right, depth + 1, config)
        return
    if isinstance(node, ast.UnaryOp):
        if type(node.op) not in UNARYOPS:
            raise ParseError(_("Operator not allowed"))
        _check_node(node.operand, depth + 1, config)
        return
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
            raise ParseError(_("Unrecognized function call"))
        if len(node.args) != 1 or node.keywords:
            raise ParseError(_("%s takes exactly one argument") % node.func.id)
        _check_node(node.args[0], depth + 1, config)
        return
    raise ParseError(_("Unsupported element ") + type(node).__name__)


def _names(tree):
    funcs = {id(c.func) for c in ast.walk(tree) if isinstance(c, ast.Call)}
    return {n.id for n in ast.walk(tree) if isinstance(n, ast.Name) and id(n) not in funcs}


def parse(text, variables=(), config=None):
    """
    Parse infix text into a ParsedExpression, or raise ParseError.

    variables are names declared by the problem; a declared e is a variable
    rather than Euler's number.
    """
    config = config or get_config()
    if text is None or not str(text).strip():
        raise ParseError(_("Your answer is blank!"))
    text = str(text).strip()
    if len(text) > config["MAX_INPUT_LENGTH"]:
        raise ParseError(_("Answer is too long"))
    declared = set(variables)
    source = to_python_source(tokenize(text, declared))
    try:
        tree = ast.parse(source, mode="eval")
    except (SyntaxError, ValueError, RecursionError, MemoryError) as e:
        raise ParseError(_("Could not parse expression")) from e
    _check_node(tree.body, 0, config)
    names = _names(tree)
    constants = {name for name in names if name in CONSTANTS and name not in declared}
    return ParsedExpression(text, tree, names - constants, constants)


class _Evaluator:
    def __init__(self, parsed, bindings, config):
        self.parsed = parsed
        self.bindings = bindings
        self.max_exponent = config["MAX_EXPONENT"]

    def run(self, node):
        if isinstance(node, ast.Constant):
            return numpy.float64(node.value)
        if isinstance(node, ast.Name):
            if node.id in self.parsed.constants:
                return numpy.float64(CONSTANTS[node.id])
            if node.id in self.bindings:
                return self.bindings[node.id]
            raise EvalError("No value for variable %s" % node.id)
        if isinstance(node, ast.UnaryOp):
            return UNARYOPS[type(node.op)](self.run(node.operand))
        if isinstance(node, ast.Call):
            return FUNCTIONS[node.func.id](self.run(node.args[0]))
        left = self.run(node.left)
        right = self.run(node.right)
        if isinstance(node.op, ast.Pow) and numpy.any(numpy.abs(right) > self.max_exponent):
            raise EvalError("Exponent too large")
        return BINOPS[type(node.op)](left, right)


def evaluate_many(parsed, bindings, config=None):
    """
    Evaluate at every point of a battery at once.

    bindings maps each variable to a numpy array of equal length; the result
    has that length too and holds nan or inf where the expression is undefined.
    """
    config = config or get_config()
    with numpy.errstate(all="ignore"):
        value = _Evaluator(parsed, bindings, config).run(parsed.body)
    length = max([len(v) for v in bindings.values()] + [1])
    return numpy.broadcast_to(numpy.asarray(value, dtype=float), (length,))


def evaluate(parsed, bindings=None, config=None):
    config = config or get_config()
    scalar_bindings = {k: numpy.float64(v) for k, v in (bindings or {}).items()}
    with numpy.errstate(all="ignore"):
        value = _Evaluator(parsed, scalar_bindings, config).run(parsed.body)
    value = float(value)
    if not math.isfinite(value):
        raise EvalError("Expression has no finite value")
    return value


def is_zero_difference(text_a, text_b, bindings=None, variables=(), config=None):
    """
    True if (text_a) - (text_b), read as a single expression, is zero at bindings.
    """
    config = config or get_config()
    difference = parse("(%s)-(%s)" % (text_a, text_b), variables, config)
    return abs(evaluate(difference, bindings, config)) < config["ZERO_TOLERANCE"]


def _sympy_number(value):
    if isinstance(value, int):
        return sympy.Integer(value)
    return sympy.Rational(repr(value))


class _SympyBuilder:
    def __init__(self, parsed, config):
        self.parsed = parsed
        self.max_exponent = config["MAX_EXPONENT"]

    def run(self, node):
        if isinstance(node, ast.Constant):
            return _sympy_number(node.value)
        if isinstance(node, ast.Name):
            if node.id in self.parsed.constants:
                return SYMPY_CONSTANTS[node.id]
            return sympy.Symbol(node.id)
        if isinstance(node, ast.UnaryOp):
            operand = self.run(node.operand)
            return -operand if isinstance(node.op, ast.USub) else operand
        if isinstance(node, ast.Call):
            return SYMPY_FUNCTIONS[node.func.id](self.run(node.args[0]))
        left = self.run(node.left)
        right = self.run(node.right)
        if isinstance(node.op, ast.Add):
            return left + right
        if isinstance(node.op, ast.Sub):
            return left - right
        if isinstance(node.op, ast.Mult):
            return left * right
        if isinstance(node.op, ast.Div):
            return left / right
        # exact powers are only safe with small rational exponents
        if not right.is_Rational or abs(right) > self.max_exponent:
            raise EvalError("Exponent not supported symbolically")
        return left**right


def to_sympy(parsed, config=None):
    config = config or get_config()
    return _SympyBuilder(parsed, config).run(parsed.body)


def node_count(parsed):
    return sum(1 for node in ast.walk(parsed.body) if isinstance(node, ast.expr))


class _DegreeBound:
    # upper bound on the polynomial degree; math.inf when an exponent is not a constant
    def __init__(self, parsed, config):
        self.parsed = parsed
        self.config = config

    def _has_variables(self, node):
        return any(isinstance(n, ast.Name) and n.id in self.parsed.variables for n in ast.walk(node))

    def run(self, node):
        if isinstance(node, ast.Constant):
            return 0
        if isinstance(node, ast.Name):
            return 0 if node.id in self.parsed.constants else 1
        if isinstance(node, ast.UnaryOp):
            return self.run(node.operand)
        if isinstance(node, ast.Call):
            return self.run(node.args[0])
        left = self.run(node.left)
        if isinstance(node.op, ast.Pow):
            if self._has_variables(node.right):
                return math.inf
            try:
                with numpy.errstate(all="ignore"):
                    exponent = float(_Evaluator(self.parsed, {}, self.config).run(node.right))
            except EvalError:
                return math.inf
            if not math.isfinite(exponent):
                return math.inf
            return left * abs(exponent)
        right = self.run(node.right)
        if isinstance(node.op, (ast.Add, ast.Sub)):
            return max(left, right)
        return left + right


def degree_bound(parsed, config=None):
    """
    An upper bound on the polynomial degree of parsed, counting a function or
    a quotient at the degree of its parts. math.inf if an exponent depends on
    a variable.
    """
    config = config or get_config()
    return _DegreeBound(parsed, config).run(parsed.body)


def symbolic_difference_is_zero(parsed_a, parsed_b, config=None):
    """
    True if sympy simplifies parsed_a - parsed_b to zero. Raises EvalError if
    sympy cannot decide.
    """
    config = config or get_config()
    # sympy.simplify has no time limit; large powers would expand for minutes
    for parsed in (parsed_a, parsed_b):
        if node_count(parsed) > config["SYMBOLIC_MAX_NODES"]:
            raise EvalError("Expression too large for symbolic simplification")
        degree = degree_bound(parsed, config)
        if degree > config["SYMBOLIC_MAX_DEGREE"]:
            raise EvalError("Degree too high for symbolic simplification")
        # monomials of degree at most d in k variables
        k = len(parsed.variables)
        if math.comb(math.ceil(degree) + k, k) > config["SYMBOLIC_MAX_TERMS"]:
            raise EvalError("Too many terms for symbolic simplification")
    difference = to_sympy(parsed_a, config) - to_sympy(parsed_b, config)
    try:
        simplified = sympy.simplify(difference)
    except Exception as e:
        raise EvalError("Could not simplify %s" % difference) from e
    if simplified.has(sympy.zoo, sympy.nan, sympy.oo, -sympy.oo):
        raise EvalError("Difference is undefined")
    logger.debug(f"SYMBOLIC difference {difference} simplified to {simplified}")
    return simplified == 0
