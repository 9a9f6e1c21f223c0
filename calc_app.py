# fx Math Input -- natural display calculator
# Python + Streamlit rework of a CASIO-style math input engine
#
# Keys:
#   0-9 .              digits
#   + - × ÷ ^          operators (− also accepted, ^ is exponentiation)
#   sin cos tan ln log functions (insert "name(")
#   ( )                parentheses
#   √                  square root box
#   frac               stacked fraction box
#   pow                power box (base and exponent slots)
#   LEFT RIGHT         move cursor
#   DEL AC =           delete, all clear, compute

import html
import logging
import math
import operator
import os
import re
import streamlit as st
from dataclasses import dataclass, field
from typing import Any, Optional

APP_VERSION = 1
DISPLAY_DIGITS = 10
LOG_LEVEL = os.environ.get("CALC_LOG_LEVEL", "WARNING")

logger = logging.getLogger(__name__)

# ============================================================
# DATA MODEL
# ============================================================

ERROR = object()

class CalcError(Exception):
    pass

@dataclass
class Num:
    value: str
    raw: Optional[str] = None

@dataclass
class Op:
    value: str

@dataclass
class Func:
    name: str

    @property
    def value(self):
        return self.name + "("

@dataclass
class Paren:
    value: str

@dataclass
class Placeholder:
    pass

@dataclass
class Fraction:
    numer: list = field(default_factory=list)
    denom: list = field(default_factory=list)

@dataclass
class Sqrt:
    radicand: list = field(default_factory=list)

@dataclass
class Power:
    base: list = field(default_factory=lambda: [Placeholder()])
    exp: list = field(default_factory=lambda: [Placeholder()])

DIGITS = tuple("0123456789.")
OPERATORS = ("+", "-", "−", "×", "÷", "^")
FUNCTIONS = ("sin", "cos", "tan", "ln", "log")

def make_token(key):
    """Fresh token for a key press, or None if the key does not insert anything."""
    if key in DIGITS:     return Num(key)
    if key in OPERATORS:  return Op(key)
    if key in FUNCTIONS:  return Func(key)
    if key in ("(", ")"): return Paren(key)
    if key == "√":        return Sqrt()
    if key == "pow":      return Power()
    if key == "frac":     return Fraction()
    return None

# ============================================================
# TOKEN SEQUENCE EDITOR
# ============================================================

class Editor:
    def __init__(self):
        self.tokens = []
        self.cursor = 0

    def insert(self, tk):
        self.tokens.insert(self.cursor, tk)
        self.cursor += 1

    def delete_before_cursor(self):
        # a composite goes with its whole subtree
        if self.cursor > 0:
            del self.tokens[self.cursor - 1]
            self.cursor -= 1

    def move_left(self):
        if self.cursor > 0: self.cursor -= 1

    def move_right(self):
        if self.cursor < len(self.tokens): self.cursor += 1

    def reset(self):
        self.tokens = []
        self.cursor = 0

    def replace_with_single_number(self, text, raw=None):
        self.tokens = [Num(text, raw)]
        self.cursor = 1

# ============================================================
# LAYOUT RENDERER  (class-name dispatch for Streamlit hot-reload safety)
# ============================================================

SLOT_GLYPH = "□"
CURSOR_HTML = '<span class="cursor">|</span>'

def render_layout(tokens):
    out = []
    for t in tokens:
        cn = type(t).__name__
        if cn == 'Fraction':
            out.append('<span class="frac"><span class="top">{}</span><span class="bottom">{}</span></span>'.format(
                render_layout(t.numer), render_layout(t.denom)))
        elif cn == 'Sqrt':
            out.append('<span class="sqrt">√<span class="radicand">{}</span></span>'.format(render_layout(t.radicand)))
        elif cn == 'Power':
            out.append('<span class="power">{}<sup>{}</sup></span>'.format(render_layout(t.base), render_layout(t.exp)))
        elif cn == 'Placeholder':
            out.append('<span class="slot">{}</span>'.format(SLOT_GLYPH))
        elif cn in ('Num', 'Op', 'Func', 'Paren'):
            out.append(html.escape(t.value))
        else:
            raise CalcError("cannot render {}".format(cn))
    return "".join(out)

# ============================================================
# LINEAR SERIALIZER
# ============================================================

LINEAR_OPS = {"×": "*", "÷": "/", "−": "-"}

def to_linear(tokens):
    out = ""
    for t in tokens:
        cn = type(t).__name__
        if cn == 'Num':
            text = t.raw or t.value
            # a seeded negative result is one operand: (-2)^2, not -(2^2)
            out += "(" + text + ")" if text.startswith("-") else text
        elif cn == 'Op':          out += LINEAR_OPS.get(t.value, t.value)
        elif cn in ('Func', 'Paren'): out += t.value
        elif cn == 'Fraction':
            out += "(" + to_linear(t.numer) + ")/(" + to_linear(t.denom) + ")"
        elif cn == 'Sqrt':
            out += "sqrt(" + to_linear(t.radicand) + ")"
        elif cn == 'Power':
            out += "pow(" + to_linear(t.base) + "," + to_linear(t.exp) + ")"
        elif cn == 'Placeholder': pass
        else:
            raise CalcError("cannot linearize {}".format(cn))
    return out

# ============================================================
# EXPRESSION TOKENIZER
# ============================================================

TK_NUM = 'NUM'; TK_NAME = 'NAME'
TK_PLUS = '+';  TK_MINUS = '-'
TK_STAR = '*';  TK_SLASH = '/'
TK_CARET = '^'; TK_COMMA = ','
TK_LPAREN = '('; TK_RPAREN = ')'
TK_EOF = 'EOF'

@dataclass
class Lexeme:
    type: str
    value: Any
    pos: int

def tokenize(src):
    lexemes = []
    i = 0
    n = len(src)
    simple = {
        '+': TK_PLUS, '-': TK_MINUS, '*': TK_STAR, '/': TK_SLASH,
        '^': TK_CARET, ',': TK_COMMA, '(': TK_LPAREN, ')': TK_RPAREN,
    }
    while i < n:
        if src[i].isspace():
            i += 1; continue
        if src[i] in simple:
            lexemes.append(Lexeme(simple[src[i]], src[i], i)); i += 1; continue
        if src[i].isdigit() or src[i] == '.':
            j = i
            while i < n and (src[i].isdigit() or src[i] == '.'): i += 1
            if i < n and src[i] in 'eE':
                k = i + 1
                if k < n and src[k] in '+-': k += 1
                if k < n and src[k].isdigit():
                    i = k
                    while i < n and src[i].isdigit(): i += 1
            try:
                lexemes.append(Lexeme(TK_NUM, float(src[j:i]), j))
            except ValueError:
                raise CalcError("syntax error: malformed number '{}' at position {}".format(src[j:i], j))
            continue
        if src[i].isalpha():
            j = i
            while i < n and src[i].isalnum(): i += 1
            lexemes.append(Lexeme(TK_NAME, src[j:i], j)); continue
        raise CalcError("syntax error: unexpected '{}' at position {}".format(src[i], i))
    lexemes.append(Lexeme(TK_EOF, None, i))
    return lexemes

# ============================================================
# AST NODES
# ============================================================

@dataclass
class ASTNum:
    value: float
@dataclass
class ASTUnary:
    op: str; operand: Any
@dataclass
class ASTBinary:
    op: str; left: Any; right: Any
@dataclass
class ASTCall:
    name: str; args: list

# ============================================================
# PARSER
# ============================================================

CONSTANTS = {"Infinity": math.inf}

class Parser:
    def __init__(self, lexemes):
        self.lexemes = lexemes; self.pos = 0
    def peek(self):
        return self.lexemes[self.pos]
    def advance(self):
        t = self.lexemes[self.pos]; self.pos += 1; return t
    def expect(self, tt):
        t = self.peek()
        if t.type != tt:
            raise CalcError("syntax error: expected '{}', got '{}' at pos {}".format(tt, t.value, t.pos))
        return self.advance()
    def at(self, *tts):
        return self.peek().type in tts

    def parse_top(self):
        if self.at(TK_EOF):
            raise CalcError("syntax error: empty expression")
        result = self.parse_sum()
        if not self.at(TK_EOF):
            raise CalcError("syntax error: unexpected '{}' at pos {}".format(self.peek().value, self.peek().pos))
        return result

    def parse_sum(self):
        left = self.parse_product()
        while self.at(TK_PLUS, TK_MINUS):
            op = self.advance().type
            left = ASTBinary(op, left, self.parse_product())
        return left

    def parse_product(self):
        left = self.parse_unary()
        while self.at(TK_STAR, TK_SLASH):
            op = self.advance().type
            left = ASTBinary(op, left, self.parse_unary())
        return left

    def parse_unary(self):
        if self.at(TK_PLUS, TK_MINUS):
            op = self.advance().type
            return ASTUnary(op, self.parse_unary())
        return self.parse_power()

    def parse_power(self):
        base = self.parse_atom()
        if self.at(TK_CARET):
            self.advance()
            # right-associative: 2^3^2 is 2^(3^2)
            return ASTBinary(TK_CARET, base, self.parse_unary())
        return base

    def parse_atom(self):
        t = self.peek()
        if t.type == TK_NUM:
            self.advance(); return ASTNum(t.value)
        if t.type == TK_NAME:
            self.advance()
            if self.at(TK_LPAREN):
                self.advance()
                args = []
                if not self.at(TK_RPAREN):
                    args.append(self.parse_sum())
                    while self.at(TK_COMMA):
                        self.advance(); args.append(self.parse_sum())
                self.expect(TK_RPAREN)
                return ASTCall(t.value, args)
            if t.value in CONSTANTS:
                return ASTNum(CONSTANTS[t.value])
            raise CalcError("undefined: {}".format(t.value))
        if t.type == TK_LPAREN:
            self.advance(); inner = self.parse_sum(); self.expect(TK_RPAREN); return inner
        raise CalcError("syntax error: unexpected '{}' at pos {}".format(t.value, t.pos))

def parse(src):
    return Parser(tokenize(src)).parse_top()

# ============================================================
# NUMERIC PRIMITIVES  (IEEE results instead of Python exceptions)
# ============================================================

def _ieee(fn):
    def f(*args):
        try: return fn(*args)
        except OverflowError: return math.inf
        except ValueError: return math.nan
    return f

def _div(a, b):
    if b == 0:
        if a == 0 or math.isnan(a): return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

def _pow(a, b):
    if a == 0 and b < 0: return math.inf
    try: return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and b % 2 == 1 else math.inf
    except ValueError: return math.nan

def _log_of(fn):
    def f(x):
        if x == 0: return -math.inf
        return _ieee(fn)(x)
    return f

BINARY_OPS = {
    TK_PLUS: operator.add,
    TK_MINUS: operator.sub,
    TK_STAR: operator.mul,
    TK_SLASH: _div,
    TK_CARET: _pow,
}

# name -> (function, arity)
MATH_FUNCS = {
    'sin':   (_ieee(math.sin), 1),
    'cos':   (_ieee(math.cos), 1),
    'tan':   (_ieee(math.tan), 1),
    'log':   (_log_of(math.log), 1),
    'log10': (_log_of(math.log10), 1),
    'sqrt':  (_ieee(math.sqrt), 1),
    'pow':   (_pow, 2),
}

def eval_node(node):
    cn = type(node).__name__
    if cn == 'ASTNum':
        return node.value
    if cn == 'ASTUnary':
        v = eval_node(node.operand)
        return -v if node.op == TK_MINUS else v
    if cn == 'ASTBinary':
        return BINARY_OPS[node.op](eval_node(node.left), eval_node(node.right))
    if cn == 'ASTCall':
        if node.name not in MATH_FUNCS:
            raise CalcError("undefined: {}".format(node.name))
        fn, arity = MATH_FUNCS[node.name]
        if len(node.args) != arity:
            raise CalcError("error: {} expects {} argument(s), got {}".format(node.name, arity, len(node.args)))
        return fn(*[eval_node(a) for a in node.args])
    raise CalcError("eval error: cannot evaluate {}".format(cn))

# ============================================================
# EVALUATOR
# ============================================================

HOST_FUNCTIONS = {"sin": "sin", "cos": "cos", "tan": "tan", "log": "log10", "ln": "log"}
_CALL_PREFIX = re.compile(r"(sin|cos|tan|log|ln)\(")

def to_host(expr):
    """Rewrite calculator call prefixes (``log(``, ``ln(``...) to math module names."""
    return _CALL_PREFIX.sub(lambda m: HOST_FUNCTIONS[m.group(1)] + "(", expr)

def evaluate(tokens):
    """Evaluate a token sequence. Returns a float, or ERROR; never raises."""
    expr = ""
    try:
        expr = to_host(to_linear(tokens))
        result = eval_node(parse(expr))
    except CalcError as e:
        logger.info("cannot evaluate %r: %s", expr, e)
        return ERROR
    except Exception as e:
        logger.warning("cannot evaluate %r: %s: %s", expr, type(e).__name__, e)
        return ERROR
    if math.isnan(result):
        logger.info("%r is not a number", expr)
        return ERROR
    return result

def format_result(v):
    if v is ERROR:
        return "Error"
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if v == int(v) and abs(v) < 10 ** DISPLAY_DIGITS:
        return str(int(v))
    return "{:.{}g}".format(v, DISPLAY_DIGITS)

def linear_number(v, text):
    """Exact text to carry alongside a rounded display, or None if the display is exact."""
    if math.isinf(v) or float(text) == v:
        return None
    return repr(v)

# ============================================================
# CALCULATOR SESSION
# ============================================================

class Calculator:
    def __init__(self):
        self.editor = Editor()
        self.main_display = "0"
        self.sub_display = ""
        self.last_result = None

    def press(self, key):
        """Feed one key press. Returns False for keys the keypad does not know."""
        if key == "=":
            self.compute()
            return True
        ed = self.editor
        tk = make_token(key)
        if tk is not None:  ed.insert(tk)
        elif key == "AC":    ed.reset()
        elif key == "DEL":   ed.delete_before_cursor()
        elif key == "LEFT":  ed.move_left()
        elif key == "RIGHT": ed.move_right()
        else:
            return False
        self.refresh()
        return True

    def refresh(self):
        ed = self.editor
        if not ed.tokens:
            self.main_display = "0"
        elif ed.cursor < len(ed.tokens):
            self.main_display = render_layout(ed.tokens[:ed.cursor]) + CURSOR_HTML + render_layout(ed.tokens[ed.cursor:])
        else:
            self.main_display = render_layout(ed.tokens)
        self.sub_display = to_linear(ed.tokens)

    def compute(self):
        result = evaluate(self.editor.tokens)
        text = format_result(result)
        self.main_display = text
        if result is ERROR:
            # expression stays in the editor for correction
            return result
        self.sub_display = ""
        self.editor.replace_with_single_number(text, linear_number(result, text))
        self.last_result = result
        return result

# ============================================================
# STREAMLIT UI -- LCD panel and keypad
# ============================================================

KEYPAD = [
    ["sin", "cos", "tan", "ln", "log"],
    ["frac", "√", "pow", "(", ")"],
    ["7", "8", "9", "DEL", "AC"],
    ["4", "5", "6", "×", "÷"],
    ["1", "2", "3", "+", "−"],
    ["0", ".", "^", "LEFT", "RIGHT"],
    ["="],
]

KEY_LABELS = {
    "frac": "a/b",
    "pow": "xʸ",
    "LEFT": "◀",
    "RIGHT": "▶",
}

LCD_CSS = """
<style>
:root {
    --lcd-bg: #c9d3b6;
    --lcd-fg: #1d2416;
    --lcd-dim: #55604a;
}
.lcd {
    background-color: var(--lcd-bg);
    color: var(--lcd-fg);
    border: 3px solid #3a3f35;
    border-radius: 6px;
    padding: 10px 14px;
    margin-bottom: 12px;
    font-family: 'Menlo', 'Consolas', monospace;
    min-height: 96px;
}
.lcd-sub {
    color: var(--lcd-dim);
    font-size: 14px;
    min-height: 20px;
    word-break: break-all;
}
.lcd-main {
    font-size: 26px;
    text-align: right;
    padding-top: 8px;
}
.frac {
    display: inline-flex;
    flex-direction: column;
    vertical-align: middle;
    text-align: center;
    margin: 0 2px;
}
.frac .top {
    border-bottom: 2px solid var(--lcd-fg);
    padding: 0 3px;
    min-width: 12px;
    min-height: 1em;
}
.frac .bottom {
    padding: 0 3px;
    min-width: 12px;
    min-height: 1em;
}
.sqrt .radicand {
    border-top: 2px solid var(--lcd-fg);
    padding: 0 2px;
    display: inline-block;
    min-width: 12px;
}
.power sup { font-size: 60%; }
.slot { color: var(--lcd-dim); }
.cursor { color: var(--lcd-dim); font-weight: 600; }
</style>
"""

def main():
    logging.basicConfig(level=LOG_LEVEL)
    st.set_page_config(page_title="fx Math Input", page_icon="fx", layout="centered")
    st.markdown(LCD_CSS, unsafe_allow_html=True)

    # Version check: force reset on code change
    if st.session_state.get("app_version") != APP_VERSION:
        st.session_state.calculator = Calculator()
        st.session_state.app_version = APP_VERSION

    if "calculator" not in st.session_state:
        st.session_state.calculator = Calculator()

    calc = st.session_state.calculator

    st.markdown(
        '<div class="lcd"><div class="lcd-sub">{}</div><div class="lcd-main">{}</div></div>'.format(
            html.escape(calc.sub_display), calc.main_display),
        unsafe_allow_html=True,
    )

    for r, row in enumerate(KEYPAD):
        cols = st.columns(len(row))
        for c, (col, key) in enumerate(zip(cols, row)):
            if col.button(KEY_LABELS.get(key, key), key="key_{}_{}".format(r, c), use_container_width=True):
                calc.press(key)
                st.rerun()

if __name__ == "__main__":
    main()
