"""
views/components/calculator.py — 시험용 공학 계산기

시험 설정에서 calculatorEnabled 가 켜진 경우에만 사이드바에 표시된다.
수식은 eval 을 쓰지 않고 AST 를 직접 계산한다 (숫자, 사칙연산, 거듭제곱,
괄호, 퍼센트, 허용된 함수/상수만).
"""

from __future__ import annotations

import ast
import math
import operator
import re

import streamlit as st


def _factorial(x: float) -> int:
    if not float(x).is_integer() or x < 0 or x > 170:
        raise ValueError("factorial 은 0~170 사이 정수만 가능합니다.")
    return math.factorial(int(x))


_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: math.pow,
}
_UNARY_OPS = {ast.UAdd: operator.pos, ast.USub: operator.neg}

_FUNCTIONS = {
    "sqrt": math.sqrt,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "log": math.log10,
    "ln": math.log,
    "factorial": _factorial,
}
_CONSTANTS = {"pi": math.pi, "e": math.e}

HISTORY_SIZE = 5


def _normalize(expression: str) -> str:
    """화면 기호를 파이썬 수식으로 바꾼다. 'a%b' 는 a의 b 퍼센트, 끝의 'a%' 는 a/100."""
    text = (
        expression.strip()
        .replace("×", "*")
        .replace("−", "-")
        .replace("÷", "/")
        .replace("^", "**")
        .replace("π", "pi")
    )
    text = re.sub(r"√\s*(\d+(?:\.\d+)?)", r"sqrt(\1)", text).replace("√", "sqrt")
    text = re.sub(r"(\d+(?:\.\d+)?)%", r"(\1/100)*", text)
    return re.sub(r"\)\*$", ")", text)


def _eval_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) \
            and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        return _BIN_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) \
            and node.func.id in _FUNCTIONS and len(node.args) == 1 and not node.keywords:
        return _FUNCTIONS[node.func.id](_eval_node(node.args[0]))
    raise ValueError("지원하지 않는 수식입니다.")


def evaluate(expression: str) -> float:
    """
    계산기 수식을 계산한다.

    Raises:
        ValueError: 빈 수식, 문법 오류, 허용되지 않은 이름, 0으로 나누기 등.
    """
    text = _normalize(expression)
    if not text:
        raise ValueError("수식을 입력하세요.")
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError:
        raise ValueError("수식 형식이 올바르지 않습니다.")
    try:
        return _eval_node(tree)
    except (ZeroDivisionError, OverflowError, TypeError) as e:
        raise ValueError(f"계산할 수 없습니다: {e}")


def format_result(value: float) -> str:
    """정수는 그대로, 실수는 소수점 10자리까지 (불필요한 0 제거)."""
    if isinstance(value, int) or float(value).is_integer():
        return str(int(value))
    return f"{value:.10f}".rstrip("0").rstrip(".")


def render() -> None:
    """사이드바용 계산기. 최근 계산 결과를 몇 개 보여준다."""
    history: list[str] = st.session_state.setdefault("calc_history", [])

    with st.expander("🧮 계산기", expanded=False):
        st.caption("+ − × ÷ ^ % ( ) · sqrt sin cos tan log ln factorial · pi e")
        with st.form("calculator_form", clear_on_submit=False, border=False):
            expression = st.text_input("수식", key="calc_expr", placeholder="예: (12.5 + 3) × 4")
            submitted = st.form_submit_button("=", use_container_width=True)

        if submitted and expression.strip():
            try:
                result = format_result(evaluate(expression))
            except ValueError as e:
                st.error(str(e))
            else:
                history.insert(0, f"{expression.strip()} = {result}")
                del history[HISTORY_SIZE:]

        for line in history:
            st.markdown(f"`{line}`")
