"""
Calculator input state machine.

Turns a stream of keypad actions into a running Decimal value. Knows nothing
about currencies: the only output is the value handed to the observer (and
returned) after every action.
"""

import functools
import logging
import threading
from decimal import Decimal, InvalidOperation, Overflow, ROUND_DOWN, localcontext
from typing import Callable, Optional, Union

from apps.converter.domain.exceptions import ParseError
from apps.converter.domain.models import CalculatorState, Operator

logger = logging.getLogger(__name__)

MAX_INTEGER_DIGITS = 12
MAX_DECIMAL_PLACES = 8
WORKING_PRECISION = 64

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DIGITS = "0123456789"

Observer = Callable[[Decimal], None]
Number = Union[Decimal, int, str]

# Keypad symbols accepted by CalculatorEngine.press
OPERATOR_KEYS = {
    "+": Operator.ADD,
    "-": Operator.SUB,
    "*": Operator.MUL,
    "×": Operator.MUL,
    "/": Operator.DIV,
    "÷": Operator.DIV,
}


def working_precision(*values: Decimal) -> int:
    """Digits needed to hold the integer part of every value plus MAX_DECIMAL_PLACES."""
    integer_digits = max(max(v.adjusted(), 0) + 1 for v in values)
    return max(WORKING_PRECISION, integer_digits + MAX_DECIMAL_PLACES + 1)


def parse_buffer(text: str) -> Decimal:
    """Parse a calculator buffer, raising ParseError for anything that is not a finite number."""
    if not text:
        raise ParseError("empty buffer")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ParseError(f"not a number: {text!r}")
    if not value.is_finite():
        raise ParseError(f"not a finite number: {text!r}")
    return value


def format_result(value: Decimal) -> str:
    """
    Render a computed value for the buffer.

    Integral values have no fractional part. Fractional values are truncated
    to MAX_DECIMAL_PLACES and lose trailing zeros and a trailing dot.
    """
    with localcontext() as ctx:
        ctx.prec = working_precision(value)
        if value == value.to_integral_value():
            text = f"{value.to_integral_value():f}"
        else:
            truncated = value.quantize(Decimal(1).scaleb(-MAX_DECIMAL_PLACES), rounding=ROUND_DOWN)
            text = f"{truncated:f}".rstrip("0").rstrip(".")
    if text in ("", "-", "-0"):
        return "0"
    return text


def _emits(method):
    """Run an action under the engine lock, then emit the resulting value."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            method(self, *args, **kwargs)
            return self._emit()

    return wrapper


class CalculatorEngine:
    """
    Four-function calculator with percent and backspace.

    Every action returns the current value and passes it to the observer
    before the next action is accepted.
    """

    def __init__(self, on_value_changed: Optional[Observer] = None):
        self._state = CalculatorState()
        self._observer = on_value_changed
        self.lock = threading.RLock()

    def subscribe(self, observer: Optional[Observer]) -> None:
        self._observer = observer

    @property
    def state(self) -> CalculatorState:
        s = self._state
        return CalculatorState(
            digits_buffer=s.digits_buffer,
            pending_operator=s.pending_operator,
            first_operand=s.first_operand,
            awaiting_fresh_operand=s.awaiting_fresh_operand,
        )

    @property
    def display(self) -> str:
        return self._state.digits_buffer

    @property
    def value(self) -> Decimal:
        return self._parse_or_zero(self._state.digits_buffer)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    @_emits
    def input_digit(self, digit: Union[int, str]) -> Decimal:
        digit = str(digit)
        if len(digit) != 1 or digit not in DIGITS:
            raise ValueError(f"Expected a single digit 0-9, got {digit!r}")

        state = self._state
        if state.awaiting_fresh_operand:
            state.digits_buffer = ""
            state.awaiting_fresh_operand = False

        buffer = state.digits_buffer
        if "." in buffer:
            decimal_part = buffer.split(".", 1)[1]
            if len(decimal_part) >= MAX_DECIMAL_PLACES:
                logger.debug("Maximum decimal places reached: %s", MAX_DECIMAL_PLACES)
                return
        elif len(buffer.lstrip("-")) >= MAX_INTEGER_DIGITS:
            logger.debug("Maximum integer digits reached: %s", MAX_INTEGER_DIGITS)
            return

        if buffer == "0":
            state.digits_buffer = digit
        elif buffer == "-0":
            state.digits_buffer = "-" + digit
        else:
            state.digits_buffer = buffer + digit

    @_emits
    def input_dot(self) -> Decimal:
        state = self._state
        if state.awaiting_fresh_operand:
            state.digits_buffer = "0"
            state.awaiting_fresh_operand = False

        if "." not in state.digits_buffer:
            if state.digits_buffer in ("", "-"):
                state.digits_buffer += "0"
            state.digits_buffer += "."

    @_emits
    def set_operator(self, operator: Union[Operator, str]) -> Decimal:
        if not isinstance(operator, Operator):
            if operator not in OPERATOR_KEYS:
                raise ValueError(f"Unknown operator {operator!r}")
            operator = OPERATOR_KEYS[operator]
        state = self._state
        if state.digits_buffer:
            state.first_operand = self._parse_or_zero(state.digits_buffer)
            state.pending_operator = operator
            state.awaiting_fresh_operand = True
            logger.debug("Operation set: %s, first operand: %s", operator.value, state.first_operand)
        elif operator is Operator.SUB:
            # Lone minus starts a negative literal instead of an operation
            state.digits_buffer = "-"

    @_emits
    def percent(self) -> Decimal:
        state = self._state
        if state.digits_buffer:
            current = self._parse_or_zero(state.digits_buffer)
            with localcontext() as ctx:
                ctx.prec = working_precision(current)
                result = current / HUNDRED
            state.digits_buffer = format_result(result)

    @_emits
    def equals(self) -> Decimal:
        state = self._state
        if not state.digits_buffer or state.pending_operator is None:
            return

        first = state.first_operand
        second = self._parse_or_zero(state.digits_buffer)
        operator = state.pending_operator
        logger.debug("Calculating: %s %s %s", first, operator.value, second)

        with localcontext() as ctx:
            ctx.prec = working_precision(first, second)
            try:
                if operator is Operator.ADD:
                    result = first + second
                elif operator is Operator.SUB:
                    result = first - second
                elif operator is Operator.MUL:
                    result = first * second
                elif second == 0:
                    logger.warning("Division by zero attempted, result set to 0")
                    result = ZERO
                else:
                    result = first / second
            except Overflow:
                logger.warning("Result of %s %s %s is out of range, result set to 0", first, operator.value, second)
                result = ZERO

        state.digits_buffer = format_result(result)
        state.pending_operator = None

    @_emits
    def clear_all(self) -> Decimal:
        self._state = CalculatorState()

    @_emits
    def backspace(self) -> Decimal:
        if self._state.digits_buffer:
            self._state.digits_buffer = self._state.digits_buffer[:-1]

    @_emits
    def set_display(self, value: Number) -> Decimal:
        self._replace_buffer(value)

    def load(self, value: Number) -> None:
        """
        Put a value in the buffer without emitting it.

        The next digit starts a fresh number; operators apply to the loaded value.
        """
        with self.lock:
            self._replace_buffer(value)
            self._state.pending_operator = None
            self._state.awaiting_fresh_operand = True

    def press(self, key: str) -> Decimal:
        """Dispatch one keypad symbol: digits, '.', operators, '%', '=', 'C' (clear) or '<' (backspace)."""
        if key in DIGITS and len(key) == 1:
            return self.input_digit(key)
        if key in OPERATOR_KEYS:
            return self.set_operator(OPERATOR_KEYS[key])
        if key == ".":
            return self.input_dot()
        if key == "%":
            return self.percent()
        if key == "=":
            return self.equals()
        if key in ("C", "c"):
            return self.clear_all()
        if key == "<":
            return self.backspace()
        raise ValueError(f"Unknown calculator key {key!r}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _replace_buffer(self, value: Number) -> None:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
        self._state.digits_buffer = format_result(number)

    def _parse_or_zero(self, text: str) -> Decimal:
        try:
            return parse_buffer(text)
        except ParseError as e:
            logger.debug("Unparsable calculator buffer treated as 0: %s", e)
            return ZERO

    def _emit(self) -> Decimal:
        value = self.value
        if self._observer is not None:
            self._observer(value)
        return value
