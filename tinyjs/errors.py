from typing import Any, Optional


REFERENCE_ERROR = 'ReferenceError'
TYPE_ERROR = 'TypeError'
ARGUMENT_ERROR = 'ArgumentError'
SYNTAX_ERROR = 'SyntaxError'
CONTROL_FLOW_ERROR = 'ControlFlowError'
ARITHMETIC_ERROR = 'ArithmeticError'
RANGE_ERROR = 'RangeError'


class TinyJSError(Exception):
    """Exception type used to abort a TinyJS run.

    ``kind`` is one of the error kind names above; ``line`` is the source
    line of the node being evaluated when the failure was detected.
    """
    def __init__(self, kind: str, message: str, line: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.kind}: {self.message}"
        return f"line {self.line}: {self.kind}: {self.message}"


class TinyJSSyntaxError(TinyJSError):
    """Raised by the lexer and parser for malformed input."""
    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(SYNTAX_ERROR, message, line)


class ReturnSignal:
    """Control signal produced by a return statement."""
    keyword = 'return'

    def __init__(self, value: Any):
        self.value = value


class BreakSignal:
    keyword = 'break'


class ContinueSignal:
    keyword = 'continue'


BREAK = BreakSignal()
CONTINUE = ContinueSignal()
