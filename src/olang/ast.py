"""
Abstract Syntax Tree (AST) node definitions for olang.

Every construct in olang is an expression: a parsed program is an ordered
list of expressions, each of which produces a value when interpreted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Union, Any
from abc import ABC
from .tokens import SourceSpan, TokenType


class ExpressionKind(Enum):
    """The kind of expression being built, reported in parser diagnostics."""
    GROUPING = "grouping"
    BLOCK = "block"
    VAR_DECL = "variable declaration"
    FUNCTION = "function"
    CALL = "function call"
    LIST = "list"
    INDEX = "index"
    IF = "if"
    LOOP = "loop"


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


# =============================================================================
# Leaves
# =============================================================================

@dataclass
class Literal(Expression):
    """A literal value (int, string, bool, null)."""
    value: Union[int, str, bool, None]
    literal_type: TokenType  # INT_LITERAL, STRING_LITERAL, TRUE/FALSE, NULL


@dataclass
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass
class Continue(Expression):
    """`continue`: skip to the update step of the enclosing loop."""
    pass


@dataclass
class Break(Expression):
    """`break`: leave the enclosing loop."""
    pass


# =============================================================================
# Compound expressions
# =============================================================================

@dataclass
class Block(Expression):
    """A brace-delimited sequence of expressions with its own scope."""
    expressions: List[Expression] = field(default_factory=list)


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x && y)."""
    left: Expression
    operator: TokenType
    right: Expression


@dataclass
class Update(Expression):
    """Increment or decrement of a variable (x++, x--)."""
    name: str
    operator: TokenType  # INCREMENT or DECREMENT


@dataclass
class VarDecl(Expression):
    """Variable declaration: var name = initializer"""
    name: str
    initializer: Expression


@dataclass
class Assignment(Expression):
    """Assignment to an existing variable (=, +=, -=, *=, /=, %=)."""
    name: str
    operator: TokenType
    value: Expression


@dataclass
class FunctionLiteral(Expression):
    """Function definition: fun(a b) { body }"""
    parameters: List[str]
    body: Block


@dataclass
class FunctionCall(Expression):
    """A call of a named function (e.g., printLn("x" 1))."""
    callee: str
    arguments: List[Expression]


@dataclass
class ListLiteral(Expression):
    """A list literal (e.g., [1 2 3])."""
    elements: List[Expression]


@dataclass
class IndexAccess(Expression):
    """Index access (e.g., items[0])."""
    object: Expression
    index: Expression


@dataclass
class IfClause(AstNode):
    """One `if` or `elif` test with its body."""
    test: Expression
    body: Block


@dataclass
class IfExpr(Expression):
    """if/elif/else chain; clauses are tried in order."""
    clauses: List[IfClause]
    else_branch: Optional[Block] = None


@dataclass
class Loop(Expression):
    """
    Unified loop node.

    `while test {}` fills only `test`, `for (init test update) {}` fills all
    three slots and `loop {}` fills none.
    """
    body: Block
    init: Optional[Expression] = None
    test: Optional[Expression] = None
    update: Optional[Expression] = None


@dataclass
class Program(AstNode):
    """A whole source file."""
    expressions: List[Expression] = field(default_factory=list)


# =============================================================================
# Visitor Helpers
# =============================================================================

class PrintVisitor(AstVisitor):
    """Debug visitor that prints the AST structure."""

    def __init__(self, indent: int = 0, out=None):
        self.indent = indent
        self.out = out

    def _print(self, text: str) -> None:
        print("  " * self.indent + text, file=self.out)

    def _child(self) -> "PrintVisitor":
        return PrintVisitor(self.indent + 2, self.out)

    def visit_Literal(self, node: Literal) -> None:
        self._print(f"Literal {node.literal_type.name} {node.value!r}")

    def visit_Identifier(self, node: Identifier) -> None:
        self._print(f"Identifier {node.name}")

    def generic_visit(self, node: AstNode) -> None:
        self._print(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._print(f"  {name}:")
                value.accept(self._child())
            elif isinstance(value, list):
                self._print(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        item.accept(self._child())
                    else:
                        self._print(f"    {item!r}")
                self._print("  ]")
            elif isinstance(value, TokenType):
                self._print(f"  {name}: {value.name}")
            else:
                self._print(f"  {name}: {value!r}")


def print_ast(node: AstNode, out=None) -> None:
    """Print an AST node for debugging."""
    node.accept(PrintVisitor(out=out))
