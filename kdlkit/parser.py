"""Recursive-descent parser building a KdlDocument from the lexer's token stream."""

from __future__ import annotations

from typing import NotRequired, Optional, TypedDict

from kdlkit.logger import Logger
from kdlkit.utils import resolve_config

from .document import KdlDocument
from .errors import KdlSyntaxError
from .lexer import KdlLexer, Token, TokenType
from .nodes import (
    KdlArgument,
    KdlBlock,
    KdlBool,
    KdlEntry,
    KdlNode,
    KdlNull,
    KdlNumber,
    KdlProperty,
    KdlSkippedEntry,
    KdlValue,
)

LINE_SPACE = {TokenType.WHITESPACE, TokenType.NEWLINE, TokenType.COMMENT}
NODE_TERMINATORS = {TokenType.NEWLINE, TokenType.COMMENT, TokenType.SEMICOLON, TokenType.EOF, TokenType.CLOSE_BRACE}

TOKEN_DESCRIPTIONS = {
    TokenType.STRING: "string",
    TokenType.NUMBER: "number",
    TokenType.KEYWORD: "keyword",
    TokenType.OPEN_PAREN: "'('",
    TokenType.CLOSE_PAREN: "')'",
    TokenType.OPEN_BRACE: "'{'",
    TokenType.CLOSE_BRACE: "'}'",
    TokenType.EQUALS: "'='",
    TokenType.SEMICOLON: "';'",
    TokenType.SLASHDASH: "'/-'",
    TokenType.WHITESPACE: "whitespace",
    TokenType.NEWLINE: "newline",
    TokenType.COMMENT: "comment",
    TokenType.EOF: "end of input",
}


class ParserConfig(TypedDict):
    keep_skipped_entries: NotRequired[bool]
    max_depth: NotRequired[int]
    enable_logger: NotRequired[bool]


class ParserConfigRequired(TypedDict):
    keep_skipped_entries: bool
    max_depth: int
    enable_logger: bool


DEFAULT_CONFIG: ParserConfigRequired = {"keep_skipped_entries": False, "max_depth": 128, "enable_logger": False}


class KdlParser:
    def __init__(self, text: str, config: Optional[ParserConfig] = None):
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "kdlkit.parser", "is_enabled": self.config["enable_logger"]}).logger
        self.text = text
        self.lexer = KdlLexer(text, config={"tokenize": False, "enable_logger": self.config["enable_logger"]})
        self._tokens = self.lexer.iter_tokens()
        self._buffer: list[Token] = []
        self._last_end = 0
        self._depth = 0

    # Token cursor ------------------------------------------------------------
    @property
    def current_token(self) -> Token:
        return self.lookahead(0)

    def lookahead(self, distance: int = 1) -> Token:
        while len(self._buffer) <= distance:
            if self._buffer and self._buffer[-1].type == TokenType.EOF:
                return self._buffer[-1]
            self._buffer.append(next(self._tokens))
        return self._buffer[distance]

    def advance(self) -> Token:
        token = self.current_token
        if token.type != TokenType.EOF:
            self._buffer.pop(0)
            self._last_end = token.end
        return token

    def expect(self, expected_type: TokenType, message: Optional[str] = None) -> Token:
        token = self.current_token
        if token.type != expected_type:
            raise self._error(
                message or f"Expected {TOKEN_DESCRIPTIONS[expected_type]}, but found {self._describe(token)}",
                token,
            )
        return token

    def consume(self, expected_type: TokenType, message: Optional[str] = None) -> Token:
        self.expect(expected_type, message)
        return self.advance()

    def _skip(self, token_types: set[TokenType]) -> bool:
        skipped = False
        while self.current_token.type in token_types:
            self.advance()
            skipped = True
        return skipped

    def _skip_node_space(self) -> bool:
        return self._skip({TokenType.WHITESPACE})

    def _skip_line_space(self) -> bool:
        return self._skip(LINE_SPACE)

    def _next_significant(self, distance: int = 1) -> Token:
        """First token at or after ``distance`` that is not whitespace, a newline or a comment."""
        while self.lookahead(distance).type in LINE_SPACE:
            distance += 1
        return self.lookahead(distance)

    def _describe(self, token: Token) -> str:
        if token.type == TokenType.STRING:
            return f"string '{token.value.value}'"
        if token.type == TokenType.NUMBER:
            return f"number '{token.value}'"
        return TOKEN_DESCRIPTIONS[token.type]

    def _error(self, message: str, token: Token) -> KdlSyntaxError:
        return KdlSyntaxError(message, token.line, token.column, token.offset)

    # Grammar -----------------------------------------------------------------
    def parse_document(self) -> KdlDocument:
        self.logger.info("Parsing document")
        nodes = self._parse_nodes(opening_brace=None)
        self.expect(TokenType.EOF, "Unconsumed content at end of input")
        self.logger.info(f"Parsed {len(nodes)} top-level nodes")
        return KdlDocument(nodes=tuple(nodes))

    def _parse_nodes(self, opening_brace: Optional[Token]) -> list[KdlNode]:
        nodes: list[KdlNode] = []
        while True:
            self._skip_line_space()
            token = self.current_token
            if token.type == TokenType.EOF:
                if opening_brace is not None:
                    raise self._error(
                        f"Expected '}}' to close the children block opened at line {opening_brace.line}, "
                        "but reached the end of input",
                        token,
                    )
                return nodes
            if token.type == TokenType.CLOSE_BRACE:
                if opening_brace is not None:
                    return nodes
                raise self._error("Unexpected '}' without a matching '{'", token)
            node = self._parse_node(inside_block=opening_brace is not None)
            if node is not None:
                nodes.append(node)

    def _parse_node(self, inside_block: bool) -> Optional[KdlNode]:
        skipped = False
        if self.current_token.type == TokenType.SLASHDASH:
            self.advance()
            self._skip_line_space()
            skipped = True

        annotation = None
        if self.current_token.type == TokenType.OPEN_PAREN:
            annotation = self._parse_type()
            self._skip_node_space()

        name_token = self.current_token
        if name_token.type in (TokenType.NUMBER, TokenType.KEYWORD):
            raise self._error(f"Node names must be strings, found {self._describe(name_token)}", name_token)
        self.consume(TokenType.STRING, f"Expected a node name, but found {self._describe(name_token)}")

        entries: list[KdlEntry] = []
        children: Optional[KdlBlock] = None
        seen_children = False
        while True:
            had_space = self._skip_node_space()
            token = self.current_token
            if token.type in NODE_TERMINATORS:
                break
            if self._starts_children(token):
                if not had_space:
                    raise self._error("Nodes must be separated from their children block by whitespace", token)
                block_skipped = token.type == TokenType.SLASHDASH
                block = self._parse_children()
                if not block_skipped:
                    if children is not None:
                        raise self._error("A node may only have one children block", token)
                    children = block
                seen_children = True
                continue
            if seen_children:
                raise self._error("Arguments and properties are not allowed after a children block", token)
            if not had_space:
                raise self._error(
                    f"Expected whitespace, a terminator or a children block, but found {self._describe(token)}",
                    token,
                )
            entry = self._parse_entry()
            if entry is not None:
                entries.append(entry)

        terminated_by_semicolon = self._parse_terminator(inside_block)
        if skipped:
            self.logger.debug("Skipped slashdashed node '%s'", name_token.value.value)
            return None
        node = KdlNode(
            name=name_token.value,
            type_annotation=annotation,
            entries=tuple(entries),
            children=children,
            terminated_by_semicolon=terminated_by_semicolon,
        )
        self.logger.debug("Parsed node '%s' with %d entries", node.name.value, len(entries))
        return node

    def _starts_children(self, token: Token) -> bool:
        if token.type == TokenType.OPEN_BRACE:
            return True
        return token.type == TokenType.SLASHDASH and self._next_significant().type == TokenType.OPEN_BRACE

    def _parse_terminator(self, inside_block: bool) -> bool:
        token = self.current_token
        if token.type == TokenType.SEMICOLON:
            self.advance()
            return True
        if token.type in (TokenType.NEWLINE, TokenType.COMMENT):
            self.advance()
        elif token.type == TokenType.CLOSE_BRACE and not inside_block:
            raise self._error("Unexpected '}' without a matching '{'", token)
        return False

    def _parse_children(self) -> KdlBlock:
        if self.current_token.type == TokenType.SLASHDASH:
            self.advance()
            self._skip_line_space()
        opening_brace = self.consume(TokenType.OPEN_BRACE)
        if self._depth >= self.config["max_depth"]:
            raise self._error(f"Children blocks nested deeper than {self.config['max_depth']} levels", opening_brace)
        self._depth += 1
        nodes = self._parse_nodes(opening_brace=opening_brace)
        self._depth -= 1
        self.consume(TokenType.CLOSE_BRACE)
        return KdlBlock(nodes=tuple(nodes))

    def _parse_entry(self) -> Optional[KdlEntry]:
        if self.current_token.type != TokenType.SLASHDASH:
            return self._parse_property_or_argument()
        self.advance()
        self._skip_line_space()
        start = self.current_token.offset
        self._parse_property_or_argument()
        if self.config["keep_skipped_entries"]:
            return KdlSkippedEntry(raw=self.text[start : self._last_end])
        return None

    def _parse_property_or_argument(self) -> KdlEntry:
        token = self.current_token
        if token.type == TokenType.STRING:
            following = self.lookahead(1)
            if following.type == TokenType.EQUALS:
                self.advance()
                self.advance()
                if self.current_token.type in LINE_SPACE:
                    raise self._error("Whitespace is not allowed after '=' in a property", self.current_token)
                return KdlProperty(key=token.value, value=self._parse_value())
            if following.type == TokenType.WHITESPACE and self.lookahead(2).type == TokenType.EQUALS:
                raise self._error("Whitespace is not allowed before '=' in a property", following)
        value = self._parse_value()
        if self.current_token.type == TokenType.EQUALS:
            raise self._error("Property keys must be unannotated strings", self.current_token)
        return KdlArgument(value=value)

    def _parse_value(self) -> KdlValue:
        annotation = None
        if self.current_token.type == TokenType.OPEN_PAREN:
            annotation = self._parse_type()
            self._skip_node_space()
        token = self.current_token
        if token.type == TokenType.STRING:
            value: KdlValue = token.value.with_annotation(annotation)
        elif token.type == TokenType.NUMBER:
            value = KdlNumber(raw=token.value, type_annotation=annotation)
        elif token.type == TokenType.KEYWORD:
            if token.value is None:
                value = KdlNull(type_annotation=annotation)
            else:
                value = KdlBool(value=token.value, type_annotation=annotation)
        elif token.type == TokenType.EOF:
            raise self._error("Expected a value, but reached the end of input", token)
        else:
            raise self._error(f"Expected a value, but found {self._describe(token)}", token)
        self.advance()
        return value

    def _parse_type(self) -> str:
        self.consume(TokenType.OPEN_PAREN)
        self._skip_node_space()
        token = self.current_token
        self.consume(TokenType.STRING, f"Expected a type name in type annotation, but found {self._describe(token)}")
        self._skip_node_space()
        self.consume(TokenType.CLOSE_PAREN, "Expected ')' to close type annotation")
        return token.value.value


def parse(text: str, config: Optional[ParserConfig] = None) -> KdlDocument:
    return KdlParser(text, config=config).parse_document()


__all__ = ["KdlParser", "ParserConfig", "parse"]
