"""
Recording parser wrapper using esprima.

Parses recorded browser scripts to ESTree-compatible dict trees.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict

import esprima

logger = logging.getLogger(__name__)

# Bare recordings use top-level await; they are parsed inside an async wrapper.
_WRAPPER_PREFIX = "(async () => {\n"
_WRAPPER_SUFFIX = "\n})();"


class ParseError(Exception):
    """Exception raised when a recording cannot be parsed"""
    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"Parse error at line {line}, column {column}: {message}")


@dataclass(frozen=True)
class ParsedRecording:
    """
    A parsed recording.

    Attributes:
        ast: Program node as nested dicts
        source: The text that was actually parsed (ranges index into it)
        line_offset: Lines to subtract from node locations to get recording lines
    """
    ast: Dict[str, Any]
    source: str
    line_offset: int = 0


class RecordingParser:
    """
    Parser that converts recorded script source to an AST.

    Tries a classic script first, then an ES module (recordings that start with
    ``import { test, expect }``), then a bare list of awaited statements.
    Parsing is strict: any syntax error aborts with ``ParseError``.
    """

    @staticmethod
    def parse(code: str) -> ParsedRecording:
        """
        Parse recording source.

        Args:
            code: Recorded script text

        Returns:
            ParsedRecording with the AST as a dictionary

        Raises:
            ParseError: If the source is not syntactically valid
        """
        options = {
            'range': True,
            'loc': True,
        }

        try:
            ast = esprima.parseScript(code, options=options)
            return ParsedRecording(RecordingParser._node_to_dict(ast), code)
        except esprima.Error:
            pass

        try:
            ast = esprima.parseModule(code, options=options)
            return ParsedRecording(RecordingParser._node_to_dict(ast), code)
        except esprima.Error as e:
            module_error = e

        wrapped = f"{_WRAPPER_PREFIX}{code}{_WRAPPER_SUFFIX}"
        try:
            ast = esprima.parseScript(wrapped, options=options)
        except esprima.Error:
            logger.debug("Recording did not parse as script, module or await sequence")
            raise ParseError(
                getattr(module_error, 'description', None) or str(module_error),
                getattr(module_error, 'lineNumber', 0) or 0,
                getattr(module_error, 'column', 0) or 0,
            )
        return ParsedRecording(RecordingParser._node_to_dict(ast), wrapped, line_offset=1)

    @staticmethod
    def _node_to_dict(node: Any) -> Any:
        """
        Convert esprima node to dictionary.

        Args:
            node: Esprima AST node

        Returns:
            Dictionary representation of the node
        """
        if node is None:
            return None

        if isinstance(node, list):
            return [RecordingParser._node_to_dict(item) for item in node]

        if not hasattr(node, '__dict__'):
            return node

        result = {}
        for key, value in node.__dict__.items():
            if key.startswith('_'):
                continue
            if isinstance(value, list):
                result[key] = [RecordingParser._node_to_dict(item) for item in value]
            elif hasattr(value, '__dict__'):
                result[key] = RecordingParser._node_to_dict(value)
            else:
                result[key] = value

        return result
