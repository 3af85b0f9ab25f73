"""
Action extractor for recorded browser scripts.

Walks the parsed recording and turns every awaited locate-and-act call into a
normalized Action, in source order.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from .parser import RecordingParser
from .types import (
    Action,
    ActionType,
    ChainStep,
    LocatorDescriptor,
    LocatorKind,
    Omission,
    OmissionKind,
)

logger = logging.getLogger(__name__)


# Locator-producing methods -> descriptor kind
LOCATOR_METHODS = {
    'getByRole': LocatorKind.ROLE,
    'getByText': LocatorKind.TEXT,
    'getByPlaceholder': LocatorKind.PLACEHOLDER,
    'getByLabel': LocatorKind.LABEL,
    'getByTestId': LocatorKind.TEST_ID,
    'locator': LocatorKind.RAW_SELECTOR,
}

# Recorded method name -> action type
METHOD_ACTION_TYPES = {
    'click': ActionType.CLICK,
    'dblclick': ActionType.DOUBLE_CLICK,
    'fill': ActionType.FILL,
    'type': ActionType.TYPE,
    'pressSequentially': ActionType.TYPE,
    'press': ActionType.KEYPRESS,
    'selectOption': ActionType.SELECT,
    'check': ActionType.CHECK,
    'uncheck': ActionType.UNCHECK,
    'setChecked': ActionType.CHECK,
    'hover': ActionType.HOVER,
    'focus': ActionType.FOCUS,
    'blur': ActionType.BLUR,
    'goto': ActionType.NAVIGATION,
    'goBack': ActionType.NAVIGATION,
    'goForward': ActionType.NAVIGATION,
    'reload': ActionType.NAVIGATION,
    'waitFor': ActionType.WAIT,
    'waitForTimeout': ActionType.WAIT,
    'waitForLoadState': ActionType.WAIT,
    'waitForURL': ActionType.WAIT,
    'waitForSelector': ActionType.WAIT,
    'setInputFiles': ActionType.FILE_UPLOAD,
    'dragTo': ActionType.DRAG_DROP,
    'expect': ActionType.ASSERTION,
    'toBeVisible': ActionType.ASSERTION,
    'toHaveText': ActionType.ASSERTION,
    'toHaveValue': ActionType.ASSERTION,
}

# Matcher prefixes that make a call an assertion even outside expect()
ASSERTION_PREFIXES = ('toBe', 'toHave', 'toContain', 'toMatch')

# Wrappers that turn a locator into a verification subject
VERIFICATION_WRAPPERS = ('expect',)
VERIFICATION_MODIFIERS = ('not', 'soft', 'poll')


def classify_method(method: str) -> ActionType:
    """Map a recorded method name to its action type."""
    action_type = METHOD_ACTION_TYPES.get(method)
    if action_type is not None:
        return action_type
    if method.startswith(ASSERTION_PREFIXES):
        return ActionType.ASSERTION
    return ActionType.GENERIC


def _property_name(member: Dict[str, Any]) -> Optional[str]:
    prop = member.get('property') or {}
    if not member.get('computed') and prop.get('type') == 'Identifier':
        return prop.get('name')
    if prop.get('type') == 'Literal' and isinstance(prop.get('value'), str):
        return prop.get('value')
    return None


class ActionExtractor:
    """
    Extracts Actions from recording source.

    One instance may be reused sequentially; it is not safe to share across
    threads while ``extract`` runs.
    """

    def __init__(self):
        self._source = ""
        self._line_offset = 0
        self._actions: List[Action] = []
        self.omissions: List[Omission] = []

    def reset(self):
        """Reset per-run state."""
        self._source = ""
        self._line_offset = 0
        self._actions = []
        self.omissions = []

    def extract(self, source: str) -> List[Action]:
        """
        Parse a recording and return its actions in source order.

        Args:
            source: Recorded script text

        Returns:
            Actions with contiguous ids ``action_0``, ``action_1``...

        Raises:
            ParseError: If the recording is not syntactically valid
        """
        self.reset()
        parsed = RecordingParser.parse(source)
        self._source = parsed.source
        self._line_offset = parsed.line_offset

        self._walk(parsed.ast)

        logger.info(f"Extracted {len(self._actions)} actions")
        return list(self._actions)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _walk(self, node: Any):
        if isinstance(node, list):
            for item in node:
                self._walk(item)
            return
        if not isinstance(node, dict) or 'type' not in node:
            return

        handler = getattr(self, f"_walk_{node['type']}", self._walk_children)
        handler(node)

    def _walk_children(self, node: Dict[str, Any]):
        for key, value in node.items():
            if key in ('type', 'loc', 'range'):
                continue
            if isinstance(value, (dict, list)):
                self._walk(value)

    def _walk_AwaitExpression(self, node: Dict[str, Any]):
        argument = node.get('argument') or {}
        if argument.get('type') == 'CallExpression':
            self._actions.append(self._build_action(argument))
        self._walk_children(node)

    # ------------------------------------------------------------------
    # Action construction
    # ------------------------------------------------------------------

    def _build_action(self, call: Dict[str, Any]) -> Action:
        index = len(self._actions)
        callee = call.get('callee') or {}

        receiver = None
        if callee.get('type') == 'MemberExpression':
            method = _property_name(callee) or 'unknown'
            receiver = callee.get('object')
        elif callee.get('type') == 'Identifier':
            method = callee.get('name', 'unknown')
        else:
            method = 'unknown'

        args = tuple(self._evaluate(arg) for arg in call.get('arguments', []))
        options = args[-1] if args and isinstance(args[-1], dict) else {}

        subject = self._verification_subject(receiver)
        if subject is not None:
            action_type = ActionType.ASSERTION
            target = self._descriptor_from(subject)
        else:
            action_type = classify_method(method)
            target = self._descriptor_from(receiver)

        action = Action(
            id=f"action_{index}",
            index=index,
            type=action_type,
            method=method,
            target=target,
            args=args,
            options=options,
            line=self._line(call),
            raw=self._text(call),
        )

        if action_type == ActionType.ASSERTION and target is None:
            self.omissions.append(Omission(
                kind=OmissionKind.UNRESOLVED_LOCATOR,
                subject=action.id,
                reason=f"verification '{method}' on line {action.line} has no element locator",
            ))
        return action

    def _verification_subject(self, receiver: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Return the wrapped expression of ``expect(x)`` / ``expect(x).not`` / ``expect.soft(x)``."""
        node = receiver
        while node:
            node_type = node.get('type')
            if node_type == 'MemberExpression' and _property_name(node) in VERIFICATION_MODIFIERS:
                node = node.get('object')
            elif node_type == 'CallExpression':
                callee = node.get('callee') or {}
                if self._is_wrapper(callee):
                    arguments = node.get('arguments') or []
                    return arguments[0] if arguments else {}
                return None
            else:
                return None
        return None

    @staticmethod
    def _is_wrapper(callee: Dict[str, Any]) -> bool:
        if callee.get('type') == 'Identifier':
            return callee.get('name') in VERIFICATION_WRAPPERS
        if callee.get('type') == 'MemberExpression' and _property_name(callee) in VERIFICATION_MODIFIERS:
            inner = callee.get('object') or {}
            return inner.get('type') == 'Identifier' and inner.get('name') in VERIFICATION_WRAPPERS
        return False

    def _collect_chain(self, node: Optional[Dict[str, Any]]) -> List[ChainStep]:
        """Walk a receiver expression backward into call steps, outermost first."""
        steps: List[ChainStep] = []
        while node:
            node_type = node.get('type')
            if node_type == 'CallExpression':
                callee = node.get('callee') or {}
                if callee.get('type') != 'MemberExpression':
                    break
                args = tuple(self._evaluate(arg) for arg in node.get('arguments', []))
                steps.append(ChainStep(_property_name(callee) or 'unknown', args))
                node = callee.get('object')
            elif node_type == 'MemberExpression':
                node = node.get('object')
            elif node_type == 'AwaitExpression':
                node = node.get('argument')
            else:
                break
        steps.reverse()
        return steps

    def _descriptor_from(self, node: Optional[Dict[str, Any]]) -> Optional[LocatorDescriptor]:
        chain = self._collect_chain(node)
        for step in reversed(chain):
            kind = LOCATOR_METHODS.get(step.method)
            if kind is not None:
                return self._make_descriptor(kind, step, tuple(chain))
        return None

    @staticmethod
    def _make_descriptor(kind: LocatorKind, step: ChainStep,
                         chain: Tuple[ChainStep, ...]) -> LocatorDescriptor:
        first = step.args[0] if step.args else ''
        value = first if isinstance(first, str) else str(first)
        options = dict(step.args[1]) if len(step.args) > 1 and isinstance(step.args[1], dict) else {}

        name = None
        if kind == LocatorKind.ROLE and options.get('name') is not None:
            name = str(options.pop('name'))
        exact = bool(options.pop('exact', False))

        return LocatorDescriptor(
            kind=kind,
            value=value,
            name=name,
            exact=exact,
            options=options,
            chain=chain,
        )

    # ------------------------------------------------------------------
    # Argument evaluation
    # ------------------------------------------------------------------

    def _evaluate(self, node: Optional[Dict[str, Any]]) -> Any:
        """Evaluate a literal argument; anything else becomes its source text."""
        if node is None:
            return None
        handler = getattr(self, f"_evaluate_{node.get('type', '')}", None)
        if handler:
            return handler(node)
        return self._text(node)

    def _evaluate_Literal(self, node: Dict[str, Any]) -> Any:
        if node.get('regex'):
            return node.get('raw', '')
        return node.get('value')

    def _evaluate_TemplateLiteral(self, node: Dict[str, Any]) -> Any:
        if node.get('expressions'):
            return self._text(node)
        quasis = node.get('quasis') or []
        return ''.join((quasi.get('value') or {}).get('cooked') or '' for quasi in quasis)

    def _evaluate_ObjectExpression(self, node: Dict[str, Any]) -> Dict[str, Any]:
        result = {}
        for prop in node.get('properties', []):
            if prop.get('type') != 'Property':
                continue
            key = prop.get('key') or {}
            if key.get('type') == 'Identifier' and not prop.get('computed'):
                key_str = key.get('name', '')
            else:
                key_str = str(self._evaluate(key))
            result[key_str] = self._evaluate(prop.get('value'))
        return result

    def _evaluate_ArrayExpression(self, node: Dict[str, Any]) -> List[Any]:
        return [self._evaluate(element) for element in node.get('elements', [])]

    def _evaluate_UnaryExpression(self, node: Dict[str, Any]) -> Any:
        operand = self._evaluate(node.get('argument'))
        operator = node.get('operator')
        if operator == '-' and isinstance(operand, (int, float)) and not isinstance(operand, bool):
            return -operand
        if operator == '!' and isinstance(operand, (bool, int)):
            return not operand
        return self._text(node)

    def _evaluate_Identifier(self, node: Dict[str, Any]) -> Any:
        if node.get('name') == 'undefined':
            return None
        return node.get('name', '')

    # ------------------------------------------------------------------
    # Source helpers
    # ------------------------------------------------------------------

    def _text(self, node: Dict[str, Any]) -> str:
        span = node.get('range')
        if not span:
            return ''
        return self._source[span[0]:span[1]]

    def _line(self, node: Dict[str, Any]) -> int:
        loc = node.get('loc') or {}
        line = (loc.get('start') or {}).get('line', 0)
        return max(line - self._line_offset, 0)


def extract_actions(source: str) -> List[Action]:
    """
    Convenience function to extract actions from a recording.

    Args:
        source: Recorded script text

    Returns:
        Extracted actions
    """
    return ActionExtractor().extract(source)
