"""
Type definitions for the recording converter.

Everything produced by the pipeline is a plain dataclass so results can be
compared structurally and serialized with ``to_dict``.
"""
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ActionType(str, Enum):
    """Normalized kind of a recorded interaction"""
    CLICK = "click"
    DOUBLE_CLICK = "double-click"
    FILL = "fill"
    TYPE = "type"
    KEYPRESS = "keypress"
    SELECT = "select"
    CHECK = "check"
    UNCHECK = "uncheck"
    HOVER = "hover"
    FOCUS = "focus"
    BLUR = "blur"
    NAVIGATION = "navigation"
    WAIT = "wait"
    ASSERTION = "assertion"
    FILE_UPLOAD = "file-upload"
    DRAG_DROP = "drag-drop"
    GENERIC = "generic"


class LocatorKind(str, Enum):
    """How the recorded script located its target"""
    ROLE = "role"
    TEXT = "text"
    PLACEHOLDER = "placeholder"
    LABEL = "label"
    TEST_ID = "testId"
    RAW_SELECTOR = "rawSelector"


class StrategyType(str, Enum):
    """Syntax family of a generated locator strategy"""
    XPATH = "xpath"
    CSS = "css"
    TEST_ID = "testId"
    TEXT = "text"
    ROLE = "role"
    PLACEHOLDER = "placeholder"
    LABEL = "label"


class PatternType(str, Enum):
    """Recognized multi-step interaction idioms"""
    DROPDOWN = "dropdown"
    MODAL = "modal"
    LOGIN = "login"
    SEARCH = "search"
    NAVIGATION = "navigation"


class ElementKind(str, Enum):
    """UI element category inferred for a target"""
    TEXTBOX = "textbox"
    BUTTON = "button"
    LINK = "link"
    DROPDOWN = "dropdown"
    CHECKBOX = "checkbox"
    TABLE = "table"
    TOAST = "toast"
    HEADING = "heading"
    ROW = "row"
    TEXT = "text"


class OmissionKind(str, Enum):
    """Why a candidate artifact was left out of the result"""
    UNRESOLVED_LOCATOR = "unresolvedLocator"
    DEGENERATE_LOCATOR = "degenerateLocator"
    NAME_COLLISION_EXHAUSTED = "nameCollisionExhausted"
    UNASSIGNED_MODULE = "unassignedModule"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_plain(value: Any) -> Any:
    """Convert dataclasses, enums and containers to JSON-ready values with camelCase keys."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class ChainStep:
    """One call in a locator chain, e.g. ``getByRole('row')`` or ``nth(2)``"""
    method: str
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class LocatorDescriptor:
    """
    The target of an action as the recording expressed it.

    Attributes:
        kind: Locator method family used by the recording
        value: Role for ``getByRole``, the text/placeholder/label/test id, or the raw selector
        name: Accessible name (``getByRole`` only)
        exact: Whether the recording asked for an exact match
        options: Remaining locator options
        chain: Every step of the receiver chain, outermost first
    """
    kind: LocatorKind
    value: str
    name: Optional[str] = None
    exact: bool = False
    options: Dict[str, Any] = field(default_factory=dict)
    chain: Tuple[ChainStep, ...] = ()

    @property
    def label(self) -> str:
        """Human-facing text of the target: accessible name, otherwise the value."""
        return self.name if self.name else self.value

    def identity(self) -> Tuple[str, str, str]:
        return (self.kind.value, self.value, self.name or "")

    def describe(self) -> str:
        if self.kind == LocatorKind.ROLE and self.name:
            return f'{self.kind.value}:{self.value}[name="{self.name}"]'
        return f"{self.kind.value}:{self.value}"


@dataclass(frozen=True)
class Action:
    """
    One recorded interaction step.

    Attributes:
        id: Stable identifier ``action_<index>``
        index: Position in the extracted sequence
        type: Normalized action kind
        method: Method name invoked by the recording (``click``, ``toBeVisible``...)
        target: Locator descriptor, None when no locator could be recovered
        args: Evaluated call arguments
        options: Trailing object-literal argument, if any
        line: 1-based source line
        raw: Source text of the awaited call
    """
    id: str
    index: int
    type: ActionType
    method: str
    target: Optional[LocatorDescriptor] = None
    args: Tuple[Any, ...] = ()
    options: Dict[str, Any] = field(default_factory=dict)
    line: int = 0
    raw: str = ""

    @property
    def first_arg(self) -> Any:
        return self.args[0] if self.args else None

    @property
    def target_name(self) -> str:
        """Accessible name or text of the target, lowercased; empty when unknown."""
        return self.target.label.lower() if self.target else ""

    @property
    def target_value(self) -> str:
        return self.target.value.lower() if self.target else ""


@dataclass(frozen=True)
class LocatorStrategy:
    """A single way of finding an element, with a 0..100 stability score"""
    type: StrategyType
    value: str
    stability: int
    description: str = ""


@dataclass(frozen=True)
class GeneratedLocators:
    """Ranked strategies for one target. The primary is always the most stable."""
    primary: LocatorStrategy
    alternatives: Tuple[LocatorStrategy, ...] = ()

    @property
    def stability_score(self) -> int:
        return self.primary.stability

    @property
    def is_degenerate(self) -> bool:
        return self.primary.stability == 0


@dataclass(frozen=True)
class CanonicalLocator:
    """Self-healing rendering: one primary expression plus prefixed fallbacks"""
    primary_type: StrategyType
    primary_value: str
    alternatives: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Pattern:
    """
    A recognized multi-step idiom.

    Attributes:
        type: Pattern family
        start_index: First action of the span
        end_index: Last action of the span (inclusive)
        confidence: Detector confidence, 0..1
        action_indices: Actions that belong to the pattern, inside the span
        data: Type-specific payload (optionText, username, searchFields...)
    """
    type: PatternType
    start_index: int
    end_index: int
    confidence: float
    action_indices: Tuple[int, ...] = ()
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start_index, self.end_index)

    def covers(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index


@dataclass(frozen=True)
class ElementContext:
    """Semantic facts inferred for an action's target"""
    element_kind: ElementKind
    module: str
    purpose: str
    action_kind: str
    business_term: Optional[str] = None
    field_label: Optional[str] = None


@dataclass
class ElementDefinition:
    """A named element that will be exposed on a page grouping"""
    name: str
    module: str
    kind: ElementKind
    descriptor: LocatorDescriptor
    locators: GeneratedLocators
    canonical: CanonicalLocator
    action_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    type: str = "string"
    default: Optional[str] = None
    allowed_values: Tuple[str, ...] = ()


@dataclass
class MethodDefinition:
    """A named interaction method built from a pattern or from assertions"""
    name: str
    module: Optional[str]
    purpose: str
    parameters: List[ParameterDefinition] = field(default_factory=list)
    action_ids: List[str] = field(default_factory=list)
    pattern_type: Optional[PatternType] = None
    step_text: Optional[str] = None


@dataclass
class PageGrouping:
    module: str
    class_name: str
    elements: List[ElementDefinition] = field(default_factory=list)
    methods: List[MethodDefinition] = field(default_factory=list)


@dataclass
class SharedNavigationComponent:
    name: str
    elements: List[ElementDefinition] = field(default_factory=list)
    methods: List[MethodDefinition] = field(default_factory=list)


@dataclass(frozen=True)
class StepBinding:
    """Links a human-readable step to the method that implements it"""
    module: str
    method: str
    step_text: str


@dataclass(frozen=True)
class Omission:
    """A candidate artifact that was skipped, with the reason"""
    kind: OmissionKind
    subject: str
    reason: str


@dataclass
class ArchitectureResult:
    shared_navigation: Optional[SharedNavigationComponent] = None
    page_groupings: List[PageGrouping] = field(default_factory=list)
    step_bindings: List[StepBinding] = field(default_factory=list)
    omissions: List[Omission] = field(default_factory=list)

    def grouping(self, module: str) -> Optional[PageGrouping]:
        for page in self.page_groupings:
            if page.module == module:
                return page
        return None
