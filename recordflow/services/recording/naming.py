"""
Name generation for elements, methods, steps and page classes.

Names are unique per module. Uniqueness is tracked by explicit NameRegistry
objects that live for a single conversion run.
"""
import logging
import re
from typing import Dict, Optional, Set

from .types import Action, ElementContext, ElementKind, Pattern, PatternType
from .vocabulary import RecognitionVocabulary

logger = logging.getLogger(__name__)

HINT_MAX_LENGTH = 15
TEXT_NAME_MAX_LENGTH = 30

BUTTON_SHORTCUTS = (
    ('search', 'searchButton'),
    ('save', 'saveButton'),
    ('delete', 'deleteButton'),
    ('cancel', 'cancelButton'),
    ('sign in', 'loginButton'),
    ('log in', 'loginButton'),
    ('login', 'loginButton'),
    ('submit', 'submitButton'),
)

TEXTBOX_SHORTCUTS = (
    ('username', 'usernameField'),
    ('user name', 'usernameField'),
    ('password', 'passwordField'),
    ('email', 'emailField'),
    ('search', 'searchInput'),
)

# Checked in order; "employment status" must win over "status"
DROPDOWN_SHORTCUTS = (
    ('employment', 'employmentStatusDropdown'),
    ('status', 'statusFilterDropdown'),
    ('role', 'roleDropdown'),
    ('type', 'typeDropdown'),
)

FIXED_NAMES = {
    ElementKind.TABLE: 'resultsTable',
    ElementKind.TOAST: 'notificationToast',
    ElementKind.HEADING: 'pageHeading',
    ElementKind.ROW: 'dataRow',
}


def to_camel_case(text: str) -> str:
    """
    Convert free text to a camelCase identifier.

    Args:
        text: Any text (labels, module names, option values)

    Returns:
        camelCase identifier, or an empty string when the text has no letters or digits
    """
    words = re.findall(r'[A-Za-z0-9]+', text or '')
    if not words:
        return ''
    head = words[0]
    head = head.lower() if head.isupper() else head[0].lower() + head[1:]
    result = head + ''.join(word[0].upper() + word[1:].lower() if word.isupper() else word[0].upper() + word[1:]
                            for word in words[1:])
    if result[0].isdigit():
        result = f"item{result[0].upper()}{result[1:]}"
    return result


def to_pascal_case(text: str) -> str:
    camel = to_camel_case(text)
    return camel[:1].upper() + camel[1:]


def name_hint(action: Action) -> str:
    """Disambiguating suffix: the target's name squeezed to 15 alphanumerics, else its role."""
    if action.target is None:
        return ''
    if action.target.name:
        squeezed = re.sub(r'[^A-Za-z0-9]', '', action.target.name)[:HINT_MAX_LENGTH]
        if squeezed:
            return squeezed[0].upper() + squeezed[1:]
    return to_pascal_case(action.target.value)[:HINT_MAX_LENGTH]


class NameRegistry:
    """Names already taken within one module"""

    def __init__(self, module: str):
        self.module = module
        self._elements: Set[str] = set()
        self._methods: Set[str] = set()
        self._counters: Dict[str, int] = {}

    def has_element(self, name: str) -> bool:
        return name in self._elements

    def claim_element(self, name: str) -> bool:
        if not name or name in self._elements:
            return False
        self._elements.add(name)
        return True

    def next_method_name(self, base: str) -> str:
        """
        Reserve a method name.

        Returns ``base`` the first time, then ``base2``, ``base3``...
        """
        count = self._counters.get(base, 0)
        while True:
            count += 1
            candidate = base if count == 1 else f"{base}{count}"
            if candidate not in self._methods:
                break
        self._counters[base] = count
        self._methods.add(candidate)
        return candidate

    def reset(self):
        self._elements = set()
        self._methods = set()
        self._counters = {}


class NamingResolver:
    """
    Resolves element, method and step names.

    Holds one NameRegistry per module; create a new resolver for every run.
    """

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self._registries: Dict[str, NameRegistry] = {}

    def registry(self, module: str) -> NameRegistry:
        if module not in self._registries:
            self._registries[module] = NameRegistry(module)
        return self._registries[module]

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def element_base_name(self, action: Action, context: ElementContext) -> str:
        kind = context.element_kind
        label = context.field_label or (action.target.label if action.target else '')
        lowered = label.lower()

        if kind == ElementKind.TEXTBOX:
            for keyword, name in TEXTBOX_SHORTCUTS:
                if keyword in lowered:
                    return name
            return f"{to_camel_case(label)}Field" if to_camel_case(label) else 'inputField'

        if kind == ElementKind.BUTTON:
            for keyword, name in BUTTON_SHORTCUTS:
                if keyword in lowered:
                    return name
            return f"{to_camel_case(label)}Button" if to_camel_case(label) else 'actionButton'

        if kind == ElementKind.LINK:
            return f"{to_camel_case(label)}Link" if to_camel_case(label) else 'navigationLink'

        if kind == ElementKind.DROPDOWN:
            text = f"{context.business_term or ''} {action.target.value if action.target else ''}".lower()
            for keyword, name in DROPDOWN_SHORTCUTS:
                if keyword in text:
                    return name
            return 'filterDropdown'

        if kind == ElementKind.CHECKBOX:
            if 'remember' in lowered:
                return 'rememberMeCheckbox'
            return f"{to_camel_case(label)}Checkbox" if to_camel_case(label) else 'selectionCheckbox'

        if kind in FIXED_NAMES:
            return FIXED_NAMES[kind]

        if self.vocabulary.mentions(label, self.vocabulary.dialog_keywords):
            return 'confirmationMessage'
        camel = to_camel_case(label[:TEXT_NAME_MAX_LENGTH])
        return f"{camel}Text" if camel else 'textElement'

    def resolve_element_name(self, action: Action, context: ElementContext,
                             registry: Optional[NameRegistry] = None) -> Optional[str]:
        """
        Pick a unique element name within the module.

        Tiers: base name, module-prefixed base name, base name plus a hint
        from the target. Returns None when every tier collides.
        """
        registry = registry or self.registry(context.module)
        base = self.element_base_name(action, context)

        module_prefix = to_camel_case(context.module)
        candidates = [base]
        if module_prefix:
            candidates.append(f"{module_prefix}{base[0].upper()}{base[1:]}")
        hint = name_hint(action)
        if hint:
            candidates.append(f"{base}{hint}")

        for candidate in candidates:
            if registry.claim_element(candidate):
                return candidate

        logger.debug(f"All name tiers taken for {base} in {registry.module}")
        return None

    # ------------------------------------------------------------------
    # Methods and steps
    # ------------------------------------------------------------------

    def resolve_method_name(self, base: str, registry: NameRegistry) -> str:
        return registry.next_method_name(base)

    @staticmethod
    def method_base_name(pattern: Pattern) -> str:
        data = pattern.data
        if pattern.type == PatternType.DROPDOWN:
            return f"selectFrom{to_pascal_case(data.get('fieldContext', ''))}Dropdown"
        if pattern.type == PatternType.MODAL:
            return 'cancelAction' if data.get('action') == 'cancel' else 'confirmAction'
        if pattern.type == PatternType.LOGIN:
            return 'loginAs'
        if pattern.type == PatternType.SEARCH:
            fields = data.get('searchFields') or []
            if fields and to_pascal_case(str(fields[0].get('field', ''))):
                return f"searchBy{to_pascal_case(str(fields[0]['field']))}"
            return 'performSearch'
        return f"navigateTo{to_pascal_case(data.get('targetModule') or '')}"

    @staticmethod
    def step_text(pattern: Pattern) -> str:
        data = pattern.data
        if pattern.type == PatternType.DROPDOWN:
            return f'When I filter by "{data.get("optionText")}" {str(data.get("fieldContext", "")).lower()}'
        if pattern.type == PatternType.MODAL:
            if data.get('action') == 'confirm':
                return 'When I confirm the action'
            if data.get('action') == 'cancel':
                return 'When I cancel the action'
            return 'When I close the dialog'
        if pattern.type == PatternType.LOGIN:
            return f'Given I am logged in as "{data.get("username")}"'
        if pattern.type == PatternType.SEARCH:
            fields = data.get('searchFields') or []
            if fields:
                return f"When I search by {str(fields[0].get('field', '')).lower()}"
            return 'When I perform the search'
        return f"Given I navigate to the {data.get('targetModule')} page"

    @staticmethod
    def verification_step_text(module: str) -> str:
        return f"Then I should see the {module} page elements"


def parameter_name(field: str) -> str:
    return to_camel_case(field) or 'value'


def page_class_name(module: str) -> str:
    return f"{to_pascal_case(module)}Page"
