"""
Context extraction: element kind, owning module and purpose of each action's target.
"""
import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

from .patterns import (
    CLICK_ACTIONS,
    INPUT_ACTIONS,
    is_login_button,
    is_module_link_click,
    is_password_input,
    is_search_button,
    is_username_input,
)
from .types import (
    Action,
    ActionType,
    ElementContext,
    ElementKind,
    LocatorKind,
    Pattern,
    PatternType,
)
from .vocabulary import RecognitionVocabulary

logger = logging.getLogger(__name__)

UNKNOWN_MODULE = "Unknown"
LOGIN_MODULE = "Login"

ROLE_KINDS = {
    'textbox': ElementKind.TEXTBOX,
    'searchbox': ElementKind.TEXTBOX,
    'spinbutton': ElementKind.TEXTBOX,
    'button': ElementKind.BUTTON,
    'link': ElementKind.LINK,
    'combobox': ElementKind.DROPDOWN,
    'listbox': ElementKind.DROPDOWN,
    'checkbox': ElementKind.CHECKBOX,
    'radio': ElementKind.CHECKBOX,
    'switch': ElementKind.CHECKBOX,
    'table': ElementKind.TABLE,
    'grid': ElementKind.TABLE,
    'row': ElementKind.ROW,
    'heading': ElementKind.HEADING,
    'alert': ElementKind.TOAST,
    'status': ElementKind.TOAST,
}

# Selector keyword -> element kind, checked in order
SELECTOR_KINDS = (
    (('select', 'dropdown'), ElementKind.DROPDOWN),
    (('toast', 'notification'), ElementKind.TOAST),
    (('checkbox',), ElementKind.CHECKBOX),
    (('button', 'btn'), ElementKind.BUTTON),
    (('table',), ElementKind.TABLE),
    (('input', 'textarea'), ElementKind.TEXTBOX),
)

ACTION_KINDS = {
    ActionType.FILL: 'fill',
    ActionType.TYPE: 'fill',
    ActionType.CLICK: 'click',
    ActionType.DOUBLE_CLICK: 'click',
    ActionType.SELECT: 'select',
    ActionType.ASSERTION: 'verify',
}


def majority_module(indices: Sequence[int], contexts: Dict[int, ElementContext]) -> Optional[str]:
    """
    Module owning a strict majority of the given actions.

    Returns None on a tie, on an empty selection, or when the majority is Unknown.
    """
    modules = [contexts[i].module for i in indices if i in contexts]
    if not modules:
        return None
    module, count = Counter(modules).most_common(1)[0]
    if count * 2 <= len(modules) or module == UNKNOWN_MODULE:
        return None
    return module


class ContextExtractor:
    """Infers semantic context for actions. Pure with respect to its inputs."""

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()

    def extract_element_context(self, action: Action, patterns: List[Pattern],
                                all_actions: List[Action]) -> ElementContext:
        """
        Build the context of one action.

        Args:
            action: The action to describe
            patterns: Patterns detected over ``all_actions``
            all_actions: The full action sequence

        Returns:
            ElementContext with kind, module and purpose
        """
        pattern = self._member_pattern(action, patterns)
        kind = self.element_kind(action)
        return ElementContext(
            element_kind=kind,
            module=self.determine_module(action, all_actions),
            purpose=self.purpose(action, kind, pattern),
            action_kind=ACTION_KINDS.get(action.type, action.type.value),
            business_term=self._business_term(action, pattern),
            field_label=self._field_label(action),
        )

    def extract_all(self, actions: List[Action], patterns: List[Pattern]) -> Dict[int, ElementContext]:
        return {action.index: self.extract_element_context(action, patterns, actions) for action in actions}

    @staticmethod
    def _member_pattern(action: Action, patterns: List[Pattern]) -> Optional[Pattern]:
        for pattern in patterns:
            if action.index in pattern.action_indices:
                return pattern
        return None

    # ------------------------------------------------------------------
    # Element kind
    # ------------------------------------------------------------------

    @staticmethod
    def element_kind(action: Action) -> ElementKind:
        target = action.target
        if target is None:
            return ElementKind.TEXT

        if target.kind == LocatorKind.ROLE:
            return ROLE_KINDS.get(target.value, ElementKind.TEXT)

        if action.type in INPUT_ACTIONS:
            return ElementKind.TEXTBOX

        lowered = target.value.lower()
        for keywords, kind in SELECTOR_KINDS:
            if any(keyword in lowered for keyword in keywords):
                return kind

        if target.kind in (LocatorKind.PLACEHOLDER, LocatorKind.LABEL):
            return ElementKind.TEXTBOX
        return ElementKind.TEXT

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------

    def determine_module(self, action: Action, all_actions: List[Action]) -> str:
        if action.type == ActionType.NAVIGATION:
            return self.module_from_url(action.first_arg)

        for k in range(action.index, -1, -1):
            previous = all_actions[k]
            if previous.type == ActionType.NAVIGATION and k != action.index:
                module = self.module_from_url(previous.first_arg)
                if module != UNKNOWN_MODULE:
                    return module
                break
            if is_module_link_click(previous, self.vocabulary):
                return self.vocabulary.module_in(previous.target.name)

        if (is_username_input(action, self.vocabulary)
                or is_password_input(action, self.vocabulary)
                or is_login_button(action, self.vocabulary)):
            return LOGIN_MODULE

        return UNKNOWN_MODULE

    def module_from_url(self, url) -> str:
        if not isinstance(url, str) or not url:
            return UNKNOWN_MODULE
        path = (urlparse(url).path or url).lower()
        if any(marker.lower() in path for marker in self.vocabulary.login_url_markers):
            return LOGIN_MODULE
        segments = [segment for segment in path.split('/') if segment]
        for module in self.vocabulary.module_keywords:
            if module.lower() in segments:
                return module
        return UNKNOWN_MODULE

    # ------------------------------------------------------------------
    # Purpose and terminology
    # ------------------------------------------------------------------

    def purpose(self, action: Action, kind: ElementKind, pattern: Optional[Pattern]) -> str:
        if pattern is not None:
            phrase = self._pattern_purpose(action, pattern)
            if phrase:
                return phrase

        label = action.target.label if action.target else ''
        if action.type in INPUT_ACTIONS:
            return f"enter {label}".strip()
        if action.type == ActionType.ASSERTION:
            return f"verify {label}".strip() if label else "verify page state"
        if action.type == ActionType.NAVIGATION:
            return f"open {action.first_arg}"
        if action.type == ActionType.SELECT:
            return f"select option in {label}".strip()
        if action.type in (ActionType.CHECK, ActionType.UNCHECK):
            return f"toggle {label}".strip()
        if action.type in CLICK_ACTIONS:
            if kind == ElementKind.LINK:
                return f"open {label}".strip()
            if kind == ElementKind.BUTTON:
                lowered = label.lower()
                for keyword, phrase in self.vocabulary.button_purposes.items():
                    if keyword.lower() in lowered:
                        return phrase
            return f"click {label}".strip()
        return f"{action.type.value} {label}".strip()

    def _pattern_purpose(self, action: Action, pattern: Pattern) -> Optional[str]:
        vocabulary = self.vocabulary
        if pattern.type == PatternType.DROPDOWN:
            return "filter by criteria"
        if pattern.type == PatternType.MODAL:
            return f"{pattern.data.get('action', 'confirm')} action"
        if pattern.type == PatternType.LOGIN:
            if is_username_input(action, vocabulary):
                return "authenticate with username"
            if is_password_input(action, vocabulary):
                return "authenticate with password"
            if is_login_button(action, vocabulary):
                return "submit login credentials"
            return "remember login"
        if pattern.type == PatternType.SEARCH:
            if action.type in INPUT_ACTIONS:
                return "enter search criteria"
            if is_search_button(action, vocabulary):
                return "execute search"
            if action.type == ActionType.ASSERTION:
                return "verify search results"
            return "filter results"
        if pattern.type == PatternType.NAVIGATION:
            return f"navigate to {pattern.data.get('targetModule')}"
        return None

    @staticmethod
    def _business_term(action: Action, pattern: Optional[Pattern]) -> Optional[str]:
        if pattern is not None:
            if pattern.type == PatternType.DROPDOWN:
                return pattern.data.get('fieldContext')
            if pattern.type == PatternType.LOGIN:
                return "Credentials"
            if pattern.type == PatternType.SEARCH:
                return "Search Criteria"
            if pattern.type == PatternType.NAVIGATION:
                return pattern.data.get('targetModule')
        if action.target is not None and action.target.kind in (LocatorKind.PLACEHOLDER, LocatorKind.LABEL):
            return action.target.value.strip().title() or None
        return None

    @staticmethod
    def _field_label(action: Action) -> Optional[str]:
        target = action.target
        if target is None or target.kind in (LocatorKind.RAW_SELECTOR, LocatorKind.TEST_ID):
            return None
        if target.kind == LocatorKind.ROLE:
            return target.name
        return target.value
