"""
Pattern recognition over extracted actions.

A single left-to-right scan; at each position the detectors are tried in
priority order and the first match consumes its span.
"""
import logging
from typing import Any, Dict, List, Optional

from .types import Action, ActionType, LocatorKind, Pattern, PatternType
from .vocabulary import DetectorTuning, RecognitionVocabulary

logger = logging.getLogger(__name__)


OPTION_ROLES = ('option', 'menuitem', 'menuitemradio', 'listitem', 'treeitem')
INPUT_ACTIONS = (ActionType.FILL, ActionType.TYPE)
CLICK_ACTIONS = (ActionType.CLICK, ActionType.DOUBLE_CLICK)
CRITERIA_ACTIONS = INPUT_ACTIONS + CLICK_ACTIONS + (ActionType.SELECT, ActionType.CHECK)


def target_text(action: Action) -> str:
    """Value and accessible name of the action's target, lowercased."""
    if action.target is None:
        return ""
    return f"{action.target.value} {action.target.name or ''}".strip().lower()


def is_module_link_click(action: Action, vocabulary: RecognitionVocabulary) -> bool:
    """Click on a ``link`` role whose name names an application module."""
    return (
        action.type in CLICK_ACTIONS
        and action.target is not None
        and action.target.kind == LocatorKind.ROLE
        and action.target.value == 'link'
        and vocabulary.module_in(action.target.name) is not None
    )


def is_username_input(action: Action, vocabulary: RecognitionVocabulary) -> bool:
    return action.type in INPUT_ACTIONS and vocabulary.mentions(target_text(action), vocabulary.username_keywords)


def is_password_input(action: Action, vocabulary: RecognitionVocabulary) -> bool:
    return action.type in INPUT_ACTIONS and vocabulary.mentions(target_text(action), vocabulary.password_keywords)


def is_login_button(action: Action, vocabulary: RecognitionVocabulary) -> bool:
    return (
        action.type in CLICK_ACTIONS
        and action.target is not None
        and vocabulary.mentions(action.target.label, vocabulary.login_button_keywords)
    )


def is_search_button(action: Action, vocabulary: RecognitionVocabulary) -> bool:
    return (
        action.type in CLICK_ACTIONS
        and action.target is not None
        and vocabulary.mentions(action.target.label, vocabulary.search_keywords)
    )


def pattern_for_action(index: int, patterns: List[Pattern]) -> Optional[Pattern]:
    """The pattern whose span covers ``index``, if any."""
    for pattern in patterns:
        if pattern.covers(index):
            return pattern
    return None


def pattern_starting_at(index: int, patterns: List[Pattern]) -> Optional[Pattern]:
    for pattern in patterns:
        if pattern.start_index == index:
            return pattern
    return None


class PatternRecognitionEngine:
    """
    Detects dropdown, modal, login, search and navigation idioms.

    Read-only over the action sequence. Patterns never overlap and come back
    ordered by start index.
    """

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None,
                 tuning: Optional[DetectorTuning] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self.tuning = tuning or DetectorTuning()
        self._detectors = (
            self._detect_dropdown,
            self._detect_modal,
            self._detect_login,
            self._detect_search,
            self._detect_navigation,
        )

    def detect_patterns(self, actions: List[Action]) -> List[Pattern]:
        """
        Scan actions for patterns.

        Args:
            actions: Extracted actions in order

        Returns:
            Non-overlapping patterns ordered by start index
        """
        patterns: List[Pattern] = []
        i = 0
        while i < len(actions):
            for detector in self._detectors:
                pattern = detector(actions, i)
                if pattern is not None:
                    logger.debug(f"{pattern.type.value} pattern at [{pattern.start_index}, {pattern.end_index}]")
                    patterns.append(pattern)
                    i = pattern.end_index + 1
                    break
            else:
                i += 1

        logger.info(f"Detected {len(patterns)} patterns in {len(actions)} actions")
        return patterns

    # ------------------------------------------------------------------
    # Detectors. Each one either matches starting exactly at ``i`` or returns None.
    # ------------------------------------------------------------------

    def _detect_dropdown(self, actions: List[Action], i: int) -> Optional[Pattern]:
        if i + 1 >= len(actions):
            return None
        trigger, option = actions[i], actions[i + 1]
        if trigger.type not in CLICK_ACTIONS or option.type not in CLICK_ACTIONS:
            return None
        if not self._is_dropdown_trigger(trigger) or not self._is_dropdown_option(option):
            return None

        option_text = option.target.label
        return Pattern(
            type=PatternType.DROPDOWN,
            start_index=i,
            end_index=i + 1,
            confidence=self.tuning.dropdown_confidence,
            action_indices=(i, i + 1),
            data={
                'triggerSelector': trigger.target.value,
                'optionText': option_text,
                'fieldContext': self._dropdown_field(trigger, option_text),
            },
        )

    def _is_dropdown_trigger(self, action: Action) -> bool:
        target = action.target
        if target is None:
            return False
        if target.kind == LocatorKind.ROLE and target.value in self.vocabulary.dropdown_trigger_roles:
            return True
        return self.vocabulary.mentions(target.value, self.vocabulary.dropdown_trigger_markers)

    @staticmethod
    def _is_dropdown_option(action: Action) -> bool:
        target = action.target
        if target is None:
            return False
        if target.kind == LocatorKind.TEXT:
            return True
        return target.kind == LocatorKind.ROLE and target.value in OPTION_ROLES

    def _dropdown_field(self, trigger: Action, option_text: str) -> str:
        lowered = option_text.lower()
        for hint, field_name in self.vocabulary.dropdown_option_hints.items():
            if hint.lower() in lowered:
                return field_name

        trigger_text = target_text(trigger)
        for hint, field_name in self.vocabulary.dropdown_selector_hints.items():
            if hint.lower() in trigger_text:
                return field_name

        return self.vocabulary.default_dropdown_field

    def _detect_modal(self, actions: List[Action], i: int) -> Optional[Pattern]:
        dialog = actions[i]
        if dialog.type != ActionType.ASSERTION or dialog.target is None:
            return None
        if dialog.target.kind != LocatorKind.TEXT:
            return None
        if not self.vocabulary.mentions(dialog.target.value, self.vocabulary.dialog_keywords):
            return None

        end = min(i + self.tuning.modal_window, len(actions))
        for j in range(i + 1, end):
            candidate = actions[j]
            if candidate.type not in CLICK_ACTIONS or candidate.target is None:
                continue
            label = candidate.target.label
            if self.vocabulary.mentions_word(label, self.vocabulary.cancel_keywords):
                choice = 'cancel'
            elif self.vocabulary.mentions_word(label, self.vocabulary.confirm_keywords):
                choice = 'confirm'
            else:
                continue

            return Pattern(
                type=PatternType.MODAL,
                start_index=i,
                end_index=j,
                confidence=self.tuning.modal_confidence,
                action_indices=(i, j),
                data={
                    'modalText': dialog.target.value,
                    'action': choice,
                    'triggerAction': self._previous_click_name(actions, i),
                },
            )
        return None

    @staticmethod
    def _previous_click_name(actions: List[Action], i: int) -> Optional[str]:
        for k in range(i - 1, -1, -1):
            if actions[k].type in CLICK_ACTIONS and actions[k].target is not None:
                return actions[k].target.label
        return None

    def _detect_login(self, actions: List[Action], i: int) -> Optional[Pattern]:
        vocabulary = self.vocabulary
        first = actions[i]
        if not (is_username_input(first, vocabulary) or is_password_input(first, vocabulary)):
            return None

        username: Optional[Any] = None
        password: Optional[Any] = None
        has_remember_me = False
        members: List[int] = []

        end = min(i + self.tuning.login_window, len(actions))
        for j in range(i, end):
            action = actions[j]
            if username is None and is_username_input(action, vocabulary):
                username = action.first_arg
                members.append(j)
            elif password is None and is_password_input(action, vocabulary):
                password = action.first_arg
                members.append(j)
            elif action.type in CLICK_ACTIONS + (ActionType.CHECK,) and vocabulary.mentions(
                    target_text(action), vocabulary.remember_me_keywords):
                has_remember_me = True
                members.append(j)
            elif is_login_button(action, vocabulary):
                if username is None or password is None:
                    return None
                members.append(j)
                return Pattern(
                    type=PatternType.LOGIN,
                    start_index=i,
                    end_index=j,
                    confidence=self.tuning.login_confidence,
                    action_indices=tuple(members),
                    data={
                        'username': username,
                        'password': password,
                        'hasRememberMe': has_remember_me,
                    },
                )
        return None

    def _detect_search(self, actions: List[Action], i: int) -> Optional[Pattern]:
        vocabulary = self.vocabulary
        if actions[i].type not in CRITERIA_ACTIONS:
            return None

        search_fields: List[Dict[str, Any]] = []
        has_filters = False
        members: List[int] = []

        end = min(i + self.tuning.search_window, len(actions))
        for j in range(i, end):
            action = actions[j]
            if action.type == ActionType.NAVIGATION or is_module_link_click(action, vocabulary):
                return None

            if is_search_button(action, vocabulary):
                members.append(j)
                last = j
                has_results = j + 1 < len(actions) and actions[j + 1].type == ActionType.ASSERTION
                if has_results:
                    members.append(j + 1)
                    last = j + 1
                return Pattern(
                    type=PatternType.SEARCH,
                    start_index=i,
                    end_index=last,
                    confidence=self.tuning.search_confidence,
                    action_indices=tuple(members),
                    data={
                        'searchFields': search_fields,
                        'hasFilters': has_filters,
                        'hasResults': has_results,
                    },
                )

            if action.type in INPUT_ACTIONS:
                search_fields.append({
                    'field': action.target.label if action.target else 'field',
                    'value': action.first_arg,
                })
                members.append(j)
            elif action.type in CRITERIA_ACTIONS:
                has_filters = True
                members.append(j)
            else:
                return None
        return None

    def _detect_navigation(self, actions: List[Action], i: int) -> Optional[Pattern]:
        link = actions[i]
        if not is_module_link_click(link, self.vocabulary):
            return None

        end = i
        following = actions[i + 1] if i + 1 < len(actions) else None
        verified = (
            following is not None
            and following.type == ActionType.ASSERTION
            and following.target is not None
            and following.target.kind == LocatorKind.ROLE
            and following.target.value == 'heading'
        )
        if verified:
            end = i + 1

        return Pattern(
            type=PatternType.NAVIGATION,
            start_index=i,
            end_index=end,
            confidence=self.tuning.navigation_confidence,
            action_indices=tuple(range(i, end + 1)),
            data={
                'linkText': link.target.name,
                'targetModule': self.vocabulary.module_in(link.target.name),
                'verified': verified,
            },
        )


def detect_patterns(actions: List[Action]) -> List[Pattern]:
    """
    Convenience function to detect patterns with the default vocabulary.

    Args:
        actions: Extracted actions

    Returns:
        Detected patterns
    """
    return PatternRecognitionEngine().detect_patterns(actions)
