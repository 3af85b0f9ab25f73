"""
Element and method builders.

Creates ElementDefinition and MethodDefinition candidates from actions,
patterns and contexts. Candidates that cannot be materialized are recorded
as omissions instead of raising.
"""
import logging
from typing import Dict, List, Optional, Tuple

from .context import UNKNOWN_MODULE, majority_module
from .locators import LocatorStrategyGenerator
from .naming import NamingResolver, parameter_name, to_pascal_case
from .patterns import is_module_link_click
from .types import (
    Action,
    ActionType,
    ElementContext,
    ElementDefinition,
    ElementKind,
    MethodDefinition,
    Omission,
    OmissionKind,
    ParameterDefinition,
    Pattern,
    PatternType,
)
from .vocabulary import RecognitionVocabulary

logger = logging.getLogger(__name__)

UNASSIGNED_REGISTRY = ""


class ArtifactBuilder:
    """
    Builds named elements and methods for one conversion run.

    Holds the run's NamingResolver, so a builder must not be reused across runs.
    """

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None,
                 locator_generator: Optional[LocatorStrategyGenerator] = None,
                 naming: Optional[NamingResolver] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self.locator_generator = locator_generator or LocatorStrategyGenerator(self.vocabulary)
        self.naming = naming or NamingResolver(self.vocabulary)
        self.omissions: List[Omission] = []

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def build_elements(self, actions: List[Action], patterns: List[Pattern],
                       contexts: Dict[int, ElementContext]) -> List[ElementDefinition]:
        """
        Materialize elements for distinct targets.

        A target becomes an element when it takes part in a pattern, is
        verified, is used more than once, or is an important control. Any
        target that is clicked as a module link, including its assertions and
        hovers, is left to the shared navigation component.

        Args:
            actions: Extracted actions
            patterns: Detected patterns
            contexts: Context per action index

        Returns:
            Elements in order of first use
        """
        pattern_members = {index for pattern in patterns for index in pattern.action_indices}
        link_targets = {
            action.target.identity() for action in actions
            if is_module_link_click(action, self.vocabulary)
        }

        groups: Dict[Tuple, List[Action]] = {}
        for action in actions:
            if action.target is None or action.target.identity() in link_targets:
                continue
            context = contexts[action.index]
            key = (context.module, context.element_kind) + action.target.identity()
            groups.setdefault(key, []).append(action)

        elements: List[ElementDefinition] = []
        for group in groups.values():
            first = group[0]
            context = contexts[first.index]
            wanted = (
                any(action.index in pattern_members for action in group)
                or any(action.type == ActionType.ASSERTION for action in group)
                or len(group) >= 2
                or self._is_important(first, context)
            )
            if not wanted:
                continue

            element = self._materialize(group, context)
            if element is not None:
                elements.append(element)

        logger.info(f"Materialized {len(elements)} elements from {len(groups)} distinct targets")
        return elements

    def _is_important(self, action: Action, context: ElementContext) -> bool:
        if context.element_kind == ElementKind.TEXTBOX:
            return True
        if context.element_kind == ElementKind.BUTTON:
            return self.vocabulary.mentions(action.target.label, self.vocabulary.important_button_keywords)
        return False

    def _materialize(self, group: List[Action], context: ElementContext) -> Optional[ElementDefinition]:
        first = group[0]
        subject = first.target.describe()

        locators = self.locator_generator.generate(first)
        if locators.is_degenerate:
            self._omit(OmissionKind.DEGENERATE_LOCATOR, subject, "no locator strategy with positive stability")
            return None

        name = self.naming.resolve_element_name(first, context, self.naming.registry(context.module))
        if name is None:
            self._omit(OmissionKind.NAME_COLLISION_EXHAUSTED, subject,
                       f"every candidate name is already used in {context.module}")
            return None

        return ElementDefinition(
            name=name,
            module=context.module,
            kind=context.element_kind,
            descriptor=first.target,
            locators=locators,
            canonical=self.locator_generator.to_canonical(locators),
            action_ids=[action.id for action in group],
        )

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------

    def build_methods(self, actions: List[Action], patterns: List[Pattern],
                      contexts: Dict[int, ElementContext]) -> List[MethodDefinition]:
        """
        Build one method per interaction pattern and one verification method per module.

        Navigation patterns get no method of their own; the shared navigation
        component's ``navigateToModule`` covers them.
        """
        methods: List[MethodDefinition] = []
        for pattern in patterns:
            if pattern.type == PatternType.NAVIGATION:
                continue
            methods.append(self._pattern_method(pattern, actions, contexts))

        methods.extend(self._verification_methods(actions, patterns, contexts))
        logger.info(f"Built {len(methods)} methods from {len(patterns)} patterns")
        return methods

    def _pattern_method(self, pattern: Pattern, actions: List[Action],
                        contexts: Dict[int, ElementContext]) -> MethodDefinition:
        module = majority_module(pattern.action_indices, contexts)
        registry = self.naming.registry(module if module is not None else UNASSIGNED_REGISTRY)

        core = [
            actions[index].id for index in pattern.action_indices
            if module is None or contexts[index].module == module
        ]
        return MethodDefinition(
            name=self.naming.resolve_method_name(self.naming.method_base_name(pattern), registry),
            module=module,
            purpose=self._method_purpose(pattern),
            parameters=self._method_parameters(pattern),
            action_ids=core,
            pattern_type=pattern.type,
            step_text=self.naming.step_text(pattern),
        )

    @staticmethod
    def _method_purpose(pattern: Pattern) -> str:
        data = pattern.data
        if pattern.type == PatternType.DROPDOWN:
            return f"Select an option from the {data.get('fieldContext')} dropdown"
        if pattern.type == PatternType.MODAL:
            verb = 'Cancel' if data.get('action') == 'cancel' else 'Confirm'
            trigger = data.get('triggerAction')
            return f"{verb} the {trigger} dialog" if trigger else f"{verb} the dialog"
        if pattern.type == PatternType.LOGIN:
            return "Log in with the given credentials"
        fields = [str(entry.get('field')) for entry in data.get('searchFields') or []]
        if fields:
            return f"Search by {', '.join(fields)}"
        return "Run the search"

    @staticmethod
    def _method_parameters(pattern: Pattern) -> List[ParameterDefinition]:
        data = pattern.data
        if pattern.type == PatternType.DROPDOWN:
            return [ParameterDefinition(
                name=parameter_name(str(data.get('fieldContext', ''))),
                default=data.get('optionText'),
            )]
        if pattern.type == PatternType.LOGIN:
            return [ParameterDefinition(name='username'), ParameterDefinition(name='password')]
        if pattern.type == PatternType.SEARCH:
            parameters: List[ParameterDefinition] = []
            used = set()
            for entry in data.get('searchFields') or []:
                base = parameter_name(str(entry.get('field', '')))
                name, suffix = base, 2
                while name in used:
                    name, suffix = f"{base}{suffix}", suffix + 1
                used.add(name)
                value = entry.get('value')
                parameters.append(ParameterDefinition(name=name, default=None if value is None else str(value)))
            return parameters
        return []

    def _verification_methods(self, actions: List[Action], patterns: List[Pattern],
                              contexts: Dict[int, ElementContext]) -> List[MethodDefinition]:
        pattern_members = {index for pattern in patterns for index in pattern.action_indices}

        by_module: Dict[str, List[str]] = {}
        for action in actions:
            if action.type != ActionType.ASSERTION or action.target is None:
                continue
            if action.index in pattern_members:
                continue
            module = contexts[action.index].module
            if module == UNKNOWN_MODULE:
                continue
            by_module.setdefault(module, []).append(action.id)

        methods = []
        for module, action_ids in by_module.items():
            registry = self.naming.registry(module)
            methods.append(MethodDefinition(
                name=self.naming.resolve_method_name(f"verify{to_pascal_case(module)}Elements", registry),
                module=module,
                purpose=f"Verify the {module} page elements are visible",
                action_ids=action_ids,
                step_text=self.naming.verification_step_text(module),
            ))
        return methods

    def _omit(self, kind: OmissionKind, subject: str, reason: str):
        logger.debug(f"Omitting {subject}: {reason}")
        self.omissions.append(Omission(kind=kind, subject=subject, reason=reason))
