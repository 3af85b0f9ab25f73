"""
Architecture organizer.

Splits the built artifacts into one shared navigation component and one page
grouping per application module.
"""
import logging
from typing import Dict, List, Optional

from .context import UNKNOWN_MODULE, majority_module
from .locators import LocatorStrategyGenerator
from .naming import NameRegistry, page_class_name, to_camel_case
from .patterns import is_module_link_click
from .types import (
    Action,
    ArchitectureResult,
    ElementContext,
    ElementDefinition,
    ElementKind,
    MethodDefinition,
    Omission,
    OmissionKind,
    PageGrouping,
    ParameterDefinition,
    Pattern,
    SharedNavigationComponent,
    StepBinding,
)
from .vocabulary import RecognitionVocabulary

logger = logging.getLogger(__name__)

NAVIGATION_COMPONENT_NAME = "NavigationComponent"
NAVIGATE_METHOD_NAME = "navigateToModule"


class ArchitectureOrganizer:
    """Partitions elements and methods by module"""

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None,
                 locator_generator: Optional[LocatorStrategyGenerator] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self.locator_generator = locator_generator or LocatorStrategyGenerator(self.vocabulary)

    def organize(self, actions: List[Action], patterns: List[Pattern],
                 contexts: Dict[int, ElementContext], elements: List[ElementDefinition],
                 methods: List[MethodDefinition]) -> ArchitectureResult:
        """
        Build the shared navigation component and the page groupings.

        Args:
            actions: Extracted actions
            patterns: Detected patterns
            contexts: Context per action index
            elements: Materialized elements (module links excluded)
            methods: Built methods

        Returns:
            ArchitectureResult; dropped artifacts are listed in ``omissions``
        """
        result = ArchitectureResult()
        result.shared_navigation = self._build_navigation(actions)

        navigation_ids = set()
        navigation_targets = set()
        if result.shared_navigation is not None:
            for element in result.shared_navigation.elements:
                navigation_ids.update(element.action_ids)
                navigation_targets.add(element.descriptor.identity())

        groupings: Dict[str, PageGrouping] = {}
        for module in self._module_order(actions, contexts):
            groupings[module] = PageGrouping(module=module, class_name=page_class_name(module))

        for element in elements:
            if navigation_ids.intersection(element.action_ids):
                continue
            if element.descriptor.identity() in navigation_targets:
                continue
            if element.module == UNKNOWN_MODULE or element.module not in groupings:
                result.omissions.append(Omission(
                    kind=OmissionKind.UNASSIGNED_MODULE,
                    subject=element.name,
                    reason="element does not belong to a known module",
                ))
                continue
            groupings[element.module].elements.append(element)

        index_by_id = {action.id: action.index for action in actions}
        for method in methods:
            module = majority_module([index_by_id[action_id] for action_id in method.action_ids], contexts)
            if module is None or module not in groupings:
                result.omissions.append(Omission(
                    kind=OmissionKind.UNASSIGNED_MODULE,
                    subject=method.name,
                    reason="no module owns a strict majority of the method's actions",
                ))
                continue
            method.module = module
            groupings[module].methods.append(method)

        result.page_groupings = [page for page in groupings.values() if page.elements or page.methods]
        result.step_bindings = self._step_bindings(result)

        logger.info(
            f"Organized {len(result.page_groupings)} page groupings, "
            f"{len(result.shared_navigation.elements) if result.shared_navigation else 0} navigation links, "
            f"{len(result.omissions)} omissions"
        )
        return result

    def _build_navigation(self, actions: List[Action]) -> Optional[SharedNavigationComponent]:
        links: Dict[str, List[Action]] = {}
        for action in actions:
            if is_module_link_click(action, self.vocabulary):
                links.setdefault(action.target.name, []).append(action)
        if not links:
            return None

        registry = NameRegistry(NAVIGATION_COMPONENT_NAME)
        elements = []
        for link_name, clicks in links.items():
            base = f"{to_camel_case(link_name) or 'navigation'}Link"
            name, suffix = base, 2
            while not registry.claim_element(name):
                name, suffix = f"{base}{suffix}", suffix + 1
            locators = self.locator_generator.generate(clicks[0])
            elements.append(ElementDefinition(
                name=name,
                module=NAVIGATION_COMPONENT_NAME,
                kind=ElementKind.LINK,
                descriptor=clicks[0].target,
                locators=locators,
                canonical=self.locator_generator.to_canonical(locators),
                action_ids=[click.id for click in clicks],
            ))

        navigate = MethodDefinition(
            name=NAVIGATE_METHOD_NAME,
            module=None,
            purpose="Navigate to an application module through the main menu",
            parameters=[ParameterDefinition(name='module', allowed_values=tuple(links))],
            action_ids=[action_id for element in elements for action_id in element.action_ids],
            step_text='Given I navigate to the "{module}" page',
        )
        return SharedNavigationComponent(
            name=NAVIGATION_COMPONENT_NAME,
            elements=elements,
            methods=[navigate],
        )

    @staticmethod
    def _module_order(actions: List[Action], contexts: Dict[int, ElementContext]) -> List[str]:
        order: List[str] = []
        for action in actions:
            module = contexts[action.index].module
            if module != UNKNOWN_MODULE and module not in order:
                order.append(module)
        return order

    @staticmethod
    def _step_bindings(result: ArchitectureResult) -> List[StepBinding]:
        bindings = []
        if result.shared_navigation is not None:
            for method in result.shared_navigation.methods:
                bindings.append(StepBinding(result.shared_navigation.name, method.name, method.step_text))
        for page in result.page_groupings:
            for method in page.methods:
                if method.step_text:
                    bindings.append(StepBinding(page.module, method.name, method.step_text))
        return bindings
