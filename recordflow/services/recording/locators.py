"""
Locator strategy generation.

Turns a recorded locator descriptor into ranked strategies (primary plus up to
four alternatives) and renders them in the single-syntax self-healing form.
"""
import logging
import re
from dataclasses import replace
from typing import List, Optional, Sequence

from .types import (
    Action,
    CanonicalLocator,
    ChainStep,
    GeneratedLocators,
    LocatorDescriptor,
    LocatorKind,
    LocatorStrategy,
    StrategyType,
)
from .vocabulary import DetectorTuning, RecognitionVocabulary

logger = logging.getLogger(__name__)


# Stability of each strategy family, 0..100
STABILITY = {
    'testId': 100,
    'id': 95,
    'role_name': 90,
    'placeholder': 85,
    'label': 85,
    'aria_label': 85,
    'name': 80,
    'text_exact': 75,
    'text_contains': 65,
    'css_attribute': 60,
    'css_class': 50,
    'css_nth': 25,
    'xpath_index': 20,
    # strategy that cannot express a recorded nth/first/last position
    'unindexed': 10,
}

# Minimum score granted to a raw selector carrying a stable marker, checked in order
RAW_SELECTOR_BOOSTS = (
    (re.compile(r'data-test(id)?', re.IGNORECASE), 95),
    (re.compile(r'^#[\w-]+$'), 90),
    (re.compile(r'aria-label', re.IGNORECASE), 85),
    (re.compile(r'\[name\s*[~|^$*]?='), 80),
    (re.compile(r'placeholder', re.IGNORECASE), 80),
    (re.compile(r'role\s*='), 75),
)
NTH_PATTERN = re.compile(r'nth-child|nth-of-type|:nth\(|>>\s*nth=')
XPATH_INDEX_PATTERN = re.compile(r'\[\d+\]')

ID_PATTERN = re.compile(r'#([A-Za-z_][\w-]*)|\[id\s*=\s*["\']?([^"\'\]]+)')
ARIA_LABEL_PATTERN = re.compile(r'aria-label\s*=\s*["\']?([^"\'\]]+)')
NAME_ATTR_PATTERN = re.compile(r'\[name\s*=\s*["\']?([^"\'\]]+)')

CSS_SPECIAL_CHARS = set('.#[]>+~:()*=^$|')
TITLE_WORD_PATTERN = re.compile(r'^[A-Z][A-Za-z0-9]*$')

WILDCARD = '//*'


def xpath_literal(value: str) -> str:
    """Quote a string for XPath, preferring double quotes."""
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        return f"'{value}'"
    pieces = value.split('"')
    return "concat(" + ", '\"', ".join(f'"{piece}"' for piece in pieces) + ")"


def css_string(value: str) -> str:
    return value.replace('\\', '\\\\').replace('"', '\\"')


def is_likely_text(value: str) -> bool:
    """Whether a CSS-typed value is really visible text rather than a selector."""
    if any(char in CSS_SPECIAL_CHARS for char in value):
        return False
    if ' ' in value.strip():
        return True
    return bool(TITLE_WORD_PATTERN.match(value))


def text_xpath(value: str, exact_only: bool = False) -> str:
    literal = xpath_literal(value)
    if exact_only:
        return f'//*[text()={literal}]'
    return f'//*[text()={literal} or contains(text(), {literal})]'


def role_xpath(role: str, name: Optional[str]) -> str:
    if not name:
        return f'//*[@role={xpath_literal(role)}]'
    literal = xpath_literal(name)
    return f'//*[@role={xpath_literal(role)}][@aria-label={literal} or contains(., {literal})]'


def label_xpath(label: str) -> str:
    return f'//label[normalize-space(.)={xpath_literal(label)}]/following::input[1]'


def chain_position(chain: Sequence[ChainStep]) -> Optional[int]:
    """
    Index selected by the trailing positional steps of a locator chain.

    ``nth(k)`` gives k, ``first()`` gives 0 and ``last()`` gives -1. Returns
    None when the chain does not end in a positional step with a literal index.
    """
    for step in reversed(chain):
        if step.method == 'first':
            return 0
        if step.method == 'last':
            return -1
        if step.method == 'nth':
            index = step.args[0] if step.args else None
            if isinstance(index, bool) or not isinstance(index, (int, float)):
                return None
            return int(index)
        return None
    return None


def split_role_value(value: str):
    role, _, name = value.partition(':')
    return role, (name or None)


class LocatorStrategyGenerator:
    """
    Generates ranked locator strategies for recorded targets.

    Pure: the same descriptor always yields the same strategies in the same order.
    """

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None,
                 tuning: Optional[DetectorTuning] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self.tuning = tuning or DetectorTuning()

    def generate(self, action: Action) -> GeneratedLocators:
        """
        Generate locators for an action's target.

        Args:
            action: Extracted action

        Returns:
            GeneratedLocators; a zero-stability wildcard when the action has no target
        """
        if action.target is None:
            return self.degenerate()
        return self.generate_for_descriptor(action.target)

    def generate_for_descriptor(self, descriptor: LocatorDescriptor) -> GeneratedLocators:
        handler = getattr(self, f'_strategies_{descriptor.kind.name.lower()}')
        strategies = self._apply_position(handler(descriptor), chain_position(descriptor.chain))

        ranked = self._rank(strategies)
        if not ranked:
            logger.debug(f"No strategies for {descriptor.describe()}")
            return self.degenerate()
        return GeneratedLocators(
            primary=ranked[0],
            alternatives=tuple(ranked[1:1 + self.tuning.max_alternatives]),
        )

    @staticmethod
    def degenerate() -> GeneratedLocators:
        return GeneratedLocators(
            primary=LocatorStrategy(StrategyType.XPATH, WILDCARD, 0, 'No usable locator'),
        )

    @staticmethod
    def _apply_position(strategies: List[LocatorStrategy], position: Optional[int]) -> List[LocatorStrategy]:
        """Pin strategies to the n-th match of a positional chain step (-1 is the last match)."""
        if position is None:
            return strategies
        if position >= 0:
            xpath_index = str(position + 1)
        else:
            xpath_index = 'last()' if position == -1 else f'last(){position + 1}'
        pinned = []
        for strategy in strategies:
            if strategy.type == StrategyType.XPATH:
                pinned.append(LocatorStrategy(StrategyType.XPATH, f'({strategy.value})[{xpath_index}]',
                                              min(strategy.stability, STABILITY['xpath_index']),
                                              f'{strategy.description}, indexed'))
            elif strategy.type == StrategyType.CSS:
                pinned.append(LocatorStrategy(StrategyType.CSS, f'{strategy.value} >> nth={position}',
                                              min(strategy.stability, STABILITY['css_nth']),
                                              f'{strategy.description}, nth match'))
            else:
                pinned.append(replace(strategy, stability=min(strategy.stability, STABILITY['unindexed'])))
        return pinned

    @staticmethod
    def _rank(strategies: List[LocatorStrategy]) -> List[LocatorStrategy]:
        ordered = sorted(strategies, key=lambda s: s.stability, reverse=True)
        seen = set()
        result = []
        for strategy in ordered:
            key = (strategy.type, strategy.value)
            if key in seen or not strategy.value:
                continue
            seen.add(key)
            result.append(strategy)
        return result

    # ------------------------------------------------------------------
    # Per-kind strategies
    # ------------------------------------------------------------------

    def _strategies_role(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        role, name = descriptor.value, descriptor.name
        if not name:
            return [
                LocatorStrategy(StrategyType.CSS, f'[role="{css_string(role)}"]',
                                STABILITY['css_attribute'], 'Role attribute'),
            ]
        literal = xpath_literal(name)
        return [
            LocatorStrategy(StrategyType.ROLE, f'{role}:{name}', STABILITY['role_name'],
                            f'Role {role} named "{name}"'),
            LocatorStrategy(StrategyType.XPATH,
                            f'//*[@role={xpath_literal(role)}][@aria-label={literal}]',
                            STABILITY['aria_label'], 'Role with aria-label'),
            LocatorStrategy(StrategyType.XPATH,
                            f'//*[@role={xpath_literal(role)}][contains(normalize-space(.), {literal})]',
                            STABILITY['text_contains'], 'Role containing text'),
        ]

    def _strategies_placeholder(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        value = descriptor.value
        return [
            LocatorStrategy(StrategyType.PLACEHOLDER, value, STABILITY['placeholder'], 'Placeholder'),
            LocatorStrategy(StrategyType.CSS, f'[placeholder="{css_string(value)}"]', 80,
                            'Placeholder attribute'),
            LocatorStrategy(StrategyType.XPATH, f'//input[@placeholder={xpath_literal(value)}]', 75,
                            'Input by placeholder'),
        ]

    def _strategies_text(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        value = descriptor.value
        return [
            LocatorStrategy(StrategyType.TEXT, value, STABILITY['text_exact'], 'Visible text'),
            LocatorStrategy(StrategyType.XPATH, text_xpath(value, exact_only=True), 70, 'Exact text'),
            LocatorStrategy(StrategyType.XPATH, f'//*[contains(text(), {xpath_literal(value)})]',
                            STABILITY['text_contains'], 'Contains text'),
        ]

    def _strategies_label(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        value = descriptor.value
        return [
            LocatorStrategy(StrategyType.LABEL, value, STABILITY['label'], 'Label'),
            LocatorStrategy(StrategyType.XPATH, label_xpath(value), 75, 'Input following label'),
        ]

    def _strategies_test_id(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        value = descriptor.value
        return [
            LocatorStrategy(StrategyType.TEST_ID, value, STABILITY['testId'], 'Test id'),
            LocatorStrategy(StrategyType.CSS, f'[data-testid="{css_string(value)}"]',
                            STABILITY['id'], 'Test id attribute'),
        ]

    def _strategies_raw_selector(self, descriptor: LocatorDescriptor) -> List[LocatorStrategy]:
        selector = descriptor.value.strip()
        if not selector:
            return []

        if selector.startswith('text='):
            text = selector[len('text='):].strip()
            quoted = len(text) > 1 and text[0] == text[-1] and text[0] in '"\''
            return [LocatorStrategy(
                StrategyType.TEXT, text.strip('"\''),
                STABILITY['text_exact'] if quoted else STABILITY['text_contains'], 'Text selector')]

        if selector.startswith('xpath='):
            strategy_type, selector = StrategyType.XPATH, selector[len('xpath='):]
        elif selector.startswith('css='):
            strategy_type, selector = StrategyType.CSS, selector[len('css='):]
        elif selector.startswith(('/', '(')):
            strategy_type = StrategyType.XPATH
        else:
            strategy_type = StrategyType.CSS

        strategies = [LocatorStrategy(strategy_type, selector, self.score_selector(selector),
                                      'Recorded selector')]

        id_match = ID_PATTERN.search(selector) if strategy_type == StrategyType.CSS else None
        if id_match:
            element_id = id_match.group(1) or id_match.group(2)
            strategies.append(LocatorStrategy(StrategyType.CSS, f'#{element_id}', STABILITY['id'], 'Id'))
            strategies.append(LocatorStrategy(StrategyType.XPATH, f'//*[@id={xpath_literal(element_id)}]',
                                              90, 'Id attribute'))

        aria_match = ARIA_LABEL_PATTERN.search(selector)
        if aria_match:
            strategies.append(LocatorStrategy(
                StrategyType.XPATH, f'//*[@aria-label={xpath_literal(aria_match.group(1))}]',
                STABILITY['aria_label'], 'Aria label'))

        name_match = NAME_ATTR_PATTERN.search(selector)
        if name_match:
            strategies.append(LocatorStrategy(
                StrategyType.CSS, f'[name="{css_string(name_match.group(1))}"]',
                STABILITY['name'], 'Name attribute'))

        return strategies

    def score_selector(self, selector: str) -> int:
        """
        Score a raw selector's stability.

        Starts at 50, is raised by stable markers and lowered by positional or
        framework-generated parts. Always within 0..100.
        """
        score = 50
        for marker, boost in RAW_SELECTOR_BOOSTS:
            if marker.search(selector):
                score = max(score, boost)

        if NTH_PATTERN.search(selector):
            score -= 30
        if XPATH_INDEX_PATTERN.search(selector):
            score -= 25
        if len(selector.split()) > 3:
            score -= 10
        if any(marker in selector for marker in self.vocabulary.utility_class_markers):
            score -= 15

        return max(0, min(100, score))

    # ------------------------------------------------------------------
    # Self-healing rendering
    # ------------------------------------------------------------------

    def to_canonical(self, locators: GeneratedLocators) -> CanonicalLocator:
        """
        Render locators in a single-syntax form for self-healing lookups.

        Text, role and text-like CSS primaries become XPath expressions;
        alternatives are prefixed with their syntax (``xpath:``, ``css:``, ``testId:``).
        """
        primary_type, primary_value = self._canonical_primary(locators.primary)

        alternatives = []
        seen = {f'{primary_type.value}:{primary_value}'}
        for strategy in locators.alternatives:
            rendered = self._canonical_alternative(strategy)
            if rendered not in seen:
                seen.add(rendered)
                alternatives.append(rendered)

        return CanonicalLocator(primary_type, primary_value, tuple(alternatives))

    @staticmethod
    def _canonical_primary(strategy: LocatorStrategy):
        value = strategy.value
        if strategy.type == StrategyType.ROLE:
            role, name = split_role_value(value)
            return StrategyType.XPATH, role_xpath(role, name)
        if strategy.type == StrategyType.TEXT:
            return StrategyType.XPATH, text_xpath(value)
        if strategy.type == StrategyType.CSS and is_likely_text(value):
            return StrategyType.XPATH, text_xpath(value)
        if strategy.type == StrategyType.PLACEHOLDER:
            return StrategyType.CSS, f'[placeholder="{css_string(value)}"]'
        if strategy.type == StrategyType.LABEL:
            return StrategyType.XPATH, label_xpath(value)
        return strategy.type, value

    @staticmethod
    def _canonical_alternative(strategy: LocatorStrategy) -> str:
        value = strategy.value
        if strategy.type == StrategyType.TEXT:
            return f'xpath:{text_xpath(value, exact_only=True)}'
        if strategy.type == StrategyType.ROLE:
            role, name = split_role_value(value)
            return f'xpath:{role_xpath(role, name)}'
        if strategy.type == StrategyType.PLACEHOLDER:
            return f'css:[placeholder="{css_string(value)}"]'
        if strategy.type == StrategyType.LABEL:
            return f'xpath:{label_xpath(value)}'
        return f'{strategy.type.value}:{value}'
