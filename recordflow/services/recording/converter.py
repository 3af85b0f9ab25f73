"""
Main recording converter.

Converts a recorded browser script into a module-partitioned artifact graph.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .builder import ArtifactBuilder
from .context import ContextExtractor
from .extractor import ActionExtractor
from .locators import LocatorStrategyGenerator
from .naming import NamingResolver
from .parser import ParseError
from .patterns import PatternRecognitionEngine
from .organizer import ArchitectureOrganizer
from .types import Action, ArchitectureResult, ElementContext, Pattern, to_plain
from .vocabulary import DetectorTuning, RecognitionVocabulary

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Everything a conversion run produced"""
    actions: List[Action] = field(default_factory=list)
    patterns: List[Pattern] = field(default_factory=list)
    contexts: Dict[int, ElementContext] = field(default_factory=dict)
    architecture: ArchitectureResult = field(default_factory=ArchitectureResult)

    def to_dict(self, include_actions: bool = True) -> Dict[str, Any]:
        result = {
            'patterns': to_plain(self.patterns),
            'architecture': to_plain(self.architecture),
        }
        if include_actions:
            result['actions'] = to_plain(self.actions)
            result['contexts'] = {str(index): to_plain(context) for index, context in self.contexts.items()}
        return result


class RecordingConverter:
    """
    Converts recorded scripts to artifact graphs.

    The pipeline runs extraction, pattern recognition, context inference,
    element and method building, then organization. Name registries are
    created fresh for every ``convert`` call, so repeated runs on the same
    input give structurally identical results. An instance is not re-entrant;
    use one per thread.

    Example:
        converter = RecordingConverter()
        result = converter.convert('''
            await page.goto('https://example.com/web/index.php/auth/login');
            await page.getByPlaceholder('Username').fill('Admin');
        ''')
        print(result.architecture.page_groupings[0].class_name)
    """

    def __init__(self, vocabulary: Optional[RecognitionVocabulary] = None,
                 tuning: Optional[DetectorTuning] = None):
        self.vocabulary = vocabulary or RecognitionVocabulary()
        self.tuning = tuning or DetectorTuning()
        self.extractor = ActionExtractor()
        self.pattern_engine = PatternRecognitionEngine(self.vocabulary, self.tuning)
        self.context_extractor = ContextExtractor(self.vocabulary)
        self.locator_generator = LocatorStrategyGenerator(self.vocabulary, self.tuning)
        self.organizer = ArchitectureOrganizer(self.vocabulary, self.locator_generator)

    def convert(self, source: str) -> ConversionResult:
        """
        Convert a recording.

        Args:
            source: Recorded script text

        Returns:
            ConversionResult with actions, patterns, contexts and architecture

        Raises:
            ParseError: If the recording is not syntactically valid
        """
        actions = self.extractor.extract(source)
        patterns = self.pattern_engine.detect_patterns(actions)
        contexts = self.context_extractor.extract_all(actions, patterns)

        builder = ArtifactBuilder(self.vocabulary, self.locator_generator, NamingResolver(self.vocabulary))
        elements = builder.build_elements(actions, patterns, contexts)
        methods = builder.build_methods(actions, patterns, contexts)

        architecture = self.organizer.organize(actions, patterns, contexts, elements, methods)
        architecture.omissions = self.extractor.omissions + builder.omissions + architecture.omissions

        return ConversionResult(
            actions=actions,
            patterns=patterns,
            contexts=contexts,
            architecture=architecture,
        )

    def convert_to_json(self, source: str, include_actions: bool = False, indent: int = 2) -> str:
        """
        Convert a recording to a JSON string.

        Args:
            source: Recorded script text
            include_actions: Also serialize actions and contexts
            indent: JSON indentation

        Returns:
            JSON string of the artifact graph
        """
        result = self.convert(source)
        return json.dumps(result.to_dict(include_actions=include_actions), indent=indent)

    def validate_recording(self, source: str) -> Dict[str, Any]:
        """
        Check that a recording parses and report how many actions it holds.

        Returns:
            Dictionary with 'valid', 'actionCount' and 'errors'
        """
        try:
            actions = self.extractor.extract(source)
        except ParseError as e:
            return {
                'valid': False,
                'actionCount': 0,
                'errors': [f"Parse error at line {e.line}: {e.message}"],
            }
        return {
            'valid': True,
            'actionCount': len(actions),
            'errors': [],
        }


def convert_recording(source: str) -> ConversionResult:
    """
    Convenience function to convert a recording with default settings.

    Args:
        source: Recorded script text

    Returns:
        ConversionResult
    """
    return RecordingConverter().convert(source)


def convert_recording_to_json(source: str, indent: int = 2) -> str:
    return RecordingConverter().convert_to_json(source, indent=indent)
