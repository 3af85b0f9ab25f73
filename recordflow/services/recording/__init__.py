"""
Recording converter package.

Turns recorded browser scripts into ranked locators, named methods,
step descriptions and a module-partitioned page architecture.
"""
from .converter import ConversionResult, RecordingConverter, convert_recording, convert_recording_to_json
from .extractor import ActionExtractor, extract_actions
from .parser import ParseError, RecordingParser
from .patterns import PatternRecognitionEngine, detect_patterns
from .locators import LocatorStrategyGenerator
from .context import ContextExtractor
from .naming import NameRegistry, NamingResolver
from .organizer import ArchitectureOrganizer
from .vocabulary import DetectorTuning, RecognitionVocabulary

__all__ = [
    'ConversionResult',
    'RecordingConverter',
    'convert_recording',
    'convert_recording_to_json',
    'ActionExtractor',
    'extract_actions',
    'ParseError',
    'RecordingParser',
    'PatternRecognitionEngine',
    'detect_patterns',
    'LocatorStrategyGenerator',
    'ContextExtractor',
    'NameRegistry',
    'NamingResolver',
    'ArchitectureOrganizer',
    'DetectorTuning',
    'RecognitionVocabulary',
]
