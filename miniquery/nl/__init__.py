"""Natural language module - Question to query translation"""

from .translator import RULES, TranslationRule, translate_natural_language
from .vocabulary import COLUMN_KEYWORDS, TABLE_KEYWORDS, detect_column, detect_table

__all__ = [
    'RULES', 'TranslationRule', 'translate_natural_language',
    'COLUMN_KEYWORDS', 'TABLE_KEYWORDS', 'detect_column', 'detect_table',
]
