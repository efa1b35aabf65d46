"""Data module - Bundled sample tables"""

from .sample import SAMPLE_SCHEMAS, SAMPLE_TABLES, sample_store

__all__ = ['SAMPLE_SCHEMAS', 'SAMPLE_TABLES', 'sample_store']
