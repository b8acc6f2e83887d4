"""
Corpus readers and writers (native, CoNLL 2002, CoNLL 2003).
"""
from .corpus import CorpusFormat, open_corpus, write_corpus

__all__ = ["CorpusFormat", "open_corpus", "write_corpus"]
