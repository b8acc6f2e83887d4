"""
nlp_nerc: training, cross-validation and span-level evaluation of
named entity taggers over annotated corpora.
"""

__version__ = "0.1.0"
