"""
Evaluation framework for NERC models.

Provides tools for:
- Exact span matching between reference and hypothesis
- Accumulating precision/recall/F1 (overall and per type)
- Evaluating a model against a reference corpus
- Comparing a prediction corpus against a reference corpus
- Generating readable reports
"""
