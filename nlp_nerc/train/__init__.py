"""
Model training: the tagging capability, its spaCy backend and the
cross-validation driver.
"""
