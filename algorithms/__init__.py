"""
Algorithms package for the Banker's Safety Analyzer.
Contains state derivation and the Banker's safety check.
"""
