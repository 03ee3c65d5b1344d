"""
Analysis package for the Banker's Safety Analyzer.
Contains the safety trace model and text reporting.
"""
