"""
Utilities package for the Banker's Safety Analyzer.
Contains the input loader, random input generator and logger.
"""
