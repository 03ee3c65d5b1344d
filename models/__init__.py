"""
Models package for the Banker's Safety Analyzer.
Contains the immutable system state snapshot.
"""
