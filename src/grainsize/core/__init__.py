"""Calculation, classification and analysis file modules."""
