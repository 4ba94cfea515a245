"""
Construction material estimator.

Calculators turn project dimensions + options into a bill of materials;
the pricing package turns that bill into a priced estimate.
"""
