"""
SAT practice backend and timed session client core.
"""
