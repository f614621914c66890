"""
People feature: list, create and delete person records.
"""
