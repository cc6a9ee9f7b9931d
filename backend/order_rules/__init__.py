"""
Restaurant order rules: kitchen ticket status, billing and offers.
"""
