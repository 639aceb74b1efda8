"""
Member accounts authenticated by emailed single-use security codes.
"""
