"""
Helpers shared by the metallb_operator unit tests
"""
