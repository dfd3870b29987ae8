"""
Installed-package bookkeeping: the in-memory index and the on-disk layout it is rebuilt from.
"""
