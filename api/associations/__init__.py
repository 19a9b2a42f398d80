"""
Many-to-many links between primary entities (e.g. case <-> victim).
"""
