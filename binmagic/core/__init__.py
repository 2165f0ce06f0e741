"""
binmagic Core
==============

Data models, the error taxonomy, and the inspection engine.
"""
