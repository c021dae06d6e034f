"""
Hypercontacts — Services Layer
===============================

Service Inventory:
    - ContactService: every query against the contacts table, plus the
      email uniqueness rule shared by both surfaces
"""
