"""
Hearthvale Test Suite
=====================

Test Organization
-----------------
- tests/unit/          : Fast, isolated tests of one component each
- tests/integration/   : Several core components wired together
- tests/support.py     : Recording subsystems shared by both

Testing Philosophy
------------------
- Use pytest markers (`unit`, `integration`) to select suites
- Follow AAA pattern: Arrange, Act, Assert
- No real clock, no real config directory: inject both
"""
