"""
Test Package

Contains unit tests for all modules.
Run with: pytest tests/ -v

Test files follow the pattern:
    test_<area>.py

Example:
    tests/test_theory.py      - Tests for chordcraft/theory/
    tests/test_generator.py   - Tests for chordcraft/engine/generator.py
    tests/test_cli.py         - Tests for chordcraft/app/cli.py
"""
