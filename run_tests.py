#!/usr/bin/env python3
"""
Main test runner for the Cheetah front end.

Runs a smoke test of the lex/parse pipeline, then the unittest suites under
tests/. The pytest-only modules (precedence tables, hypothesis properties)
run with `pytest`.

Author: xwest
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def run_smoke_test():
    """Lex and parse a small program end to end."""

    print("🚀 Cheetah Front End Test Suite")
    print("=" * 60)

    try:
        from cheetah.lexer import tokenize
        from cheetah.parser import ParseFailure, parse, dump
        print("✅ Lexer and parser modules imported successfully")
        print()
    except ImportError as e:
        print(f"❌ Failed to import front end modules: {e}")
        return False

    print("Testing simple pipeline...")
    code = (
        "def area(width, height=1):\n"
        "    if width <= 0:\n"
        "        raise ValueError(f\"bad width {width!r}\")\n"
        "    return width * height\n"
        "\n"
        "sizes = [area(w) for w in range(1, 4) if w % 2]\n"
    )

    try:
        print("  🔧 Lexing...")
        tokens, lexer_errors = tokenize(code)
        print(f"     Generated {len(tokens)} tokens")
        if lexer_errors:
            print(f"     ❌ Lexer errors: {len(lexer_errors)}")
            for error in lexer_errors:
                print(f"        {error}")
            return False

        print("  🔧 Parsing...")
        module = parse(tokens, code)
        print(f"     Generated AST with {len(module.body)} top-level statements")
        print(f"     {dump(module.body[1].value)}")
    except ParseFailure as failure:
        print(f"❌ Pipeline test FAILED: {failure}")
        return False

    print("  ❌ Testing error handling...")
    try:
        tokens, _ = tokenize("x = 1 +\nreturn 2\n")
        parse(tokens)
        print("     ❌ Error handling test failed: expected errors but got none")
        return False
    except ParseFailure as failure:
        print(f"     ✅ Error handling successful: caught {len(failure.errors)} expected errors")

    print()
    return True


def run_unit_tests():
    """Discover and run the unittest suites in tests/."""
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), pattern="test_*.py")
    result = unittest.TextTestRunner(verbosity=1).run(suite)
    return result.wasSuccessful()


def run_all_tests():
    if not run_smoke_test():
        return False
    if not run_unit_tests():
        print("❌ Unit tests FAILED")
        return False
    print()
    print("🎉 All tests PASSED!")
    return True


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
