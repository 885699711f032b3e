#!/usr/bin/env python3
"""
Test Runner for the gltf_core Test Suite

Runs the Slash test modules in pipeline order (container, parser, validator,
buffers, views, document), each in its own ``slash run`` process.
"""

import argparse
import shutil
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent

# Lower pipeline stages first so the first failure points at the root cause
TEST_MODULES = [
    'tests/test_glb_container.py',
    'tests/test_gltf_parser.py',
    'tests/test_validator.py',
    'tests/test_buffer_resolver.py',
    'tests/test_accessor_view.py',
    'tests/test_extensions.py',
    'tests/test_gltf_document.py',
    'tests/test_error_handling.py',
]


def run_slash_module(test_file, verbose=False):
    """Run one test module; returns True when it passed"""
    slash_executable = shutil.which('slash')
    if slash_executable is None:
        print("[ERROR] 'slash' executable not found; install the test extra")
        return False

    cmd = [slash_executable, 'run', str(PROJECT_ROOT / test_file)]
    if verbose:
        cmd.append('-v')

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, capture_output=True, text=True, timeout=300)
    except subprocess.TimeoutExpired:
        print("[TIMEOUT] TIMEOUT (5 minutes)")
        return False

    if result.returncode == 0:
        print("[PASS] PASSED")
        return True

    print("[FAIL] FAILED")
    if verbose:
        print("STDOUT:")
        print(result.stdout)
        print("STDERR:")
        print(result.stderr)
    return False


def run_slash_tests(test_files=None, verbose=False, fail_fast=False):
    """Run Slash tests for the given test modules (all of them by default)"""
    test_files = test_files or TEST_MODULES

    print("[TEST] Running gltf_core Test Suite")
    print("=" * 50)

    success_count = 0
    for test_file in test_files:
        if not (PROJECT_ROOT / test_file).exists():
            print(f"[ERROR] Test file not found: {test_file}")
            continue

        print(f"\n[RUN] Running: {test_file}")
        print("-" * 30)
        if run_slash_module(test_file, verbose):
            success_count += 1
        elif fail_fast:
            break

    print("\n" + "=" * 50)
    print(f"[STATS] Test Results: {success_count}/{len(test_files)} test files passed")

    if success_count == len(test_files):
        print("[SUCCESS] All tests passed!")
        return 0
    print("[WARNING] Some tests failed. Check output above for details.")
    return 1


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="gltf_core Test Runner")
    parser.add_argument('--test', help='Run specific test file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--fail-fast', '-x', action='store_true',
                        help='Stop after the first failing module')
    parser.add_argument('--list', action='store_true', help='List available tests')

    args = parser.parse_args()

    if args.list:
        print("Available test files:")
        for test_file in TEST_MODULES:
            print(f"  {test_file}")
        return 0

    test_files = [args.test] if args.test else None
    return run_slash_tests(test_files, args.verbose, args.fail_fast)


if __name__ == "__main__":
    sys.exit(main())
