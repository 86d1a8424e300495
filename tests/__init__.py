"""
Test suite for netcluster.

This package contains all tests organized by component:
- test_algorithms/: Tests for community detection and numeric routines
- test_graph/: Tests for adjacency-matrix construction
"""
