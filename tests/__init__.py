"""
Test Suite for the Tabular Simulator

Provides tests for:
- Leaf generators (numeric variates, categorical patterns)
- Dataset assembly and replication
- Configuration management
- Command-line interface
"""
