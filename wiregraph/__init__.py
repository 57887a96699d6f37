"""Dependency graph engine for dependency-injection codebases."""
