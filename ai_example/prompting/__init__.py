"""Prompting package.

This package contains deterministic prompt templates and the bundled context
documents used by the capability services. It does not perform model invocation.
"""
