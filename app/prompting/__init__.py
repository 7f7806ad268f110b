"""Prompting package.

This package contains deterministic instruction templates and message builders
used by the generation engine. It does not perform provider selection, model
invocation, or reply parsing.
"""
