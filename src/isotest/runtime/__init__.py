"""Sandbox runtime for isotest.

Everything that executes *inside* a test session's isolated namespace: the
mock runtime, link-time stubs, the assertion primitive and the sandbox that
evaluates linked module graphs.
"""
