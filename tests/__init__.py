"""isotest test suite.

Folder taxonomy
- unit/         : One module at a time, against in-memory readers and reporters.
- contract/     : Behaviour every adapter of a port shares (source readers, ID generators).
- integration/  : Sessions and the composition root on a real temporary directory.
- e2e/          : The ``isotest`` command line through Click's test runner.

Property-based tests live beside the layer they exercise and carry
``@pytest.mark.property``.
"""
