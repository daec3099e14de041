"""
Smoke tests to verify all modules can be imported.
"""

def test_import_assay_core():
    import assay_core
    assert hasattr(assay_core, '__version__')


def test_import_store():
    import store
    assert hasattr(store, '__version__')


def test_import_project():
    import project
    assert hasattr(project, '__version__')


def test_import_evals():
    import evals
    assert hasattr(evals, '__version__')


def test_import_commands():
    import commands
    assert hasattr(commands, '__version__')
