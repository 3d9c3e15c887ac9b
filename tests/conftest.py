import pathlib
import site

import pytest
from mysqlcdc.properties import system_properties

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_system_properties():
    """Reset the process-wide property table before and after each test to ensure test isolation."""
    for name in system_properties.snapshot():
        system_properties.clear(name)
    yield
    for name in system_properties.snapshot():
        system_properties.clear(name)


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.values',
]
