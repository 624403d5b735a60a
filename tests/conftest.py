import pytest

from auralib import make_global_environment, run


@pytest.fixture
def env():
    return make_global_environment()


@pytest.fixture
def evaluate(env):
    def _evaluate(text):
        value, errors = run('<test>', text, env)
        assert errors == [], [error.as_string() for error in errors]
        return value
    return _evaluate


@pytest.fixture
def evaluate_error(env):
    def _evaluate_error(text):
        value, errors = run('<test>', text, env)
        assert value is None
        assert len(errors) == 1
        return errors[0]
    return _evaluate_error
