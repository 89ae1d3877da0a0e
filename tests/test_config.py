"""Tests for the configuration system (backend and zero-row policy)."""

import os

import pytest

from multinomial_ess._config import (
    TINY,
    _jax_is_available,
    get_backend,
    get_zero_row_policy,
    resolve_zero_row_policy,
    set_backend,
    set_zero_row_policy,
)


def _reset() -> None:
    import multinomial_ess._config as _cfg

    _cfg._backend_override = None
    _cfg._zero_row_override = None
    os.environ.pop("MULTINOMIAL_ESS_BACKEND", None)
    os.environ.pop("MULTINOMIAL_ESS_ZERO_ROWS", None)


class TestGetBackend:
    """Tests for get_backend() resolution order."""

    def setup_method(self):
        """Reset state before each test."""
        _reset()

    def teardown_method(self):
        """Reset state after each test."""
        _reset()

    def test_auto_detects_available_backend(self):
        expected = "jax" if _jax_is_available() else "numpy"
        assert get_backend() == expected

    def test_env_var_overrides_auto(self):
        os.environ["MULTINOMIAL_ESS_BACKEND"] = "numpy"
        assert get_backend() == "numpy"

    def test_env_var_jax(self):
        os.environ["MULTINOMIAL_ESS_BACKEND"] = "jax"
        assert get_backend() == "jax"

    def test_env_var_case_insensitive(self):
        os.environ["MULTINOMIAL_ESS_BACKEND"] = "NumPy"
        assert get_backend() == "numpy"

    def test_unknown_env_value_is_ignored(self):
        os.environ["MULTINOMIAL_ESS_BACKEND"] = "tensorflow"
        expected = "jax" if _jax_is_available() else "numpy"
        assert get_backend() == expected

    def test_programmatic_override_wins_over_env(self):
        os.environ["MULTINOMIAL_ESS_BACKEND"] = "numpy"
        set_backend("jax")
        assert get_backend() == "jax"

    def test_auto_restores_default(self):
        set_backend("numpy")
        assert get_backend() == "numpy"
        set_backend("auto")
        expected = "jax" if _jax_is_available() else "numpy"
        assert get_backend() == expected


class TestSetBackend:
    """Tests for set_backend() validation."""

    def setup_method(self):
        _reset()

    def teardown_method(self):
        _reset()

    def test_accepts_valid_names(self):
        for name in ("jax", "numpy", "auto"):
            set_backend(name)  # should not raise

    def test_case_insensitive(self):
        set_backend("JAX")
        assert get_backend() == "jax"

    def test_rejects_invalid_name(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            set_backend("tensorflow")


class TestZeroRowPolicy:
    """Tests for the zero-row policy resolution."""

    def setup_method(self):
        _reset()

    def teardown_method(self):
        _reset()

    def test_default_is_propagate(self):
        assert get_zero_row_policy() == "propagate"

    def test_env_var(self):
        os.environ["MULTINOMIAL_ESS_ZERO_ROWS"] = "Skip"
        assert get_zero_row_policy() == "skip"

    def test_programmatic_override_wins_over_env(self):
        os.environ["MULTINOMIAL_ESS_ZERO_ROWS"] = "skip"
        set_zero_row_policy("raise")
        assert get_zero_row_policy() == "raise"

    def test_none_restores_default(self):
        set_zero_row_policy("skip")
        set_zero_row_policy(None)
        assert get_zero_row_policy() == "propagate"

    def test_rejects_invalid_policy(self):
        with pytest.raises(ValueError, match="Unknown zero-row policy"):
            set_zero_row_policy("ignore")

    def test_per_call_value_takes_precedence(self):
        set_zero_row_policy("raise")
        assert resolve_zero_row_policy("skip") == "skip"
        assert resolve_zero_row_policy(None) == "raise"


class TestTiny:
    def test_value(self):
        assert TINY == 1e-8

    def test_public_api_exports(self):
        """Configuration helpers should be importable from the package."""
        import multinomial_ess

        assert multinomial_ess.TINY == TINY
        assert hasattr(multinomial_ess, "get_backend")
        assert hasattr(multinomial_ess, "set_backend")
        assert hasattr(multinomial_ess, "set_zero_row_policy")
