"""
Test the custom exceptions and assert functions
"""

# Third Party
import pytest

# Local
from metallb_operator import exceptions


def test_assert_config_pass():
    """Make sure that no exception is thrown by assert_config when it passes"""
    exceptions.assert_config(True)


def test_assert_config_fail():
    """Make sure the right exception is thrown by assert_config when it fails"""
    exception_msg = "error message"
    with pytest.raises(exceptions.ConfigError, match=exception_msg):
        exceptions.assert_config(False, exception_msg)


def test_assert_cluster_fail():
    """Make sure assert_cluster raises a StoreError, which is a ClusterError"""
    with pytest.raises(exceptions.StoreError) as store_error:
        exceptions.assert_cluster(False, "boom")
    assert isinstance(store_error.value, exceptions.ClusterError)
    assert store_error.value.is_fatal_error


def test_assert_patch_fail():
    """Make sure assert_patch raises a fatal PatchError"""
    with pytest.raises(exceptions.PatchError, match="no endpoints") as patch_error:
        exceptions.assert_patch(False, "no endpoints")
    assert patch_error.value.is_fatal_error


def test_missing_configuration_names_variable():
    """Make sure the missing variable is carried on the error and in the
    message
    """
    err = exceptions.MissingConfigurationError("CONTROLLER_IMAGE")
    assert err.variable == "CONTROLLER_IMAGE"
    assert "CONTROLLER_IMAGE" in str(err)
    assert isinstance(err, exceptions.ConfigError)


def test_parse_error_carries_value():
    """Make sure the offending value is kept on a ParseError"""
    err = exceptions.ParseError("bad port", value="abc")
    assert err.value == "abc"
    assert err.is_fatal_error


def test_render_error_is_parse_error():
    """A malformed rendered document is a kind of parse error"""
    assert issubclass(exceptions.RenderError, exceptions.ParseError)


def test_cancelled_is_non_fatal():
    """Make sure cancellation is an expected error"""
    err = exceptions.CancelledError("stop")
    assert not err.is_fatal_error
    assert isinstance(err, exceptions.MetalLBOperatorExpectedError)
    assert isinstance(err, exceptions.MetalLBOperatorError)
