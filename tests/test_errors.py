"""Tests for sluice.errors — exception hierarchy and error messages."""

from sluice.errors import ConfigurationError, ProtocolError, SluiceError


class TestHierarchy:
    def test_configuration_error_is_sluice_error(self) -> None:
        assert issubclass(ConfigurationError, SluiceError)

    def test_protocol_error_is_sluice_error(self) -> None:
        assert issubclass(ProtocolError, SluiceError)


class TestProtocolError:
    def test_fields(self) -> None:
        err = ProtocolError("on_data", "ended")
        assert err.operation == "on_data"
        assert err.phase == "ended"
        assert err.detail == ""

    def test_str_without_detail(self) -> None:
        assert str(ProtocolError("on_end", "failed")) == "on_end called while failed"

    def test_str_with_detail(self) -> None:
        err = ProtocolError("on_data", "draining", "state was already superseded")
        assert str(err) == "on_data called while draining: state was already superseded"
