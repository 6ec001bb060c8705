"""Tests for positron.errors — the exception hierarchy and failure codes."""

import pytest

from positron.errors import (
    BridgeError,
    ConfigurationError,
    HTTPError,
    InvalidEnumTag,
    InvalidJson,
    InvalidNumber,
    JsonSyntaxError,
    LengthMismatch,
    MethodNotAllowed,
    MissingField,
    NotFound,
    Overflow,
    PositronError,
    ProtocolError,
    ResourceError,
    StartupError,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnknownField,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [ConfigurationError, StartupError, HTTPError, ProtocolError, BridgeError],
    )
    def test_rooted_at_positron_error(self, cls) -> None:
        assert issubclass(cls, PositronError)

    def test_resource_error_is_http_error(self) -> None:
        assert issubclass(ResourceError, HTTPError)


class TestHTTPErrors:
    def test_not_found(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert str(exc) == "404: Not Found"

    def test_method_not_allowed_sets_allow(self) -> None:
        exc = MethodNotAllowed(frozenset({"HEAD", "GET"}))
        assert exc.status == 405
        assert exc.headers == (("Allow", "GET, HEAD"),)
        assert "GET, HEAD" in exc.detail

    def test_resource_error(self) -> None:
        exc = ResourceError(500, "Could not read file x: FileTooBig")
        assert exc.status == 500
        assert exc.detail.endswith("FileTooBig")

    def test_bare_status(self) -> None:
        assert str(HTTPError(status=418)) == "418"


class TestProtocolErrors:
    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (InvalidJson, "InvalidJson"),
            (JsonSyntaxError, "SyntaxError"),
            (UnexpectedEndOfInput, "UnexpectedEndOfInput"),
            (UnexpectedToken, "UnexpectedToken"),
            (UnknownField, "UnknownField"),
            (MissingField, "MissingField"),
            (Overflow, "Overflow"),
            (InvalidNumber, "InvalidNumber"),
            (InvalidEnumTag, "InvalidEnumTag"),
            (LengthMismatch, "LengthMismatch"),
        ],
    )
    def test_codes(self, cls, code) -> None:
        exc = cls("detail", index=2)
        assert exc.code == code
        assert exc.index == 2
        assert isinstance(exc, ProtocolError)

    def test_message_defaults_to_code(self) -> None:
        assert str(Overflow()) == "Overflow"


class TestBridgeError:
    def test_code(self) -> None:
        exc = BridgeError("AccountLocked", "too many attempts")
        assert exc.code == "AccountLocked"
        assert str(exc) == "too many attempts"

    def test_empty_code_rejected(self) -> None:
        with pytest.raises(ValueError):
            BridgeError("")
