"""Tests for the error taxonomy."""

from __future__ import annotations

import pytest

from ziptree.core.errors import (
    EXIT_CODES,
    AccessDeniedError,
    ConfigError,
    CorruptArchiveError,
    DirectoryNotFoundError,
    DiskFullError,
    ErrorKind,
    InvalidArgumentError,
    IOFailureError,
    NotFoundError,
    PathTooLongError,
    UnsupportedPathError,
    ZipTreeError,
)


@pytest.mark.parametrize(
    ("err", "kind"),
    [
        (InvalidArgumentError("x"), ErrorKind.INVALID_ARGUMENT),
        (UnsupportedPathError("ftp://x"), ErrorKind.UNSUPPORTED_PATH),
        (PathTooLongError("x"), ErrorKind.PATH_TOO_LONG),
        (NotFoundError("x"), ErrorKind.NOT_FOUND),
        (DirectoryNotFoundError("/x"), ErrorKind.DIRECTORY_NOT_FOUND),
        (AccessDeniedError("x"), ErrorKind.ACCESS_DENIED),
        (CorruptArchiveError("x"), ErrorKind.CORRUPT_ARCHIVE),
        (IOFailureError("x"), ErrorKind.IO_FAILURE),
        (DiskFullError("/x"), ErrorKind.IO_FAILURE),
        (ConfigError("x"), ErrorKind.CONFIG),
    ],
)
def test_each_error_has_one_kind(err, kind):
    assert isinstance(err, ZipTreeError)
    assert err.kind == kind
    assert err.exit_code == EXIT_CODES[kind]


def test_exit_codes_are_distinct():
    assert len(set(EXIT_CODES.values())) == len(ErrorKind)
    assert 0 not in EXIT_CODES.values()
    assert 1 not in EXIT_CODES.values()


def test_suggestion_appended():
    err = DirectoryNotFoundError("/data")
    assert str(err).startswith("Directory not found: /data")
    assert "\nSuggestion: " in str(err)
    assert err.message == "Directory not found: /data"


def test_plain_message():
    assert str(NotFoundError("Not found: a.zip")) == "Not found: a.zip"
