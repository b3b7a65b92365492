from __future__ import annotations

"""
Unit tests for the pack result model and pack-time errors.
"""

from dataclasses import FrozenInstanceError, asdict

import pytest

from embedres.domain.pack_models import (
    EncodeError,
    FilterError,
    OutputError,
    PackError,
    SourceReadError,
    create_error_result,
    create_success_result,
)


def test_error_family_carries_context() -> None:
    cause = PermissionError("denied")
    err = SourceReadError("Cannot read /x", path="/x", cause=cause)

    assert isinstance(err, PackError)
    assert err.path == "/x"
    assert err.cause is cause
    assert str(err) == "Cannot read /x"
    for cls in (EncodeError, FilterError, OutputError):
        assert issubclass(cls, PackError)


def test_error_result(mock_config_dict) -> None:
    result = create_error_result("boom", mock_config_dict, {"error_kind": "pack"})

    assert result.ok is False
    assert result.error == "boom"
    assert result.source == mock_config_dict["source"]
    assert result.summary == {"error_kind": "pack"}
    assert result.file_count == 0


def test_success_result_is_frozen(mock_config_dict) -> None:
    result = create_success_result(
        mock_config_dict,
        dry_run=False,
        dir_count=2,
        file_count=3,
        raw_bytes=100,
        encoded_chars=80,
        text="X = 1\n",
    )

    assert result.ok is True
    assert result.target == "-"
    assert result.ratio == pytest.approx(0.8)
    assert asdict(result)["text"] == "X = 1\n"
    with pytest.raises(FrozenInstanceError):
        result.ok = False  # type: ignore[misc]


def test_ratio_of_empty_pack(mock_config_dict) -> None:
    result = create_success_result(
        mock_config_dict, dry_run=True, dir_count=1, file_count=0, raw_bytes=0, encoded_chars=0
    )
    assert result.ratio == 0.0
