"""Tests for CLI exit codes."""

import pytest

from sizefit.cli.exit_codes import ExitCode, exit_code_for
from sizefit.domain.enums import Violation
from sizefit.domain.errors import (
    BuildError,
    CompressionError,
    EncodeFailure,
    PlanningError,
    ProbeError,
    ProcessError,
    ToolNotFoundError,
    ValidationError,
)


class TestExitCode:
    """Tests for the ExitCode ranges."""

    def test_values_are_unique(self):
        values = [code.value for code in ExitCode]
        assert len(values) == len(set(values))

    def test_success_is_zero(self):
        assert ExitCode.SUCCESS == 0


class TestExitCodeFor:
    """Tests for exit_code_for."""

    @pytest.mark.parametrize(
        "error,expected",
        [
            (
                ValidationError(Violation.INVALID_FPS, "bad fps"),
                ExitCode.REQUEST_INVALID,
            ),
            (ToolNotFoundError("missing"), ExitCode.TOOL_NOT_AVAILABLE),
            (ProbeError("probe"), ExitCode.PROBE_FAILED),
            (BuildError("build"), ExitCode.BUILD_FAILED),
            (ProcessError("start"), ExitCode.ENCODE_FAILED),
            (EncodeFailure("encode"), ExitCode.ENCODE_FAILED),
            (PlanningError("plan"), ExitCode.GENERAL_ERROR),
            (CompressionError("other"), ExitCode.GENERAL_ERROR),
            (None, ExitCode.GENERAL_ERROR),
        ],
    )
    def test_mapping(self, error, expected):
        assert exit_code_for(error) is expected
