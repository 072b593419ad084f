"""
Tests for CLI functionality.

These tests verify the command-line interface logic.
"""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime
from io import StringIO
from unittest.mock import Mock, patch

import pytest

from commute_isochrones.cli import (
    cmd_info,
    cmd_isochrone,
    cmd_providers,
    create_parser,
    main,
    parse_location,
)
from commute_isochrones.errors import BackendUnreachable, ProviderUnavailable
from commute_isochrones.flows.isochrone import build_response
from commute_isochrones.providers import ProviderRegistry
from commute_isochrones.schemas import (
    Feature,
    FeatureCollection,
    IsochroneRequest,
    Location,
    ProviderName,
)

CHAPEL_HILL = Location(lat=35.9042, lng=-79.0469)

ISOCHRONE_ARGS = [
    "isochrone",
    "--provider",
    "mapbox",
    "--mode",
    "walk",
    "--window",
    "08:00-09:00",
    "--minutes",
    "15",
    "--dest",
    "35.9042,-79.0469",
]


def _isochrone_args(**overrides: object) -> argparse.Namespace:
    fields: dict[str, object] = {
        "provider": "mapbox",
        "mode": "walk",
        "window": "08:00-09:00",
        "minutes": 15.0,
        "destinations": [CHAPEL_HILL],
        "no_cache": False,
    }
    fields.update(overrides)
    return argparse.Namespace(**fields)


class TestParseLocation:
    """LAT,LNG argument parsing."""

    def test_valid(self) -> None:
        assert parse_location("35.9042,-79.0469") == CHAPEL_HILL

    @pytest.mark.parametrize("value", ["35.9", "a,b", "1,2,3", "95,0"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_location(value)


class TestCreateParser:
    """Tests for create_parser function."""

    def test_creates_parser(self) -> None:
        """Parser is created successfully."""
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.prog == "commute-isochrones"

    def test_parser_has_version(self) -> None:
        """Parser has version argument."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--version"])

    def test_parser_has_debug_flag(self) -> None:
        """Parser accepts --debug flag."""
        parser = create_parser()
        args = parser.parse_args(["--debug", "info"])
        assert args.debug is True

    def test_parser_isochrone_command(self) -> None:
        """Parser accepts the isochrone command with repeatable --dest."""
        parser = create_parser()
        args = parser.parse_args([*ISOCHRONE_ARGS, "--dest", "35.7796,-78.6382"])
        assert args.command == "isochrone"
        assert args.provider == "mapbox"
        assert args.minutes == 15.0
        assert args.destinations == [CHAPEL_HILL, Location(lat=35.7796, lng=-78.6382)]
        assert args.no_cache is False

    def test_provider_is_required(self) -> None:
        """There is no default provider."""
        parser = create_parser()
        args = [a for a in ISOCHRONE_ARGS if a not in ("--provider", "mapbox")]
        with pytest.raises(SystemExit):
            parser.parse_args(args)

    def test_rejects_unknown_provider(self) -> None:
        parser = create_parser()
        args = ["here" if a == "mapbox" else a for a in ISOCHRONE_ARGS]
        with pytest.raises(SystemExit):
            parser.parse_args(args)

    def test_parser_providers_command(self) -> None:
        parser = create_parser()
        assert parser.parse_args(["providers"]).command == "providers"


class TestCmdInfo:
    """Tests for cmd_info function."""

    def test_returns_zero(self) -> None:
        """Info command returns exit code 0."""
        assert cmd_info(argparse.Namespace()) == 0

    def test_prints_app_info(self) -> None:
        """Info command prints application information."""
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            cmd_info(argparse.Namespace())
            output = mock_stdout.getvalue()
            assert "Application" in output
            assert "Version" in output


class TestCmdProviders:
    """Tests for cmd_providers function."""

    def test_lists_supported_and_configured(self) -> None:
        service = Mock()
        service.registry = ProviderRegistry(
            {ProviderName.MAPBOX: Mock()},
            warnings=["Failed to initialize google provider: google provider requires api_key"],
        )

        with (
            patch("commute_isochrones.cli.get_service", return_value=service),
            patch("sys.stdout", new=StringIO()) as mock_stdout,
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            exit_code = cmd_providers(argparse.Namespace())

        assert exit_code == 0
        output = mock_stdout.getvalue()
        assert "Supported: google, mapbox, openroute" in output
        assert "Configured: mapbox" in output
        assert "google provider requires api_key" in mock_stderr.getvalue()


class TestCmdIsochrone:
    """Tests for cmd_isochrone function."""

    def test_prints_response_json(self) -> None:
        def generate(request: IsochroneRequest, use_cache: bool) -> object:
            collection = FeatureCollection(
                features=[Feature.for_destination(request, CHAPEL_HILL, [CHAPEL_HILL])]
            )
            return build_response(
                collection, request, "abc", datetime(2026, 10, 18, tzinfo=UTC)
            )

        with (
            patch("commute_isochrones.cli.generate_isochrones", side_effect=generate) as mock_gen,
            patch("sys.stdout", new=StringIO()) as mock_stdout,
        ):
            exit_code = cmd_isochrone(_isochrone_args())

        assert exit_code == 0
        payload = json.loads(mock_stdout.getvalue())
        assert payload["type"] == "FeatureCollection"
        assert payload["metadata"]["provider"] == "mapbox"
        assert payload["features"][0]["properties"]["destination"] == {
            "lat": 35.9042,
            "lng": -79.0469,
        }
        assert mock_gen.call_args.kwargs["use_cache"] is True

    def test_no_cache_flag(self) -> None:
        with patch("commute_isochrones.cli.generate_isochrones") as mock_gen:
            mock_gen.return_value.model_dump_json.return_value = "{}"
            cmd_isochrone(_isochrone_args(no_cache=True))
        assert mock_gen.call_args.kwargs["use_cache"] is False

    def test_invalid_window_returns_one(self) -> None:
        with (
            patch("commute_isochrones.cli.generate_isochrones") as mock_gen,
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            exit_code = cmd_isochrone(_isochrone_args(window="morning"))
        assert exit_code == 1
        assert "Invalid request" in mock_stderr.getvalue()
        mock_gen.assert_not_called()

    def test_provider_unavailable_returns_one(self) -> None:
        with (
            patch(
                "commute_isochrones.cli.generate_isochrones",
                side_effect=ProviderUnavailable("mapbox"),
            ),
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            exit_code = cmd_isochrone(_isochrone_args())
        assert exit_code == 1
        assert "Isochrone service unavailable" in mock_stderr.getvalue()

    def test_backend_unreachable_returns_one(self) -> None:
        with (
            patch(
                "commute_isochrones.cli.generate_isochrones",
                side_effect=BackendUnreachable("mapbox backend unreachable"),
            ),
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            exit_code = cmd_isochrone(_isochrone_args())
        assert exit_code == 1
        assert "temporarily unavailable" in mock_stderr.getvalue()


class TestMain:
    """Tests for main function."""

    def test_no_command_shows_help(self) -> None:
        """No command shows help and exits 0."""
        with patch("sys.argv", ["commute-isochrones"]):
            assert main() == 0

    def test_info_command_executes(self) -> None:
        """Info command executes successfully."""
        with (
            patch("sys.argv", ["commute-isochrones", "info"]),
            patch("commute_isochrones.cli.cmd_info") as mock_cmd,
        ):
            mock_cmd.return_value = 0
            assert main() == 0
            mock_cmd.assert_called_once()

    def test_isochrone_command_executes(self) -> None:
        with (
            patch("sys.argv", ["commute-isochrones", *ISOCHRONE_ARGS]),
            patch("commute_isochrones.cli.cmd_isochrone") as mock_cmd,
        ):
            mock_cmd.return_value = 1
            assert main() == 1
            mock_cmd.assert_called_once()

    def test_unknown_command_shows_help(self) -> None:
        """Unknown command shows help and returns 1."""
        with (
            patch("sys.argv", ["commute-isochrones", "info"]),
            patch("commute_isochrones.cli.create_parser") as mock_parser,
        ):
            mock_parser.return_value.parse_args.return_value = argparse.Namespace(command="unknown")
            assert main() == 1
