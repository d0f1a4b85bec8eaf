"""Tests for the command-line entry point."""

import json

from main import build_config, build_run_input, main, parse_args


class TestBuildRunInput:
    def test_flags(self):
        args = parse_args(["laptop hp", "-n", "5", "--min-price", "100000"])

        assert build_run_input(args) == {"searchQuery": "laptop hp", "maxProducts": 5, "minPrice": 100000.0}

    def test_input_file_with_overrides(self, tmp_path):
        input_file = tmp_path / "INPUT.json"
        input_file.write_text(
            json.dumps({"searchFor": "pages", "searchQuery": "tv", "maxProducts": 20}), encoding="utf-8"
        )

        args = parse_args(["--input", str(input_file), "-n", "3"])

        assert build_run_input(args) == {"searchFor": "pages", "searchQuery": "tv", "maxProducts": 3}


class TestBuildConfig:
    def test_browser_and_logging_flags(self):
        pipeline_config = build_config(parse_args(["tv", "--headless", "false", "--page-delay", "0.5", "--log-file"]))

        assert pipeline_config.scraper.headless is False
        assert pipeline_config.scraper.page_delay_seconds == 0.5
        assert pipeline_config.logging.log_to_file is True


class TestMain:
    def test_missing_input_fails(self):
        assert main([]) == 1

    def test_missing_query_fails(self):
        assert main(["--max-products", "5"]) == 1

    def test_unreadable_input_file_fails(self, tmp_path):
        bad = tmp_path / "INPUT.json"
        bad.write_text("{not json", encoding="utf-8")

        assert main(["--input", str(bad)]) == 1
