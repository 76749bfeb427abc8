"""Tests for configuration loading and validation."""

import pytest

from fieldops.config import (
    AppConfig,
    CompanyConfig,
    CompletionConfig,
    InvoiceConfig,
    SchedulingConfig,
    _validate_config,
)


def _config(**overrides) -> AppConfig:
    return AppConfig(
        company=overrides.get("company", CompanyConfig()),
        scheduling=overrides.get("scheduling", SchedulingConfig()),
        completion=overrides.get("completion", CompletionConfig()),
        invoicing=overrides.get("invoicing", InvoiceConfig()),
    )


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_defaults(self):
        config = AppConfig()
        assert config.scheduling.default_duration_minutes == 120
        assert config.scheduling.location_timeout_sec == 10.0
        assert config.scheduling.max_photo_bytes == 10 * 1024 * 1024

    def test_invalid_language(self):
        company = CompanyConfig(default_language="fr")
        with pytest.raises(ValueError, match="DEFAULT_LANGUAGE"):
            _validate_config(_config(company=company))

    def test_invalid_duration(self):
        with pytest.raises(ValueError, match="DEFAULT_DURATION_MINUTES"):
            _validate_config(_config(scheduling=SchedulingConfig(default_duration_minutes=0)))

    def test_invalid_location_timeout(self):
        with pytest.raises(ValueError, match="LOCATION_TIMEOUT_SEC"):
            _validate_config(_config(scheduling=SchedulingConfig(location_timeout_sec=0)))

    def test_invalid_checklist_gate(self):
        with pytest.raises(ValueError, match="CHECKLIST_GATE"):
            _validate_config(_config(completion=CompletionConfig(checklist_gate="most")))

    def test_invalid_tax_rate(self):
        with pytest.raises(ValueError, match="TAX_RATE"):
            _validate_config(_config(invoicing=InvoiceConfig(tax_rate=150.0)))

    def test_invalid_due_days(self):
        with pytest.raises(ValueError, match="INVOICE_DUE_DAYS"):
            _validate_config(_config(invoicing=InvoiceConfig(due_days=-1)))


class TestEnvParsing:
    def test_safe_int_parsing(self):
        from fieldops.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_bad_value(self, monkeypatch):
        from fieldops.config import _safe_int

        monkeypatch.setenv("FIELDOPS_TEST_INT", "many")
        with pytest.raises(ValueError, match="FIELDOPS_TEST_INT"):
            _safe_int("FIELDOPS_TEST_INT", "1")

    def test_safe_float_parsing(self):
        from fieldops.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("No", False), ("off", False)])
    def test_safe_bool_parsing(self, monkeypatch, raw, expected):
        from fieldops.config import _safe_bool

        monkeypatch.setenv("FIELDOPS_TEST_BOOL", raw)
        assert _safe_bool("FIELDOPS_TEST_BOOL", "false") is expected

    def test_safe_bool_bad_value(self, monkeypatch):
        from fieldops.config import _safe_bool

        monkeypatch.setenv("FIELDOPS_TEST_BOOL", "maybe")
        with pytest.raises(ValueError, match="FIELDOPS_TEST_BOOL"):
            _safe_bool("FIELDOPS_TEST_BOOL", "false")
