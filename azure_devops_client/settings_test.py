"""Unit tests for settings."""

import math
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from .errors import ConfigurationError
from .settings import Settings, get_registry, get_settings


@pytest.fixture(autouse=True)
def _clear_caches():
    get_settings.cache_clear()
    get_registry.cache_clear()
    yield
    get_settings.cache_clear()
    get_registry.cache_clear()


def describe_Settings():
    def it_reads_the_environment():
        env = {
            "AZURE_DEVOPS_URL": "https://tfs.example.com/",
            "AZURE_DEVOPS_USERNAME": "alice",
            "AZURE_DEVOPS_TOKEN": "pat",
            "AZURE_DEVOPS_PROJECTS": '["org/p1", "org/p2"]',
            "AZURE_DEVOPS_ORGS": '["org"]',
        }
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.azure_devops_url == "https://tfs.example.com/"
        assert settings.azure_devops_projects == ["org/p1", "org/p2"]
        assert settings.azure_devops_orgs == ["org"]

    def it_defaults_to_the_hosted_service():
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.azure_devops_url == "https://dev.azure.com"
        assert settings.azure_devops_token is None
        assert settings.azure_devops_requests_per_second is None

    def describe_connection():
        def it_builds_an_immutable_connection():
            with patch.dict("os.environ", {}, clear=True):
                settings = Settings(
                    _env_file=None,
                    azure_devops_username="alice",
                    azure_devops_token="pat",
                    azure_devops_projects=["org/p1"],
                )
            conn = settings.connection()

            assert conn.url == "https://dev.azure.com"
            assert conn.username == "alice"
            assert conn.token == "pat"
            assert conn.projects == ("org/p1",)
            assert conn.orgs == ()
            with pytest.raises(AttributeError):
                conn.token = "other"

        def it_requires_a_token():
            settings = Settings(_env_file=None, azure_devops_token=None)

            with pytest.raises(ConfigurationError, match="AZURE_DEVOPS_TOKEN"):
                settings.connection()


    def describe_rate_limit_fields():
        @pytest.mark.parametrize("rate", ["0", "-1"])
        def it_rejects_non_positive_rates(rate):
            env = {"AZURE_DEVOPS_REQUESTS_PER_SECOND": rate}
            with patch.dict("os.environ", env, clear=True):
                with pytest.raises(ValidationError):
                    Settings(_env_file=None)

        def it_rejects_an_empty_burst():
            with patch.dict("os.environ", {"AZURE_DEVOPS_BURST": "0"}, clear=True):
                with pytest.raises(ValidationError):
                    Settings(_env_file=None)


def describe_get_registry():
    def it_is_unlimited_without_a_configured_rate():
        with patch.dict("os.environ", {}, clear=True):
            registry = get_registry()

        assert math.isinf(registry.default_rate)

    def it_uses_the_configured_rate_and_burst():
        env = {"AZURE_DEVOPS_REQUESTS_PER_SECOND": "2.5", "AZURE_DEVOPS_BURST": "10"}
        with patch.dict("os.environ", env, clear=True):
            registry = get_registry()

        assert registry.default_rate == 2.5
        assert registry.default_burst == 10

    def it_is_shared_across_calls():
        assert get_registry() is get_registry()
