import pytest

from copilot_dashboard.config import GITHUB_API_BASE_URL, Config

ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_API_VERSION",
    "GITHUB_API_BASE_URL",
    "GITHUB_API_SCOPE",
    "GITHUB_ENTERPRISE",
    "GITHUB_ORGANIZATION",
    "AZURE_COSMOSDB_ENDPOINT",
    "AZURE_COSMOSDB_KEY",
    "AZURE_COSMOSDB_DATABASE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: "pytest.MonkeyPatch") -> "None":
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfigFromEnv:
    def test_defaults(self) -> "None":
        config = Config.from_env()
        assert config.github_token == ""
        assert config.github_api_version == "2022-11-28"
        assert config.github_api_base_url == GITHUB_API_BASE_URL
        assert config.github_api_scope == "organization"
        assert config.cosmosdb_database == "platform-engineering"
        assert config.github_enabled is False
        assert config.cosmosdb_enabled is False
        assert config.enterprise_scope is False

    def test_reads_env_vars(self, monkeypatch: "pytest.MonkeyPatch") -> "None":
        monkeypatch.setenv("GITHUB_TOKEN", "ghp-test")
        monkeypatch.setenv("GITHUB_API_SCOPE", "enterprise")
        monkeypatch.setenv("GITHUB_ENTERPRISE", "bigcorp")
        monkeypatch.setenv("GITHUB_ORGANIZATION", "acme")
        config = Config.from_env()
        assert config.github_token == "ghp-test"
        assert config.github_enterprise == "bigcorp"
        assert config.github_organization == "acme"
        assert config.github_enabled is True
        assert config.enterprise_scope is True

    def test_cosmosdb_needs_endpoint_and_key(
        self, monkeypatch: "pytest.MonkeyPatch"
    ) -> "None":
        monkeypatch.setenv("AZURE_COSMOSDB_ENDPOINT", "https://db.example.com")
        assert Config.from_env().cosmosdb_enabled is False

        monkeypatch.setenv("AZURE_COSMOSDB_KEY", "secret")
        monkeypatch.setenv("AZURE_COSMOSDB_DATABASE", "copilot")
        config = Config.from_env()
        assert config.cosmosdb_enabled is True
        assert config.cosmosdb_database == "copilot"
