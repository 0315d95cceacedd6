import os
from dataclasses import dataclass

GITHUB_API_BASE_URL = "https://api.github.com"


@dataclass
class Config:
    # listen_address: format ":9186" or "0.0.0.0:9186",
    # empty to print the dashboard once and exit
    listen_address: "str" = ""
    # refresh interval in seconds when serving metrics
    refresh_interval: "int" = 300
    log_level: "str" = "info"
    # "console" or "json"
    log_format: "str" = "console"

    github_token: "str" = ""
    github_api_version: "str" = "2022-11-28"
    github_api_base_url: "str" = GITHUB_API_BASE_URL
    # "enterprise" or "organization"
    github_api_scope: "str" = "organization"
    github_enterprise: "str" = ""
    github_organization: "str" = ""
    # outbound HTTP timeout in seconds
    http_timeout: "float" = 30.0

    cosmosdb_endpoint: "str" = ""
    cosmosdb_key: "str" = ""
    cosmosdb_database: "str" = "platform-engineering"

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            github_token=os.environ.get("GITHUB_TOKEN", ""),
            github_api_version=os.environ.get("GITHUB_API_VERSION", "2022-11-28"),
            github_api_base_url=os.environ.get(
                "GITHUB_API_BASE_URL", GITHUB_API_BASE_URL
            ),
            github_api_scope=os.environ.get("GITHUB_API_SCOPE", "organization"),
            github_enterprise=os.environ.get("GITHUB_ENTERPRISE", ""),
            github_organization=os.environ.get("GITHUB_ORGANIZATION", ""),
            cosmosdb_endpoint=os.environ.get("AZURE_COSMOSDB_ENDPOINT", ""),
            cosmosdb_key=os.environ.get("AZURE_COSMOSDB_KEY", ""),
            cosmosdb_database=os.environ.get(
                "AZURE_COSMOSDB_DATABASE", "platform-engineering"
            ),
        )

    @property
    def github_enabled(self) -> "bool":
        return bool(self.github_token)

    @property
    def cosmosdb_enabled(self) -> "bool":
        return bool(self.cosmosdb_endpoint and self.cosmosdb_key)

    @property
    def enterprise_scope(self) -> "bool":
        return self.github_api_scope == "enterprise"
